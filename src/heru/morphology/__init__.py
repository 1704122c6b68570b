# Copyright 2025 HERU Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Morphological analysis of Hebrew and Russian text.

Provides per-language tokenization, lemmatization and feature tagging, and
the generation side of the same paradigms used by the translation core.
"""

from heru.morphology.base import AnalyzedDocument, Inflection, LemmaInfo, MorphologicalAnalyzer
from heru.morphology.detection import detect_language, get_analyzer_for_language
from heru.morphology.hebrew import HebrewAnalyzer
from heru.morphology.russian import RussianAnalyzer

__all__ = [
    "AnalyzedDocument",
    "HebrewAnalyzer",
    "Inflection",
    "LemmaInfo",
    "MorphologicalAnalyzer",
    "RussianAnalyzer",
    "detect_language",
    "get_analyzer_for_language",
]
