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

"""
HERU - Hebrew/Russian technical translation core

Rule-based morphology, terminology-aware candidate generation, learned
ranking and a feedback loop for technical documents.
"""

__version__ = "0.1.0"

from heru.core.engine import TranslationEngine
from heru.core.errors import (
    AnalysisError,
    HeruError,
    NoCandidateError,
    QualityReject,
    UnsupportedLanguagePair,
)
from heru.core.models import Language, TranslationResult

__all__ = [
    "AnalysisError",
    "HeruError",
    "Language",
    "NoCandidateError",
    "QualityReject",
    "TranslationEngine",
    "TranslationResult",
    "UnsupportedLanguagePair",
    "__version__",
]
