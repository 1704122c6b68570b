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

"""Technical terminology: lexicon, recognition and domain detection."""

from heru.terminology.builtin import BUILTIN_TERMS, COMMON_WORDS
from heru.terminology.domains import GENERAL_DOMAIN, detect_domain
from heru.terminology.lexicon import TermLexicon
from heru.terminology.recognizer import TermRecognizer

__all__ = [
    "BUILTIN_TERMS",
    "COMMON_WORDS",
    "GENERAL_DOMAIN",
    "TermLexicon",
    "TermRecognizer",
    "detect_domain",
]
