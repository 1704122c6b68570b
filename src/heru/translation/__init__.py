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

"""Translation core: bilingual dictionary, transfer rules and candidate generation."""

from heru.translation.dictionary import BUILTIN_PAIRS, BilingualDictionary, Translation
from heru.translation.generator import CandidateGenerator
from heru.translation.transfer import (
    HebrewToRussian,
    RussianToHebrew,
    Transfer,
    make_transfer,
)

__all__ = [
    "BUILTIN_PAIRS",
    "BilingualDictionary",
    "CandidateGenerator",
    "HebrewToRussian",
    "RussianToHebrew",
    "Transfer",
    "Translation",
    "make_transfer",
]
