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

"""Candidate features, fluency model and ranker."""

from heru.ranking.features import (
    EXPECTED_LENGTH_RATIO,
    length_plausibility,
    length_ratio,
    morph_wellformedness,
    term_consistency,
)
from heru.ranking.fluency import FluencyModel, seed_models
from heru.ranking.ranker import Ranker

__all__ = [
    "EXPECTED_LENGTH_RATIO",
    "FluencyModel",
    "Ranker",
    "length_plausibility",
    "length_ratio",
    "morph_wellformedness",
    "seed_models",
    "term_consistency",
]
