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

"""Candidate feature functions.

Every feature is a float in [0, 1]; the ranking model combines them
linearly.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from heru.core.models import Language, TermEntry, TermMatch

# Expected target/source character length ratio per source language
EXPECTED_LENGTH_RATIO: dict[Language, float] = {
    Language.HEBREW: 1.5,
    Language.RUSSIAN: 0.67,
}


def length_ratio(source: str, target: str) -> float:
    """Raw target/source length ratio over non-space characters."""
    source_len = len("".join(source.split()))
    target_len = len("".join(target.split()))
    if source_len == 0:
        return 0.0 if target_len == 0 else math.inf
    return target_len / source_len


def length_plausibility(source: str, target: str, source_lang: Language) -> float:
    """1.0 at the expected ratio, decaying with the log distance from it."""
    ratio = length_ratio(source, target)
    if ratio == 0.0 or math.isinf(ratio):
        return 0.0
    return math.exp(-abs(math.log(ratio / EXPECTED_LENGTH_RATIO[source_lang])))


def term_consistency(chosen: Sequence[tuple[TermMatch, TermEntry]]) -> float:
    """Share of term units rendered with their best-ranked sense.

    A segment without term matches is fully consistent.
    """
    if not chosen:
        return 1.0
    agreeing = sum(1 for match, entry in chosen if entry.key == match.best.key)
    return agreeing / len(chosen)


def morph_wellformedness(ok: int, total: int) -> float:
    """Share of inflectable words that inflected cleanly."""
    if total == 0:
        return 1.0
    return ok / total
