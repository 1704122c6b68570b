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

"""Quality gate: deterministic pre-release checks on generated output.

Rejecting checks:
- Output contains no target-language letters
- Output/source length ratio outside the configured band
- Output matches a banned pattern

Flagging checks:
- Unknown source term copied untranslated into the output
- Fluency under the soft threshold
- Segment passed through untranslated (reported by the engine)
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable

from heru.core.models import (
    Candidate,
    Issue,
    IssueKind,
    Language,
    QualityVerdict,
    Segment,
)
from heru.morphology.detection import get_analyzer_for_language
from heru.ranking.features import length_ratio
from heru.utils.config import Settings

logger = logging.getLogger(__name__)


class QualityGate:
    """Validate candidates and assembled documents.

    Example:
        >>> gate = QualityGate(length_ratio_min=0.25, length_ratio_max=4.0)
        >>> verdict = gate.validate(segment, candidate)
        >>> verdict.outcome
        <Outcome.PASS: 'pass'>
    """

    def __init__(
        self,
        length_ratio_min: float = 0.25,
        length_ratio_max: float = 4.0,
        fluency_threshold: float = 0.15,
        banned_patterns: Iterable[str] = (),
    ) -> None:
        if length_ratio_min >= length_ratio_max:
            raise ValueError("length_ratio_min must be below length_ratio_max")
        self.length_ratio_min = length_ratio_min
        self.length_ratio_max = length_ratio_max
        self.fluency_threshold = fluency_threshold
        self.banned_patterns = [re.compile(pattern) for pattern in banned_patterns]

    @classmethod
    def from_settings(cls, settings: Settings) -> QualityGate:
        return cls(
            length_ratio_min=settings.length_ratio_min,
            length_ratio_max=settings.length_ratio_max,
            fluency_threshold=settings.fluency_soft_threshold,
            banned_patterns=settings.banned_patterns,
        )

    def validate(self, segment: Segment, candidate: Candidate) -> QualityVerdict:
        """Validate one candidate against its source segment."""
        return QualityVerdict.from_issues(self.check_segment(segment, candidate))

    def check_segment(self, segment: Segment, candidate: Candidate) -> list[Issue]:
        """All issues of a candidate. Output spans are relative to ``candidate.text``."""
        index = segment.index
        issues = self.check_output(segment.text, candidate.text, candidate.language, index)

        for unknown in segment.unknown_terms:
            if unknown.surface in candidate.text:
                issues.append(
                    Issue(
                        kind=IssueKind.UNKNOWN_TERM_UNTRANSLATED,
                        span=unknown.span,
                        segment_index=index,
                        detail=f"Unknown term {unknown.surface!r} left untranslated",
                    )
                )

        fluency = candidate.features.get("fluency")
        if fluency is not None and fluency < self.fluency_threshold:
            issues.append(
                Issue(
                    kind=IssueKind.LOW_FLUENCY,
                    span=(0, len(candidate.text)),
                    in_output=True,
                    segment_index=index,
                    detail=f"Fluency {fluency:.2f} below {self.fluency_threshold:.2f}",
                )
            )
        return issues

    def validate_document(
        self,
        source: str,
        output: str,
        target_lang: Language,
        flags: Iterable[Issue] = (),
    ) -> QualityVerdict:
        """Run the output checks over a whole document.

        Args:
            source: Full source text
            output: Assembled translation
            target_lang: Expected output language
            flags: Segment-level issues to include in the verdict

        Returns:
            Verdict over document checks and the given flags
        """
        issues = self.check_output(source, output, target_lang)
        issues.extend(flags)
        verdict = QualityVerdict.from_issues(issues)
        if verdict.rejected:
            logger.warning(
                f"Document rejected: {[issue.kind.value for issue in verdict.reasons]}"
            )
        return verdict

    def check_output(
        self,
        source: str,
        output: str,
        target_lang: Language,
        segment_index: int | None = None,
    ) -> list[Issue]:
        """Rejecting checks shared by segment and document validation."""
        issues: list[Issue] = []
        whole = (0, len(output))

        if not get_analyzer_for_language(target_lang).has_letters(output):
            issues.append(
                Issue(
                    kind=IssueKind.NO_TARGET_TOKENS,
                    span=whole,
                    in_output=True,
                    segment_index=segment_index,
                    detail=f"No {target_lang.value} words in output",
                )
            )

        ratio = length_ratio(source, output)
        if not self.length_ratio_min <= ratio <= self.length_ratio_max:
            shown = "inf" if math.isinf(ratio) else f"{ratio:.2f}"
            issues.append(
                Issue(
                    kind=IssueKind.LENGTH_RATIO_OUT_OF_BAND,
                    span=whole,
                    in_output=True,
                    segment_index=segment_index,
                    detail=(
                        f"Length ratio {shown} outside "
                        f"[{self.length_ratio_min}, {self.length_ratio_max}]"
                    ),
                )
            )

        for pattern in self.banned_patterns:
            for match in pattern.finditer(output):
                issues.append(
                    Issue(
                        kind=IssueKind.BANNED_PATTERN,
                        span=match.span(),
                        in_output=True,
                        segment_index=segment_index,
                        detail=f"Output matches banned pattern {pattern.pattern!r}",
                    )
                )
        return issues
