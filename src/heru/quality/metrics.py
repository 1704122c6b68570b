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

"""Reference-based translation metrics for evaluating corrected feedback.

Scores produced output against the reviewer's correction with sacreBLEU:
- BLEU: word n-gram overlap
- chrF++: character n-gram F-score (robust for Hebrew and Russian morphology)
- TER: edits needed to turn the output into the correction

Term accuracy measures how many applied term translations the reviewer kept.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Sequence

from pydantic import BaseModel, Field
from sacrebleu import BLEU, CHRF, TER

logger = logging.getLogger(__name__)


class MetricScores(BaseModel):
    """Reference-based scores of one translation or a corpus."""

    bleu: float = Field(..., description="BLEU score (0-100, higher is better)", ge=0.0, le=100.0)
    chrf: float = Field(..., description="chrF++ score (0-100, higher is better)", ge=0.0, le=100.0)
    ter: float = Field(
        ..., description="Translation Edit Rate (0 = identical, lower is better)", ge=0.0
    )
    length_ratio: float = Field(..., description="Output/reference character ratio", ge=0.0)
    quality_level: str = Field(
        ..., description="Overall quality level: excellent, good, acceptable, or poor"
    )


class FeedbackEvaluation(BaseModel):
    """Scores of the outputs reviewers corrected in one retrain batch."""

    records: int = Field(..., description="Corrected records scored", ge=1)
    scores: MetricScores
    term_accuracy: float = Field(
        ..., description="Share of applied terms kept in the corrections", ge=0.0, le=1.0
    )


def term_accuracy(observed: Iterable[tuple[Sequence[Sequence[str]], Collection[str]]]) -> float:
    """Share of applied target terms whose lemmas all survive in the correction.

    Args:
        observed: Per record, the target lemma tuples of the applied terms and
            the lemmas of the correction

    Returns:
        Accuracy in 0..1, or 1.0 when no term was applied

    Example:
        >>> applied = [("давление",), ("система",)]
        >>> term_accuracy([(applied, {"давление", "высокий"})])
        0.5
    """
    kept = total = 0
    for terms, lemmas in observed:
        for target in terms:
            total += 1
            kept += all(lemma in lemmas for lemma in target)
    return kept / total if total else 1.0


class TranslationMetrics:
    """sacreBLEU metrics with chrF-based quality levels.

    Example:
        >>> metrics = TranslationMetrics()
        >>> metrics.evaluate("высокое давление", "высокое давление").chrf
        100.0
    """

    THRESHOLD_EXCELLENT = 80.0
    THRESHOLD_GOOD = 65.0
    THRESHOLD_ACCEPTABLE = 50.0

    def __init__(self) -> None:
        # effective_order keeps short technical segments from scoring zero
        self.bleu = BLEU(effective_order=True)
        self.chrf = CHRF(word_order=2)
        self.ter = TER()

    def evaluate(self, translation: str, reference: str) -> MetricScores:
        """Score one translation against its reference."""
        chrf = self.chrf.sentence_score(translation, [reference]).score
        return MetricScores(
            bleu=round(self.bleu.sentence_score(translation, [reference]).score, 2),
            chrf=round(chrf, 2),
            ter=round(self.ter.sentence_score(translation, [reference]).score, 2),
            length_ratio=round(len(translation) / max(len(reference), 1), 2),
            quality_level=self._quality_level(chrf),
        )

    def evaluate_corpus(
        self, translations: Sequence[str], references: Sequence[str]
    ) -> MetricScores:
        """Corpus-level scores, more stable than averaged sentence scores.

        Raises:
            ValueError: If the lists differ in length or are empty
        """
        if len(translations) != len(references):
            raise ValueError("Number of translations must match number of references")
        if not translations:
            raise ValueError("Nothing to evaluate")

        refs = [list(references)]
        chrf = self.chrf.corpus_score(list(translations), refs).score
        total_ref = sum(len(r) for r in references)
        return MetricScores(
            bleu=round(self.bleu.corpus_score(list(translations), refs).score, 2),
            chrf=round(chrf, 2),
            ter=round(self.ter.corpus_score(list(translations), refs).score, 2),
            length_ratio=round(sum(len(t) for t in translations) / max(total_ref, 1), 2),
            quality_level=self._quality_level(chrf),
        )

    def evaluate_feedback(
        self,
        outputs: Sequence[str],
        corrections: Sequence[str],
        applied_terms: Sequence[tuple[Sequence[Sequence[str]], Collection[str]]] = (),
    ) -> FeedbackEvaluation:
        """Score produced outputs against reviewer corrections.

        Args:
            outputs: Translations that were rated
            corrections: Reviewer corrections, aligned with ``outputs``
            applied_terms: Applied term targets and correction lemmas per record

        Returns:
            Corpus scores plus term accuracy
        """
        scores = self.evaluate_corpus(outputs, corrections)
        accuracy = term_accuracy(applied_terms)
        logger.debug(
            f"Feedback evaluation: {len(outputs)} corrections, chrF {scores.chrf}, "
            f"term accuracy {accuracy:.2f}"
        )
        return FeedbackEvaluation(records=len(outputs), scores=scores, term_accuracy=accuracy)

    def _quality_level(self, chrf_score: float) -> str:
        if chrf_score >= self.THRESHOLD_EXCELLENT:
            return "excellent"
        if chrf_score >= self.THRESHOLD_GOOD:
            return "good"
        if chrf_score >= self.THRESHOLD_ACCEPTABLE:
            return "acceptable"
        return "poor"


__all__ = ["FeedbackEvaluation", "MetricScores", "TranslationMetrics", "term_accuracy"]
