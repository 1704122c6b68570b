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

"""Batch learner: turns rated feedback into a new snapshot.

The learner is a pure function of (base snapshot, observations): the same
records applied to the same base always produce the same snapshot. The
engine handles reading records, publishing and persisting.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
from pydantic import BaseModel, Field

from heru.core.models import (
    RANKING_FEATURES,
    AppliedTerm,
    FeedbackRecord,
    RankingModel,
    TermEntry,
)
from heru.core.snapshot import Snapshot, memory_key
from heru.quality.metrics import FeedbackEvaluation
from heru.utils.config import Settings

logger = logging.getLogger(__name__)

PROFILE_STEP = 0.1
MEMORY_MIN_RATING = 4


@dataclass(frozen=True)
class Observation:
    """A feedback record re-analyzed against the snapshot it is learned into.

    Attributes:
        record: The stored feedback
        features: Feature vector of the candidate that produced the output
        applied: Term substitutions used by that candidate
        contexts: Source context lemmas around each applied term
        correction_lemmas: Target lemmas of the correction (empty if none)
        unknown_terms: Unknown source terms found in the original
    """

    record: FeedbackRecord
    features: Mapping[str, float] = field(default_factory=dict)
    applied: tuple[AppliedTerm, ...] = ()
    contexts: tuple[frozenset[str], ...] = ()
    correction_lemmas: tuple[str, ...] = ()
    unknown_terms: tuple[str, ...] = ()


class RetrainReport(BaseModel):
    """Outcome of a retrain run."""

    version: int = Field(..., description="Snapshot version after the run")
    changed: bool = Field(..., description="Whether a new snapshot was published")
    records: int = Field(default=0, description="Feedback records consumed")
    weights: dict[str, float] = Field(default_factory=dict)
    unknown_terms: list[str] = Field(
        default_factory=list, description="Unknown source terms seen in feedback"
    )
    evaluation: FeedbackEvaluation | None = Field(
        default=None, description="Scores of corrected outputs against their corrections"
    )


class Learner:
    """Bounded gradient steps on ranking weights plus term confidence updates."""

    def __init__(
        self,
        learning_rate: float = 0.1,
        max_step: float = 0.25,
        min_weight: float = 0.05,
        confidence_step: float = 0.1,
        min_confidence: float = 0.05,
    ) -> None:
        if min_weight <= 0:
            raise ValueError("min_weight must be positive")
        self.learning_rate = learning_rate
        self.max_step = max_step
        self.min_weight = min_weight
        self.confidence_step = confidence_step
        self.min_confidence = min_confidence

    @classmethod
    def from_settings(cls, settings: Settings) -> Learner:
        return cls(
            learning_rate=settings.learning_rate,
            max_step=settings.max_step,
            min_weight=settings.min_weight,
            confidence_step=settings.confidence_step,
            min_confidence=settings.min_confidence,
        )

    def learn(self, base: Snapshot, observations: Sequence[Observation]) -> Snapshot:
        """Build the snapshot following ``base`` from ``observations``.

        Raises:
            ValueError: If there are no observations
        """
        if not observations:
            raise ValueError("Nothing to learn from")

        version = base.version + 1
        model = RankingModel(version=version, weights=self.update_weights(base.model, observations))
        lexicon = base.lexicon.with_entries(self.update_terms(base, observations), version)

        fluency = dict(base.fluency)
        memory = dict(base.memory)
        for obs in observations:
            record = obs.record
            if record.correction is None or not obs.correction_lemmas:
                continue
            target = fluency.get(record.target_lang)
            if target is not None:
                fluency[record.target_lang] = target.with_sentences([obs.correction_lemmas])
            if record.rating >= MEMORY_MIN_RATING:
                key = memory_key(record.source_lang, record.target_lang, record.original)
                memory[key] = record.correction

        return Snapshot(
            version=version, lexicon=lexicon, model=model, fluency=fluency, memory=memory
        )

    def update_weights(
        self, model: RankingModel, observations: Sequence[Observation]
    ) -> dict[str, float]:
        """Apply one clipped, floored gradient step to the ranking weights.

        ``Δw_f = lr · mean(r̂ · (x_f − mean x_f))``; the step is discarded if
        any resulting weight is not finite.
        """
        names = list(dict.fromkeys([*RANKING_FEATURES, *model.weights]))
        weights = np.array([model.weights.get(name, 0.0) for name in names], dtype=np.float64)
        x: npt.NDArray[np.float64] = np.array(
            [[obs.features.get(name, 0.0) for name in names] for obs in observations],
            dtype=np.float64,
        )
        ratings = np.array([obs.record.normalized_rating for obs in observations])

        centered = x - x.mean(axis=0)
        delta = self.learning_rate * (ratings[:, None] * centered).mean(axis=0)
        delta = np.clip(delta, -self.max_step, self.max_step)
        updated = np.maximum(weights + delta, self.min_weight)

        if not np.all(np.isfinite(updated)):
            logger.warning("Weight update produced non-finite values; keeping previous weights")
            updated = weights

        return {name: float(value) for name, value in zip(names, updated)}

    def update_terms(self, base: Snapshot, observations: Sequence[Observation]) -> list[TermEntry]:
        """Confidence, usage and context profile updates for applied terms."""
        working: dict[tuple[str, tuple[str, ...], str], TermEntry] = {}

        def current(key: tuple[str, tuple[str, ...], str]) -> TermEntry | None:
            return working.get(key) or base.lexicon.get(key)

        for obs in observations:
            record = obs.record
            r = record.normalized_rating
            contexts = obs.contexts or tuple(frozenset() for _ in obs.applied)
            for applied, context in zip(obs.applied, contexts):
                key = (record.source_lang.value, applied.source, applied.domain)
                entry = current(key)
                if entry is None:
                    continue
                if r >= 0:
                    entry = entry.model_copy(update={"usage_count": entry.usage_count + 1})
                if r > 0:
                    entry = self._reinforce(entry, context, r)
                elif r < 0 and record.correction and entry.head_lemma not in obs.correction_lemmas:
                    entry = entry.model_copy(
                        update={
                            "confidence": max(
                                self.min_confidence,
                                entry.confidence - self.confidence_step * entry.confidence * -r,
                            )
                        }
                    )
                    # a correction naming another sense of the same source confirms it
                    for other in base.lexicon.entries_for(record.source_lang):
                        if other.source != applied.source or other.key == key:
                            continue
                        sense = current(other.key) or other
                        if sense.head_lemma in obs.correction_lemmas:
                            working[sense.key] = self._reinforce(sense, context, -r)
                working[key] = entry

        if working:
            logger.info(f"Updated {len(working)} term entries")
        return list(working.values())

    def _reinforce(self, entry: TermEntry, context: frozenset[str], strength: float) -> TermEntry:
        profile = dict(entry.context_profile)
        for lemma in sorted(context):
            profile[lemma] = min(1.0, profile.get(lemma, 0.0) + PROFILE_STEP * strength)
        confidence = entry.confidence + self.confidence_step * (1.0 - entry.confidence) * strength
        return entry.model_copy(
            update={"confidence": min(1.0, confidence), "context_profile": profile}
        )
