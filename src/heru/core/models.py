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

"""Core data models for the Hebrew<->Russian translation core.

This module defines the data structures shared by every pipeline stage:
- Languages, parts of speech and morphological features
- Tokens with weighted lemma readings, segments and term matches
- Candidates, quality verdicts and translation results
- Feedback records and the versioned ranking model
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

RANKING_FEATURES: tuple[str, ...] = (
    "term_consistency",
    "morph_wellformedness",
    "length_ratio",
    "fluency",
    "memory_match",
)


class Language(str, Enum):
    """Supported languages."""

    HEBREW = "he"
    RUSSIAN = "ru"

    @classmethod
    def parse(cls, value: str | Language) -> Language:
        """Parse a language code such as ``"he"``, ``"HE"`` or ``"ru-RU"``.

        Raises:
            ValueError: If the code is not a supported language
        """
        if isinstance(value, Language):
            return value
        code = value.strip().lower().split("-")[0].split("_")[0]
        aliases = {"iw": "he", "heb": "he", "hebrew": "he", "rus": "ru", "russian": "ru"}
        return cls(aliases.get(code, code))

    @property
    def other(self) -> Language:
        return Language.RUSSIAN if self is Language.HEBREW else Language.HEBREW


class PartOfSpeech(str, Enum):
    """Part-of-speech tags shared by both analyzers."""

    NOUN = "NOUN"
    ADJ = "ADJ"
    VERB = "VERB"
    ADV = "ADV"
    PRON = "PRON"
    PREP = "PREP"
    CONJ = "CONJ"
    DET = "DET"
    PART = "PART"
    NUM = "NUM"
    PUNCT = "PUNCT"
    FOREIGN = "FOREIGN"
    UNKNOWN = "UNKNOWN"

    @property
    def is_lexical(self) -> bool:
        """Whether tokens with this tag carry translatable content."""
        return self not in (PartOfSpeech.NUM, PartOfSpeech.PUNCT, PartOfSpeech.FOREIGN)


class MorphFeatures(BaseModel):
    """Morphological features of a single reading.

    Values are lower-case tags: case in ``nom gen dat acc ins loc``, gender in
    ``masc fem neut``, number in ``sing plur``, tense in ``pres past inf``.
    """

    case: str | None = None
    gender: str | None = None
    number: str | None = None
    tense: str | None = None
    person: int | None = Field(default=None, ge=1, le=3)
    definite: bool = False
    construct_state: bool = False
    animate: bool = False
    prefixes: tuple[str, ...] = Field(
        default=(), description="Hebrew clitic prefixes attached to the word, in order"
    )

    model_config = ConfigDict(frozen=True)

    def merged(self, **changes: Any) -> MorphFeatures:
        """Return a copy with the given non-None fields replaced."""
        return self.model_copy(update={k: v for k, v in changes.items() if v is not None})


class Reading(BaseModel):
    """One possible analysis of a token."""

    lemma: str
    pos: PartOfSpeech
    features: MorphFeatures = Field(default_factory=MorphFeatures)
    weight: float = Field(default=1.0, ge=0.0, le=1.0, description="Normalized probability")
    origin: str = Field(default="dictionary", description="'dictionary' or 'rule'")

    model_config = ConfigDict(frozen=True)


class Token(BaseModel):
    """A token of analyzed text.

    ``lemma``, ``pos`` and ``features`` mirror the highest-weighted reading;
    ``readings`` holds every reading, best first. ``span`` is a character
    range into the analyzed document.
    """

    surface: str
    lemma: str
    language: Language
    pos: PartOfSpeech
    features: MorphFeatures = Field(default_factory=MorphFeatures)
    span: tuple[int, int]
    readings: tuple[Reading, ...] = ()
    is_clitic: bool = False

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_readings(
        cls,
        surface: str,
        language: Language,
        span: tuple[int, int],
        readings: list[Reading],
        is_clitic: bool = False,
    ) -> Token:
        """Build a token whose head fields mirror the best reading."""
        ordered = tuple(sorted(readings, key=lambda r: -r.weight))
        best = ordered[0]
        return cls(
            surface=surface,
            lemma=best.lemma,
            language=language,
            pos=best.pos,
            features=best.features,
            span=span,
            readings=ordered,
            is_clitic=is_clitic,
        )

    @property
    def is_word(self) -> bool:
        return not self.is_clitic and self.pos.is_lexical

    @property
    def is_guessed(self) -> bool:
        """True when every reading came from rules rather than the dictionary."""
        return bool(self.readings) and all(r.origin == "rule" for r in self.readings)

    @property
    def lemmas(self) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for reading in self.readings or (Reading(lemma=self.lemma, pos=self.pos),):
            seen.setdefault(reading.lemma, None)
        return tuple(seen)


class TermEntry(BaseModel):
    """A bilingual technical term mapping.

    Uniquely keyed by (source language, source lemma sequence, domain).
    """

    source: tuple[str, ...] = Field(..., min_length=1, description="Source lemma sequence")
    target: tuple[str, ...] = Field(..., min_length=1, description="Target lemma sequence")
    source_lang: Language
    target_lang: Language
    domain: str = Field(default="general", description="Domain tag")
    head: int = Field(default=0, ge=0, description="Index of the inflecting target word")
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    usage_count: int = Field(default=0, ge=0)
    context_profile: dict[str, float] = Field(
        default_factory=dict, description="Co-occurring source lemma -> weight"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_head(self) -> TermEntry:
        if self.head >= len(self.target):
            raise ValueError(f"head index {self.head} outside target {self.target}")
        if self.source_lang == self.target_lang:
            raise ValueError("source and target language must differ")
        return self

    @property
    def key(self) -> tuple[str, tuple[str, ...], str]:
        return (self.source_lang.value, self.source, self.domain)

    @property
    def head_lemma(self) -> str:
        return self.target[self.head]


class TermMatch(BaseModel):
    """A matched term span in a segment (token indices, end exclusive)."""

    start: int = Field(..., ge=0)
    end: int = Field(..., ge=1)
    senses: tuple[TermEntry, ...] = Field(..., min_length=1, description="Best sense first")
    resolved: bool = Field(..., description="Whether context disambiguation picked a sense")
    context_scores: tuple[float, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def best(self) -> TermEntry:
        return self.senses[0]

    @property
    def is_ambiguous(self) -> bool:
        return len({sense.target for sense in self.senses}) > 1


class UnknownTerm(BaseModel):
    """A technical-looking token not covered by the term lexicon."""

    token_index: int
    surface: str
    span: tuple[int, int]

    model_config = ConfigDict(frozen=True)


class Segment(BaseModel):
    """A sentence or clause of analyzed text."""

    index: int = Field(..., ge=0, description="Position in the document")
    text: str
    span: tuple[int, int] = Field(..., description="Character span in the document")
    language: Language
    tokens: tuple[Token, ...] = ()
    term_matches: tuple[TermMatch, ...] = ()
    unknown_terms: tuple[UnknownTerm, ...] = ()

    model_config = ConfigDict(frozen=True)

    @property
    def has_words(self) -> bool:
        return any(token.is_word for token in self.tokens)

    def context_lemmas(self, start: int, end: int, window: int) -> set[str]:
        """Lemmas of word tokens within ``window`` words around ``[start, end)``."""
        words = [i for i, token in enumerate(self.tokens) if token.is_word]
        before = [i for i in words if i < start][-window:] if window else []
        after = [i for i in words if i >= end][:window]
        lemmas: set[str] = set()
        for i in before + after:
            lemmas.update(self.tokens[i].lemmas)
        return lemmas


class AppliedTerm(BaseModel):
    """A term substitution used by a candidate, grounded in a source span."""

    source: tuple[str, ...]
    target: tuple[str, ...]
    domain: str
    token_start: int
    token_end: int

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_match(cls, entry: TermEntry, match: TermMatch) -> AppliedTerm:
        return cls(
            source=entry.source,
            target=entry.target,
            domain=entry.domain,
            token_start=match.start,
            token_end=match.end,
        )

    @property
    def key(self) -> tuple[tuple[str, ...], str]:
        return (self.source, self.domain)


class Candidate(BaseModel):
    """A target-language rendering of one segment."""

    segment_index: int
    language: Language
    text: str
    tokens: tuple[Token, ...] = ()
    lemmas: tuple[str, ...] = Field(default=(), description="Target lemma sequence")
    rules: tuple[str, ...] = Field(default=(), description="Generating rule tags")
    applied_terms: tuple[AppliedTerm, ...] = ()
    prior: float = Field(default=1.0, ge=0.0)
    index: int = Field(..., ge=0, description="Generation order")
    features: dict[str, float] = Field(default_factory=dict)
    score: float | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_memory(self) -> bool:
        return "memory" in self.rules


class IssueKind(str, Enum):
    """Structured reasons produced by the quality gate."""

    NO_TARGET_TOKENS = "no_target_tokens"
    LENGTH_RATIO_OUT_OF_BAND = "length_ratio_out_of_band"
    BANNED_PATTERN = "banned_pattern"
    UNKNOWN_TERM_UNTRANSLATED = "unknown_term_untranslated"
    LOW_FLUENCY = "low_fluency"
    SEGMENT_PASSTHROUGH = "segment_passthrough"

    @property
    def rejects(self) -> bool:
        return self in (
            IssueKind.NO_TARGET_TOKENS,
            IssueKind.LENGTH_RATIO_OUT_OF_BAND,
            IssueKind.BANNED_PATTERN,
        )


class Issue(BaseModel):
    """A single quality finding."""

    kind: IssueKind
    span: tuple[int, int] = Field(..., description="Character span of the affected text")
    in_output: bool = Field(
        default=False, description="Whether span points into the output instead of the source"
    )
    segment_index: int | None = None
    detail: str = ""

    model_config = ConfigDict(frozen=True)


class Outcome(str, Enum):
    PASS = "pass"
    FLAG = "flag"
    REJECT = "reject"


class QualityVerdict(BaseModel):
    """Result of quality gate validation."""

    outcome: Outcome
    reasons: tuple[Issue, ...] = ()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_issues(cls, issues: list[Issue]) -> QualityVerdict:
        """Reject if any rejecting issue is present, Flag on any other issue."""
        rejects = [issue for issue in issues if issue.kind.rejects]
        flags = [issue for issue in issues if not issue.kind.rejects]
        if rejects:
            return cls(outcome=Outcome.REJECT, reasons=tuple(rejects + flags))
        if flags:
            return cls(outcome=Outcome.FLAG, reasons=tuple(flags))
        return cls(outcome=Outcome.PASS)

    @property
    def rejected(self) -> bool:
        return self.outcome is Outcome.REJECT


class SegmentTranslation(BaseModel):
    """Per-segment part of a translation result."""

    index: int
    source: str
    span: tuple[int, int]
    translation: str
    alternatives: list[str] = Field(default_factory=list)
    passthrough: bool = False
    score: float | None = None
    applied_terms: list[AppliedTerm] = Field(default_factory=list)


class TranslationResult(BaseModel):
    """Response of a translation request."""

    request_id: str
    source_lang: Language
    target_lang: Language
    domain: str
    translation: str
    alternatives: list[str] = Field(default_factory=list)
    flags: list[Issue] = Field(default_factory=list)
    verdict: QualityVerdict
    segments: list[SegmentTranslation] = Field(default_factory=list)
    snapshot_version: int


class FeedbackRecord(BaseModel):
    """A user correction or rating of a past translation. Append-only."""

    id: int | None = Field(default=None, description="Store-assigned sequence number")
    original: str = Field(..., min_length=1)
    output: str
    correction: str | None = None
    rating: int = Field(..., ge=1, le=5, description="1 (bad) .. 5 (perfect)")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    source_lang: Language
    target_lang: Language
    domain: str = "general"

    model_config = ConfigDict(frozen=True)

    @field_validator("correction")
    @classmethod
    def _blank_correction(cls, value: str | None) -> str | None:
        if value is not None and not value.strip():
            return None
        return value

    @property
    def normalized_rating(self) -> float:
        """Rating mapped onto [-1, 1] with 3 as neutral."""
        return (self.rating - 3) / 2.0


@dataclass(frozen=True)
class RankingModel:
    """Versioned, immutable feature weights used by the ranker."""

    version: int
    weights: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name, value in self.weights.items():
            if not math.isfinite(value):
                raise ValueError(f"Ranking weight {name!r} is not finite: {value}")
        object.__setattr__(self, "weights", MappingProxyType(dict(self.weights)))

    def score(self, features: Mapping[str, float]) -> float:
        return sum(weight * features.get(name, 0.0) for name, weight in self.weights.items())

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "weights": dict(self.weights)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RankingModel:
        return cls(
            version=int(data["version"]),
            weights={str(k): float(v) for k, v in data["weights"].items()},
        )
