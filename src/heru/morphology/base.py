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

"""Base abstract class for language-specific morphological analyzers."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import ClassVar

from heru.core.errors import AnalysisError
from heru.core.models import Language, MorphFeatures, PartOfSpeech, Reading, Segment, Token

logger = logging.getLogger(__name__)

# Sentence-final punctuation followed by whitespace or end of text, or a newline
# that does not continue a word hyphenated across lines.
_SEGMENT_BOUNDARY = re.compile(r"[.!?;]+(?=\s|$)|(?<!-)\n")

_ALNUM = r"(?P<alnum>[A-Za-z0-9]+(?:[.,\-/][A-Za-z0-9]+)*)"
_PUNCT = r"(?P<punct>[^\w\s])"


@dataclass
class LemmaInfo:
    """Dictionary information about a lemma used on the generation side.

    Attributes:
        lemma: Dictionary form
        pos: Part of speech
        gender: Grammatical gender of nouns
        animate: Russian animacy (affects accusative forms)
        plural_only: Noun has no singular forms
    """

    lemma: str
    pos: PartOfSpeech
    gender: str | None = None
    animate: bool = False
    plural_only: bool = False


@dataclass
class Inflection:
    """Result of generating a surface form.

    ``ok`` is False when the lemma or feature combination was unknown and the
    surface is a fallback.
    """

    surface: str
    ok: bool = True


class AnalyzedDocument:
    """Lazy, restartable sequence of analyzed segments.

    Each iteration re-runs analysis over the stored text, so iterating twice
    yields equal segments.

    Example:
        >>> doc = analyzer.analyze("לחץ גבוה. מים חמים.")
        >>> len(doc)
        2
        >>> [segment.index for segment in doc]
        [0, 1]
    """

    def __init__(self, analyzer: MorphologicalAnalyzer, text: str) -> None:
        self.analyzer = analyzer
        self.text = text
        self.spans = analyzer.split_segments(text)

    def __iter__(self) -> Iterator[Segment]:
        for index, span in enumerate(self.spans):
            yield self.analyzer.analyze_segment(self.text, index=index, span=span)

    def __len__(self) -> int:
        return len(self.spans)


class MorphologicalAnalyzer(ABC):
    """Abstract base class for per-language tokenizer, lemmatizer and tagger.

    Subclasses supply the word pattern of their script, word-level analysis
    and the generation side of their paradigms (:meth:`inflect`).

    Example:
        >>> analyzer = RussianAnalyzer()
        >>> segment = analyzer.analyze_segment("Давление в системе")
        >>> [t.lemma for t in segment.tokens]
        ['давление', 'в', 'система']
    """

    #: Regex character class (without brackets) of the language's letters
    letters: ClassVar[str] = ""
    #: Regex matching one word of the language's script
    word_pattern: ClassVar[str] = ""

    def __init__(self) -> None:
        self._token_re = re.compile(f"(?P<word>{self.word_pattern})|{_ALNUM}|{_PUNCT}")
        self._letter_re = re.compile(f"[{self.letters}]")

    @property
    @abstractmethod
    def language(self) -> Language:
        """Language handled by this analyzer."""

    def analyze(self, text: str) -> AnalyzedDocument:
        """Analyze a document lazily, segment by segment."""
        return AnalyzedDocument(self, text)

    def split_segments(self, text: str) -> list[tuple[int, int]]:
        """Split text into sentence/clause spans.

        Boundaries are ``. ! ? ;`` followed by whitespace and newlines; a dot
        inside a decimal number is not a boundary. Spans are trimmed of
        surrounding whitespace and empty spans are dropped.
        """
        spans: list[tuple[int, int]] = []
        start = 0
        for match in _SEGMENT_BOUNDARY.finditer(text):
            self._append_span(text, start, match.end(), spans)
            start = match.end()
        self._append_span(text, start, len(text), spans)
        return spans

    @staticmethod
    def _append_span(text: str, start: int, end: int, spans: list[tuple[int, int]]) -> None:
        chunk = text[start:end]
        stripped = chunk.strip()
        if not stripped:
            return
        lead = len(chunk) - len(chunk.lstrip())
        spans.append((start + lead, start + lead + len(stripped)))

    def analyze_segment(
        self, text: str, index: int = 0, span: tuple[int, int] | None = None
    ) -> Segment:
        """Analyze one segment of ``text``.

        Args:
            text: Full document text
            index: Segment index in the document
            span: Character span of the segment (whole text if None)

        Raises:
            AnalysisError: If the segment contains letters of an unsupported script
        """
        start, end = span if span is not None else (0, len(text))
        chunk = text[start:end]
        self.check_script(chunk, offset=start)
        tokens = self._resolve_context(self._tokenize(chunk, offset=start))
        return Segment(
            index=index,
            text=chunk,
            span=(start, end),
            language=self.language,
            tokens=tuple(tokens),
        )

    def check_script(self, text: str, offset: int = 0) -> None:
        """Raise AnalysisError on letters outside this language's script.

        Latin letters and digits are always allowed (units, part numbers).
        """
        for i, char in enumerate(text):
            if not char.isalpha() or char.isascii() or self._letter_re.match(char):
                continue
            raise AnalysisError(
                f"Character {char!r} at offset {offset + i} is not valid "
                f"{self.language.value} text",
                language=self.language.value,
                span=(offset + i, offset + i + 1),
            )

    def has_letters(self, text: str) -> bool:
        """Whether text contains at least one letter of this language's script."""
        return self._letter_re.search(text) is not None

    def normalize(self, word: str) -> str:
        """Normalize a surface form for dictionary lookup."""
        return word.lower()

    def _tokenize(self, text: str, offset: int) -> list[Token]:
        tokens: list[Token] = []
        for match in self._token_re.finditer(text):
            span = (offset + match.start(), offset + match.end())
            surface = match.group()
            if match.group("word"):
                tokens.extend(self._analyze_word(surface, span))
            elif match.group("alnum"):
                pos = PartOfSpeech.FOREIGN if re.search("[A-Za-z]", surface) else PartOfSpeech.NUM
                tokens.append(self._literal(surface, span, pos))
            else:
                tokens.append(self._literal(surface, span, PartOfSpeech.PUNCT))
        return tokens

    def _literal(self, surface: str, span: tuple[int, int], pos: PartOfSpeech) -> Token:
        return Token.from_readings(
            surface,
            self.language,
            span,
            [Reading(lemma=surface, pos=pos, features=MorphFeatures(), weight=1.0)],
        )

    @staticmethod
    def _normalized(readings: list[Reading]) -> list[Reading]:
        """Rescale reading weights to sum to one, merging duplicates."""
        merged: dict[tuple[str, PartOfSpeech, MorphFeatures], float] = {}
        origins: dict[tuple[str, PartOfSpeech, MorphFeatures], str] = {}
        for reading in readings:
            key = (reading.lemma, reading.pos, reading.features)
            merged[key] = merged.get(key, 0.0) + reading.weight
            origins.setdefault(key, reading.origin)
        total = sum(merged.values()) or 1.0
        return [
            Reading(lemma=k[0], pos=k[1], features=k[2], weight=w / total, origin=origins[k])
            for k, w in merged.items()
        ]

    @abstractmethod
    def _analyze_word(self, surface: str, span: tuple[int, int]) -> list[Token]:
        """Analyze a single word of the language's script.

        Returns one token, or several when clitics are split off.
        """

    def _resolve_context(self, tokens: list[Token]) -> list[Token]:
        """Reweight readings using neighbouring tokens. Default: no change."""
        return tokens

    @abstractmethod
    def inflect(self, lemma: str, pos: PartOfSpeech, features: MorphFeatures) -> Inflection:
        """Generate the surface form of ``lemma`` with the given features."""

    @abstractmethod
    def lemma_info(self, lemma: str, pos: PartOfSpeech | None = None) -> LemmaInfo | None:
        """Look up dictionary information for a lemma."""

    def reweighted(self, token: Token, factors: dict[int, float]) -> Token:
        """Return token with reading weights multiplied by ``factors[i]``."""
        readings = [
            reading.model_copy(update={"weight": reading.weight * factors.get(i, 1.0)})
            for i, reading in enumerate(token.readings)
        ]
        return Token.from_readings(
            token.surface,
            token.language,
            token.span,
            self._normalized(readings),
            is_clitic=token.is_clitic,
        )
