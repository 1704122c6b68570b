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

"""Technical term recognition and sense disambiguation.

Scans segments greedily, leftmost-longest, matching token lemmas (any reading)
against the term lexicon of the requested domain plus the general domain.
Single-lemma terms with several senses are resolved by comparing the
surrounding lemmas with each sense's context profile.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator

from heru.core.models import Language, Segment, TermEntry, TermMatch, Token, UnknownTerm
from heru.terminology.builtin import COMMON_WORDS
from heru.terminology.domains import GENERAL_DOMAIN
from heru.terminology.lexicon import TermLexicon

logger = logging.getLogger(__name__)

_MIXED_ALNUM = re.compile(r"(?=.*[A-Za-z])(?=.*\d)")


class TermRecognizer:
    """Annotates analyzed segments with term matches and unknown terms.

    Example:
        >>> recognizer = TermRecognizer(lexicon)
        >>> segment = recognizer.recognize_segment(
        ...     HebrewAnalyzer().analyze_segment("לחץ גבוה במערכת"), "engineering"
        ... )
        >>> segment.term_matches[0].best.target
        ('давление',)
    """

    def __init__(
        self,
        lexicon: TermLexicon,
        context_window: int = 3,
        common_words: dict[Language, frozenset[str]] | None = None,
    ) -> None:
        self.lexicon = lexicon
        self.context_window = context_window
        self.common_words = common_words if common_words is not None else COMMON_WORDS

    def recognize(self, segments: Iterable[Segment], domain: str) -> Iterator[Segment]:
        """Annotate each segment lazily."""
        for segment in segments:
            yield self.recognize_segment(segment, domain)

    def recognize_segment(self, segment: Segment, domain: str) -> Segment:
        domains = (domain, GENERAL_DOMAIN) if domain != GENERAL_DOMAIN else (GENERAL_DOMAIN,)
        tokens = segment.tokens
        positions = [i for i, token in enumerate(tokens) if not token.is_clitic]
        matches: list[TermMatch] = []
        covered: set[int] = set()

        p = 0
        while p < len(positions):
            found = self._longest_match(segment, positions, p, domain, domains)
            if found is None:
                p += 1
                continue
            length, entries = found
            start = positions[p]
            end = positions[p + length - 1] + 1
            matches.append(self._disambiguate(segment, start, end, entries))
            covered.update(positions[p : p + length])
            p += length

        unknown = [
            UnknownTerm(token_index=i, surface=token.surface, span=token.span)
            for i, token in enumerate(tokens)
            if i not in covered and self._looks_technical(token)
        ]
        if unknown:
            logger.debug(f"Segment {segment.index}: unknown terms {[u.surface for u in unknown]}")
        return segment.model_copy(
            update={"term_matches": tuple(matches), "unknown_terms": tuple(unknown)}
        )

    def _longest_match(
        self,
        segment: Segment,
        positions: list[int],
        p: int,
        domain: str,
        domains: tuple[str, ...],
    ) -> tuple[int, list[TermEntry]] | None:
        first = segment.tokens[positions[p]]
        if not first.is_word:
            return None
        candidates: dict[tuple[str, tuple[str, ...], str], TermEntry] = {}
        for lemma in first.lemmas:
            for entry in self.lexicon.starting_with(segment.language, lemma, domains):
                candidates[entry.key] = entry

        best_length = 0
        best: list[TermEntry] = []
        for entry in candidates.values():
            length = len(entry.source)
            if length < best_length or p + length > len(positions):
                continue
            window = [segment.tokens[i] for i in positions[p : p + length]]
            if not all(
                token.is_word and lemma in token.lemmas
                for token, lemma in zip(window, entry.source)
            ):
                continue
            if length > best_length:
                best_length, best = length, [entry]
            else:
                best.append(entry)
        if not best:
            return None

        best.sort(
            key=lambda e: (e.domain != domain, -e.confidence, -e.usage_count, e.target)
        )
        return best_length, best

    def _disambiguate(
        self, segment: Segment, start: int, end: int, entries: list[TermEntry]
    ) -> TermMatch:
        targets = {entry.target for entry in entries}
        if len(targets) == 1 or end - start > 1:
            return TermMatch(
                start=start, end=end, senses=tuple(entries), resolved=len(targets) == 1
            )

        context = segment.context_lemmas(start, end, self.context_window)
        scores = [
            sum(weight for lemma, weight in entry.context_profile.items() if lemma in context)
            for entry in entries
        ]
        top = max(scores)
        resolved = top > 0 and scores.count(top) == 1
        if resolved:
            order = sorted(range(len(entries)), key=lambda k: -scores[k])
        else:
            order = list(range(len(entries)))
        logger.debug(
            f"Term at tokens {start}-{end}: senses "
            f"{[entries[k].target for k in order]} scores {[scores[k] for k in order]}"
        )
        return TermMatch(
            start=start,
            end=end,
            senses=tuple(entries[k] for k in order),
            resolved=resolved,
            context_scores=tuple(scores[k] for k in order),
        )

    def _looks_technical(self, token: Token) -> bool:
        """Rule-only analysis or mixed Latin/digits, and not a common word."""
        if token.is_clitic or token.pos.value in ("PUNCT", "NUM"):
            return False
        mixed = bool(_MIXED_ALNUM.match(token.surface))
        if not (token.is_guessed or mixed):
            return False
        words = {token.lemma, token.surface.lower()}
        return not any(words & common for common in self.common_words.values())
