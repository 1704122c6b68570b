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

"""Hebrew morphological analyzer.

Splits prefix particles (ו, ש, ב/כ/ל/מ, ה) into clitic tokens, looks words
up in a form index generated from the lemma tables and falls back to suffix
stripping for words outside the dictionary.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from itertools import product

from heru.core.models import Language, MorphFeatures, PartOfSpeech, Reading, Token
from heru.morphology import lexicon_he as lex
from heru.morphology.base import Inflection, LemmaInfo, MorphologicalAnalyzer

logger = logging.getLogger(__name__)

_NIQQUD = re.compile("[֑-ׇ]")

# Each split-off clitic makes a reading this much less likely than a whole-word hit
PREFIX_PENALTY = 0.35

# Prefix letters allowed before verbs
_VERB_PREFIXES = frozenset("וש")

FormIndex = dict[str, list[tuple[str, PartOfSpeech, MorphFeatures]]]


def construct_form(lemma: str, plural: str | None, number: str) -> str | None:
    """Construct-state (smikhut) form of a noun."""
    if number == "plur":
        if plural is None:
            return None
        return plural[:-2] + "י" if plural.endswith("ים") else plural
    return lemma[:-1] + "ת" if lemma.endswith("ה") else lemma


def restore_final_letter(word: str) -> str:
    """Replace a trailing medial letter with its final form (e.g. מ -> ם)."""
    if word and word[-1] in lex.MEDIAL_TO_FINAL:
        return word[:-1] + lex.MEDIAL_TO_FINAL[word[-1]]
    return word


@lru_cache(maxsize=1)
def build_form_index() -> FormIndex:
    """Generate every known surface form from the lemma tables."""
    index: FormIndex = {}

    def add(form: str, lemma: str, pos: PartOfSpeech, features: MorphFeatures) -> None:
        entries = index.setdefault(form, [])
        if (lemma, pos, features) not in entries:
            entries.append((lemma, pos, features))

    for lemma, (gender, plural) in lex.NOUNS.items():
        if lemma in lex.PLURAL_ONLY:
            add(lemma, lemma, PartOfSpeech.NOUN, MorphFeatures(gender=gender, number="plur"))
            continue
        add(lemma, lemma, PartOfSpeech.NOUN, MorphFeatures(gender=gender, number="sing"))
        if plural:
            add(plural, lemma, PartOfSpeech.NOUN, MorphFeatures(gender=gender, number="plur"))
        for number in ("sing", "plur"):
            form = construct_form(lemma, plural, number)
            if form and form not in (lemma, plural):
                features = MorphFeatures(gender=gender, number=number, construct_state=True)
                add(form, lemma, PartOfSpeech.NOUN, features)

    for lemma, (fs, mp, fp) in lex.ADJECTIVES.items():
        for form, gender, number in (
            (lemma, "masc", "sing"),
            (fs, "fem", "sing"),
            (mp, "masc", "plur"),
            (fp, "fem", "plur"),
        ):
            add(form, lemma, PartOfSpeech.ADJ, MorphFeatures(gender=gender, number=number))

    for lemma, forms in lex.VERBS.items():
        for form, (tense, gender, number, person) in zip(forms, lex.VERB_SLOTS):
            features = MorphFeatures(tense=tense, gender=gender, number=number, person=person)
            add(form, lemma, PartOfSpeech.VERB, features)

    logger.debug(f"Hebrew form index built with {len(index)} forms")
    return index


def _prefix_candidates(word: str) -> list[str]:
    """All clitic prefix strings, in canonical order, that ``word`` starts with."""
    found: list[str] = []
    for parts in product(("", "ו"), ("", "ש"), ("", "ב", "כ", "ל", "מ"), ("", "ה")):
        prefix = "".join(parts)
        if word.startswith(prefix) and prefix not in found:
            found.append(prefix)
    return found


class HebrewAnalyzer(MorphologicalAnalyzer):
    """Rule- and dictionary-based Hebrew analyzer.

    Example:
        >>> analyzer = HebrewAnalyzer()
        >>> segment = analyzer.analyze_segment("לחץ גבוה במערכת")
        >>> [(t.surface, t.lemma, t.is_clitic) for t in segment.tokens]
        [('לחץ', 'לחץ', False), ('גבוה', 'גבוה', False), ('ב', 'ב', True),
         ('מערכת', 'מערכת', False)]
    """

    letters = "א-תװ-״"
    word_pattern = "[א-ת֑-ׇ]+(?:[׳״'\"][א-ת]+)*"

    def __init__(self) -> None:
        super().__init__()
        self._index = build_form_index()

    @property
    def language(self) -> Language:
        return Language.HEBREW

    def normalize(self, word: str) -> str:
        return _NIQQUD.sub("", word)

    def known_forms(self) -> frozenset[str]:
        return frozenset(self._index)

    def _analyze_word(self, surface: str, span: tuple[int, int]) -> list[Token]:
        word = self.normalize(surface)
        if word in lex.FUNCTION_WORDS:
            reading = Reading(lemma=word, pos=PartOfSpeech(lex.FUNCTION_WORDS[word]))
            return [Token.from_readings(surface, self.language, span, [reading])]

        scored: list[tuple[str, Reading]] = []
        for prefix in _prefix_candidates(word):
            rest = word[len(prefix) :]
            if len(rest) < 2:
                continue
            for reading in self._lookup(rest, prefix):
                scored.append((prefix, reading))

        if not scored:
            scored = self._guess(word)

        best_weight = max(reading.weight for _, reading in scored)
        prefix = next(p for p, r in scored if r.weight == best_weight)
        readings = self._normalized([r for p, r in scored if p == prefix])
        return self._split_clitics(surface, span, prefix, readings)

    def _lookup(self, rest: str, prefix: str) -> list[Reading]:
        readings: list[Reading] = []
        penalty = PREFIX_PENALTY ** len(prefix)
        definite = prefix.endswith("ה")
        if prefix and set(prefix) <= _VERB_PREFIXES and rest in lex.FUNCTION_WORDS:
            pos = PartOfSpeech(lex.FUNCTION_WORDS[rest])
            features = MorphFeatures(prefixes=tuple(prefix))
            readings.append(Reading(lemma=rest, pos=pos, features=features, weight=penalty))
        for lemma, pos, features in self._index.get(rest, []):
            if pos is PartOfSpeech.VERB and not set(prefix) <= _VERB_PREFIXES:
                continue
            if definite and features.construct_state:
                continue
            prior = lex.PRIORS.get((lemma, pos.value), 1.0)
            readings.append(
                Reading(
                    lemma=lemma,
                    pos=pos,
                    features=features.merged(prefixes=tuple(prefix), definite=definite or None),
                    weight=prior * penalty,
                )
            )
        return readings

    def _guess(self, word: str) -> list[tuple[str, Reading]]:
        """Rule-based reading for a word outside the dictionary."""
        prefix = ""
        for candidate in ("וה", "ה", "ו"):
            if word.startswith(candidate) and len(word) - len(candidate) >= 4:
                prefix = candidate
                break
        rest = word[len(prefix) :]
        number = "sing"
        gender = None
        if len(rest) >= 4 and rest.endswith("ים"):
            rest, number, gender = restore_final_letter(rest[:-2]), "plur", "masc"
        elif len(rest) >= 4 and rest.endswith("ות"):
            rest, number, gender = rest[:-2] + "ה", "plur", "fem"
        else:
            rest = restore_final_letter(rest)
        features = MorphFeatures(
            gender=gender,
            number=number,
            definite=prefix.endswith("ה"),
            prefixes=tuple(prefix),
        )
        reading = Reading(
            lemma=rest, pos=PartOfSpeech.NOUN, features=features, weight=1.0, origin="rule"
        )
        return [(prefix, reading)]

    def _split_clitics(
        self, surface: str, span: tuple[int, int], prefix: str, readings: list[Reading]
    ) -> list[Token]:
        tokens: list[Token] = []
        start, end = span
        cursor = 0
        for letter in prefix:
            # niqqud marks belong to the preceding letter
            width = 1
            while cursor + width < len(surface) and _NIQQUD.match(surface[cursor + width]):
                width += 1
            clitic = Reading(lemma=letter, pos=PartOfSpeech(lex.PREFIX_ROLES[letter]))
            tokens.append(
                Token.from_readings(
                    surface[cursor : cursor + width],
                    self.language,
                    (start + cursor, start + cursor + width),
                    [clitic],
                    is_clitic=True,
                )
            )
            cursor += width
        tokens.append(
            Token.from_readings(surface[cursor:], self.language, (start + cursor, end), readings)
        )
        return tokens

    def _resolve_context(self, tokens: list[Token]) -> list[Token]:
        """Mark nouns followed directly by another noun as construct state."""
        hosts = [i for i, token in enumerate(tokens) if not token.is_clitic]
        resolved = list(tokens)
        for current, following in zip(hosts, hosts[1:]):
            token, nxt = tokens[current], tokens[following]
            if token.pos is not PartOfSpeech.NOUN or nxt.pos is not PartOfSpeech.NOUN:
                continue
            if token.features.definite or token.features.construct_state or token.is_guessed:
                continue
            # a clitic preposition between the nouns breaks the chain
            if any(tokens[k].pos is PartOfSpeech.PREP for k in range(current + 1, following)):
                continue
            info = lex.NOUNS.get(token.lemma)
            if info is None:
                continue
            form = construct_form(token.lemma, info[1], token.features.number or "sing")
            bare = self.normalize(token.surface)
            if form != bare:
                continue
            readings = [
                reading.model_copy(
                    update={"features": reading.features.merged(construct_state=True)}
                )
                if reading.pos is PartOfSpeech.NOUN
                else reading
                for reading in token.readings
            ]
            resolved[current] = Token.from_readings(
                token.surface, token.language, token.span, readings, is_clitic=token.is_clitic
            )
        return resolved

    def lemma_info(self, lemma: str, pos: PartOfSpeech | None = None) -> LemmaInfo | None:
        if pos in (None, PartOfSpeech.NOUN) and lemma in lex.NOUNS:
            gender = lex.NOUNS[lemma][0]
            return LemmaInfo(
                lemma, PartOfSpeech.NOUN, gender=gender, plural_only=lemma in lex.PLURAL_ONLY
            )
        if pos in (None, PartOfSpeech.ADJ) and lemma in lex.ADJECTIVES:
            return LemmaInfo(lemma, PartOfSpeech.ADJ)
        if pos in (None, PartOfSpeech.VERB) and lemma in lex.VERBS:
            return LemmaInfo(lemma, PartOfSpeech.VERB)
        if lemma in lex.FUNCTION_WORDS:
            return LemmaInfo(lemma, PartOfSpeech(lex.FUNCTION_WORDS[lemma]))
        return None

    def inflect(self, lemma: str, pos: PartOfSpeech, features: MorphFeatures) -> Inflection:
        """Generate a Hebrew surface form, prefixes included.

        Example:
            >>> HebrewAnalyzer().inflect("גבוה", PartOfSpeech.ADJ, MorphFeatures(gender="fem"))
            Inflection(surface='גבוהה', ok=True)
        """
        prefix = "".join(features.prefixes)
        if pos is PartOfSpeech.NOUN:
            result = self._inflect_noun(lemma, features)
        elif pos is PartOfSpeech.ADJ:
            result = self._inflect_adjective(lemma, features)
        elif pos is PartOfSpeech.VERB:
            result = self._inflect_verb(lemma, features)
        else:
            result = Inflection(lemma)
        return Inflection(prefix + result.surface, result.ok)

    def _inflect_noun(self, lemma: str, features: MorphFeatures) -> Inflection:
        info = lex.NOUNS.get(lemma)
        if info is None:
            return Inflection(lemma, ok=False)
        plural = info[1]
        number = features.number or "sing"
        if lemma in lex.PLURAL_ONLY:
            form, ok = lemma, True
        elif features.construct_state:
            constructed = construct_form(lemma, plural, number)
            form, ok = (constructed, True) if constructed else (lemma, False)
        elif number == "plur":
            form, ok = (plural, True) if plural else (lemma, False)
        else:
            form, ok = lemma, True
        if features.definite and not features.construct_state:
            form = "ה" + form
        return Inflection(form, ok)

    def _inflect_adjective(self, lemma: str, features: MorphFeatures) -> Inflection:
        forms = lex.ADJECTIVES.get(lemma)
        if forms is None:
            return Inflection(lemma, ok=False)
        fs, mp, fp = forms
        table = {
            ("masc", "sing"): lemma,
            ("fem", "sing"): fs,
            ("masc", "plur"): mp,
            ("fem", "plur"): fp,
        }
        gender = "fem" if features.gender == "fem" else "masc"
        form = table[(gender, features.number or "sing")]
        return Inflection("ה" + form if features.definite else form)

    def _inflect_verb(self, lemma: str, features: MorphFeatures) -> Inflection:
        forms = lex.VERBS.get(lemma)
        if forms is None:
            return Inflection(lemma, ok=False)
        plural = features.number == "plur"
        feminine = features.gender == "fem"
        if features.tense == "pres":
            slot = (2 if plural else 0) + (1 if feminine else 0)
        elif features.tense == "past":
            if features.person == 1 and not plural:
                slot = 7
            elif plural:
                slot = 6
            else:
                slot = 5 if feminine else 4
        elif features.tense == "inf":
            slot = 8
        else:
            return Inflection(forms[0], ok=False)
        return Inflection(forms[slot])
