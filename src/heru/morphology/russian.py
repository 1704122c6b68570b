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

"""Russian morphological analyzer with pymorphy3 integration.

Readings come from the OpenCorpora dictionary through
:class:`pymorphy3.MorphAnalyzer`, weighted by the parse scores. Words the
dictionary does not know get pymorphy3's suffix predictions and count as
rule readings. Case readings are reweighted by the governing preposition,
and closed-class words are overridden from :mod:`heru.morphology.lexicon_ru`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from functools import lru_cache
from typing import Any

import pymorphy3

from heru.core.models import Language, MorphFeatures, PartOfSpeech, Reading, Token
from heru.morphology import lexicon_ru as lex
from heru.morphology.base import Inflection, LemmaInfo, MorphologicalAnalyzer

logger = logging.getLogger(__name__)

_LINE_BREAK_HYPHEN = re.compile(r"-\n[ \t]*")

# Weight multiplier for case readings licensed by the governing preposition
GOVERNMENT_BOOST = 4.0
# Weight multiplier for genitive readings of a noun directly after a noun
GENITIVE_CHAIN_BOOST = 2.0
# Floor for parse scores so every reading keeps some weight
MIN_SCORE = 1e-3

# OpenCorpora grammemes <-> feature tags
CASES: dict[str, str] = {
    "nomn": "nom",
    "gent": "gen",
    "gen2": "gen",
    "datv": "dat",
    "accs": "acc",
    "acc2": "acc",
    "ablt": "ins",
    "loct": "loc",
    "loc2": "loc",
    "voct": "nom",
}
CASE_GRAMMEMES: dict[str, str] = {
    "nom": "nomn",
    "gen": "gent",
    "dat": "datv",
    "acc": "accs",
    "ins": "ablt",
    "loc": "loct",
}
GENDERS: dict[str, str] = {"masc": "masc", "femn": "fem", "neut": "neut"}
GENDER_GRAMMEMES: dict[str, str] = {"masc": "masc", "fem": "femn", "neut": "neut"}
PERSONS: dict[str, int] = {"1per": 1, "2per": 2, "3per": 3}

POS_TAGS: dict[str, PartOfSpeech] = {
    "NOUN": PartOfSpeech.NOUN,
    "ADJF": PartOfSpeech.ADJ,
    "ADJS": PartOfSpeech.ADJ,
    "COMP": PartOfSpeech.ADJ,
    "PRTF": PartOfSpeech.ADJ,
    "PRTS": PartOfSpeech.ADJ,
    "VERB": PartOfSpeech.VERB,
    "INFN": PartOfSpeech.VERB,
    "GRND": PartOfSpeech.ADV,
    "ADVB": PartOfSpeech.ADV,
    "PRED": PartOfSpeech.ADV,
    "NPRO": PartOfSpeech.PRON,
    "PREP": PartOfSpeech.PREP,
    "CONJ": PartOfSpeech.CONJ,
    "PRCL": PartOfSpeech.PART,
    "INTJ": PartOfSpeech.PART,
}

# Dictionary-form tags a generation lemma must carry
LEMMA_TAGS: dict[PartOfSpeech, tuple[str, ...]] = {
    PartOfSpeech.NOUN: ("NOUN",),
    PartOfSpeech.ADJ: ("ADJF",),
    PartOfSpeech.VERB: ("INFN",),
}

# Proper-name readings are dropped unless nothing else is left
PROPER_NAME_GRAMMEMES = frozenset({"Name", "Surn", "Patr", "Geox", "Orgn", "Trad"})


@lru_cache(maxsize=1)
def get_morph() -> pymorphy3.MorphAnalyzer:
    """Shared pymorphy3 analyzer (loading the dictionaries is slow)."""
    morph = pymorphy3.MorphAnalyzer()
    logger.debug("pymorphy3 Russian dictionaries loaded")
    return morph


def fold_yo(word: str) -> str:
    return word.replace("ё", "е")


def tag_features(tag: Any) -> MorphFeatures:
    """Convert a pymorphy3 tag to reading features."""
    if tag.POS == "INFN":
        tense = "inf"
    elif tag.tense in ("pres", "futr"):
        tense = "pres"
    else:
        tense = tag.tense
    return MorphFeatures(
        case=CASES.get(tag.case),
        gender=GENDERS.get(tag.gender),
        number=tag.number,
        tense=tense,
        person=PERSONS.get(tag.person),
        animate=tag.animacy == "anim",
    )


class RussianAnalyzer(MorphologicalAnalyzer):
    """Russian analyzer backed by pymorphy3.

    Example:
        >>> analyzer = RussianAnalyzer()
        >>> token = analyzer.analyze_segment("в системе").tokens[1]
        >>> token.lemma, token.features.case
        ('система', 'loc')
    """

    letters = "Ѐ-ӿ"
    word_pattern = r"[а-яёА-ЯЁ]+(?:(?:-\n[ \t]*|-)[а-яёА-ЯЁ]+)*"

    def __init__(self) -> None:
        super().__init__()
        self.morph = get_morph()

    @property
    def language(self) -> Language:
        return Language.RUSSIAN

    def normalize(self, word: str) -> str:
        return fold_yo(_LINE_BREAK_HYPHEN.sub("", word).lower())

    def _analyze_word(self, surface: str, span: tuple[int, int]) -> list[Token]:
        word = self.normalize(surface)
        if word in lex.PREPOSITIONS:
            readings = [Reading(lemma=word, pos=PartOfSpeech.PREP)]
        elif word in lex.FUNCTION_WORDS:
            readings = [Reading(lemma=word, pos=PartOfSpeech(lex.FUNCTION_WORDS[word]))]
        else:
            readings = self._readings(word)
        return [Token.from_readings(surface, self.language, span, self._normalized(readings))]

    def _readings(self, word: str) -> list[Reading]:
        """Weighted readings of ``word``; unknown words get predicted readings."""
        parses = self.morph.parse(word)
        common = [p for p in parses if not PROPER_NAME_GRAMMEMES & p.tag.grammemes] or parses
        return [
            Reading(
                lemma=fold_yo(parse.normal_form),
                pos=POS_TAGS.get(parse.tag.POS, PartOfSpeech.UNKNOWN),
                features=tag_features(parse.tag),
                weight=min(1.0, max(parse.score, MIN_SCORE)),
                origin="dictionary" if parse.is_known else "rule",
            )
            for parse in common
        ]

    def _resolve_context(self, tokens: list[Token]) -> list[Token]:
        """Boost case readings licensed by a preposition or a preceding noun."""
        resolved = list(tokens)
        governed: tuple[str, ...] | None = None
        after_noun = False
        for i, token in enumerate(tokens):
            if token.pos is PartOfSpeech.PREP and token.lemma in lex.PREPOSITIONS:
                governed = lex.PREPOSITIONS[token.lemma]
                after_noun = False
                continue
            if token.pos in (PartOfSpeech.NOUN, PartOfSpeech.ADJ):
                if governed:
                    factors = {
                        k: GOVERNMENT_BOOST
                        for k, reading in enumerate(token.readings)
                        if reading.features.case in governed
                    }
                elif after_noun:
                    factors = {
                        k: GENITIVE_CHAIN_BOOST
                        for k, reading in enumerate(token.readings)
                        if reading.features.case == "gen"
                    }
                else:
                    factors = {}
                if factors and len(token.readings) > 1:
                    resolved[i] = self.reweighted(token, factors)
                if resolved[i].pos is PartOfSpeech.NOUN:
                    governed = None
                    after_noun = True
                continue
            governed = None
            after_noun = False
        return resolved

    def _lemma_parses(self, lemma: str, tags: tuple[str, ...]) -> Iterator[Any]:
        """Parses of ``lemma`` as its own dictionary form, best first."""
        trusted = lemma in lex.DOMAIN_LEMMAS
        for parse in self.morph.parse(lemma):
            if parse.tag.POS not in tags or fold_yo(parse.normal_form) != lemma:
                continue
            if parse.is_known or trusted:
                yield parse

    def lemma_info(self, lemma: str, pos: PartOfSpeech | None = None) -> LemmaInfo | None:
        if pos in (None, PartOfSpeech.PREP) and lemma in lex.PREPOSITIONS:
            return LemmaInfo(lemma, PartOfSpeech.PREP)
        if pos is None and lemma in lex.FUNCTION_WORDS:
            return LemmaInfo(lemma, PartOfSpeech(lex.FUNCTION_WORDS[lemma]))

        wanted = (pos,) if pos is not None else tuple(LEMMA_TAGS)
        tags = tuple(tag for p in wanted for tag in LEMMA_TAGS.get(p, ()))
        parse = next(self._lemma_parses(lemma, tags), None)
        if parse is None:
            return None
        tag = parse.tag
        return LemmaInfo(
            lemma,
            POS_TAGS[tag.POS],
            gender=GENDERS.get(tag.gender),
            animate=tag.animacy == "anim",
            plural_only="Pltm" in tag,
        )

    def inflect(self, lemma: str, pos: PartOfSpeech, features: MorphFeatures) -> Inflection:
        """Generate a Russian surface form with pymorphy3.

        Lemmas the dictionary does not know (outside the domain overrides)
        fall back to the lemma with ``ok=False``.

        Example:
            >>> features = MorphFeatures(case="loc", number="sing")
            >>> RussianAnalyzer().inflect("система", PartOfSpeech.NOUN, features)
            Inflection(surface='системе', ok=True)
        """
        if pos not in LEMMA_TAGS:
            return Inflection(lemma)
        parse = next(self._lemma_parses(lemma, LEMMA_TAGS[pos]), None)
        if parse is None:
            logger.debug(f"No Russian paradigm for {lemma!r} ({pos.value})")
            return Inflection(lemma, ok=False)
        if pos is PartOfSpeech.VERB and features.tense not in ("pres", "past"):
            return Inflection(lemma)

        for grammemes in self._grammemes(lemma, pos, features, parse.tag):
            form = parse.inflect(grammemes)
            if form is not None:
                return Inflection(fold_yo(form.word))
        return Inflection(lemma, ok=False)

    @staticmethod
    def _grammemes(
        lemma: str, pos: PartOfSpeech, features: MorphFeatures, tag: Any
    ) -> Iterator[set[str]]:
        """Grammeme sets to try for ``features``, most specific first."""
        case = CASE_GRAMMEMES[features.case or "nom"]
        number = features.number or "sing"

        if pos is PartOfSpeech.NOUN:
            if number == "plur" and (lemma in lex.SINGULAR_ONLY or "Sgtm" in tag):
                number = "sing"
            if "Pltm" in tag:
                number = "plur"
            yield {case, number}
            yield {case}
        elif pos is PartOfSpeech.ADJ:
            agreement = {"plur"} if number == "plur" else {
                "sing",
                GENDER_GRAMMEMES.get(features.gender or "masc", "masc"),
            }
            if case == "accs" and ("plur" in agreement or "masc" in agreement):
                yield {case, *agreement, "anim" if features.animate else "inan"}
            yield {case, *agreement}
        else:
            if features.tense == "past":
                agreement = {"plur"} if number == "plur" else {
                    "sing",
                    GENDER_GRAMMEMES.get(features.gender or "masc", "masc"),
                }
                yield {"VERB", "past", *agreement}
            else:
                person = f"{features.person or 3}per"
                # perfective verbs have future forms in place of the present
                for tense in ("pres", "futr"):
                    yield {"VERB", tense, number, person}
