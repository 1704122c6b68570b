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

"""Structural transfer between Hebrew and Russian.

A transfer maps analyzed source tokens onto target-side drafts: it assigns
each source word a grammatical role (case, agreement head, genitive
dependency), lists target lemma options per unit and turns a chosen option
per unit into inflected, reordered target words.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from heru.core.models import (
    Language,
    MorphFeatures,
    PartOfSpeech,
    Reading,
    Segment,
    TermEntry,
    TermMatch,
    Token,
)
from heru.morphology.base import MorphologicalAnalyzer
from heru.translation.dictionary import BilingualDictionary

logger = logging.getLogger(__name__)

NOUN = PartOfSpeech.NOUN
ADJ = PartOfSpeech.ADJ
VERB = PartOfSpeech.VERB
PREP = PartOfSpeech.PREP
PUNCT = PartOfSpeech.PUNCT

# Hebrew clitic -> (Russian word or None, case it governs)
HE_CLITICS_TO_RU: dict[str, tuple[str | None, str | None]] = {
    "ו": ("и", None),
    "ש": ("что", None),
    "ב": ("в", "loc"),
    "ל": ("для", "gen"),
    "מ": ("из", "gen"),
    "כ": ("как", "nom"),
    "ה": (None, None),
}

# Hebrew preposition -> (Russian preposition or None, case of the following noun)
HE_PREPOSITIONS_TO_RU: dict[str, tuple[str | None, str]] = {
    "של": (None, "gen"),
    "את": (None, "acc"),
    "על": ("на", "loc"),
    "עם": ("с", "ins"),
    "לפני": ("перед", "ins"),
    "אחרי": ("после", "gen"),
    "בין": ("между", "ins"),
    "ללא": ("без", "gen"),
    "לפי": ("по", "dat"),
    "עבור": ("для", "gen"),
}

HE_FUNCTION_TO_RU: dict[str, str] = {
    "לא": "не",
    "יש": "есть",
    "אין": "нет",
    "או": "или",
    "אבל": "но",
    "אם": "если",
    "כאשר": "когда",
    "כי": "так как",
    "גם": "также",
    "מאוד": "очень",
    "זה": "это",
    "הוא": "он",
    "היא": "она",
    "הם": "они",
}

# Russian preposition -> (Hebrew word, attaches as prefix)
RU_PREPOSITIONS_TO_HE: dict[str, tuple[str, bool]] = {
    "в": ("ב", True),
    "во": ("ב", True),
    "на": ("על", False),
    "для": ("ל", True),
    "из": ("מ", True),
    "от": ("מ", True),
    "с": ("עם", False),
    "со": ("עם", False),
    "к": ("ל", True),
    "по": ("לפי", False),
    "без": ("ללא", False),
    "о": ("על", False),
    "об": ("על", False),
    "при": ("ב", True),
    "перед": ("לפני", False),
    "после": ("אחרי", False),
    "до": ("לפני", False),
    "между": ("בין", False),
    "под": ("מתחת", False),
    "над": ("מעל", False),
    "как": ("כ", True),
}

RU_FUNCTION_TO_HE: dict[str, tuple[str, bool]] = {
    "и": ("ו", True),
    "а": ("ו", True),
    "что": ("ש", True),
    "или": ("או", False),
    "но": ("אבל", False),
    "если": ("אם", False),
    "когда": ("כאשר", False),
    "не": ("לא", False),
    "нет": ("אין", False),
    "есть": ("יש", False),
    "это": ("זה", False),
    "он": ("הוא", False),
    "она": ("היא", False),
    "оно": ("זה", False),
    "они": ("הם", False),
    "также": ("גם", False),
    "очень": ("מאוד", False),
    "я": ("אני", False),
    "ты": ("אתה", False),
    "мы": ("אנחנו", False),
    "вы": ("אתם", False),
}

# Russian case without preposition -> Hebrew prefix
RU_BARE_CASE_TO_HE: dict[str, str] = {"dat": "ל", "ins": "ב"}

# Russian genitive dependent -> Hebrew realization and its prior
GENITIVE_REALIZATIONS: tuple[tuple[str, float], ...] = (("construct", 0.6), ("shel", 0.4))

_OPENING = frozenset("([{«")


@dataclass
class Role:
    """Grammatical role of a source word within its segment.

    Attributes:
        case: Target case (Russian targets) or source case (Russian sources)
        head: Source index of the noun an adjective or verb agrees with
        attributive: Adjective modifies its head inside the noun phrase
        genitive_of: Source index of the noun this noun depends on
        prefixes: Hebrew prefixes marking a bare Russian case
    """

    case: str | None = None
    head: int | None = None
    attributive: bool = False
    genitive_of: int | None = None
    prefixes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Option:
    """One way to render a unit: target lemmas plus how they were chosen."""

    lemmas: tuple[str, ...]
    pos: tuple[PartOfSpeech, ...]
    prior: float
    rule: str
    head: int = 0
    reading: Reading | None = None
    term: TermEntry | None = None
    match: TermMatch | None = None
    realization: str | None = None
    attach: bool = False


@dataclass(frozen=True)
class Unit:
    """A source token or matched term span with its rendering options."""

    start: int
    end: int
    anchor: int
    options: tuple[Option, ...]


@dataclass
class Draft:
    """A target word before and after inflection."""

    lemma: str
    pos: PartOfSpeech
    features: MorphFeatures = field(default_factory=MorphFeatures)
    unit: int = -1
    covers: tuple[int, ...] = ()
    head_source: int | None = None
    attributive: bool = False
    in_term: bool = False
    fixed: bool = False
    attach: bool = False
    passthrough: bool = False
    dependent_of: int | None = None
    realization: str | None = None
    surface: str = ""
    ok: bool = True

    @property
    def inflectable(self) -> bool:
        return self.passthrough or (not self.fixed and self.pos in (NOUN, ADJ, VERB))


class Transfer(ABC):
    """Direction-specific transfer rules.

    Subclasses define roles, function-word mappings, agreement and word
    order for one translation direction.
    """

    source_lang: ClassVar[Language]

    def __init__(
        self,
        source: MorphologicalAnalyzer,
        target: MorphologicalAnalyzer,
        dictionary: BilingualDictionary,
    ) -> None:
        self.source = source
        self.target = target
        self.dictionary = dictionary

    @property
    def target_lang(self) -> Language:
        return self.source_lang.other

    # ------------------------------------------------------------------
    # Units and options
    # ------------------------------------------------------------------

    def build_units(self, segment: Segment, roles: dict[int, Role]) -> list[Unit]:
        """Split a segment into units: matched terms and single tokens."""
        match_at = {match.start: match for match in segment.term_matches}
        units: list[Unit] = []
        i = 0
        while i < len(segment.tokens):
            match = match_at.get(i)
            if match is not None:
                units.append(self._term_unit(segment, match, roles))
                i = match.end
                continue
            token = segment.tokens[i]
            options = self._token_options(token)
            units.append(Unit(i, i + 1, i, self._with_realizations(options, roles.get(i))))
            i += 1
        return units

    def _term_unit(self, segment: Segment, match: TermMatch, roles: dict[int, Role]) -> Unit:
        anchor = next(
            (
                k
                for k in range(match.start, match.end)
                if segment.tokens[k].is_word and segment.tokens[k].pos is NOUN
            ),
            match.start,
        )
        senses = (match.best,) if match.resolved else match.senses
        readings = segment.tokens[anchor].readings
        reading = next((r for r in readings if r.pos is NOUN), readings[0] if readings else None)
        options = tuple(
            Option(
                lemmas=entry.target,
                pos=tuple(self._target_pos(lemma) for lemma in entry.target),
                prior=1.0 if match.resolved else entry.confidence,
                rule="term",
                head=entry.head,
                reading=reading,
                term=entry,
                match=match,
            )
            for entry in senses
        )
        options = self._with_realizations(options, roles.get(anchor))
        return Unit(match.start, match.end, anchor, options)

    def _target_pos(self, lemma: str) -> PartOfSpeech:
        info = self.target.lemma_info(lemma)
        return info.pos if info else NOUN

    def _token_options(self, token: Token) -> tuple[Option, ...]:
        if token.pos in (PUNCT, PartOfSpeech.NUM, PartOfSpeech.FOREIGN):
            return (Option((token.surface,), (token.pos,), 1.0, "literal"),)
        if token.is_clitic or token.pos not in (NOUN, ADJ, VERB):
            return (self._function_option(token),)

        best: dict[tuple[str, PartOfSpeech], Option] = {}
        for reading in token.readings:
            for translation in self.dictionary.lookup(self.source_lang, reading.lemma, reading.pos):
                prior = reading.weight * translation.weight
                key = (translation.lemma, translation.pos)
                if key not in best or best[key].prior < prior:
                    best[key] = Option(
                        (translation.lemma,),
                        (translation.pos,),
                        prior,
                        "dictionary",
                        reading=reading,
                    )
        if not best:
            return (Option((token.surface,), (token.pos,), 1.0, "passthrough"),)
        return tuple(sorted(best.values(), key=lambda o: -o.prior))

    def _with_realizations(
        self, options: tuple[Option, ...], role: Role | None
    ) -> tuple[Option, ...]:
        """Hook for directions that render one option in several ways."""
        return options

    @abstractmethod
    def _function_option(self, token: Token) -> Option:
        """Option for a clitic or closed-class word."""

    @abstractmethod
    def roles(self, segment: Segment) -> dict[int, Role]:
        """Assign a role to every source host word."""

    # ------------------------------------------------------------------
    # Realization
    # ------------------------------------------------------------------

    def realize(
        self,
        segment: Segment,
        units: Sequence[Unit],
        choices: Sequence[int],
        roles: dict[int, Role],
    ) -> tuple[list[Draft], list[str]]:
        """Turn one option per unit into inflected, ordered target drafts.

        Returns:
            Tuple of (drafts in output order, rule tags applied)
        """
        drafts: list[Draft] = []
        for u, (unit, choice) in enumerate(zip(units, choices)):
            option = unit.options[choice]
            if option.rule in ("literal", "passthrough"):
                drafts.append(
                    Draft(
                        option.lemmas[0],
                        option.pos[0],
                        unit=u,
                        covers=(unit.anchor,),
                        fixed=True,
                        passthrough=option.rule == "passthrough",
                    )
                )
            elif option.rule == "function":
                drafts.extend(
                    Draft(lemma, pos, unit=u, fixed=True, attach=option.attach)
                    for lemma, pos in zip(option.lemmas, option.pos)
                )
            else:
                drafts.extend(self._content_drafts(segment, u, unit, option, roles))

        index = self._by_source(drafts)
        self._link(drafts, index)
        self._agree(drafts, index)
        ordered, rules = self._reorder(drafts, index)
        for draft in ordered:
            if draft.fixed:
                draft.surface = draft.lemma
                draft.ok = not draft.passthrough
            else:
                inflection = self.target.inflect(draft.lemma, draft.pos, draft.features)
                draft.surface, draft.ok = inflection.surface, inflection.ok
        return ordered, rules

    @abstractmethod
    def _content_drafts(
        self, segment: Segment, u: int, unit: Unit, option: Option, roles: dict[int, Role]
    ) -> list[Draft]:
        """Drafts for a dictionary or term option."""

    @staticmethod
    def _by_source(drafts: list[Draft]) -> dict[int, Draft]:
        """Map source token indices to the noun draft realizing them."""
        index: dict[int, Draft] = {}
        for draft in drafts:
            if draft.pos is NOUN and not draft.fixed:
                for source in draft.covers:
                    index.setdefault(source, draft)
        return index

    def _link(self, drafts: list[Draft], index: dict[int, Draft]) -> None:
        """Apply dependencies between drafts before agreement."""

    def _agree(self, drafts: list[Draft], index: dict[int, Draft]) -> None:
        for draft in drafts:
            if draft.head_source is None or draft.pos not in (ADJ, VERB):
                continue
            head = index.get(draft.head_source)
            if head is None or head is draft:
                continue
            info = self.target.lemma_info(head.lemma, NOUN)
            gender = info.gender if info else None
            self._agree_with(draft, head, gender, bool(info and info.animate))

    @abstractmethod
    def _agree_with(self, draft: Draft, head: Draft, gender: str | None, animate: bool) -> None:
        """Copy agreement features from ``head`` into ``draft``."""

    @abstractmethod
    def _reorder(
        self, drafts: list[Draft], index: dict[int, Draft]
    ) -> tuple[list[Draft], list[str]]:
        """Deterministic word-order post-pass."""

    @staticmethod
    def _unit_bounds(drafts: list[Draft], unit: int) -> tuple[int, int]:
        positions = [i for i, draft in enumerate(drafts) if draft.unit == unit]
        return positions[0], positions[-1]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, drafts: Sequence[Draft]) -> tuple[str, list[Token]]:
        """Join drafts into text, merging Hebrew prefixes and attaching punctuation."""
        text = ""
        tokens: list[Token] = []
        prefix = ""
        for draft in drafts:
            if draft.attach:
                prefix += draft.surface
                continue
            surface = prefix + draft.surface
            prefix = ""
            if not surface:
                continue
            glue = draft.pos is PUNCT and surface not in _OPENING
            if text and not glue and text[-1] not in _OPENING:
                text += " "
            start = len(text)
            text += surface
            reading = Reading(lemma=draft.lemma, pos=draft.pos, features=draft.features)
            tokens.append(
                Token.from_readings(surface, self.target_lang, (start, len(text)), [reading])
            )
        if prefix:
            text += (" " if text else "") + prefix
        return text, tokens


class HebrewToRussian(Transfer):
    """Hebrew source, Russian target."""

    source_lang = Language.HEBREW

    def _function_option(self, token: Token) -> Option:
        if token.is_clitic:
            word, _ = HE_CLITICS_TO_RU.get(token.lemma, (None, None))
        elif token.pos is PREP:
            word, _ = HE_PREPOSITIONS_TO_RU.get(token.lemma, (token.surface, "nom"))
        else:
            word = HE_FUNCTION_TO_RU.get(token.lemma, token.surface)
        if word is None:
            return Option((), (), 1.0, "function")
        words = tuple(word.split())
        return Option(words, (token.pos,) * len(words), 1.0, "function")

    def roles(self, segment: Segment) -> dict[int, Role]:
        tokens = segment.tokens
        roles: dict[int, Role] = {}
        pending_case: str | None = None
        last_noun: int | None = None
        for i, token in enumerate(tokens):
            if token.is_clitic:
                continue
            if token.pos is PREP:
                pending_case = HE_PREPOSITIONS_TO_RU.get(token.lemma, (None, None))[1]
                last_noun = None
            elif token.pos is NOUN:
                role = Role(case="nom")
                clitic_case = self._clitic_case(token)
                if clitic_case:
                    role.case = clitic_case
                elif pending_case:
                    role.case = pending_case
                elif last_noun is not None and tokens[last_noun].features.construct_state:
                    role.case = "gen"
                    role.genitive_of = last_noun
                roles[i] = role
                pending_case = None
                last_noun = i
            elif token.pos is ADJ:
                head = self._adjective_head(tokens, i)
                role = Role(head=head)
                if head is not None:
                    role.case = roles[head].case
                    role.attributive = self._np_definite(tokens, head, i) == (
                        token.features.definite
                    )
                roles[i] = role
            elif token.pos is VERB:
                roles[i] = Role(head=self._subject(tokens, i, roles))
                pending_case = None
                last_noun = None
            else:
                pending_case = None
                last_noun = None
        return roles

    @staticmethod
    def _clitic_case(token: Token) -> str | None:
        for prefix in reversed(token.features.prefixes):
            case = HE_CLITICS_TO_RU.get(prefix, (None, None))[1]
            if case:
                return case
        return None

    @staticmethod
    def _adjective_head(tokens: Sequence[Token], i: int) -> int | None:
        """Nearest preceding noun of the phrase, preferring one that agrees."""
        nouns: list[int] = []
        for j in range(i - 1, -1, -1):
            token = tokens[j]
            if token.is_clitic and token.pos is PartOfSpeech.DET:
                continue
            if token.is_clitic or token.pos not in (NOUN, ADJ):
                break
            if token.pos is NOUN:
                nouns.append(j)
        if not nouns:
            return None
        adjective = tokens[i].features
        for j in nouns:
            noun = tokens[j].features
            if noun.gender == adjective.gender and noun.number == adjective.number:
                return j
        return nouns[0]

    @staticmethod
    def _np_definite(tokens: Sequence[Token], head: int, end: int) -> bool:
        return any(
            tokens[k].features.definite for k in range(head, end) if tokens[k].pos is NOUN
        )

    @staticmethod
    def _subject(tokens: Sequence[Token], i: int, roles: dict[int, Role]) -> int | None:
        for j in range(i - 1, -1, -1):
            if tokens[j].pos is PUNCT:
                break
            role = roles.get(j)
            if role and role.case == "nom" and role.genitive_of is None:
                return j
        previous: Token | None = None
        for j in range(i + 1, len(tokens)):
            token = tokens[j]
            if token.pos is PUNCT or token.pos is VERB:
                break
            if token.pos is NOUN and not token.is_clitic:
                free = set(token.features.prefixes) <= {"ה", "ו"}
                if free and not (previous is not None and previous.pos is PREP):
                    return j
            if not token.is_clitic:
                previous = token
        return None

    def _content_drafts(
        self, segment: Segment, u: int, unit: Unit, option: Option, roles: dict[int, Role]
    ) -> list[Draft]:
        role = roles.get(unit.anchor, Role())
        source = option.reading.features if option.reading else MorphFeatures()
        covers = tuple(range(unit.start, unit.end))
        if option.rule == "term":
            return self._term_drafts(u, option, role, source, covers, unit.anchor)

        pos = option.pos[0]
        draft = Draft(option.lemmas[0], pos, unit=u, covers=covers)
        if pos is NOUN:
            draft.features = MorphFeatures(case=role.case or "nom", number=source.number or "sing")
            draft.dependent_of = role.genitive_of
        elif pos is ADJ:
            draft.features = MorphFeatures(
                case="nom", gender=source.gender, number=source.number or "sing"
            )
            draft.head_source = role.head
            draft.attributive = role.attributive
        elif pos is VERB:
            draft.features = MorphFeatures(
                tense=source.tense or "pres",
                gender=source.gender,
                number=source.number or "sing",
                person=source.person or 3,
            )
            draft.head_source = role.head
        return [draft]

    def _term_drafts(
        self,
        u: int,
        option: Option,
        role: Role,
        source: MorphFeatures,
        covers: tuple[int, ...],
        anchor: int,
    ) -> list[Draft]:
        drafts: list[Draft] = []
        for j, (lemma, pos) in enumerate(zip(option.lemmas, option.pos)):
            draft = Draft(lemma, pos, unit=u, in_term=True)
            if j == option.head:
                draft.covers = covers
                draft.features = MorphFeatures(
                    case=role.case or "nom", number=source.number or "sing"
                )
                draft.dependent_of = role.genitive_of
            elif pos is ADJ:
                draft.head_source = anchor
                draft.attributive = True
            elif pos is NOUN:
                draft.features = MorphFeatures(case="gen", number="sing")
            else:
                draft.fixed = True
            drafts.append(draft)
        return drafts

    def _agree_with(self, draft: Draft, head: Draft, gender: str | None, animate: bool) -> None:
        number = head.features.number or "sing"
        if draft.pos is ADJ:
            draft.features = draft.features.model_copy(
                update={
                    "gender": gender,
                    "number": number,
                    "case": head.features.case if draft.attributive else "nom",
                    "animate": animate,
                }
            )
        elif draft.features.tense == "past":
            draft.features = draft.features.model_copy(update={"gender": gender, "number": number})
        elif draft.features.tense == "pres":
            draft.features = draft.features.model_copy(update={"number": number, "person": 3})

    def _reorder(
        self, drafts: list[Draft], index: dict[int, Draft]
    ) -> tuple[list[Draft], list[str]]:
        ordered = list(drafts)
        rules: list[str] = []
        for draft in drafts:
            if draft.pos is not ADJ or not draft.attributive or draft.in_term:
                continue
            head = index.get(draft.head_source) if draft.head_source is not None else None
            if head is None:
                continue
            ordered.remove(draft)
            ordered.insert(self._unit_bounds(ordered, head.unit)[0], draft)
            rules.append("reorder:adj_noun")

        verb = next((d for d in ordered if d.pos not in (PUNCT,) and not d.fixed), None)
        if (
            verb is not None
            and verb.pos is VERB
            and verb.head_source is not None
            and verb.covers
            and verb.head_source > verb.covers[0]
            and verb.head_source in index
        ):
            subject = index[verb.head_source]
            ordered.remove(verb)
            end = self._unit_bounds(ordered, subject.unit)[1]
            while end + 1 < len(ordered) and ordered[end + 1].dependent_of in subject.covers:
                end += 1
            ordered.insert(end + 1, verb)
            rules.append("reorder:verb_subject")
        return ordered, rules


class RussianToHebrew(Transfer):
    """Russian source, Hebrew target."""

    source_lang = Language.RUSSIAN

    def _function_option(self, token: Token) -> Option:
        if token.pos is PREP:
            word, attach = RU_PREPOSITIONS_TO_HE.get(token.lemma, (None, False))
        else:
            word, attach = RU_FUNCTION_TO_HE.get(token.lemma, (None, False))
        if word is None:
            return Option((token.surface,), (token.pos,), 1.0, "passthrough")
        return Option((word,), (token.pos,), 1.0, "function", attach=attach)

    def roles(self, segment: Segment) -> dict[int, Role]:
        tokens = segment.tokens
        roles: dict[int, Role] = {}
        governed = False
        last_noun: int | None = None
        for i, token in enumerate(tokens):
            if token.pos is PREP:
                governed = True
                last_noun = None
            elif token.pos is NOUN:
                role = Role(case=token.features.case)
                if governed:
                    pass
                elif role.case == "gen" and last_noun is not None:
                    role.genitive_of = last_noun
                elif role.case in RU_BARE_CASE_TO_HE:
                    role.prefixes = (RU_BARE_CASE_TO_HE[role.case],)
                roles[i] = role
                governed = False
                last_noun = i
            elif token.pos is ADJ:
                head = self._following_noun(tokens, i)
                if head is not None:
                    roles[i] = Role(head=head, attributive=True)
                else:
                    roles[i] = Role(head=self._subject(tokens, i, roles))
            elif token.pos is VERB:
                roles[i] = Role(head=self._subject(tokens, i, roles))
                governed = False
                last_noun = None
            else:
                governed = False
                last_noun = None
        return roles

    @staticmethod
    def _following_noun(tokens: Sequence[Token], i: int) -> int | None:
        for j in range(i + 1, len(tokens)):
            if tokens[j].pos is NOUN:
                return j
            if tokens[j].pos is not ADJ:
                return None
        return None

    @staticmethod
    def _subject(tokens: Sequence[Token], i: int, roles: dict[int, Role]) -> int | None:
        for j in range(i - 1, -1, -1):
            if tokens[j].pos is PUNCT:
                break
            role = roles.get(j)
            if tokens[j].pos is NOUN and role and role.case == "nom":
                return j
        for j in range(i + 1, len(tokens)):
            token = tokens[j]
            if token.pos in (PUNCT, VERB):
                break
            if token.pos is NOUN and token.features.case == "nom":
                if not (j > 0 and tokens[j - 1].pos is PREP):
                    return j
        return None

    def _with_realizations(
        self, options: tuple[Option, ...], role: Role | None
    ) -> tuple[Option, ...]:
        if role is None or role.genitive_of is None:
            return options
        expanded = [
            Option(
                option.lemmas,
                option.pos,
                option.prior * weight,
                option.rule,
                head=option.head,
                reading=option.reading,
                term=option.term,
                match=option.match,
                realization=realization,
            )
            for option in options
            if option.rule in ("dictionary", "term")
            for realization, weight in GENITIVE_REALIZATIONS
        ]
        return tuple(expanded) or options

    def _content_drafts(
        self, segment: Segment, u: int, unit: Unit, option: Option, roles: dict[int, Role]
    ) -> list[Draft]:
        role = roles.get(unit.anchor, Role())
        source = option.reading.features if option.reading else MorphFeatures()
        covers = tuple(range(unit.start, unit.end))
        drafts: list[Draft] = []
        if role.prefixes:
            drafts.append(Draft("".join(role.prefixes), PREP, unit=u, fixed=True, attach=True))
        if role.genitive_of is not None and option.realization == "shel":
            drafts.append(Draft("של", PREP, unit=u, fixed=True, dependent_of=role.genitive_of))

        if option.rule == "term":
            drafts.extend(self._term_drafts(u, option, role, source, covers, unit.anchor))
            return drafts

        pos = option.pos[0]
        draft = Draft(option.lemmas[0], pos, unit=u, covers=covers)
        gender = "fem" if source.gender == "fem" else "masc"
        if pos is NOUN:
            draft.features = MorphFeatures(number=source.number or "sing")
            draft.dependent_of = role.genitive_of
            draft.realization = option.realization
        elif pos is ADJ:
            draft.features = MorphFeatures(gender=gender, number=source.number or "sing")
            draft.head_source = role.head
            draft.attributive = role.attributive
        elif pos is VERB:
            draft.features = MorphFeatures(
                tense=source.tense or "pres",
                gender=gender,
                number=source.number or "sing",
                person=1 if source.person == 1 else 3,
            )
            draft.head_source = role.head
        drafts.append(draft)
        return drafts

    def _term_drafts(
        self,
        u: int,
        option: Option,
        role: Role,
        source: MorphFeatures,
        covers: tuple[int, ...],
        anchor: int,
    ) -> list[Draft]:
        drafts: list[Draft] = []
        nouns_after_head = any(
            pos is NOUN for pos in option.pos[option.head + 1 :]
        )
        for j, (lemma, pos) in enumerate(zip(option.lemmas, option.pos)):
            draft = Draft(lemma, pos, unit=u, in_term=True)
            if j == option.head:
                draft.covers = covers
                draft.features = MorphFeatures(
                    number=source.number or "sing", construct_state=nouns_after_head
                )
                draft.dependent_of = role.genitive_of
                draft.realization = option.realization
            elif pos is ADJ:
                draft.head_source = anchor
                draft.attributive = True
            elif pos is NOUN:
                draft.features = MorphFeatures(number="sing")
            else:
                draft.fixed = True
            drafts.append(draft)
        return drafts

    def _link(self, drafts: list[Draft], index: dict[int, Draft]) -> None:
        """Put the governing noun of a construct-realized genitive into construct state."""
        for draft in drafts:
            if draft.realization != "construct" or draft.dependent_of is None:
                continue
            governor = index.get(draft.dependent_of)
            if governor is not None and governor is not draft:
                governor.features = governor.features.merged(construct_state=True)

    def _agree_with(self, draft: Draft, head: Draft, gender: str | None, animate: bool) -> None:
        update = {"gender": gender or "masc", "number": head.features.number or "sing"}
        draft.features = draft.features.model_copy(update=update)

    def _reorder(
        self, drafts: list[Draft], index: dict[int, Draft]
    ) -> tuple[list[Draft], list[str]]:
        ordered = list(drafts)
        rules: list[str] = []
        for draft in drafts:
            if draft.pos is not ADJ or not draft.attributive or draft.in_term:
                continue
            head = index.get(draft.head_source) if draft.head_source is not None else None
            if head is None:
                continue
            ordered.remove(draft)
            end = self._unit_bounds(ordered, head.unit)[1]
            if head.features.construct_state:
                while end + 1 < len(ordered) and self._depends_on(ordered[end + 1], head, ordered):
                    end += 1
            ordered.insert(end + 1, draft)
            rules.append("reorder:adj_noun")
        return ordered, rules

    @staticmethod
    def _depends_on(draft: Draft, head: Draft, ordered: list[Draft]) -> bool:
        """Whether ``draft`` belongs to a genitive dependent of ``head``."""
        if draft.dependent_of is not None and draft.dependent_of in head.covers:
            return True
        # prefixes and adjectives of the dependent travel with it
        unit_members = [d for d in ordered if d.unit == draft.unit]
        return any(d.dependent_of is not None and d.dependent_of in head.covers
                   for d in unit_members)


def make_transfer(
    source_lang: Language,
    source: MorphologicalAnalyzer,
    target: MorphologicalAnalyzer,
    dictionary: BilingualDictionary,
) -> Transfer:
    """Create the transfer for a translation direction."""
    if source_lang is Language.HEBREW:
        return HebrewToRussian(source, target, dictionary)
    return RussianToHebrew(source, target, dictionary)
