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

"""Candidate generation for one segment.

Units (terms and single tokens) are expanded left to right with a bounded
beam: after each unit the partial hypotheses are sorted by prior and
truncated to ``max_candidates``. Each surviving hypothesis is realized
through the direction's transfer rules and scored with the candidate
features.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from heru.core.errors import AnalysisError
from heru.core.models import AppliedTerm, Candidate, Segment
from heru.core.snapshot import memory_key
from heru.ranking.features import length_plausibility, morph_wellformedness, term_consistency
from heru.ranking.fluency import FluencyModel
from heru.translation.transfer import Role, Transfer, Unit

logger = logging.getLogger(__name__)

_RENDERING_RULES = frozenset({"dictionary", "term", "function"})

Hypothesis = tuple[tuple[int, ...], float]


class CandidateGenerator:
    """Generate target-language candidates for analyzed segments.

    Args:
        transfer: Transfer rules for the translation direction
        max_candidates: Upper bound on candidates per segment

    Example:
        >>> generator = CandidateGenerator(transfer, max_candidates=32)
        >>> candidates = list(generator.generate(segment, fluency=model))
    """

    def __init__(self, transfer: Transfer, max_candidates: int = 32) -> None:
        if max_candidates < 1:
            raise ValueError("max_candidates must be at least 1")
        self.transfer = transfer
        self.max_candidates = max_candidates

    def generate(
        self,
        segment: Segment,
        fluency: FluencyModel | None = None,
        memory: Mapping[str, str] | None = None,
    ) -> Iterator[Candidate]:
        """Yield candidates for ``segment``, memory match first.

        Yields nothing for a segment without words or without any
        translatable unit.
        """
        index = 0
        remembered = None
        if memory:
            key = memory_key(self.transfer.source_lang, self.transfer.target_lang, segment.text)
            remembered = memory.get(key)
        if remembered is not None:
            yield self._memory_candidate(segment, remembered, fluency)
            index += 1

        if not segment.has_words:
            return
        roles = self.transfer.roles(segment)
        units = self.transfer.build_units(segment, roles)
        if not any(o.rule in _RENDERING_RULES for unit in units for o in unit.options):
            logger.debug(f"Segment {segment.index}: nothing to translate")
            return

        for choices, prior in self._beam(units, self.max_candidates - index):
            yield self._realize(segment, units, roles, choices, prior, index, fluency)
            index += 1

    @staticmethod
    def _beam(units: list[Unit], width: int) -> list[Hypothesis]:
        beam: list[Hypothesis] = [((), 1.0)]
        for unit in units:
            expanded = [
                ((*choices, k), prior * option.prior)
                for choices, prior in beam
                for k, option in enumerate(unit.options)
            ]
            expanded.sort(key=lambda h: -h[1])
            beam = expanded[:width]
        return beam

    def _realize(
        self,
        segment: Segment,
        units: list[Unit],
        roles: dict[int, Role],
        choices: tuple[int, ...],
        prior: float,
        index: int,
        fluency: FluencyModel | None,
    ) -> Candidate:
        drafts, reorder_rules = self.transfer.realize(segment, units, choices, roles)
        text, tokens = self.transfer.render(drafts)

        rules: list[str] = []
        applied: list[AppliedTerm] = []
        chosen_terms = []
        for unit, choice in zip(units, choices):
            option = unit.options[choice]
            if option.rule == "term" and option.term is not None and option.match is not None:
                applied.append(AppliedTerm.from_match(option.term, option.match))
                chosen_terms.append((option.match, option.term))
                rules.append(f"term:{option.term.domain}")
            else:
                rules.append(option.rule)
            if option.realization:
                rules.append(f"genitive:{option.realization}")
        rules.extend(reorder_rules)

        inflectable = [draft for draft in drafts if draft.inflectable]
        ok = sum(1 for draft in inflectable if draft.ok)
        lemmas = tuple(token.lemma for token in tokens if token.is_word)
        features = {
            "term_consistency": term_consistency(chosen_terms),
            "morph_wellformedness": morph_wellformedness(ok, len(inflectable)),
            "length_ratio": length_plausibility(segment.text, text, self.transfer.source_lang),
            "fluency": fluency.score(lemmas) if fluency else 0.0,
            "memory_match": 0.0,
        }
        return Candidate(
            segment_index=segment.index,
            language=self.transfer.target_lang,
            text=text,
            tokens=tuple(tokens),
            lemmas=lemmas,
            rules=tuple(dict.fromkeys(rules)),
            applied_terms=tuple(applied),
            prior=prior,
            index=index,
            features=features,
        )

    def _memory_candidate(
        self, segment: Segment, text: str, fluency: FluencyModel | None
    ) -> Candidate:
        try:
            tokens = self.transfer.target.analyze_segment(text).tokens
        except AnalysisError:
            logger.warning(f"Segment memory entry for segment {segment.index} does not analyze")
            tokens = ()
        lemmas = tuple(token.lemma for token in tokens if token.is_word)
        return Candidate(
            segment_index=segment.index,
            language=self.transfer.target_lang,
            text=text,
            tokens=tokens,
            lemmas=lemmas,
            rules=("memory",),
            prior=1.0,
            index=0,
            features={
                "term_consistency": 1.0,
                "morph_wellformedness": 1.0,
                "length_ratio": length_plausibility(segment.text, text, self.transfer.source_lang),
                "fluency": fluency.score(lemmas) if fluency else 0.0,
                "memory_match": 1.0,
            },
        )
