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

"""Candidate scoring and selection."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from heru.core.errors import NoCandidateError
from heru.core.models import Candidate, RankingModel

logger = logging.getLogger(__name__)


class Ranker:
    """Score candidates with a linear ranking model.

    Example:
        >>> ranker = Ranker()
        >>> best = ranker.select(candidates, model)
    """

    def rank(
        self, candidates: Iterable[Candidate], model: RankingModel, top_k: int | None = None
    ) -> list[Candidate]:
        """Return candidates best first, each carrying its score.

        Ties are broken by lower generation index.

        Args:
            candidates: Candidates of one segment
            model: Ranking model to score with (not modified)
            top_k: Keep only the best ``top_k`` (all if None)

        Returns:
            Scored candidates, best first

        Raises:
            NoCandidateError: If there are no candidates
        """
        scored = [
            candidate.model_copy(update={"score": model.score(candidate.features)})
            for candidate in candidates
        ]
        if not scored:
            raise NoCandidateError("No candidates to rank")

        scored.sort(key=lambda c: (-(c.score or 0.0), c.index))
        logger.debug(
            f"Ranked {len(scored)} candidates with model v{model.version}; "
            f"best score {scored[0].score:.3f}"
        )
        return scored[:top_k] if top_k is not None else scored

    def select(self, candidates: Iterable[Candidate], model: RankingModel) -> Candidate:
        return self.rank(candidates, model, top_k=1)[0]
