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

"""Target-language fluency: an interpolated add-k bigram model over lemmas."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from heru.core.models import Language

BOUNDARY = "<s>"
INTERPOLATION = 0.7
ADD_K = 0.5

# Lemma sentences the default model is trained on
SEED_CORPUS: dict[Language, tuple[str, ...]] = {
    Language.HEBREW: (
        "לחץ גבוה ב מערכת",
        "לחץ נמוך ב צינור",
        "לחץ מים ב מערכת",
        "מערכת כיבוי אש",
        "בדיקה של מערכת כיבוי",
        "גלאי עשן חדש",
        "ברז מים ראשי",
        "התקנה של משאבה חדשה",
        "מדידה של מתח ו זרם",
        "מתח גבוה ב מעגל",
        "הארקה של מערכת חשמל",
        "שסתום סגר את צינור",
        "מהנדס בדק את מערכת",
        "לחיצה על כפתור",
        "ניקוז מים מ צינור",
        "אספקה מים ל מערכת",
        "טמפרטורה עלה",
        "לחץ ירד",
        "תקלה ב מנוע",
    ),
    Language.RUSSIAN: (
        "высокий давление в система",
        "низкий давление в труба",
        "давление вода в система",
        "система пожаротушение",
        "проверка система пожаротушение",
        "новый детектор дым",
        "главный кран вода",
        "установка новый насос",
        "измерение напряжение и ток",
        "высокий напряжение в цепь",
        "заземление электрический система",
        "клапан закрывать труба",
        "инженер проверять система",
        "нажатие на кнопка",
        "дренаж вода из труба",
        "подача вода в система",
        "температура повышаться",
        "давление понижаться",
        "неисправность двигатель",
    ),
}


@dataclass(frozen=True)
class FluencyModel:
    """Bigram counts for one target language.

    Probabilities interpolate the add-k bigram estimate with the add-k
    unigram estimate; every sentence is padded with a boundary marker.
    """

    unigrams: Mapping[str, int] = field(default_factory=dict)
    bigrams: Mapping[str, Mapping[str, int]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "unigrams", MappingProxyType(dict(self.unigrams)))
        object.__setattr__(
            self,
            "bigrams",
            MappingProxyType({k: MappingProxyType(dict(v)) for k, v in self.bigrams.items()}),
        )

    @classmethod
    def train(cls, sentences: Iterable[Sequence[str]]) -> FluencyModel:
        return cls().with_sentences(sentences)

    def with_sentences(self, sentences: Iterable[Sequence[str]]) -> FluencyModel:
        """Return a new model with the counts of ``sentences`` added."""
        unigrams = Counter(self.unigrams)
        bigrams = {k: Counter(v) for k, v in self.bigrams.items()}
        for sentence in sentences:
            lemmas = [BOUNDARY, *sentence]
            unigrams.update(sentence)
            for previous, current in zip(lemmas, lemmas[1:]):
                bigrams.setdefault(previous, Counter())[current] += 1
        return FluencyModel(unigrams, bigrams)

    @property
    def total(self) -> int:
        return sum(self.unigrams.values())

    @property
    def vocabulary(self) -> int:
        # +1 for unseen lemmas
        return len(self.unigrams) + 1

    def probability(self, previous: str, current: str) -> float:
        v = self.vocabulary
        unigram = (self.unigrams.get(current, 0) + ADD_K) / (self.total + ADD_K * v)
        following = self.bigrams.get(previous, {})
        context = sum(following.values())
        bigram = (following.get(current, 0) + ADD_K) / (context + ADD_K * v)
        return INTERPOLATION * bigram + (1 - INTERPOLATION) * unigram

    def score(self, lemmas: Sequence[str]) -> float:
        """Fluency in [0, 1]: 1 minus the mean log-probability relative to uniform.

        An empty lemma sequence, or an untrained model, scores 0.
        """
        if not lemmas or not self.unigrams:
            return 0.0
        sequence = [BOUNDARY, *lemmas]
        log_prob = sum(
            math.log(self.probability(previous, current))
            for previous, current in zip(sequence, sequence[1:])
        )
        average = log_prob / len(lemmas)
        uniform = math.log(1.0 / self.vocabulary)
        return min(1.0, max(0.0, 1.0 - average / uniform))

    def to_dict(self) -> dict[str, Any]:
        return {
            "unigrams": dict(self.unigrams),
            "bigrams": {k: dict(v) for k, v in self.bigrams.items()},
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FluencyModel:
        return cls(data.get("unigrams", {}), data.get("bigrams", {}))


def seed_models() -> dict[Language, FluencyModel]:
    """Fluency models trained on the built-in lemma corpus."""
    return {
        language: FluencyModel.train(sentence.split() for sentence in sentences)
        for language, sentences in SEED_CORPUS.items()
    }
