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

"""Lemma-level bilingual dictionary."""

from __future__ import annotations

from dataclasses import dataclass

from heru.core.models import Language, PartOfSpeech

NOUN = PartOfSpeech.NOUN
ADJ = PartOfSpeech.ADJ
VERB = PartOfSpeech.VERB

# (Hebrew lemma, Russian lemma, part of speech, weight)
BUILTIN_PAIRS: tuple[tuple[str, str, PartOfSpeech, float], ...] = (
    ("מערכת", "система", NOUN, 1.0),
    ("לחץ", "давление", NOUN, 0.7),
    ("לחץ", "нажатие", NOUN, 0.3),
    ("משאבה", "насос", NOUN, 1.0),
    ("שסתום", "клапан", NOUN, 1.0),
    ("צינור", "труба", NOUN, 1.0),
    ("מים", "вода", NOUN, 1.0),
    ("טמפרטורה", "температура", NOUN, 1.0),
    ("מתח", "напряжение", NOUN, 1.0),
    ("זרם", "ток", NOUN, 1.0),
    ("מעגל", "цепь", NOUN, 1.0),
    ("חשמל", "электричество", NOUN, 1.0),
    ("מנוע", "двигатель", NOUN, 1.0),
    ("בדיקה", "проверка", NOUN, 1.0),
    ("מדידה", "измерение", NOUN, 1.0),
    ("התקנה", "установка", NOUN, 1.0),
    ("כפתור", "кнопка", NOUN, 1.0),
    ("גלאי", "детектор", NOUN, 1.0),
    ("עשן", "дым", NOUN, 1.0),
    ("ברז", "кран", NOUN, 1.0),
    ("הארקה", "заземление", NOUN, 1.0),
    ("כיבוי", "тушение", NOUN, 1.0),
    ("כיבוי", "пожаротушение", NOUN, 0.4),
    ("חירום", "авария", NOUN, 1.0),
    ("מהנדס", "инженер", NOUN, 1.0),
    ("ערך", "значение", NOUN, 1.0),
    ("חיבור", "соединение", NOUN, 1.0),
    ("אספקה", "подача", NOUN, 1.0),
    ("לחיצה", "нажатие", NOUN, 1.0),
    ("מערך", "массив", NOUN, 1.0),
    ("תקלה", "неисправность", NOUN, 1.0),
    ("ניקוז", "дренаж", NOUN, 1.0),
    ("ספרינקלר", "спринклер", NOUN, 1.0),
    ("גבוה", "высокий", ADJ, 1.0),
    ("נמוך", "низкий", ADJ, 1.0),
    ("חדש", "новый", ADJ, 1.0),
    ("חשמלי", "электрический", ADJ, 1.0),
    ("ראשי", "главный", ADJ, 1.0),
    ("תקין", "исправный", ADJ, 1.0),
    ("גדול", "большой", ADJ, 1.0),
    ("קטן", "малый", ADJ, 1.0),
    ("בדק", "проверять", VERB, 1.0),
    ("התקין", "устанавливать", VERB, 1.0),
    ("עלה", "повышаться", VERB, 1.0),
    ("ירד", "понижаться", VERB, 1.0),
    ("פעל", "работать", VERB, 1.0),
    ("מדד", "измерять", VERB, 1.0),
    ("סגר", "закрывать", VERB, 1.0),
    ("פתח", "открывать", VERB, 1.0),
    ("חיבר", "подключать", VERB, 1.0),
    ("לחץ", "нажимать", VERB, 1.0),
)


@dataclass(frozen=True)
class Translation:
    """One target lemma option for a source lemma."""

    lemma: str
    pos: PartOfSpeech
    weight: float


class BilingualDictionary:
    """Bidirectional lemma dictionary built from Hebrew-Russian pairs.

    Example:
        >>> dictionary = BilingualDictionary()
        >>> [t.lemma for t in dictionary.lookup(Language.HEBREW, "לחץ", PartOfSpeech.NOUN)]
        ['давление', 'нажатие']
    """

    def __init__(
        self, pairs: tuple[tuple[str, str, PartOfSpeech, float], ...] = BUILTIN_PAIRS
    ) -> None:
        self._index: dict[tuple[Language, str, PartOfSpeech], list[Translation]] = {}
        for hebrew, russian, pos, weight in pairs:
            self._add(Language.HEBREW, hebrew, Translation(russian, pos, weight))
            self._add(Language.RUSSIAN, russian, Translation(hebrew, pos, weight))
        for options in self._index.values():
            options.sort(key=lambda t: -t.weight)

    def _add(self, language: Language, lemma: str, translation: Translation) -> None:
        self._index.setdefault((language, lemma, translation.pos), []).append(translation)

    def lookup(
        self, source_lang: Language, lemma: str, pos: PartOfSpeech
    ) -> list[Translation]:
        """Target lemma options, highest weight first."""
        return list(self._index.get((source_lang, lemma, pos), []))

    def __contains__(self, item: tuple[Language, str, PartOfSpeech]) -> bool:
        return item in self._index
