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

"""Built-in seed terminology and common-word lists."""

from __future__ import annotations

from heru.core.models import Language, TermEntry

HE = Language.HEBREW
RU = Language.RUSSIAN


def _term(
    source: str,
    target: str,
    source_lang: Language,
    domain: str,
    confidence: float,
    head: int = 0,
    profile: dict[str, float] | None = None,
) -> TermEntry:
    return TermEntry(
        source=tuple(source.split()),
        target=tuple(target.split()),
        source_lang=source_lang,
        target_lang=source_lang.other,
        domain=domain,
        head=head,
        confidence=confidence,
        context_profile=profile or {},
    )


BUILTIN_TERMS: tuple[TermEntry, ...] = (
    # Hebrew -> Russian
    _term(
        "לחץ",
        "давление",
        HE,
        "engineering",
        0.9,
        profile={
            "מערכת": 1.0,
            "משאבה": 1.0,
            "צינור": 1.0,
            "שסתום": 1.0,
            "מים": 0.8,
            "מדידה": 0.6,
            "גבוה": 0.5,
            "נמוך": 0.5,
            "עלה": 0.5,
            "ירד": 0.5,
        },
    ),
    _term("לחץ", "нажатие", HE, "general", 0.6, profile={"כפתור": 1.0, "לחיצה": 0.5}),
    _term("מערכת כיבוי", "система пожаротушение", HE, "fire_safety", 0.95),
    _term("מערכת כיבוי אש", "система пожаротушение", HE, "fire_safety", 0.9),
    _term("כיבוי אש", "пожаротушение", HE, "fire_safety", 0.9),
    _term("גלאי עשן", "детектор дым", HE, "fire_safety", 0.9),
    _term("ספרינקלר", "спринклер", HE, "fire_safety", 0.9),
    _term("אספקה מים", "подача вода", HE, "plumbing", 0.9),
    _term("ברז", "кран", HE, "plumbing", 0.9),
    _term("ניקוז", "дренаж", HE, "plumbing", 0.85),
    _term("הארקה", "заземление", HE, "electrical", 0.95),
    _term("מתח גבוה", "высокий напряжение", HE, "electrical", 0.9, head=1),
    _term(
        "מעגל",
        "цепь",
        HE,
        "electrical",
        0.85,
        profile={"חשמל": 1.0, "זרם": 1.0, "מתח": 1.0, "חשמלי": 0.8},
    ),
    # Russian -> Hebrew
    _term(
        "давление",
        "לחץ",
        RU,
        "engineering",
        0.9,
        profile={"система": 1.0, "насос": 1.0, "труба": 1.0, "клапан": 1.0, "вода": 0.8},
    ),
    _term("нажатие", "לחיצה", RU, "general", 0.7, profile={"кнопка": 1.0}),
    _term("система пожаротушение", "מערכת כיבוי", RU, "fire_safety", 0.95),
    _term("пожаротушение", "כיבוי אש", RU, "fire_safety", 0.9),
    _term("детектор дым", "גלאי עשן", RU, "fire_safety", 0.9),
    _term("спринклер", "ספרינקלר", RU, "fire_safety", 0.9),
    _term("подача вода", "אספקה מים", RU, "plumbing", 0.9),
    _term("кран", "ברז", RU, "plumbing", 0.9),
    _term("дренаж", "ניקוז", RU, "plumbing", 0.85),
    _term("заземление", "הארקה", RU, "electrical", 0.95),
    _term("высокий напряжение", "מתח גבוה", RU, "electrical", 0.9),
    _term("цепь", "מעגל", RU, "electrical", 0.85, profile={"ток": 1.0, "напряжение": 1.0}),
)

# Frequent non-technical words; unknown words in these lists are never
# reported as unknown terms.
COMMON_WORDS: dict[Language, frozenset[str]] = {
    HE: frozenset(
        {
            "של", "את", "על", "עם", "זה", "גם", "כל", "או", "אבל", "כי", "לא", "יש", "אין",
            "אני", "אתה", "הוא", "היא", "אנחנו", "הם", "הן", "דבר", "אחד", "אחת",
            "שני", "שתי", "כמה", "עכשיו", "היום", "כאן", "שם", "צריך", "יכול", "חייב",
            "מאוד", "רק", "עוד", "כבר", "אחרי", "לפני", "בין", "תמיד", "פעם", "כדי",
        }
    ),
    RU: frozenset(
        {
            "и", "в", "не", "на", "с", "по", "для", "от", "из", "при", "что", "это", "как",
            "я", "мы", "вы", "он", "она", "оно", "они", "который", "весь", "свой", "можно",
            "нужно", "надо", "один", "два", "здесь", "там", "сейчас", "быть", "был",
            "была", "были", "будет", "уже", "еще", "только", "очень", "также", "всегда",
        }
    ),
}
