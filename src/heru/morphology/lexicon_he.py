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

"""Hebrew lemma tables for the built-in technical vocabulary.

Forms are listed explicitly where Hebrew morphology is not reliably
predictable from the lemma (adjective and verb inflection); noun forms are
derived from lemma, gender and plural.
"""

from __future__ import annotations

# lemma -> (gender, plural form or None for mass / plural-only nouns)
NOUNS: dict[str, tuple[str, str | None]] = {
    "מערכת": ("fem", "מערכות"),
    "לחץ": ("masc", "לחצים"),
    "משאבה": ("fem", "משאבות"),
    "שסתום": ("masc", "שסתומים"),
    "צינור": ("masc", "צינורות"),
    "מים": ("masc", None),
    "טמפרטורה": ("fem", "טמפרטורות"),
    "מתח": ("masc", "מתחים"),
    "זרם": ("masc", "זרמים"),
    "מעגל": ("masc", "מעגלים"),
    "חשמל": ("masc", None),
    "מנוע": ("masc", "מנועים"),
    "בדיקה": ("fem", "בדיקות"),
    "מדידה": ("fem", "מדידות"),
    "התקנה": ("fem", "התקנות"),
    "כפתור": ("masc", "כפתורים"),
    "גלאי": ("masc", "גלאים"),
    "עשן": ("masc", None),
    "ברז": ("masc", "ברזים"),
    "הארקה": ("fem", "הארקות"),
    "כיבוי": ("masc", "כיבויים"),
    "אש": ("fem", None),
    "חירום": ("masc", None),
    "מהנדס": ("masc", "מהנדסים"),
    "ערך": ("masc", "ערכים"),
    "חיבור": ("masc", "חיבורים"),
    "אספקה": ("fem", "אספקות"),
    "לחיצה": ("fem", "לחיצות"),
    "מערך": ("masc", "מערכים"),
    "תקלה": ("fem", "תקלות"),
    "ניקוז": ("masc", None),
    "ספרינקלר": ("masc", "ספרינקלרים"),
}

# Nouns that only occur in plural form.
PLURAL_ONLY: frozenset[str] = frozenset({"מים"})

# lemma (masc. sing.) -> (fem. sing., masc. plur., fem. plur.)
ADJECTIVES: dict[str, tuple[str, str, str]] = {
    "גבוה": ("גבוהה", "גבוהים", "גבוהות"),
    "נמוך": ("נמוכה", "נמוכים", "נמוכות"),
    "חדש": ("חדשה", "חדשים", "חדשות"),
    "חשמלי": ("חשמלית", "חשמליים", "חשמליות"),
    "ראשי": ("ראשית", "ראשיים", "ראשיות"),
    "תקין": ("תקינה", "תקינים", "תקינות"),
    "גדול": ("גדולה", "גדולים", "גדולות"),
    "קטן": ("קטנה", "קטנים", "קטנות"),
}

# lemma (past 3ms) -> present ms, fs, mp, fp; past 3ms, 3fs, 3p, 1s; infinitive
VERBS: dict[str, tuple[str, ...]] = {
    "בדק": ("בודק", "בודקת", "בודקים", "בודקות", "בדק", "בדקה", "בדקו", "בדקתי", "לבדוק"),
    "התקין": (
        "מתקין", "מתקינה", "מתקינים", "מתקינות",
        "התקין", "התקינה", "התקינו", "התקנתי", "להתקין",
    ),
    "עלה": ("עולה", "עולה", "עולים", "עולות", "עלה", "עלתה", "עלו", "עליתי", "לעלות"),
    "ירד": ("יורד", "יורדת", "יורדים", "יורדות", "ירד", "ירדה", "ירדו", "ירדתי", "לרדת"),
    "פעל": ("פועל", "פועלת", "פועלים", "פועלות", "פעל", "פעלה", "פעלו", "פעלתי", "לפעול"),
    "מדד": ("מודד", "מודדת", "מודדים", "מודדות", "מדד", "מדדה", "מדדו", "מדדתי", "למדוד"),
    "סגר": ("סוגר", "סוגרת", "סוגרים", "סוגרות", "סגר", "סגרה", "סגרו", "סגרתי", "לסגור"),
    "פתח": ("פותח", "פותחת", "פותחים", "פותחות", "פתח", "פתחה", "פתחו", "פתחתי", "לפתוח"),
    "חיבר": ("מחבר", "מחברת", "מחברים", "מחברות", "חיבר", "חיברה", "חיברו", "חיברתי", "לחבר"),
    "לחץ": ("לוחץ", "לוחצת", "לוחצים", "לוחצות", "לחץ", "לחצה", "לחצו", "לחצתי", "ללחוץ"),
}

# Feature slots of the VERBS tuples: (tense, gender, number, person)
VERB_SLOTS: tuple[tuple[str, str | None, str | None, int | None], ...] = (
    ("pres", "masc", "sing", None),
    ("pres", "fem", "sing", None),
    ("pres", "masc", "plur", None),
    ("pres", "fem", "plur", None),
    ("past", "masc", "sing", 3),
    ("past", "fem", "sing", 3),
    ("past", None, "plur", 3),
    ("past", None, "sing", 1),
    ("inf", None, None, None),
)

# Standalone function words: surface -> part of speech tag
FUNCTION_WORDS: dict[str, str] = {
    "של": "PREP",
    "את": "PREP",
    "על": "PREP",
    "עם": "PREP",
    "לפני": "PREP",
    "אחרי": "PREP",
    "בין": "PREP",
    "ללא": "PREP",
    "לפי": "PREP",
    "עבור": "PREP",
    "לא": "PART",
    "יש": "PART",
    "אין": "PART",
    "או": "CONJ",
    "אבל": "CONJ",
    "אם": "CONJ",
    "כאשר": "CONJ",
    "כי": "CONJ",
    "גם": "ADV",
    "מאוד": "ADV",
    "זה": "PRON",
    "הוא": "PRON",
    "היא": "PRON",
    "הם": "PRON",
}

# Clitic prefix letters and their role
PREFIX_ROLES: dict[str, str] = {
    "ו": "CONJ",
    "ש": "CONJ",
    "ב": "PREP",
    "כ": "PREP",
    "ל": "PREP",
    "מ": "PREP",
    "ה": "DET",
}

# Relative frequency of homograph readings; unlisted readings weigh 1.0
PRIORS: dict[tuple[str, str], float] = {
    ("לחץ", "VERB"): 0.5,
}

# Final letter forms and their medial counterparts
FINAL_LETTERS: dict[str, str] = {"ך": "כ", "ם": "מ", "ן": "נ", "ף": "פ", "ץ": "צ"}
MEDIAL_TO_FINAL: dict[str, str] = {v: k for k, v in FINAL_LETTERS.items()}
