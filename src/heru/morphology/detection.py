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

"""Language detection for automatic source language selection."""

from __future__ import annotations

import logging
import re

from heru.core.models import Language
from heru.morphology.base import MorphologicalAnalyzer
from heru.morphology.hebrew import HebrewAnalyzer
from heru.morphology.russian import RussianAnalyzer

logger = logging.getLogger(__name__)

HEBREW_KEYWORDS = frozenset({"של", "את", "על", "עם", "זה", "גם", "כל", "או", "אבל", "כי"})
RUSSIAN_KEYWORDS = frozenset({"и", "в", "не", "на", "с", "по", "для", "от", "из", "при"})

# Script share above which detection is decided without keywords
MIN_CONFIDENCE = 0.8
KEYWORD_BONUS = 0.2


def detect_language(text: str) -> Language | None:
    """Detect whether text is Hebrew or Russian.

    Combines the share of Hebrew vs. Cyrillic letters with a bonus for
    frequent function words.

    Args:
        text: Text to analyze

    Returns:
        Detected language, or None when the text has neither script

    Example:
        >>> detect_language("לחץ גבוה במערכת")
        <Language.HEBREW: 'he'>
        >>> detect_language("Давление в системе")
        <Language.RUSSIAN: 'ru'>
    """
    if not text or not text.strip():
        return None

    hebrew_chars = len(re.findall(r"[א-ת]", text))
    cyrillic_chars = len(re.findall(r"[Ѐ-ӿ]", text))
    total_chars = hebrew_chars + cyrillic_chars
    if total_chars == 0:
        return None

    words = [word.strip(".,;:!?()\"'").lower() for word in text.split()]
    hebrew_score = hebrew_chars / total_chars + KEYWORD_BONUS * sum(
        word in HEBREW_KEYWORDS for word in words
    )
    russian_score = cyrillic_chars / total_chars + KEYWORD_BONUS * sum(
        word in RUSSIAN_KEYWORDS for word in words
    )
    logger.debug(f"Language scores: he={hebrew_score:.2f} ru={russian_score:.2f}")

    if hebrew_score > russian_score:
        return Language.HEBREW
    if russian_score > hebrew_score:
        return Language.RUSSIAN
    return None


def get_analyzer_for_language(language: Language | str) -> MorphologicalAnalyzer:
    """Create the analyzer for a language.

    Raises:
        ValueError: If the language is not supported
    """
    language = Language.parse(language)
    if language is Language.HEBREW:
        return HebrewAnalyzer()
    return RussianAnalyzer()
