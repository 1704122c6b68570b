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

"""Technical domain detection from keywords and patterns."""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

GENERAL_DOMAIN = "general"

# Tie-break order when several domains score equally
DOMAINS: tuple[str, ...] = ("fire_safety", "plumbing", "electrical", "engineering")

DOMAIN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "plumbing": (
        "צינור", "ברז", "מים", "ניקוז", "שסתום",
        "труба", "кран", "вода", "воды", "дренаж", "клапан",
    ),
    "fire_safety": (
        "כיבוי", "אש", "גלאי", "ספרינקלר", "חירום",
        "пожар", "тушени", "детектор", "спринклер", "авари",
    ),
    "electrical": (
        "חשמל", "מתח", "זרם", "הארקה", "מעגל",
        "электр", "напряжени", "ток", "заземлени", "цеп",
    ),
    "engineering": (
        "לחץ", "משאבה", "מנוע", "טמפרטורה", "מערכת",
        "давлени", "насос", "двигател", "температур", "систем",
    ),
}

DOMAIN_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "plumbing": (
        re.compile(r"צינור\s+\d+"),
        re.compile(r"ברז\s+[א-ת]+"),
        re.compile(r"מערכת\s+אספקת\s+מים"),
        re.compile(r"труб\w*\s+DN\s*\d+", re.IGNORECASE),
    ),
    "fire_safety": (
        re.compile(r"מערכת\s+כיבוי"),
        re.compile(r"גלאי\s+[א-ת]+"),
        re.compile(r"ספרינקלר\s+\d+"),
        re.compile(r"систем\w*\s+пожаротушени", re.IGNORECASE),
    ),
    "electrical": (
        re.compile(r"מעגל\s+חשמלי"),
        re.compile(r"הארקה\s+[א-ת]+"),
        re.compile(r"מתח\s+\d+"),
        re.compile(r"\d+\s*(?:В|кВ|V|kV)\b"),
    ),
    "engineering": (re.compile(r"\d+(?:[.,]\d+)?\s*(?:bar|бар|атм|psi)\b", re.IGNORECASE),),
}


def detect_domain(text: str) -> str:
    """Detect the technical domain of a text.

    Each keyword occurring in the text and each matching pattern adds one
    point; the highest-scoring domain wins.

    Args:
        text: Source text

    Returns:
        Domain tag, or ``"general"`` when nothing matched

    Example:
        >>> detect_domain("מערכת כיבוי אש עם גלאי עשן")
        'fire_safety'
    """
    lowered = text.lower()
    scores: dict[str, int] = {}
    for domain in DOMAINS:
        score = sum(1 for keyword in DOMAIN_KEYWORDS[domain] if keyword in lowered)
        score += sum(1 for pattern in DOMAIN_PATTERNS[domain] if pattern.search(text))
        scores[domain] = score

    best = max(DOMAINS, key=lambda d: scores[d])
    if scores[best] == 0:
        return GENERAL_DOMAIN
    logger.debug(f"Domain scores: {scores}")
    return best
