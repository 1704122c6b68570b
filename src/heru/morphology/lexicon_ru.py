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

"""Domain overrides layered over the pymorphy3 Russian dictionary."""

from __future__ import annotations

# Nouns with no plural in technical usage, even where the dictionary has one
SINGULAR_ONLY: frozenset[str] = frozenset(
    {"вода", "электричество", "дым", "тушение", "пожаротушение", "дренаж"}
)

# Technical lemmas whose predicted paradigm is trusted for generation even
# when they are missing from the general dictionary
DOMAIN_LEMMAS: frozenset[str] = frozenset(
    {"спринклер", "пожаротушение", "заземление", "дренаж", "детектор"}
)

# Preposition -> cases it governs, most frequent first
PREPOSITIONS: dict[str, tuple[str, ...]] = {
    "в": ("loc", "acc"),
    "во": ("loc", "acc"),
    "на": ("loc", "acc"),
    "для": ("gen",),
    "из": ("gen",),
    "от": ("gen",),
    "без": ("gen",),
    "после": ("gen",),
    "до": ("gen",),
    "с": ("ins", "gen"),
    "со": ("ins", "gen"),
    "к": ("dat",),
    "по": ("dat",),
    "о": ("loc",),
    "об": ("loc",),
    "при": ("loc",),
    "перед": ("ins",),
    "между": ("ins",),
    "под": ("ins", "acc"),
    "над": ("ins",),
    "как": ("nom",),
}

# Closed-class words whose dictionary readings are ambiguous with content
# words (есть "eat", а "the letter"): surface -> part of speech tag
FUNCTION_WORDS: dict[str, str] = {
    "и": "CONJ",
    "или": "CONJ",
    "но": "CONJ",
    "а": "CONJ",
    "что": "CONJ",
    "если": "CONJ",
    "когда": "CONJ",
    "не": "PART",
    "нет": "PART",
    "есть": "PART",
    "это": "PRON",
    "он": "PRON",
    "она": "PRON",
    "оно": "PRON",
    "они": "PRON",
    "также": "ADV",
    "очень": "ADV",
}
