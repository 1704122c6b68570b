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

"""Immutable, versioned term lexicon.

Supports lookup of multi-word terms by their first lemma, JSON round trips
for snapshots and CSV import of user-maintained term lists.
"""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from heru.core.models import Language, TermEntry

logger = logging.getLogger(__name__)

TermKey = tuple[str, tuple[str, ...], str]


class TermLexicon:
    """Collection of term entries with lookup indices.

    A lexicon is never modified in place; :meth:`with_entries` returns a new
    lexicon carrying the replaced entries and a new version.

    Example:
        >>> lexicon = TermLexicon.from_json(Path("terms.json"))
        >>> entry = lexicon.lookup(Language.HEBREW, ("לחץ",), "engineering")
        >>> if entry:
        ...     print(entry.target)  # ('давление',)
    """

    def __init__(self, entries: Iterable[TermEntry], version: int = 1) -> None:
        """Initialize lexicon.

        Args:
            entries: Term entries; a later entry replaces an earlier one with the same key
            version: Lexicon version (follows the snapshot version)
        """
        self.version = version
        self._entries: dict[TermKey, TermEntry] = {}
        for entry in entries:
            if entry.key in self._entries:
                logger.debug(f"Replacing duplicate term entry {entry.key}")
            self._entries[entry.key] = entry

        # Build lookup indices
        self._build_indices()

    def _build_indices(self) -> None:
        """Index entries by (source language, first source lemma), longest first."""
        self.by_first: dict[tuple[Language, str], list[TermEntry]] = {}
        for entry in self._entries.values():
            self.by_first.setdefault((entry.source_lang, entry.source[0]), []).append(entry)
        for bucket in self.by_first.values():
            bucket.sort(key=lambda e: -len(e.source))
        self.max_length = max((len(e.source) for e in self._entries.values()), default=0)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TermEntry]:
        return iter(self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: TermKey) -> TermEntry | None:
        return self._entries.get(key)

    def lookup(
        self, source_lang: Language, source: tuple[str, ...], domain: str
    ) -> TermEntry | None:
        """Look up an entry by its unique key."""
        return self._entries.get((source_lang.value, source, domain))

    def starting_with(
        self, source_lang: Language, lemma: str, domains: Iterable[str]
    ) -> list[TermEntry]:
        """Entries whose first source lemma is ``lemma`` in any of ``domains``."""
        wanted = set(domains)
        return [e for e in self.by_first.get((source_lang, lemma), []) if e.domain in wanted]

    def entries_for(
        self, source_lang: Language | None = None, domain: str | None = None
    ) -> list[TermEntry]:
        """Get all entries, optionally filtered by source language and domain."""
        return [
            entry
            for entry in self._entries.values()
            if (source_lang is None or entry.source_lang == source_lang)
            and (domain is None or entry.domain == domain)
        ]

    def domains(self) -> list[str]:
        return sorted({entry.domain for entry in self._entries.values()})

    def with_entries(self, updated: Iterable[TermEntry], version: int) -> TermLexicon:
        """Return a new lexicon where ``updated`` entries replace (or extend) this one's."""
        return TermLexicon(list(self._entries.values()) + list(updated), version=version)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "entries": [entry.model_dump(mode="json") for entry in self._entries.values()],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TermLexicon:
        entries = [TermEntry.model_validate(e) for e in data.get("entries", [])]
        return cls(entries, version=int(data.get("version", 1)))

    @classmethod
    def from_json(cls, path: Path) -> TermLexicon:
        """Load lexicon from JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If an entry is invalid
        """
        if not path.exists():
            raise FileNotFoundError(f"Lexicon file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = json.load(f)

        return cls.from_dict(data)

    def to_json(self, path: Path) -> None:
        """Save lexicon to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    @staticmethod
    def read_csv(path: Path) -> list[TermEntry]:
        """Read term entries from CSV.

        CSV Format:
            source,target,source_lang,target_lang,domain,head,confidence

        ``source`` and ``target`` are space-separated lemma sequences.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If required columns are missing
        """
        if not path.exists():
            raise FileNotFoundError(f"Term list not found: {path}")

        entries: list[TermEntry] = []
        with open(path, encoding="utf-8") as f:
            reader = csv.DictReader(f)

            # Validate required columns
            required = {"source", "target", "source_lang", "target_lang"}
            if not required.issubset(set(reader.fieldnames or [])):
                missing = required - set(reader.fieldnames or [])
                raise ValueError(f"CSV missing required columns: {missing}")

            for row in reader:
                try:
                    entries.append(
                        TermEntry(
                            source=tuple(row["source"].split()),
                            target=tuple(row["target"].split()),
                            source_lang=Language.parse(row["source_lang"]),
                            target_lang=Language.parse(row["target_lang"]),
                            domain=row.get("domain") or "general",
                            head=int(row.get("head") or 0),
                            confidence=float(row.get("confidence") or 0.5),
                        )
                    )
                except ValueError as e:
                    logger.warning(f"Skipping invalid CSV row {row}: {e}")

        return entries
