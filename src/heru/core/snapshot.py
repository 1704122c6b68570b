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

"""Immutable, versioned state shared by translation requests.

A :class:`Snapshot` bundles everything the learner can change: the term
lexicon, the ranking model, the fluency models and the segment memory.
Requests read :attr:`SnapshotRegistry.current` once and use that snapshot
to the end; the learner publishes a replacement with a single reference
swap.
"""

from __future__ import annotations

import json
import logging
import os
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Protocol

from heru.core.errors import ModelLoadError
from heru.core.models import Language, RankingModel
from heru.ranking.fluency import FluencyModel, seed_models
from heru.terminology.builtin import BUILTIN_TERMS
from heru.terminology.lexicon import TermLexicon
from heru.utils.config import Settings

logger = logging.getLogger(__name__)

HISTORY_SIZE = 8
_BLOB_NAME = re.compile(r"^snapshot-(\d+)\.json$")


def memory_key(source_lang: Language, target_lang: Language, text: str) -> str:
    """Segment memory key: language pair plus whitespace-normalized source text."""
    return f"{source_lang.value}>{target_lang.value}:{' '.join(text.split())}"


@dataclass(frozen=True)
class Snapshot:
    """One consistent version of the learnable state."""

    version: int
    lexicon: TermLexicon
    model: RankingModel
    fluency: Mapping[Language, FluencyModel] = field(default_factory=dict)
    memory: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fluency", MappingProxyType(dict(self.fluency)))
        object.__setattr__(self, "memory", MappingProxyType(dict(self.memory)))

    def fluency_for(self, language: Language) -> FluencyModel:
        return self.fluency.get(language) or FluencyModel()

    def evolve(self, **changes: Any) -> Snapshot:
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "lexicon": self.lexicon.to_dict(),
            "model": self.model.to_dict(),
            "fluency": {lang.value: model.to_dict() for lang, model in self.fluency.items()},
            "memory": dict(self.memory),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Snapshot:
        return cls(
            version=int(data["version"]),
            lexicon=TermLexicon.from_dict(data["lexicon"]),
            model=RankingModel.from_dict(data["model"]),
            fluency={
                Language(lang): FluencyModel.from_dict(model)
                for lang, model in data.get("fluency", {}).items()
            },
            memory={str(k): str(v) for k, v in data.get("memory", {}).items()},
        )


def default_snapshot(settings: Settings) -> Snapshot:
    """Version 1: built-in terms, configured weights, seed fluency models."""
    return Snapshot(
        version=1,
        lexicon=TermLexicon(BUILTIN_TERMS, version=1),
        model=RankingModel(version=1, weights=settings.ranking_weights),
        fluency=seed_models(),
    )


class SnapshotRegistry:
    """Holds the current snapshot; swaps it atomically on publish.

    Readers take :attr:`current` without locking. Only writers serialize.
    """

    def __init__(self, initial: Snapshot) -> None:
        self._current = initial
        self._history: list[Snapshot] = [initial]
        self._lock = threading.Lock()

    @property
    def current(self) -> Snapshot:
        return self._current

    def publish(self, snapshot: Snapshot) -> None:
        """Make ``snapshot`` current.

        Raises:
            ValueError: If its version does not exceed the current version
        """
        with self._lock:
            if snapshot.version <= self._current.version:
                raise ValueError(
                    f"Snapshot version {snapshot.version} is not newer than "
                    f"{self._current.version}"
                )
            self._history = [*self._history, snapshot][-HISTORY_SIZE:]
            self._current = snapshot
        logger.info(f"Published snapshot v{snapshot.version}")

    @property
    def history(self) -> list[Snapshot]:
        return list(self._history)

    def get(self, version: int) -> Snapshot | None:
        return next((s for s in self._history if s.version == version), None)


class SnapshotStore(Protocol):
    """Persistence collaborator for snapshots."""

    def save(self, snapshot: Snapshot) -> None: ...

    def load_latest(self) -> Snapshot | None: ...


class JsonSnapshotStore:
    """Stores each snapshot as ``snapshot-<version>.json`` in a directory.

    Example:
        >>> store = JsonSnapshotStore(Path("~/.heru/snapshots").expanduser())
        >>> store.save(snapshot)
        >>> store.load_latest().version
        2
    """

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, version: int) -> Path:
        return self.directory / f"snapshot-{version}.json"

    def versions(self) -> list[int]:
        if not self.directory.exists():
            return []
        found = (_BLOB_NAME.match(path.name) for path in self.directory.iterdir())
        return sorted(int(m.group(1)) for m in found if m)

    def save(self, snapshot: Snapshot) -> None:
        """Write the snapshot blob atomically (temp file + rename)."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(snapshot.version)
        tmp = path.with_suffix(".json.tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, ensure_ascii=False)
        os.replace(tmp, path)
        logger.debug(f"Saved snapshot v{snapshot.version} to {path}")

    def load(self, version: int) -> Snapshot:
        """Load one version.

        Raises:
            ModelLoadError: If the blob is missing, unreadable or invalid
        """
        path = self.path_for(version)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return Snapshot.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise ModelLoadError(f"Cannot load snapshot {path}: {e}") from e

    def load_latest(self) -> Snapshot | None:
        versions = self.versions()
        if not versions:
            return None
        return self.load(versions[-1])
