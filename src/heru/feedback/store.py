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

"""Append-only feedback storage.

Submissions go into an in-memory queue (a deque append, so callers never
block on I/O); :meth:`FeedbackStore.flush` moves queued records into an
SQLite table. The learner reads records past a persisted watermark.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections import deque
from datetime import datetime
from pathlib import Path

from heru.core.models import FeedbackRecord, Language

logger = logging.getLogger(__name__)

ERR_STORE_NOT_INITIALIZED = "Feedback store not initialized"


class FeedbackStore:
    """Feedback queue backed by an SQLite database.

    Example:
        >>> store = FeedbackStore("feedback.db")
        >>> store.initialize()
        >>> store.submit(record)
        >>> store.flush()
        1
    """

    def __init__(self, db_path: str | Path = ":memory:"):
        """Initialize Feedback Store.

        Args:
            db_path: Path to SQLite database file (``:memory:`` for a private in-memory DB)
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self.db: sqlite3.Connection | None = None
        self._initialized = False
        self._queue: deque[FeedbackRecord] = deque()
        self._lock = threading.Lock()

    def initialize(self) -> None:
        """Open the database and create the schema.

        Raises:
            RuntimeError: If initialization fails
        """
        if self._initialized:
            return

        try:
            if isinstance(self.db_path, Path):
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self.db = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self.db.row_factory = sqlite3.Row
            self._create_schema()

            self._initialized = True
            logger.info(f"Feedback store initialized: {self.db_path}")

        except (sqlite3.Error, OSError) as e:
            raise RuntimeError(f"Failed to initialize feedback store: {e}") from e

    def _create_schema(self) -> None:
        if self.db is None:
            raise RuntimeError("Database not initialized")

        self.db.execute(
            """
            CREATE TABLE IF NOT EXISTS feedback (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                original TEXT NOT NULL,
                output TEXT NOT NULL,
                correction TEXT,
                rating INTEGER NOT NULL,
                timestamp TEXT NOT NULL,
                source_lang TEXT NOT NULL,
                target_lang TEXT NOT NULL,
                domain TEXT NOT NULL
            )
        """
        )

        self.db.execute(
            """
            CREATE TABLE IF NOT EXISTS meta (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """
        )

        self.db.commit()

    def _require_db(self) -> sqlite3.Connection:
        if not self._initialized or self.db is None:
            raise RuntimeError(f"{ERR_STORE_NOT_INITIALIZED}. Call initialize() first.")
        return self.db

    def submit(self, record: FeedbackRecord) -> None:
        """Queue a record. Never blocks on storage and never raises."""
        self._queue.append(record)

    @property
    def queued(self) -> int:
        return len(self._queue)

    def flush(self) -> int:
        """Persist queued records in one transaction.

        Records leave the queue only after the transaction commits, so a
        failed write keeps every record queued for the next flush.

        Returns:
            Number of records written

        Raises:
            RuntimeError: If the store is not initialized
            sqlite3.Error: If the write fails (nothing is stored)
        """
        db = self._require_db()
        with self._lock:
            batch = list(self._queue)
            if not batch:
                return 0
            with db:
                for record in batch:
                    db.execute(
                        """
                        INSERT INTO feedback
                            (original, output, correction, rating, timestamp,
                             source_lang, target_lang, domain)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                        (
                            record.original,
                            record.output,
                            record.correction,
                            record.rating,
                            record.timestamp.isoformat(),
                            record.source_lang.value,
                            record.target_lang.value,
                            record.domain,
                        ),
                    )
            for _ in batch:
                self._queue.popleft()

        logger.debug(f"Flushed {len(batch)} feedback records")
        return len(batch)

    def records_since(self, watermark: int) -> list[FeedbackRecord]:
        """Stored records with an id above ``watermark``, oldest first."""
        db = self._require_db()
        with self._lock:
            rows = db.execute(
                "SELECT * FROM feedback WHERE id > ? ORDER BY id", (watermark,)
            ).fetchall()

        return [
            FeedbackRecord(
                id=row["id"],
                original=row["original"],
                output=row["output"],
                correction=row["correction"],
                rating=row["rating"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
                source_lang=Language(row["source_lang"]),
                target_lang=Language(row["target_lang"]),
                domain=row["domain"],
            )
            for row in rows
        ]

    def _get_meta(self, key: str) -> str | None:
        db = self._require_db()
        with self._lock:
            row = db.execute("SELECT value FROM meta WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def _set_meta(self, key: str, value: str) -> None:
        db = self._require_db()
        with self._lock:
            db.execute(
                "INSERT INTO meta (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, value),
            )
            db.commit()

    @property
    def watermark(self) -> int:
        """Id of the last record consumed by the learner."""
        value = self._get_meta("watermark")
        return int(value) if value is not None else 0

    def set_watermark(self, value: int) -> None:
        self._set_meta("watermark", str(value))

    @property
    def last_retrain(self) -> datetime | None:
        value = self._get_meta("last_retrain")
        return datetime.fromisoformat(value) if value is not None else None

    def set_last_retrain(self, when: datetime) -> None:
        self._set_meta("last_retrain", when.isoformat())

    def pending_count(self) -> int:
        """Queued plus stored records not yet consumed by the learner."""
        db = self._require_db()
        watermark = self.watermark
        with self._lock:
            row = db.execute(
                "SELECT COUNT(*) AS n FROM feedback WHERE id > ?", (watermark,)
            ).fetchone()
        return self.queued + int(row["n"])

    def cleanup(self) -> None:
        """Close database connection."""
        if self.db is not None:
            self.db.close()
            self.db = None

        self._initialized = False
        logger.info("Feedback store cleaned up")

    def __del__(self) -> None:
        """Cleanup on object destruction."""
        if self.db is not None:
            self.db.close()
