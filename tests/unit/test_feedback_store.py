"""Unit tests for the SQLite feedback store."""

from datetime import datetime, timezone
import sqlite3
from pathlib import Path

import pytest

from heru.core.models import FeedbackRecord, Language
from heru.feedback.store import FeedbackStore


def make_record(rating: int = 5, correction: str | None = None) -> FeedbackRecord:
    return FeedbackRecord(
        original="לחץ גבוה",
        output="высокое давление",
        correction=correction,
        rating=rating,
        source_lang=Language.HEBREW,
        target_lang=Language.RUSSIAN,
        domain="engineering",
    )



class FailingConnection:
    """Connection wrapper whose n-th feedback INSERT fails."""

    def __init__(self, db: sqlite3.Connection, fail_on: int):
        self._db = db
        self._fail_on = fail_on
        self._inserts = 0

    def execute(self, sql, params=()):
        if "INSERT INTO feedback" in sql:
            self._inserts += 1
            if self._inserts == self._fail_on:
                raise sqlite3.OperationalError("database is locked")
        return self._db.execute(sql, params)

    def __enter__(self):
        return self._db.__enter__()

    def __exit__(self, *exc_info):
        return self._db.__exit__(*exc_info)

    def __getattr__(self, name):
        return getattr(self._db, name)


@pytest.fixture
def store():
    """Provide an initialized in-memory store."""
    store = FeedbackStore()
    store.initialize()
    yield store
    store.cleanup()


class TestFeedbackStore:
    """Tests for queueing, persistence and the learner watermark."""

    def test_requires_initialize(self):
        """Test reading before initialize raises RuntimeError."""
        with pytest.raises(RuntimeError, match="not initialized"):
            FeedbackStore().records_since(0)

    def test_submit_queues_without_writing(self, store):
        """Test submit only queues the record."""
        store.submit(make_record())

        assert store.queued == 1
        assert store.records_since(0) == []

    def test_flush_assigns_ids_in_order(self, store):
        """Test flushed records get increasing ids."""
        store.submit(make_record(rating=5))
        store.submit(make_record(rating=2, correction="низкое давление"))

        assert store.flush() == 2
        records = store.records_since(0)

        assert [r.id for r in records] == [1, 2]
        assert [r.rating for r in records] == [5, 2]
        assert records[1].correction == "низкое давление"
        assert records[0].source_lang is Language.HEBREW
        assert records[0].domain == "engineering"

    def test_failed_flush_keeps_records_queued(self, store):
        """Test a write failing mid-batch stores nothing and loses nothing."""
        store.submit(make_record(rating=5))
        store.submit(make_record(rating=1, correction="низкое давление"))
        connection = store.db
        store.db = FailingConnection(connection, fail_on=2)

        with pytest.raises(sqlite3.OperationalError):
            store.flush()

        assert store.queued == 2
        store.db = connection
        assert store.records_since(0) == []

        assert store.flush() == 2
        assert store.queued == 0
        assert [r.rating for r in store.records_since(0)] == [5, 1]

    def test_records_submitted_after_failure_are_kept(self, store):
        """Test the retry writes old and new records in submission order."""
        store.submit(make_record(rating=4))
        connection = store.db
        store.db = FailingConnection(connection, fail_on=1)
        with pytest.raises(sqlite3.OperationalError):
            store.flush()
        store.db = connection

        store.submit(make_record(rating=2))

        assert store.flush() == 2
        assert [r.rating for r in store.records_since(0)] == [4, 2]
        assert store.queued == 0

    def test_records_since_watermark(self, store):
        """Test only records past the watermark are returned."""
        for _ in range(3):
            store.submit(make_record())
        store.flush()

        assert [r.id for r in store.records_since(2)] == [3]

    def test_watermark_and_pending(self, store):
        """Test pending counts queued plus unconsumed records."""
        store.submit(make_record())
        store.submit(make_record())
        store.flush()
        store.submit(make_record())

        assert store.watermark == 0
        assert store.pending_count() == 3

        store.set_watermark(2)

        assert store.watermark == 2
        assert store.pending_count() == 1

    def test_last_retrain(self, store):
        """Test the retrain timestamp round-trips through the meta table."""
        when = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

        assert store.last_retrain is None
        store.set_last_retrain(when)

        assert store.last_retrain == when

    def test_file_database_survives_reopen(self, tmp_path: Path):
        """Test records and watermark persist across connections."""
        db_path = tmp_path / "nested" / "feedback.db"
        first = FeedbackStore(db_path)
        first.initialize()
        first.submit(make_record())
        first.flush()
        first.set_watermark(1)
        first.cleanup()

        second = FeedbackStore(db_path)
        second.initialize()

        assert len(second.records_since(0)) == 1
        assert second.watermark == 1
        second.cleanup()

    def test_initialize_twice(self, store):
        """Test initialize is idempotent."""
        store.initialize()

        assert store.pending_count() == 0
