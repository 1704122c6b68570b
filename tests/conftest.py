"""Shared pytest fixtures for HERU tests.

Provides analyzers, a seeded lexicon, isolated settings and engines.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from heru.core.engine import TranslationEngine
from heru.core.observability import CollectingEventSink
from heru.core.snapshot import JsonSnapshotStore
from heru.feedback.store import FeedbackStore
from heru.morphology.hebrew import HebrewAnalyzer
from heru.morphology.russian import RussianAnalyzer
from heru.terminology.builtin import BUILTIN_TERMS
from heru.terminology.lexicon import TermLexicon
from heru.terminology.recognizer import TermRecognizer
from heru.utils.config import Settings, reset_settings

# ============================================================================
# Analyzer and Lexicon Fixtures
# ============================================================================


@pytest.fixture(scope="session")
def hebrew() -> HebrewAnalyzer:
    """Provide a shared Hebrew analyzer."""
    return HebrewAnalyzer()


@pytest.fixture(scope="session")
def russian() -> RussianAnalyzer:
    """Provide a shared Russian analyzer."""
    return RussianAnalyzer()


@pytest.fixture
def lexicon() -> TermLexicon:
    """Provide the built-in term lexicon."""
    return TermLexicon(BUILTIN_TERMS, version=1)


@pytest.fixture
def recognizer(lexicon: TermLexicon) -> TermRecognizer:
    """Provide a term recognizer over the built-in lexicon."""
    return TermRecognizer(lexicon, context_window=3)


# ============================================================================
# Settings and Engine Fixtures
# ============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Provide settings isolated from the environment and the user's store."""
    return Settings(store_dir=tmp_path / "store", _env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def event_sink() -> CollectingEventSink:
    """Provide an event sink that records stage events."""
    return CollectingEventSink()


@pytest.fixture
def engine(settings: Settings, event_sink: CollectingEventSink) -> Iterator[TranslationEngine]:
    """Provide an engine with in-memory feedback and no snapshot persistence."""
    engine = TranslationEngine(settings=settings, event_sink=event_sink)
    yield engine
    engine.close()


@pytest.fixture
def persistent_engine(settings: Settings) -> Iterator[TranslationEngine]:
    """Provide an engine backed by SQLite feedback and JSON snapshots in tmp_path."""
    engine = TranslationEngine(
        settings=settings,
        feedback_store=FeedbackStore(settings.feedback_db),
        snapshot_store=JsonSnapshotStore(settings.snapshot_dir),
    )
    yield engine
    engine.close()


# ============================================================================
# CLI Fixtures
# ============================================================================


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """Point the CLI's global settings at a temporary store directory."""
    store = tmp_path / "cli-store"
    monkeypatch.setenv("HERU_STORE_DIR", str(store))
    monkeypatch.setenv("HERU_LOG_LEVEL", "WARNING")
    reset_settings()
    yield store
    reset_settings()


# ============================================================================
# Pytest Configuration Hooks
# ============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Modify test collection to auto-mark tests based on location."""
    for item in items:
        # Auto-mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Add custom command line options."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="Run slow tests",
    )


def pytest_runtest_setup(item: pytest.Item) -> None:
    """Skip tests based on markers and command line options."""
    # Skip slow tests unless --run-slow is specified
    if "slow" in item.keywords and not item.config.getoption("--run-slow"):
        pytest.skip("Slow tests skipped (use --run-slow to run)")
