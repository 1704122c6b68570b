"""Unit tests for configuration module."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from heru.utils.config import DEFAULT_WEIGHTS, Settings, get_settings, reset_settings


@pytest.mark.unit
class TestSettings:
    """Test Settings functionality."""

    def test_settings_has_default_values(self, tmp_path: Path) -> None:
        """Test defaults of the generation, gate and learner settings."""
        settings = Settings(store_dir=tmp_path, _env_file=None)  # type: ignore[call-arg]

        assert settings.max_candidates == 32
        assert settings.top_k == 3
        assert settings.length_ratio_min == 0.25
        assert settings.length_ratio_max == 4.0
        assert settings.banned_patterns == []
        assert settings.ranking_weights == DEFAULT_WEIGHTS

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test HERU_ environment variables override defaults."""
        monkeypatch.setenv("HERU_MAX_CANDIDATES", "5")
        monkeypatch.setenv("HERU_BANNED_PATTERNS", '["TODO"]')
        monkeypatch.setenv("HERU_LOG_LEVEL", "debug")

        settings = Settings(_env_file=None)  # type: ignore[call-arg]

        assert settings.max_candidates == 5
        assert settings.banned_patterns == ["TODO"]
        assert settings.log_level == "DEBUG"

    def test_invalid_length_band(self) -> None:
        """Test the length band must be non-empty."""
        with pytest.raises(ValidationError):
            Settings(length_ratio_min=2.0, length_ratio_max=1.0, _env_file=None)  # type: ignore[call-arg]

    def test_max_candidates_positive(self) -> None:
        """Test max_candidates below 1 is invalid."""
        with pytest.raises(ValidationError):
            Settings(max_candidates=0, _env_file=None)  # type: ignore[call-arg]

    @pytest.mark.parametrize("floor", [0.0, -0.05])
    def test_min_weight_positive(self, floor: float) -> None:
        """Test a weight floor of zero or below is invalid."""
        with pytest.raises(ValidationError):
            Settings(min_weight=floor, _env_file=None)  # type: ignore[call-arg]

    def test_default_source_lang(self) -> None:
        """Test the feedback fallback language is normalized and validated."""
        default = Settings(_env_file=None)  # type: ignore[call-arg]
        russian = Settings(default_source_lang=" RU ", _env_file=None)  # type: ignore[call-arg]

        assert default.default_source_lang == "he"
        assert russian.default_source_lang == "ru"
        with pytest.raises(ValidationError):
            Settings(default_source_lang="en", _env_file=None)  # type: ignore[call-arg]

    def test_store_paths(self, tmp_path: Path) -> None:
        """Test snapshot and feedback locations derive from store_dir."""
        settings = Settings(store_dir=tmp_path, _env_file=None)  # type: ignore[call-arg]

        assert settings.snapshot_dir == tmp_path / "snapshots"
        assert settings.feedback_db == tmp_path / "feedback.db"


@pytest.mark.unit
class TestGetSettings:
    """Test the settings singleton."""

    def test_singleton(self) -> None:
        """Test get_settings returns the cached instance."""
        reset_settings()
        try:
            assert get_settings() is get_settings()
        finally:
            reset_settings()

    def test_reset_rereads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test reset_settings drops the cached instance."""
        reset_settings()
        try:
            first = get_settings()
            monkeypatch.setenv("HERU_TOP_K", "7")
            reset_settings()
            second = get_settings()

            assert second is not first
            assert second.top_k == 7
        finally:
            reset_settings()
