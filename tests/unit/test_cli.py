"""Unit tests for CLI interface.

Each test runs against a temporary store directory via the ``cli_env``
fixture, so snapshots and feedback never touch the user's home.
"""

import json
import re
from pathlib import Path

import pytest

from heru import __version__
from heru.cli.main import app


def strip_ansi(text: str) -> str:
    """Strip ANSI escape codes from text."""
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


@pytest.mark.unit
class TestCLIBasics:
    """Test basic CLI functionality."""

    def test_cli_version(self, cli_runner) -> None:
        """Test --version flag shows version."""
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "HERU version:" in result.stdout
        assert __version__ in result.stdout

    def test_cli_help(self, cli_runner, cli_env) -> None:
        """Test --help lists the commands."""
        result = cli_runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        output = strip_ansi(result.stdout)
        for command in ("translate", "feedback", "retrain", "terms"):
            assert command in output

    def test_invalid_command_fails(self, cli_runner, cli_env) -> None:
        """Test invalid command shows error."""
        result = cli_runner.invoke(app, ["invalid-command"])

        assert result.exit_code != 0


@pytest.mark.unit
class TestTranslateCommand:
    """Test 'heru translate' command."""

    def test_translate_text(self, cli_runner, cli_env) -> None:
        """Test a Hebrew sentence is translated to Russian."""
        result = cli_runner.invoke(app, ["translate", "לחץ גבוה במערכת", "--to", "ru"])

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.stdout)
        assert "высокое давление в системе" in output
        assert "snapshot v1" in output

    def test_translate_json(self, cli_runner, cli_env) -> None:
        """Test --json prints the full result."""
        result = cli_runner.invoke(
            app, ["translate", "לחץ גבוה במערכת", "--from", "he", "--json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(strip_ansi(result.stdout))
        assert data["translation"] == "высокое давление в системе"
        assert data["target_lang"] == "ru"
        assert data["verdict"]["outcome"] == "pass"

    def test_translate_file(self, cli_runner, cli_env, tmp_path: Path) -> None:
        """Test text is read from --file."""
        source = tmp_path / "manual.txt"
        source.write_text("Высокое давление в системе.", encoding="utf-8")

        result = cli_runner.invoke(app, ["translate", "--file", str(source)])

        assert result.exit_code == 0, result.output
        assert "לחץ גבוה במערכת." in result.stdout

    def test_missing_file(self, cli_runner, cli_env, tmp_path: Path) -> None:
        """Test a missing input file exits with code 1."""
        result = cli_runner.invoke(app, ["translate", "--file", str(tmp_path / "nope.txt")])

        assert result.exit_code == 1
        assert "File not found" in strip_ansi(result.stdout)

    def test_no_input(self, cli_runner, cli_env) -> None:
        """Test translate without text or file fails."""
        result = cli_runner.invoke(app, ["translate"])

        assert result.exit_code == 1

    def test_unsupported_pair(self, cli_runner, cli_env) -> None:
        """Test an unsupported target language exits with code 1."""
        result = cli_runner.invoke(app, ["translate", "לחץ", "--to", "en"])

        assert result.exit_code == 1

    def test_nothing_to_translate(self, cli_runner, cli_env) -> None:
        """Test digits-only input exits with code 1."""
        result = cli_runner.invoke(app, ["translate", "12345"])

        assert result.exit_code == 1


@pytest.mark.unit
class TestFeedbackAndRetrain:
    """Test 'heru feedback' and 'heru retrain' commands."""

    def test_retrain_without_feedback(self, cli_runner, cli_env) -> None:
        """Test retrain with an empty store reports no change."""
        result = cli_runner.invoke(app, ["retrain"])

        assert result.exit_code == 0
        assert "No new feedback; snapshot v1 unchanged" in strip_ansi(result.stdout)

    def test_feedback_then_retrain(self, cli_runner, cli_env) -> None:
        """Test stored feedback produces snapshot v2 on retrain."""
        result = cli_runner.invoke(
            app,
            ["feedback", "לחץ גבוה", "высокое давление", "-r", "5", "-d", "engineering"],
        )
        assert result.exit_code == 0, result.output
        assert "Feedback recorded (he → ru, rating 5)" in strip_ansi(result.stdout)
        assert (cli_env / "feedback.db").exists()

        result = cli_runner.invoke(app, ["retrain"])
        assert result.exit_code == 0, result.output
        output = strip_ansi(result.stdout)
        assert "Snapshot v2 from 1 feedback records" in output
        assert "fluency" in output
        assert "Corrected outputs" not in output

        result = cli_runner.invoke(app, ["retrain"])
        assert "snapshot v2 unchanged" in strip_ansi(result.stdout)

    def test_retrain_prints_correction_scores(self, cli_runner, cli_env) -> None:
        """Test retrain lists BLEU, chrF++ and TER for corrected feedback."""
        result = cli_runner.invoke(
            app,
            ["feedback", "לחץ גבוה", "высокое нажатие", "-r", "2", "-c", "высокое давление"],
        )
        assert result.exit_code == 0, result.output

        result = cli_runner.invoke(app, ["retrain"])

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.stdout)
        assert "Corrected outputs (1)" in output
        for metric in ("BLEU", "chrF++", "TER", "Term accuracy"):
            assert metric in output

    def test_feedback_rating_out_of_range(self, cli_runner, cli_env) -> None:
        """Test ratings outside 1..5 are refused by the option parser."""
        result = cli_runner.invoke(app, ["feedback", "לחץ", "давление", "-r", "7"])

        assert result.exit_code == 2

    def test_feedback_without_detectable_language(self, cli_runner, cli_env) -> None:
        """Test feedback on part numbers falls back to the default pair."""
        result = cli_runner.invoke(app, ["feedback", "ABC-123", "ABC-123", "-r", "2"])

        assert result.exit_code == 0, result.output
        assert "Feedback recorded (he → ru, rating 2)" in strip_ansi(result.stdout)

    def test_feedback_unsupported_language_code(self, cli_runner, cli_env) -> None:
        """Test an explicit unsupported source language exits with code 1."""
        result = cli_runner.invoke(app, ["feedback", "pressure", "давление", "-r", "3", "-s", "en"])

        assert result.exit_code == 1


@pytest.mark.unit
class TestCorruptStore:
    """Test commands against a snapshot blob that cannot be loaded."""

    @pytest.fixture
    def corrupt_store(self, cli_env):
        snapshots = cli_env / "snapshots"
        snapshots.mkdir(parents=True)
        (snapshots / "snapshot-1.json").write_text("{not json", encoding="utf-8")
        return cli_env

    @pytest.mark.parametrize(
        "args",
        [
            ["translate", "לחץ גבוה"],
            ["retrain"],
            ["feedback", "לחץ", "давление", "-r", "4"],
            ["terms", "list"],
        ],
    )
    def test_load_error_is_reported(self, cli_runner, corrupt_store, args) -> None:
        """Test an unreadable snapshot prints an error and exits with code 1."""
        result = cli_runner.invoke(app, args)

        assert result.exit_code == 1
        output = strip_ansi(result.stdout)
        assert "Cannot load snapshot" in output
        assert "Traceback" not in output


@pytest.mark.unit
class TestTermsCommands:
    """Test 'heru terms' sub-commands."""

    def test_list_filtered(self, cli_runner, cli_env) -> None:
        """Test listing terms of one language and domain."""
        result = cli_runner.invoke(app, ["terms", "list", "--from", "he", "--domain", "plumbing"])

        assert result.exit_code == 0, result.output
        output = strip_ansi(result.stdout)
        assert "кран" in output
        assert "Lexicon v1" in output

    def test_list_empty(self, cli_runner, cli_env) -> None:
        """Test an unknown domain lists nothing."""
        result = cli_runner.invoke(app, ["terms", "list", "--domain", "aviation"])

        assert result.exit_code == 0
        assert "No terms found" in strip_ansi(result.stdout)

    def test_list_bad_language(self, cli_runner, cli_env) -> None:
        """Test an unsupported language code fails."""
        result = cli_runner.invoke(app, ["terms", "list", "--from", "xx"])

        assert result.exit_code == 1

    def test_import_csv(self, cli_runner, cli_env, tmp_path: Path) -> None:
        """Test imported terms land in a new persisted snapshot."""
        csv_file = tmp_path / "terms.csv"
        csv_file.write_text(
            "source,target,source_lang,target_lang,domain,confidence\n"
            "מגוף,задвижка,he,ru,plumbing,0.8\n",
            encoding="utf-8",
        )

        result = cli_runner.invoke(app, ["terms", "import", str(csv_file)])

        assert result.exit_code == 0, result.output
        assert "Imported 1 terms into snapshot v2" in strip_ansi(result.stdout)
        assert (cli_env / "snapshots" / "snapshot-2.json").exists()

        result = cli_runner.invoke(app, ["terms", "list", "--from", "he", "--domain", "plumbing"])
        output = strip_ansi(result.stdout)
        assert "задвижка" in output
        assert "Lexicon v2" in output

    def test_import_missing_file(self, cli_runner, cli_env, tmp_path: Path) -> None:
        """Test importing a missing file exits with code 1."""
        result = cli_runner.invoke(app, ["terms", "import", str(tmp_path / "none.csv")])

        assert result.exit_code == 1
