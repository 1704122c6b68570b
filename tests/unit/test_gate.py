"""Unit tests for the quality gate."""

import pytest

from heru.core.models import (
    Candidate,
    Issue,
    IssueKind,
    Language,
    Outcome,
    Segment,
    UnknownTerm,
)
from heru.quality.gate import QualityGate
from heru.utils.config import Settings


def make_segment(text: str, unknown: tuple[UnknownTerm, ...] = ()) -> Segment:
    return Segment(
        index=0,
        text=text,
        span=(0, len(text)),
        language=Language.HEBREW,
        unknown_terms=unknown,
    )


def make_candidate(text: str, fluency: float = 0.9) -> Candidate:
    return Candidate(
        segment_index=0,
        language=Language.RUSSIAN,
        text=text,
        index=0,
        features={"fluency": fluency},
    )


@pytest.mark.unit
class TestQualityGate:
    """Test segment and document validation."""

    @pytest.fixture
    def gate(self) -> QualityGate:
        """Create a gate with one banned pattern."""
        return QualityGate(banned_patterns=[r"\bTODO\b"])

    def test_pass(self, gate: QualityGate) -> None:
        """Test a plausible translation passes."""
        verdict = gate.validate(
            make_segment("לחץ גבוה במערכת"), make_candidate("высокое давление в системе")
        )

        assert verdict.outcome is Outcome.PASS
        assert verdict.reasons == ()

    def test_length_ratio_reject(self, gate: QualityGate) -> None:
        """Test an output ten times longer than the source is rejected."""
        verdict = gate.validate(make_segment("לחץ"), make_candidate("д" * 30))

        assert verdict.rejected
        assert [r.kind for r in verdict.reasons] == [IssueKind.LENGTH_RATIO_OUT_OF_BAND]
        assert verdict.reasons[0].in_output

    def test_no_target_tokens(self, gate: QualityGate) -> None:
        """Test output without target-language letters is rejected."""
        verdict = gate.validate(make_segment("לחץ גבוה"), make_candidate("לחץ גבוה"))

        assert verdict.rejected
        assert IssueKind.NO_TARGET_TOKENS in {r.kind for r in verdict.reasons}

    def test_banned_pattern_spans(self, gate: QualityGate) -> None:
        """Test each banned match is reported with its output span."""
        output = "давление TODO система TODO"
        issues = gate.check_output("לחץ מערכת בדיקה עוד", output, Language.RUSSIAN)

        banned = [i for i in issues if i.kind is IssueKind.BANNED_PATTERN]
        assert [i.span for i in banned] == [(9, 13), (22, 26)]

    def test_unknown_term_flag(self, gate: QualityGate) -> None:
        """Test an unknown source term copied into the output flags."""
        unknown = UnknownTerm(token_index=0, surface="DN50", span=(6, 10))
        segment = make_segment("צינור DN50", unknown=(unknown,))

        verdict = gate.validate(segment, make_candidate("труба DN50"))

        assert verdict.outcome is Outcome.FLAG
        issue = verdict.reasons[0]
        assert issue.kind is IssueKind.UNKNOWN_TERM_UNTRANSLATED
        assert issue.span == (6, 10)
        assert not issue.in_output

    def test_low_fluency_flag(self, gate: QualityGate) -> None:
        """Test fluency under the soft threshold flags."""
        verdict = gate.validate(
            make_segment("לחץ גבוה במערכת"),
            make_candidate("высокое давление в системе", fluency=0.01),
        )

        assert verdict.outcome is Outcome.FLAG
        assert verdict.reasons[0].kind is IssueKind.LOW_FLUENCY

    def test_validate_document_includes_flags(self, gate: QualityGate) -> None:
        """Test segment flags are merged into the document verdict."""
        flag = Issue(kind=IssueKind.SEGMENT_PASSTHROUGH, span=(0, 5), segment_index=1)

        verdict = gate.validate_document(
            "לחץ גבוה. 12345", "высокое давление. 12345", Language.RUSSIAN, [flag]
        )

        assert verdict.outcome is Outcome.FLAG
        assert verdict.reasons == (flag,)

    def test_invalid_band(self) -> None:
        """Test an empty length band is refused."""
        with pytest.raises(ValueError):
            QualityGate(length_ratio_min=2.0, length_ratio_max=2.0)

    def test_from_settings(self) -> None:
        """Test gate configuration comes from settings."""
        settings = Settings(
            length_ratio_max=3.0,
            banned_patterns=["xxx"],
            _env_file=None,  # type: ignore[call-arg]
        )

        gate = QualityGate.from_settings(settings)

        assert gate.length_ratio_max == 3.0
        assert gate.banned_patterns[0].pattern == "xxx"
