"""Unit tests for reference-based translation metrics."""

import pytest
from pydantic import ValidationError

from heru.quality.metrics import MetricScores, TranslationMetrics, term_accuracy


@pytest.fixture(scope="module")
def metrics() -> TranslationMetrics:
    """Provide shared metric calculators."""
    return TranslationMetrics()


@pytest.mark.unit
class TestSentenceScores:
    """Tests for single translation scores."""

    @pytest.mark.parametrize(
        "text", ["высокое давление в системе", "לחץ גבוה במערכת", "давление"]
    )
    def test_identical_is_perfect(self, metrics, text):
        """Test a translation equal to its reference scores perfectly."""
        scores = metrics.evaluate(text, text)

        assert scores.bleu == pytest.approx(100.0)
        assert scores.chrf == pytest.approx(100.0)
        assert scores.ter == pytest.approx(0.0)
        assert scores.length_ratio == 1.0
        assert scores.quality_level == "excellent"

    def test_different_wording_scores_lower(self, metrics):
        """Test a wrong term lowers every score."""
        scores = metrics.evaluate("высокое нажатие в системе", "высокое давление в системе")

        assert scores.bleu < 100.0
        assert scores.chrf < 100.0
        assert scores.ter > 0.0

    def test_unrelated_is_poor(self, metrics):
        """Test unrelated text gets the lowest quality level."""
        scores = metrics.evaluate("кран", "высокое давление в системе")

        assert scores.quality_level == "poor"
        assert scores.length_ratio < 1.0


@pytest.mark.unit
class TestCorpusScores:
    """Tests for corpus-level scores."""

    def test_identical_corpus(self, metrics):
        """Test a corpus of exact matches scores perfectly."""
        texts = ["давление", "высокое давление в системе"]

        scores = metrics.evaluate_corpus(texts, texts)

        assert scores.bleu == pytest.approx(100.0)
        assert scores.chrf == pytest.approx(100.0)
        assert scores.ter == pytest.approx(0.0)

    def test_length_mismatch_raises(self, metrics):
        """Test translations and references must align."""
        with pytest.raises(ValueError, match="must match"):
            metrics.evaluate_corpus(["давление"], [])

    def test_empty_raises(self, metrics):
        """Test an empty corpus is refused."""
        with pytest.raises(ValueError):
            metrics.evaluate_corpus([], [])

    def test_feedback_evaluation(self, metrics):
        """Test corrections are scored together with term accuracy."""
        evaluation = metrics.evaluate_feedback(
            ["высокое нажатие", "давление воды"],
            ["высокое давление", "давление воды"],
            [([("нажатие",)], {"высокий", "давление"}), ([("давление",)], {"давление", "вода"})],
        )

        assert evaluation.records == 2
        assert evaluation.term_accuracy == 0.5
        assert 0.0 < evaluation.scores.chrf < 100.0


@pytest.mark.unit
class TestTermAccuracy:
    """Tests for the share of kept term translations."""

    def test_no_terms(self):
        """Test feedback without applied terms counts as accurate."""
        assert term_accuracy([]) == 1.0
        assert term_accuracy([([], {"давление"})]) == 1.0

    def test_multiword_term_needs_every_lemma(self):
        """Test a multi-word term counts only when all its lemmas survive."""
        applied = [("пожарный", "насос"), ("давление",)]

        assert term_accuracy([(applied, {"насос", "давление"})]) == 0.5
        assert term_accuracy([(applied, {"пожарный", "насос", "давление"})]) == 1.0


@pytest.mark.unit
def test_scores_are_bounded():
    """Test BLEU and chrF stay within 0..100."""
    with pytest.raises(ValidationError):
        MetricScores(bleu=120.0, chrf=50.0, ter=0.0, length_ratio=1.0, quality_level="poor")
