"""Unit tests for fluency scoring, candidate features and the ranker."""

import math

import pytest

from heru.core.errors import NoCandidateError
from heru.core.models import Candidate, Language, RankingModel, TermEntry, TermMatch
from heru.ranking.features import (
    length_plausibility,
    length_ratio,
    morph_wellformedness,
    term_consistency,
)
from heru.ranking.fluency import FluencyModel, seed_models
from heru.ranking.ranker import Ranker


def make_candidate(index: int, **features: float) -> Candidate:
    return Candidate(
        segment_index=0,
        language=Language.RUSSIAN,
        text=f"candidate {index}",
        index=index,
        features=features,
    )


class TestFluencyModel:
    """Tests for the bigram fluency model."""

    def test_seen_sequence_scores_higher(self):
        """Test a corpus sentence outscores a scrambled one."""
        model = seed_models()[Language.RUSSIAN]

        seen = model.score(["высокий", "давление", "в", "система"])
        scrambled = model.score(["система", "в", "высокий", "давление"])

        assert seen > scrambled

    def test_empty_sequence(self):
        """Test an empty lemma sequence scores zero."""
        assert seed_models()[Language.HEBREW].score([]) == 0.0

    def test_score_in_unit_interval(self):
        """Test scores stay within [0, 1] for unseen lemmas."""
        model = FluencyModel.train([["a", "b"]])

        score = model.score(["x", "y", "z"])

        assert 0.0 <= score <= 1.0

    def test_with_sentences_returns_new_model(self):
        """Test adding sentences leaves the original counts untouched."""
        model = FluencyModel.train([["לחץ", "גבוה"]])

        updated = model.with_sentences([["לחץ", "נמוך"]])

        assert model.unigrams["לחץ"] == 1
        assert updated.unigrams["לחץ"] == 2
        assert updated.bigrams["לחץ"]["נמוך"] == 1

    def test_counts_are_read_only(self):
        """Test the model cannot be mutated in place."""
        model = FluencyModel.train([["a"]])

        with pytest.raises(TypeError):
            model.unigrams["a"] = 5  # type: ignore[index]

    def test_dict_round_trip(self):
        """Test serialization preserves scores."""
        model = seed_models()[Language.HEBREW]

        restored = FluencyModel.from_dict(model.to_dict())

        lemmas = ["לחץ", "גבוה", "ב", "מערכת"]
        assert restored.score(lemmas) == pytest.approx(model.score(lemmas))


class TestFeatures:
    """Tests for candidate feature functions."""

    def test_length_ratio_ignores_spaces(self):
        """Test whitespace does not count toward length."""
        assert length_ratio("א ב", "абвг") == 2.0

    def test_length_ratio_empty_source(self):
        """Test empty sources give zero or infinity."""
        assert length_ratio("", "") == 0.0
        assert math.isinf(length_ratio(" ", "x"))

    def test_length_plausibility_peaks_at_expected_ratio(self):
        """Test plausibility is 1 at the expected ratio and lower elsewhere."""
        assert length_plausibility("אב", "абв", Language.HEBREW) == pytest.approx(1.0)
        assert length_plausibility("אב", "а" * 30, Language.HEBREW) < 0.2
        assert length_plausibility("", "abc", Language.HEBREW) == 0.0

    def test_term_consistency(self):
        """Test the share of terms rendered with their best sense."""
        best = TermEntry(
            source=("לחץ",),
            target=("давление",),
            source_lang=Language.HEBREW,
            target_lang=Language.RUSSIAN,
            domain="engineering",
        )
        other = best.model_copy(update={"target": ("нажатие",), "domain": "general"})
        match = TermMatch(start=0, end=1, senses=(best, other), resolved=False)

        assert term_consistency([]) == 1.0
        assert term_consistency([(match, best)]) == 1.0
        assert term_consistency([(match, best), (match, other)]) == 0.5

    def test_morph_wellformedness(self):
        """Test share of cleanly inflected words."""
        assert morph_wellformedness(0, 0) == 1.0
        assert morph_wellformedness(3, 4) == 0.75


class TestRanker:
    """Tests for candidate ranking."""

    def test_rank_by_score(self):
        """Test candidates are ordered by weighted score."""
        model = RankingModel(version=1, weights={"fluency": 1.0})
        candidates = [make_candidate(0, fluency=0.2), make_candidate(1, fluency=0.9)]

        ranked = Ranker().rank(candidates, model)

        assert [c.index for c in ranked] == [1, 0]
        assert ranked[0].score == pytest.approx(0.9)

    def test_ties_broken_by_generation_order(self):
        """Test equal scores keep the earlier candidate first."""
        model = RankingModel(version=1, weights={"fluency": 1.0})
        candidates = [make_candidate(2, fluency=0.5), make_candidate(1, fluency=0.5)]

        ranked = Ranker().rank(candidates, model)

        assert [c.index for c in ranked] == [1, 2]

    def test_top_k(self):
        """Test top_k truncates the ranking."""
        model = RankingModel(version=1, weights={"fluency": 1.0})
        candidates = [make_candidate(i, fluency=i / 10) for i in range(5)]

        ranked = Ranker().rank(candidates, model, top_k=2)

        assert [c.index for c in ranked] == [4, 3]

    def test_memory_match_dominates(self):
        """Test a memory hit wins under the default weights."""
        model = RankingModel(
            version=1,
            weights={"term_consistency": 2.0, "fluency": 1.0, "memory_match": 3.0},
        )
        memory = make_candidate(0, term_consistency=1.0, fluency=0.1, memory_match=1.0)
        generated = make_candidate(1, term_consistency=1.0, fluency=0.9, memory_match=0.0)

        assert Ranker().select([generated, memory], model).index == 0

    def test_empty_raises(self):
        """Test ranking nothing raises NoCandidateError."""
        with pytest.raises(NoCandidateError):
            Ranker().rank([], RankingModel(version=1))

    def test_input_not_modified(self):
        """Test the ranker scores copies, not the given candidates."""
        candidate = make_candidate(0, fluency=0.5)

        Ranker().rank([candidate], RankingModel(version=1, weights={"fluency": 1.0}))

        assert candidate.score is None
