"""Unit tests for core data models."""

import math

import pytest
from pydantic import ValidationError

from heru.core.errors import QualityReject
from heru.core.models import (
    FeedbackRecord,
    Issue,
    IssueKind,
    Language,
    MorphFeatures,
    Outcome,
    PartOfSpeech,
    QualityVerdict,
    RankingModel,
    Reading,
    Segment,
    TermEntry,
    Token,
)


class TestLanguage:
    """Tests for language code parsing."""

    @pytest.mark.parametrize(
        "code,expected",
        [
            ("he", Language.HEBREW),
            ("HE", Language.HEBREW),
            ("iw", Language.HEBREW),
            ("ru-RU", Language.RUSSIAN),
            ("russian", Language.RUSSIAN),
        ],
    )
    def test_parse(self, code, expected):
        """Test codes, aliases and regional variants."""
        assert Language.parse(code) is expected

    def test_parse_unsupported(self):
        """Test that other languages raise ValueError."""
        with pytest.raises(ValueError):
            Language.parse("en")

    def test_other(self):
        """Test the opposite language of the pair."""
        assert Language.HEBREW.other is Language.RUSSIAN
        assert Language.RUSSIAN.other is Language.HEBREW


class TestToken:
    """Tests for tokens built from readings."""

    def test_from_readings_orders_best_first(self):
        """Test head fields mirror the highest-weighted reading."""
        token = Token.from_readings(
            "לחץ",
            Language.HEBREW,
            (0, 3),
            [
                Reading(lemma="לחץ", pos=PartOfSpeech.VERB, weight=0.3),
                Reading(lemma="לחץ", pos=PartOfSpeech.NOUN, weight=0.7),
            ],
        )

        assert token.pos is PartOfSpeech.NOUN
        assert token.readings[0].weight == 0.7
        assert token.lemmas == ("לחץ",)

    def test_is_word(self):
        """Test clitics and punctuation are not words."""
        clitic = Token.from_readings(
            "ב", Language.HEBREW, (0, 1), [Reading(lemma="ב", pos=PartOfSpeech.PREP)], True
        )
        punct = Token.from_readings(
            ".", Language.HEBREW, (1, 2), [Reading(lemma=".", pos=PartOfSpeech.PUNCT)]
        )

        assert not clitic.is_word
        assert not punct.is_word

    def test_is_guessed(self):
        """Test tokens with only rule readings count as guessed."""
        token = Token.from_readings(
            "абв",
            Language.RUSSIAN,
            (0, 3),
            [Reading(lemma="абв", pos=PartOfSpeech.NOUN, origin="rule")],
        )

        assert token.is_guessed


class TestTermEntry:
    """Tests for TermEntry validation."""

    def test_key_and_head(self):
        """Test key and head lemma of a multi-word entry."""
        entry = TermEntry(
            source=("מתח", "גבוה"),
            target=("высокий", "напряжение"),
            source_lang=Language.HEBREW,
            target_lang=Language.RUSSIAN,
            domain="electrical",
            head=1,
        )

        assert entry.key == ("he", ("מתח", "גבוה"), "electrical")
        assert entry.head_lemma == "напряжение"

    def test_head_out_of_range(self):
        """Test head index must point into the target."""
        with pytest.raises(ValidationError):
            TermEntry(
                source=("לחץ",),
                target=("давление",),
                source_lang=Language.HEBREW,
                target_lang=Language.RUSSIAN,
                head=1,
            )

    def test_same_languages_rejected(self):
        """Test source and target language must differ."""
        with pytest.raises(ValidationError):
            TermEntry(
                source=("לחץ",),
                target=("לחץ",),
                source_lang=Language.HEBREW,
                target_lang=Language.HEBREW,
            )

    def test_confidence_bounds(self):
        """Test confidence outside [0, 1] is invalid."""
        with pytest.raises(ValidationError):
            TermEntry(
                source=("кран",),
                target=("ברז",),
                source_lang=Language.RUSSIAN,
                target_lang=Language.HEBREW,
                confidence=1.5,
            )


class TestSegment:
    """Tests for segment helpers."""

    def test_context_lemmas_skip_clitics(self, hebrew):
        """Test context window counts words only."""
        segment = hebrew.analyze_segment("לחץ גבוה במערכת")

        context = segment.context_lemmas(0, 1, window=3)

        assert context == {"גבוה", "מערכת"}

    def test_context_lemmas_zero_window(self, hebrew):
        """Test a zero window yields no context."""
        segment = hebrew.analyze_segment("לחץ גבוה במערכת")

        assert segment.context_lemmas(0, 1, window=0) == set()

    def test_has_words(self):
        """Test an empty segment has no words."""
        segment = Segment(index=0, text="", span=(0, 0), language=Language.HEBREW)

        assert not segment.has_words


class TestQualityVerdict:
    """Tests for verdict construction from issues."""

    def test_pass_without_issues(self):
        """Test an empty issue list passes."""
        assert QualityVerdict.from_issues([]).outcome is Outcome.PASS

    def test_flag_on_soft_issue(self):
        """Test non-rejecting issues flag."""
        issue = Issue(kind=IssueKind.LOW_FLUENCY, span=(0, 3), in_output=True)

        verdict = QualityVerdict.from_issues([issue])

        assert verdict.outcome is Outcome.FLAG
        assert verdict.reasons == (issue,)

    def test_reject_lists_rejections_first(self):
        """Test rejecting issues win and come first."""
        flag = Issue(kind=IssueKind.SEGMENT_PASSTHROUGH, span=(0, 3))
        reject = Issue(kind=IssueKind.BANNED_PATTERN, span=(0, 3), in_output=True)

        verdict = QualityVerdict.from_issues([flag, reject])

        assert verdict.rejected
        assert verdict.reasons == (reject, flag)

    def test_quality_reject_message(self):
        """Test QualityReject names the issue kinds."""
        reject = Issue(kind=IssueKind.LENGTH_RATIO_OUT_OF_BAND, span=(0, 1), in_output=True)

        error = QualityReject([reject])

        assert "length_ratio_out_of_band" in str(error)
        assert error.reasons == [reject]


class TestFeedbackRecord:
    """Tests for feedback records."""

    def test_normalized_rating(self):
        """Test ratings map onto [-1, 1]."""
        record = FeedbackRecord(
            original="לחץ",
            output="давление",
            rating=1,
            source_lang=Language.HEBREW,
            target_lang=Language.RUSSIAN,
        )

        assert record.normalized_rating == -1.0

    def test_blank_correction_is_none(self):
        """Test whitespace-only corrections are dropped."""
        record = FeedbackRecord(
            original="לחץ",
            output="давление",
            correction="   ",
            rating=3,
            source_lang=Language.HEBREW,
            target_lang=Language.RUSSIAN,
        )

        assert record.correction is None

    @pytest.mark.parametrize("rating", [0, 6])
    def test_rating_bounds(self, rating):
        """Test ratings outside 1..5 are invalid."""
        with pytest.raises(ValidationError):
            FeedbackRecord(
                original="x",
                output="y",
                rating=rating,
                source_lang=Language.RUSSIAN,
                target_lang=Language.HEBREW,
            )


class TestRankingModel:
    """Tests for the ranking model."""

    def test_score_is_weighted_sum(self):
        """Test score combines features linearly, missing features count zero."""
        model = RankingModel(version=1, weights={"fluency": 2.0, "length_ratio": 0.5})

        assert model.score({"fluency": 0.5}) == pytest.approx(1.0)

    def test_weights_are_read_only(self):
        """Test weights cannot be mutated after creation."""
        model = RankingModel(version=1, weights={"fluency": 1.0})

        with pytest.raises(TypeError):
            model.weights["fluency"] = 2.0  # type: ignore[index]

    def test_non_finite_weight_rejected(self):
        """Test NaN weights are refused."""
        with pytest.raises(ValueError):
            RankingModel(version=1, weights={"fluency": math.nan})

    def test_dict_round_trip(self):
        """Test serialization keeps version and weights."""
        model = RankingModel(version=3, weights={"fluency": 1.25})

        restored = RankingModel.from_dict(model.to_dict())

        assert restored.version == 3
        assert dict(restored.weights) == {"fluency": 1.25}


class TestMorphFeatures:
    """Tests for feature helpers."""

    def test_merged_ignores_none(self):
        """Test merged only replaces given values."""
        features = MorphFeatures(case="nom", number="sing")

        merged = features.merged(case="gen", number=None)

        assert merged.case == "gen"
        assert merged.number == "sing"

    def test_construct_state_keeps_model_constructor(self):
        """Test the construct-state flag does not shadow BaseModel.construct."""
        features = MorphFeatures(gender="fem").merged(construct_state=True)

        assert features.construct_state
        assert "construct" not in MorphFeatures.model_fields
        assert callable(MorphFeatures.construct)
