"""Unit tests for term recognition and sense disambiguation."""

import pytest

from heru.core.models import Language, TermEntry
from heru.terminology.lexicon import TermLexicon
from heru.terminology.recognizer import TermRecognizer


@pytest.mark.unit
class TestRecognizeSegment:
    """Test term matching over analyzed segments."""

    def test_context_picks_engineering_sense(self, hebrew, recognizer):
        """Test לחץ next to מערכת resolves to давление."""
        segment = recognizer.recognize_segment(
            hebrew.analyze_segment("לחץ גבוה במערכת"), "engineering"
        )

        assert len(segment.term_matches) == 1
        match = segment.term_matches[0]
        assert (match.start, match.end) == (0, 1)
        assert match.resolved
        assert match.best.target == ("давление",)
        assert match.context_scores[0] > match.context_scores[1]

    def test_context_picks_general_sense(self, hebrew, recognizer):
        """Test לחץ next to כפתור resolves to нажатие even in an engineering text."""
        segment = recognizer.recognize_segment(
            hebrew.analyze_segment("לחץ על כפתור"), "engineering"
        )

        match = segment.term_matches[0]
        assert match.resolved
        assert match.best.target == ("нажатие",)

    def test_no_context_is_unresolved(self, hebrew, recognizer):
        """Test a lone ambiguous term keeps every sense, requested domain first."""
        segment = recognizer.recognize_segment(hebrew.analyze_segment("לחץ"), "engineering")

        match = segment.term_matches[0]
        assert not match.resolved
        assert match.is_ambiguous
        assert [s.domain for s in match.senses] == ["engineering", "general"]

    def test_longest_match_wins(self, hebrew, recognizer):
        """Test the three-word term beats its two-word prefix."""
        segment = recognizer.recognize_segment(
            hebrew.analyze_segment("מערכת כיבוי אש"), "fire_safety"
        )

        assert len(segment.term_matches) == 1
        match = segment.term_matches[0]
        assert (match.start, match.end) == (0, 3)
        assert match.best.source == ("מערכת", "כיבוי", "אש")

    def test_match_skips_clitics(self, hebrew, recognizer):
        """Test a term after a prefix starts at the host token."""
        segment = recognizer.recognize_segment(
            hebrew.analyze_segment("במערכת כיבוי"), "fire_safety"
        )

        match = segment.term_matches[0]
        assert (match.start, match.end) == (1, 3)

    def test_domain_filter(self, hebrew, recognizer):
        """Test terms of other domains are not matched."""
        segment = recognizer.recognize_segment(hebrew.analyze_segment("ברז"), "electrical")

        assert segment.term_matches == ()

    def test_russian_inflected_form(self, russian, recognizer):
        """Test matching uses lemmas, not surfaces."""
        segment = recognizer.recognize_segment(
            russian.analyze_segment("проверка детектора дыма"), "fire_safety"
        )

        match = segment.term_matches[0]
        assert (match.start, match.end) == (1, 3)
        assert match.best.target == ("גלאי", "עשן")

    def test_unknown_terms(self, hebrew, recognizer):
        """Test guessed and mixed alphanumeric tokens are reported."""
        segment = recognizer.recognize_segment(
            hebrew.analyze_segment("קומפרסור DN50 12345"), "engineering"
        )

        assert [u.surface for u in segment.unknown_terms] == ["קומפרסור", "DN50"]
        assert segment.unknown_terms[0].span == (0, 8)

    def test_common_words_not_unknown(self, russian, recognizer):
        """Test frequent words outside the dictionary are not reported."""
        segment = recognizer.recognize_segment(
            russian.analyze_segment("можно здесь"), "general"
        )

        assert segment.unknown_terms == ()

    def test_recognize_is_lazy(self, hebrew, recognizer):
        """Test recognize yields annotated segments one by one."""
        document = hebrew.analyze("לחץ גבוה במערכת. ברז מים.")

        segments = recognizer.recognize(document, "plumbing")

        first = next(segments)
        assert first.index == 0
        second = next(segments)
        assert second.term_matches[0].best.target == ("кран",)

    def test_usage_breaks_confidence_ties(self, hebrew):
        """Test equal-confidence senses are ordered by usage count."""
        entries = [
            TermEntry(
                source=("מגוף",),
                target=(target,),
                source_lang=Language.HEBREW,
                target_lang=Language.RUSSIAN,
                domain="plumbing",
                confidence=0.5,
                usage_count=usage,
            )
            for target, usage in (("задвижка", 1), ("заслонка", 7))
        ]
        recognizer = TermRecognizer(TermLexicon(entries))

        segment = recognizer.recognize_segment(hebrew.analyze_segment("מגוף"), "plumbing")

        assert segment.term_matches[0].best.target == ("заслонка",)
