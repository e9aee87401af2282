"""
Unit tests for core/quality/annotator.py - spelling annotation
"""
import pytest

from core.quality import (
    QUALITY_FLAGS_KEY,
    LexiconSpellingAnnotator,
    TextQualityAnnotator,
    annotate_corpus,
)
from core.records import MergedRecord, Record


VOCABULARY = ["this", "is", "a", "wonderful", "day", "the", "game", "was", "great"]


class TestLexiconSpellingAnnotator:
    """Test vocabulary-based spelling flags."""

    @pytest.fixture
    def annotator(self):
        """Annotator over a tiny vocabulary."""
        return LexiconSpellingAnnotator(VOCABULARY)

    def test_known_words_not_flagged(self, annotator):
        """Test a correctly spelled sentence has no flags."""
        assert annotator.annotate("This is a wonderful day!") == []

    def test_misspelling_flagged_with_suggestion(self, annotator):
        """Test unknown words are flagged with close matches."""
        flags = annotator.annotate("This is a wonderfull day")

        assert len(flags) == 1
        flag = flags[0]
        assert flag.token == "wonderfull"
        assert (flag.start, flag.end) == (10, 20)
        assert flag.issue == "spelling"
        assert flag.suggestions[0] == "wonderful"

    def test_social_media_tokens_skipped(self, annotator):
        """Test URLs, mentions, hashtags and numbers are not flagged."""
        text = "@someone the game was great #gameday https://example.com/xyz 2024"
        assert annotator.annotate(text) == []

    def test_short_tokens_skipped(self):
        """Test tokens below the minimum length are ignored."""
        annotator = LexiconSpellingAnnotator(VOCABULARY, min_token_length=3)
        assert annotator.annotate("ok the game") == []

    def test_empty_text(self, annotator):
        """Test empty text yields no flags."""
        assert annotator.annotate("") == []

    def test_text_is_not_modified(self, annotator):
        """Test flag offsets point into the original text."""
        text = "Teh game"
        flag = annotator.annotate(text)[0]
        assert text[flag.start:flag.end] == flag.token

    def test_from_file(self, tmp_path):
        """Test loading a word list with comments."""
        path = tmp_path / "words.txt"
        path.write_text("# English words\nhello\nWorld\n\n", encoding="utf-8")

        annotator = LexiconSpellingAnnotator.from_file(path)

        assert annotator.vocabulary == frozenset({"hello", "world"})
        assert annotator.annotate("Hello world") == []


class TestAnnotateCorpus:
    """Test corpus-level annotation."""

    def test_attaches_flags(self):
        """Test every record gets a flags entry, flagged or not."""
        records = [
            MergedRecord.from_native(Record(id="1", text="the game was great", language="en"), "en"),
            MergedRecord.from_native(Record(id="2", text="the gmae", language="en"), "en"),
        ]

        annotated = annotate_corpus(records, LexiconSpellingAnnotator(VOCABULARY))

        assert [r.id for r in annotated] == ["1", "2"]
        assert annotated[0].annotations[QUALITY_FLAGS_KEY] == ()
        assert annotated[1].annotations[QUALITY_FLAGS_KEY][0]["token"] == "gmae"
        assert annotated[1].text == "the gmae"
        assert records[1].annotations == {}

    def test_custom_annotator(self):
        """Test any TextQualityAnnotator implementation plugs in."""
        class ShoutingAnnotator(TextQualityAnnotator):
            def annotate(self, text):
                from core.quality import QualityFlag
                return [QualityFlag(0, len(text), text, issue="shouting")] if text.isupper() else []

        records = [MergedRecord.from_native(Record(id="1", text="STOP", language="en"), "en")]

        annotated = annotate_corpus(records, ShoutingAnnotator())

        assert annotated[0].annotations[QUALITY_FLAGS_KEY][0]["issue"] == "shouting"
