"""Tests for the plagiarism engine."""
import json
import tempfile
from pathlib import Path

import pytest

from plagscore.config import Settings
from plagscore.schemas import MalformedSubmissionError, Submission
from plagscore.services.engine import PlagiarismEngine, coerce_submission, get_plagiarism_engine
from plagscore.services.patterns import PatternTable

ORIGINAL = "function add(a, b) {\n  return a + b;\n}"
COPIED = "function add(x, y) {\n  // sum\n  return x + y;\n}"


@pytest.fixture
def engine():
    """Engine with default settings and a private pattern table."""
    return PlagiarismEngine(settings=Settings(), pattern_table=PatternTable.default())


def payload(submission_id, content, session_id="s1", language="javascript", user_id="u1"):
    """Build a submission mapping as the session layer sends it."""
    return {
        "id": submission_id,
        "session_id": session_id,
        "user_id": user_id,
        "language": language,
        "raw_content": content,
    }


class TestScore:
    """Tests for PlagiarismEngine.score."""

    def test_flags_near_duplicate(self, engine):
        """Test a renamed copy of a registered submission is flagged."""
        engine.register_in_corpus(payload("orig", ORIGINAL, user_id="u1"))
        report = engine.score(payload("copy", COPIED, session_id="s2", user_id="u2"))

        assert report.submission_id == "copy"
        assert report.flagged is True
        assert report.top_match.entry_id == "orig"
        assert report.top_match.session_id == "s1"

    def test_score_does_not_register(self, engine):
        """Test scoring is read-only with respect to the corpus."""
        engine.score(payload("a", ORIGINAL))
        assert engine.corpus_size == 0
        assert engine.is_loaded is False

    def test_accepts_submission_model(self, engine):
        """Test scoring a Submission instance."""
        engine.register_in_corpus(payload("orig", ORIGINAL))
        submission = Submission(id="copy", session_id="s2", language="javascript", raw_content=ORIGINAL)
        report = engine.score(submission)
        assert report.top_score == 1.0

    def test_accepts_camel_case_payload(self, engine):
        """Test the session layer's camelCase field names."""
        report = engine.score({
            "id": "a", "sessionId": "s1", "userId": "u1",
            "language": "JavaScript", "rawContent": ORIGINAL,
        })
        assert report.language == "javascript"

    def test_cross_language_never_matched(self, engine):
        """Test identical text in another language is not a candidate."""
        engine.register_in_corpus(payload("py", ORIGINAL, language="python"))
        report = engine.score(payload("js", ORIGINAL, language="javascript"))
        assert report.matches == ()

    def test_unknown_language_degrades(self, engine):
        """Test an unknown language scores by edit distance only."""
        engine.register_in_corpus(payload("a", "abcd", language="zig"))
        report = engine.score(payload("b", "abce", language="zig"))
        assert report.pattern_matches == ()
        assert report.top_score == 0.75

    def test_reference_label_reported(self, engine):
        """Test reference solutions carry their label into matches."""
        engine.register_in_corpus(payload("ref-3", ORIGINAL, session_id="reference"), source_label="known solution #3")
        report = engine.score(payload("copy", COPIED))
        assert report.top_match.source_label == "known solution #3"


class TestMalformedSubmission:
    """Tests for caller contract violations."""

    @pytest.mark.parametrize("missing", ["id", "session_id", "language"])
    def test_missing_identity_field(self, engine, missing):
        """Test missing identity fields are rejected before scoring."""
        data = payload("a", ORIGINAL)
        del data[missing]
        with pytest.raises(MalformedSubmissionError):
            engine.score(data)

    @pytest.mark.parametrize("field", ["id", "session_id", "language"])
    def test_blank_identity_field(self, engine, field):
        """Test blank identity fields are rejected."""
        data = payload("a", ORIGINAL)
        data[field] = "   "
        with pytest.raises(MalformedSubmissionError):
            engine.register_in_corpus(data)
        assert engine.corpus_size == 0

    def test_is_value_error(self):
        """Test the error is a ValueError for callers catching validation failures."""
        with pytest.raises(ValueError, match="Malformed submission"):
            coerce_submission({"id": "a", "language": "python", "raw_content": ""})

    def test_missing_user_id_allowed(self, engine):
        """Test user_id is optional."""
        data = payload("a", ORIGINAL)
        del data["user_id"]
        assert engine.score(data).submission_id == "a"

    def test_inconsistent_settings_rejected(self):
        """Test an engine built from explicit settings validates thresholds."""
        with pytest.raises(ValueError, match="match_floor"):
            PlagiarismEngine(settings=Settings(match_floor=0.9, flag_threshold=0.75))


class TestCorpusManagement:
    """Tests for registration and eviction."""

    def test_register_idempotent(self, engine):
        """Test re-registering the same id replaces the entry."""
        engine.register_in_corpus(payload("a", ORIGINAL))
        engine.register_in_corpus(payload("a", COPIED))
        assert engine.corpus_size == 1
        assert engine.corpus.get("a").raw_content == COPIED

    def test_evict(self, engine):
        """Test explicit eviction."""
        engine.register_in_corpus(payload("a", ORIGINAL))
        assert engine.evict("a") is True
        assert engine.evict("a") is False
        assert engine.score(payload("b", ORIGINAL)).matches == ()

    def test_purge_session(self, engine):
        """Test purging a session's entries."""
        engine.register_in_corpus(payload("a", ORIGINAL, session_id="s1"))
        engine.register_in_corpus(payload("b", ORIGINAL, session_id="s2"))
        assert engine.purge_session("s1") == 1
        assert engine.corpus_size == 1


class TestReferenceCorpus:
    """Tests for loading reference solutions from JSONL."""

    def test_load_reference_corpus(self, engine):
        """Test valid lines load and invalid lines are skipped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            corpus_file = Path(tmpdir) / "known.jsonl"
            with open(corpus_file, "w") as f:
                f.write(json.dumps({"id": "k1", "language": "javascript", "content": ORIGINAL, "label": "known solution #1"}) + "\n")
                f.write(json.dumps({"id": "k2", "language": "python", "content": "def solution(): pass"}) + "\n")
                f.write("\n")
                f.write("not json\n")
                f.write(json.dumps({"id": "k3", "content": "missing language"}) + "\n")

            count = engine.load_reference_corpus(tmpdir)

        assert count == 2
        assert engine.corpus.get("k1").source_label == "known solution #1"
        assert engine.corpus.get("k2").source_label == "reference k2"
        assert engine.corpus.get("k2").session_id == "reference"

    def test_load_nonexistent_corpus(self, engine):
        """Test loading from a missing path."""
        assert engine.load_reference_corpus("/nonexistent/path") == 0
        assert engine.is_loaded is False


class TestEngineSingleton:
    """Tests for singleton pattern."""

    def test_get_plagiarism_engine_singleton(self):
        """Test singleton pattern."""
        import plagscore.services.engine as engine_module
        engine_module._engine = None

        engine1 = get_plagiarism_engine()
        engine2 = get_plagiarism_engine()

        assert engine1 is engine2
        engine_module._engine = None
