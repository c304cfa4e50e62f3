"""Tests for audit logging."""
from pathlib import Path

from plagscore.config import Settings
from plagscore.services.engine import PlagiarismEngine
from plagscore.utils.logging import fingerprint, get_audit_logger

SECRET_CODE = "def very_distinctive_solution(): return 42"


def read_audit_log() -> str:
    """Flush and read the audit log file."""
    audit = get_audit_logger()
    for handler in audit.handlers:
        handler.flush()
    return Path(audit.handlers[0].baseFilename).read_text(encoding="utf-8")


def test_fingerprint_is_stable_and_short():
    """Test fingerprints identify content without revealing it."""
    assert fingerprint(SECRET_CODE) == fingerprint(SECRET_CODE)
    assert fingerprint(SECRET_CODE) != fingerprint(SECRET_CODE + " ")
    assert len(fingerprint(SECRET_CODE)) == 16


def test_score_logged_without_code():
    """Test scoring writes request and result records but never the code."""
    engine = PlagiarismEngine(settings=Settings())
    engine.register_in_corpus({"id": "ref", "session_id": "s0", "language": "python", "raw_content": SECRET_CODE})
    engine.score({"id": "audit-sub", "session_id": "s1", "language": "python", "raw_content": SECRET_CODE})

    contents = read_audit_log()
    assert "SCORE_REQUEST | submission_id=audit-sub" in contents
    assert "SCORE_RESULT | submission_id=audit-sub" in contents
    assert f"content_hash={fingerprint(SECRET_CODE)}" in contents
    assert "CORPUS_CHANGE | action=INSERT | entry_id=ref" in contents
    assert "very_distinctive_solution" not in contents
