"""Logging utilities for plagscore.

Provides audit logging for scoring requests and corpus changes.
"""
import logging
import hashlib
from typing import Optional
from pathlib import Path

from plagscore.config import get_settings


AUDIT_LOGGER = "plagscore.audit"
AUDIT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def get_audit_logger() -> logging.Logger:
    """Return the audit logger, attaching its file handler on first use.

    Records go to ``<log_path>/audit.log``.
    """
    audit = logging.getLogger(AUDIT_LOGGER)
    if audit.handlers:
        return audit

    log_dir = Path(get_settings().log_path)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_dir / "audit.log", encoding="utf-8")
    handler.setFormatter(logging.Formatter(AUDIT_FORMAT))
    audit.addHandler(handler)
    audit.setLevel(logging.INFO)
    return audit


def fingerprint(code: str) -> str:
    """Short content fingerprint so two log lines can be tied to the same code."""
    return hashlib.sha256(code.encode("utf-8")).hexdigest()[:16]


def log_score_request(
    submission_id: str,
    session_id: str,
    language: str,
    content: str,
    candidate_count: int,
) -> None:
    """Log a scoring request (without code).

    Args:
        submission_id: Submission being scored
        session_id: Interview session of the submission
        language: Language tag
        content: Raw submission text (will be hashed)
        candidate_count: Number of corpus entries considered
    """
    logger = get_audit_logger()
    logger.info(
        f"SCORE_REQUEST | "
        f"submission_id={submission_id} | "
        f"session_id={session_id} | "
        f"language={language} | "
        f"content_hash={fingerprint(content)} | "
        f"content_len={len(content)} | "
        f"candidates={candidate_count}"
    )


def log_score_result(
    submission_id: str,
    top_entry_id: Optional[str],
    top_score: float,
    match_count: int,
    flagged: bool,
    processing_time_ms: int,
) -> None:
    """Log a scoring result.

    Args:
        submission_id: Submission that was scored
        top_entry_id: Best matching corpus entry, if any
        top_score: Combined score of the best match
        match_count: Number of ranked matches in the report
        flagged: Whether the report was flagged
        processing_time_ms: Processing time in milliseconds
    """
    logger = get_audit_logger()
    logger.info(
        f"SCORE_RESULT | "
        f"submission_id={submission_id} | "
        f"top_entry_id={top_entry_id} | "
        f"top_score={top_score:.4f} | "
        f"matches={match_count} | "
        f"flagged={flagged} | "
        f"processing_time_ms={processing_time_ms}"
    )


def log_corpus_change(
    action: str,
    entry_id: str,
    language: Optional[str] = None,
    source_label: Optional[str] = None,
) -> None:
    """Log an insert or removal in the corpus.

    Args:
        action: INSERT, REPLACE or REMOVE
        entry_id: Affected entry
        language: Partition of the entry
        source_label: Reference label, if any
    """
    logger = get_audit_logger()
    logger.info(
        f"CORPUS_CHANGE | "
        f"action={action} | "
        f"entry_id={entry_id} | "
        f"language={language} | "
        f"source_label={source_label}"
    )
