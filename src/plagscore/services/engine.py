"""Plagiarism Engine.

Caller-facing entry point: scores submissions against the corpus and
registers accepted submissions and reference solutions into it.
"""
import json
import logging
import time
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from plagscore.config import Settings, get_settings
from plagscore.schemas import CorpusEntry, MalformedSubmissionError, PlagiarismReport, Submission
from plagscore.services.corpus import CorpusIndex
from plagscore.services.patterns import PatternTable
from plagscore.services.report import ReportBuilder, ScoringConfig
from plagscore.utils.logging import log_corpus_change, log_score_request, log_score_result

logger = logging.getLogger(__name__)

SubmissionLike = Union[Submission, Mapping[str, Any]]


def coerce_submission(payload: SubmissionLike) -> Submission:
    """Validate caller input into a Submission.

    Args:
        payload: Submission instance or mapping of its fields

    Returns:
        Validated Submission

    Raises:
        MalformedSubmissionError: If identity fields are missing or invalid
    """
    if isinstance(payload, Submission):
        return payload
    try:
        return Submission.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MalformedSubmissionError(
            f"Malformed submission, invalid fields: {', '.join(fields)}"
        ) from e


class PlagiarismEngine:
    """Scores submissions against a language-partitioned corpus."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        pattern_table: Optional[PatternTable] = None,
    ):
        """Initialize engine.

        Args:
            settings: Engine settings (defaults to config)
            pattern_table: Boilerplate pattern table (defaults to built-in)
        """
        self.settings = settings or get_settings()
        self.settings.validate_thresholds()
        self.corpus = CorpusIndex()
        self.builder = ReportBuilder(
            config=ScoringConfig.from_settings(self.settings),
            pattern_table=pattern_table,
        )

    def score(self, submission: SubmissionLike) -> PlagiarismReport:
        """Score a submission against the current corpus.

        Reads the corpus only; nothing is registered.

        Args:
            submission: Submission or mapping with id, session_id, language, raw_content

        Returns:
            Ranked plagiarism report

        Raises:
            MalformedSubmissionError: On missing identity fields
        """
        submission = coerce_submission(submission)
        start = time.time()

        if not self.builder.pattern_table.supports(submission.language):
            logger.debug(f"Language '{submission.language}' has no pattern table; edit distance only")

        candidates = self.corpus.candidates_for(submission.language)
        log_score_request(
            submission.id,
            submission.session_id,
            submission.language,
            submission.raw_content,
            len(candidates),
        )

        report = self.builder.build_report(submission, candidates)

        elapsed_ms = int((time.time() - start) * 1000)
        top = report.top_match
        log_score_result(
            submission.id,
            top.entry_id if top else None,
            report.top_score,
            len(report.matches),
            report.flagged,
            elapsed_ms,
        )
        if report.flagged:
            logger.info(
                f"Submission {submission.id} flagged: {report.top_score:.2f} "
                f"similarity to {top.entry_id}"
            )
        return report

    def register_in_corpus(
        self,
        submission: SubmissionLike,
        source_label: Optional[str] = None,
    ) -> None:
        """Insert a submission into the corpus.

        Registering the same id again replaces the earlier entry.

        Args:
            submission: Submission or mapping of its fields
            source_label: Label marking a reference solution

        Raises:
            MalformedSubmissionError: On missing identity fields
        """
        submission = coerce_submission(submission)
        entry = CorpusEntry.from_submission(submission, source_label=source_label)
        replaced = self.corpus.insert(entry)
        log_corpus_change(
            "REPLACE" if replaced else "INSERT",
            entry.id,
            entry.language,
            source_label,
        )

    def evict(self, entry_id: str) -> bool:
        """Remove one entry from the corpus.

        Returns:
            True if the entry existed
        """
        removed = self.corpus.remove(entry_id)
        if removed:
            log_corpus_change("REMOVE", entry_id)
        return removed

    def purge_session(self, session_id: str) -> int:
        """Remove all corpus entries of a session.

        Returns:
            Number of entries removed
        """
        removed = self.corpus.remove_session(session_id)
        if removed:
            logger.info(f"Purged {removed} corpus entries for session {session_id}")
        return removed

    def load_reference_corpus(self, corpus_path: Optional[str] = None) -> int:
        """Load labelled reference solutions from JSONL files.

        Each line holds ``{"id", "language", "content", "label"}``;
        ``session_id`` defaults to ``"reference"``.

        Args:
            corpus_path: Path to corpus directory (defaults to config)

        Returns:
            Number of reference entries loaded
        """
        corpus_path = Path(corpus_path or self.settings.reference_corpus_path)

        loaded = 0
        if not corpus_path.exists():
            logger.warning(f"Reference corpus not found at {corpus_path}")
            return loaded

        for jsonl_file in sorted(corpus_path.glob("*.jsonl")):
            with open(jsonl_file, encoding="utf-8") as f:
                for line in f:
                    if not line.strip():
                        continue
                    try:
                        item = json.loads(line)
                        submission = coerce_submission({
                            "id": item["id"],
                            "session_id": item.get("session_id", "reference"),
                            "language": item["language"],
                            "raw_content": item["content"],
                        })
                    except (json.JSONDecodeError, KeyError, TypeError, MalformedSubmissionError) as e:
                        logger.warning(f"Skipping invalid line in {jsonl_file.name}: {e}")
                        continue
                    label = item.get("label") or f"reference {submission.id}"
                    self.register_in_corpus(submission, source_label=label)
                    loaded += 1

        logger.info(f"Loaded {loaded} reference solutions from {corpus_path}")
        return loaded

    @property
    def is_loaded(self) -> bool:
        """Check if the corpus holds any entries."""
        return len(self.corpus) > 0

    @property
    def corpus_size(self) -> int:
        """Get number of entries in the corpus."""
        return len(self.corpus)


# Singleton instance
_engine: Optional[PlagiarismEngine] = None


def get_plagiarism_engine() -> PlagiarismEngine:
    """Get or create plagiarism engine singleton."""
    global _engine
    if _engine is None:
        _engine = PlagiarismEngine()
    return _engine
