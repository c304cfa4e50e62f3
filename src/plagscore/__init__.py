"""plagscore - code plagiarism scoring for live interview sessions."""

from plagscore.schemas import (
    CorpusEntry,
    MalformedSubmissionError,
    MatchCandidate,
    MatchMethod,
    PatternMatch,
    PlagiarismReport,
    Submission,
)
from plagscore.services.engine import PlagiarismEngine, get_plagiarism_engine

__version__ = "0.1.0"

__all__ = [
    "CorpusEntry",
    "MalformedSubmissionError",
    "MatchCandidate",
    "MatchMethod",
    "PatternMatch",
    "PlagiarismReport",
    "Submission",
    "PlagiarismEngine",
    "get_plagiarism_engine",
]
