"""Engine data model.

Submissions, corpus entries, match records and reports. All models
are frozen: reports and match records can be shared between threads
once built.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from plagscore.utils.normalize import normalize


class MalformedSubmissionError(ValueError):
    """A submission is missing required identity fields."""


class MatchMethod(str, Enum):
    """Which scorer produced a match's combined score."""
    EDIT_DISTANCE = "edit_distance"
    PATTERN_HEURISTIC = "pattern_heuristic"
    COMBINED = "combined"


class Submission(BaseModel):
    """A code snippet submitted during an interview session."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1, alias="sessionId")
    user_id: Optional[str] = Field(None, alias="userId")
    language: str = Field(..., min_length=1)
    raw_content: str = Field(default="", alias="rawContent")

    # (raw_content, language, normalized); copies may carry a stale memo
    _normalized: Optional[tuple[str, str, str]] = PrivateAttr(default=None)

    @field_validator("id", "session_id")
    @classmethod
    def identity_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("language")
    @classmethod
    def language_lowercase(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("must not be blank")
        return v

    @property
    def normalized_content(self) -> str:
        """Normalized form of raw_content, computed on first access."""
        memo = self._normalized
        if memo is None or memo[0] != self.raw_content or memo[1] != self.language:
            memo = (self.raw_content, self.language, normalize(self.raw_content, self.language))
            self._normalized = memo
        return memo[2]


class CorpusEntry(Submission):
    """A submission held in the corpus, optionally labelled as a reference."""
    source_label: Optional[str] = Field(None, alias="sourceLabel")

    @property
    def is_reference(self) -> bool:
        return self.source_label is not None

    @classmethod
    def from_submission(cls, submission: Submission, source_label: Optional[str] = None) -> "CorpusEntry":
        entry = cls(
            id=submission.id,
            session_id=submission.session_id,
            user_id=submission.user_id,
            language=submission.language,
            raw_content=submission.raw_content,
            source_label=source_label,
        )
        # Reuse the memoized normalization; same raw_content and language
        entry._normalized = (entry.raw_content, entry.language, submission.normalized_content)
        return entry


class PatternMatch(BaseModel):
    """Submission-level boilerplate detection result."""
    model_config = ConfigDict(frozen=True)

    label: str
    similarity: float = Field(..., ge=0.0, le=1.0)
    matched_patterns: tuple[str, ...] = ()


class MatchCandidate(BaseModel):
    """Score of one submission against one corpus entry."""
    model_config = ConfigDict(frozen=True)

    entry_id: str
    similarity: float = Field(..., ge=0.0, le=1.0)
    method: MatchMethod
    evidence_label: str
    edit_distance_similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    pattern_similarity: float = Field(default=0.0, ge=0.0, le=1.0)
    source_label: Optional[str] = None
    session_id: Optional[str] = None
    snippet: str = ""


class PlagiarismReport(BaseModel):
    """Ranked matches for one submission."""
    model_config = ConfigDict(frozen=True)

    submission_id: str
    session_id: str
    language: str
    matches: tuple[MatchCandidate, ...] = ()
    pattern_matches: tuple[PatternMatch, ...] = ()
    flagged: bool = False
    overall_score: float = Field(default=0.0, ge=0.0, le=1.0)
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def top_match(self) -> Optional[MatchCandidate]:
        return self.matches[0] if self.matches else None

    @property
    def top_score(self) -> float:
        return self.matches[0].similarity if self.matches else 0.0
