"""Plagiarism Report Builder.

Scores one submission against its same-language candidates and ranks
the results into a PlagiarismReport.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Literal, Optional, Sequence

from plagscore.config import Settings
from plagscore.schemas import (
    CorpusEntry, MatchCandidate, MatchMethod, PatternMatch, PlagiarismReport, Submission,
)
from plagscore.services.patterns import PatternTable, get_pattern_table, match_common_patterns
from plagscore.utils.levenshtein import prefiltered_similarity

logger = logging.getLogger(__name__)

EDIT_DISTANCE_LABEL = "edit distance similarity"
COMBINED_LABEL = "weighted edit distance and pattern similarity"

# (normalized_a, normalized_b, prefilter_threshold) -> similarity
Scorer = Callable[[str, str, float], float]


@dataclass(frozen=True)
class ScoringConfig:
    """Thresholds and policy knobs for one ReportBuilder."""
    length_prefilter_threshold: float = 0.5
    pattern_coverage_threshold: float = 0.8
    pattern_confidence: float = 0.60
    flag_threshold: float = 0.75
    match_floor: float = 0.7
    combine_policy: Literal["max", "weighted"] = "max"
    pattern_weight: float = 0.5
    max_workers: int = 1
    max_candidates: Optional[int] = None
    snippet_length: int = 200

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoringConfig":
        return cls(
            length_prefilter_threshold=settings.length_prefilter_threshold,
            pattern_coverage_threshold=settings.pattern_coverage_threshold,
            pattern_confidence=settings.pattern_confidence,
            flag_threshold=settings.flag_threshold,
            match_floor=settings.match_floor,
            combine_policy=settings.combine_policy,
            pattern_weight=settings.pattern_weight,
            max_workers=settings.max_workers,
            max_candidates=settings.max_candidates,
            snippet_length=settings.snippet_length,
        )


class ReportBuilder:
    """Builds ranked, thresholded reports from per-pair scores."""

    def __init__(
        self,
        config: Optional[ScoringConfig] = None,
        pattern_table: Optional[PatternTable] = None,
        scorer: Optional[Scorer] = None,
    ):
        self.config = config or ScoringConfig()
        self.pattern_table = pattern_table or get_pattern_table()
        self._scorer = scorer or prefiltered_similarity

    def detect_patterns(self, submission: Submission) -> tuple[PatternMatch, ...]:
        """Run the boilerplate heuristic once for a submission."""
        return match_common_patterns(
            submission.normalized_content,
            submission.language,
            table=self.pattern_table,
            coverage_threshold=self.config.pattern_coverage_threshold,
            confidence=self.config.pattern_confidence,
        )

    def _combine(
        self,
        entry: CorpusEntry,
        edit_score: float,
        pattern_matches: tuple[PatternMatch, ...],
    ) -> MatchCandidate:
        pattern_score = max((p.similarity for p in pattern_matches), default=0.0)

        if self.config.combine_policy == "weighted" and pattern_matches:
            weight = self.config.pattern_weight
            score = weight * pattern_score + (1 - weight) * edit_score
            method = MatchMethod.COMBINED
            label = COMBINED_LABEL
        elif pattern_score > edit_score:
            score = pattern_score
            method = MatchMethod.PATTERN_HEURISTIC
            label = pattern_matches[0].label
        else:
            score = edit_score
            method = MatchMethod.EDIT_DISTANCE
            label = EDIT_DISTANCE_LABEL

        return MatchCandidate(
            entry_id=entry.id,
            similarity=min(1.0, max(0.0, score)),
            method=method,
            evidence_label=label,
            edit_distance_similarity=edit_score,
            pattern_similarity=pattern_score,
            source_label=entry.source_label,
            session_id=entry.session_id,
            snippet=entry.raw_content[:self.config.snippet_length],
        )

    def _edit_score(self, normalized: str, entry: CorpusEntry) -> float:
        # Comment-only (empty) submissions score 0 against everything
        if not normalized:
            return 0.0
        return self._scorer(
            normalized,
            entry.normalized_content,
            self.config.length_prefilter_threshold,
        )

    def build_report(
        self,
        submission: Submission,
        candidates: Sequence[CorpusEntry],
    ) -> PlagiarismReport:
        """Build the ranked report for a submission.

        Candidates in other languages and the submission's own corpus
        entry are skipped. Matches are sorted by descending combined
        score; equal scores keep candidate order.

        Args:
            submission: Submission being checked
            candidates: Corpus entries in insertion order

        Returns:
            Immutable report with the full ranked match list
        """
        comparable = [
            c for c in candidates
            if c.language == submission.language and c.id != submission.id
        ]
        if self.config.max_candidates is not None:
            comparable = comparable[-self.config.max_candidates:]

        normalized = submission.normalized_content
        pattern_matches = self.detect_patterns(submission)

        if self.config.max_workers > 1 and len(comparable) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                edit_scores = list(executor.map(lambda c: self._edit_score(normalized, c), comparable))
        else:
            edit_scores = [self._edit_score(normalized, c) for c in comparable]

        scored = [
            self._combine(entry, edit_score, pattern_matches)
            for entry, edit_score in zip(comparable, edit_scores)
        ]
        # sorted() is stable: ties keep insertion order
        ranked = tuple(sorted(scored, key=lambda m: m.similarity, reverse=True))

        flagged = bool(ranked) and ranked[0].similarity >= self.config.flag_threshold
        above_floor = [m.similarity for m in ranked if m.similarity >= self.config.match_floor]
        overall = sum(above_floor) / len(above_floor) if above_floor else 0.0

        logger.debug(
            f"Scored {submission.id} against {len(comparable)} candidates: "
            f"top={ranked[0].similarity if ranked else 0.0:.4f} flagged={flagged}"
        )

        return PlagiarismReport(
            submission_id=submission.id,
            session_id=submission.session_id,
            language=submission.language,
            matches=ranked,
            pattern_matches=pattern_matches,
            flagged=flagged,
            overall_score=min(1.0, overall),
        )
