"""Boilerplate Pattern Detection.

Flags submissions made mostly of generic scaffolding (solution
function declarations, entry points, module exports) that edit
distance alone underrates.
"""
import logging
import threading
from typing import Iterable, Optional

from plagscore.schemas import PatternMatch
from plagscore.utils.normalize import normalize

logger = logging.getLogger(__name__)

COMMON_PATTERN_LABEL = "common code pattern detected"
DEFAULT_COVERAGE_THRESHOLD = 0.8
DEFAULT_PATTERN_CONFIDENCE = 0.60

# Raw patterns; normalized with the language's rules when registered
DEFAULT_PATTERNS: dict[str, list[str]] = {
    "javascript": [
        "function solution",
        "const solution =",
        "export default",
        "module.exports",
    ],
    "typescript": [
        "function solution",
        "const solution =",
        "export default",
        "export function",
    ],
    "python": [
        "def solution",
        "class Solution",
        'if __name__ == "__main__"',
    ],
    "java": [
        "public class Solution",
        "public static void main",
        "class Solution",
    ],
    "cpp": [
        "#include <iostream>",
        "using namespace std;",
        "int main(",
        "class Solution",
    ],
}


class PatternTable:
    """Registry of boilerplate patterns indexed by language.

    A language without a row has an empty pattern set. Matching against
    it produces no records; it is never an error.
    """

    def __init__(self, patterns: Optional[dict[str, Iterable[str]]] = None):
        self._lock = threading.Lock()
        self._rows: dict[str, tuple[str, ...]] = {}
        for language, row in (patterns or {}).items():
            self.register(language, row)

    @classmethod
    def default(cls) -> "PatternTable":
        """Table preloaded with the built-in language rows."""
        return cls(DEFAULT_PATTERNS)

    def register(self, language: str, patterns: Iterable[str]) -> None:
        """Add or replace a language row.

        Args:
            language: Language tag (case-insensitive)
            patterns: Boilerplate snippets in source form
        """
        language = language.strip().lower()
        normalized = []
        for pattern in patterns:
            canonical = normalize(pattern, language)
            if canonical and canonical not in normalized:
                normalized.append(canonical)
        with self._lock:
            self._rows[language] = tuple(normalized)

    def patterns_for(self, language: str) -> tuple[str, ...]:
        """Normalized patterns for a language, empty if unknown."""
        return self._rows.get(language.strip().lower(), ())

    def supports(self, language: str) -> bool:
        return bool(self.patterns_for(language))

    @property
    def languages(self) -> list[str]:
        return sorted(self._rows)


_default_table: Optional[PatternTable] = None


def get_pattern_table() -> PatternTable:
    """Get or create the default pattern table singleton."""
    global _default_table
    if _default_table is None:
        _default_table = PatternTable.default()
    return _default_table


def match_common_patterns(
    normalized_code: str,
    language: str,
    table: Optional[PatternTable] = None,
    coverage_threshold: float = DEFAULT_COVERAGE_THRESHOLD,
    confidence: float = DEFAULT_PATTERN_CONFIDENCE,
) -> tuple[PatternMatch, ...]:
    """Detect language boilerplate in normalized code.

    Args:
        normalized_code: Output of normalize()
        language: Language tag
        table: Pattern table (defaults to the built-in table)
        coverage_threshold: Fraction of a language's patterns that must appear
        confidence: Similarity reported when the threshold is met

    Returns:
        One PatternMatch when coverage is met, otherwise empty
    """
    table = table or get_pattern_table()
    patterns = table.patterns_for(language)
    if not patterns:
        logger.debug(f"No boilerplate patterns registered for language '{language}'")
        return ()

    matched = tuple(p for p in patterns if p in normalized_code)
    coverage = len(matched) / len(patterns)
    if coverage < coverage_threshold:
        return ()

    return (PatternMatch(
        label=COMMON_PATTERN_LABEL,
        similarity=confidence,
        matched_patterns=matched,
    ),)
