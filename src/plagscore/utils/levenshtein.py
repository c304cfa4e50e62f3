"""Edit distance similarity.

Levenshtein distance with a rolling two-row table, the normalized
similarity ratio built on it, and the length prefilter used for
corpus-wide scans.
"""

DEFAULT_LENGTH_PREFILTER = 0.5


def levenshtein_distance(a: str, b: str) -> int:
    """Compute the Levenshtein distance between two strings.

    Insertion, deletion and substitution each cost 1. Only two rows of
    the DP table are kept, sized by the shorter string.

    Args:
        a: First string
        b: Second string

    Returns:
        Minimum number of single-character edits turning a into b
    """
    if a == b:
        return 0
    # Iterate rows over the longer string so a row has len(shorter) + 1 cells
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    current = [0] * (len(b) + 1)
    for i, char_a in enumerate(a, start=1):
        current[0] = i
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(
                    previous[j - 1],  # substitution
                    previous[j],      # deletion
                    current[j - 1],   # insertion
                )
        previous, current = current, previous
    return previous[len(b)]


def similarity(a: str, b: str) -> float:
    """Normalized edit distance similarity in [0, 1].

    Args:
        a: First (normalized) string
        b: Second (normalized) string

    Returns:
        1.0 for equal strings, 0.0 if either is empty, otherwise
        (len(longer) - distance) / len(longer)
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0

    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    distance = levenshtein_distance(longer, shorter)
    ratio = (len(longer) - distance) / len(longer)
    return min(1.0, max(0.0, ratio))


def length_ratio(a: str, b: str) -> float:
    """Ratio of the shorter length to the longer one (0.0 when either is empty)."""
    longest = max(len(a), len(b))
    if longest == 0 or min(len(a), len(b)) == 0:
        return 0.0
    return min(len(a), len(b)) / longest


def passes_length_prefilter(a: str, b: str, threshold: float = DEFAULT_LENGTH_PREFILTER) -> bool:
    """Check whether a pair is close enough in length to be worth scoring."""
    return length_ratio(a, b) >= threshold


def prefiltered_similarity(a: str, b: str, threshold: float = DEFAULT_LENGTH_PREFILTER) -> float:
    """Similarity with the length prefilter applied first.

    Pairs whose lengths differ by more than the threshold allows are
    reported as 0.0 without running the O(n*m) computation. Empty input
    always scores 0.0 here, so a comment-only submission matches nothing.

    Args:
        a: First (normalized) string
        b: Second (normalized) string
        threshold: Minimum min(len)/max(len) ratio

    Returns:
        Similarity in [0, 1]
    """
    if not a or not b:
        return 0.0
    if not passes_length_prefilter(a, b, threshold):
        return 0.0
    return similarity(a, b)
