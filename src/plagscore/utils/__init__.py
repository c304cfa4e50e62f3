"""plagscore utilities package."""

from plagscore.utils.normalize import (
    CommentSyntax,
    normalize,
    register_comment_syntax,
    comment_syntax_for,
)
from plagscore.utils.levenshtein import (
    levenshtein_distance,
    similarity,
    length_ratio,
    passes_length_prefilter,
    prefiltered_similarity,
)

__all__ = [
    # normalize
    "CommentSyntax",
    "normalize",
    "register_comment_syntax",
    "comment_syntax_for",
    # levenshtein
    "levenshtein_distance",
    "similarity",
    "length_ratio",
    "passes_length_prefilter",
    "prefiltered_similarity",
]
