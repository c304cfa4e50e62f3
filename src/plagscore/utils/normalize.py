"""Source code normalization.

Turns raw submission text into the canonical form every comparison
runs on: comments, quote characters and whitespace differences are
removed and the result is lower-cased.
"""
import re
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CommentSyntax:
    """Comment markers for one family of languages."""
    line_marker: str
    block_open: Optional[str] = None
    block_close: Optional[str] = None

    @property
    def line_pattern(self) -> re.Pattern:
        return re.compile(re.escape(self.line_marker) + r"[^\n]*")

    @property
    def block_pattern(self) -> Optional[re.Pattern]:
        if not self.block_open or not self.block_close:
            return None
        # Non-greedy; an unterminated block runs to end of input
        return re.compile(
            re.escape(self.block_open) + r".*?(?:" + re.escape(self.block_close) + r"|\Z)",
            re.DOTALL,
        )


C_FAMILY = CommentSyntax("//", "/*", "*/")
HASH_FAMILY = CommentSyntax("#")

# Languages without a row fall back to the generic (C-family) rules
GENERIC_SYNTAX = C_FAMILY

_COMMENT_SYNTAX: dict[str, CommentSyntax] = {
    "javascript": C_FAMILY,
    "typescript": C_FAMILY,
    "java": C_FAMILY,
    "kotlin": C_FAMILY,
    "scala": C_FAMILY,
    "c": C_FAMILY,
    "cpp": C_FAMILY,
    "csharp": C_FAMILY,
    "go": C_FAMILY,
    "rust": C_FAMILY,
    "swift": C_FAMILY,
    "python": HASH_FAMILY,
    "ruby": HASH_FAMILY,
    "bash": HASH_FAMILY,
}

_WHITESPACE = re.compile(r"\s+")
_QUOTES = re.compile(r"['\"]")


def register_comment_syntax(language: str, syntax: CommentSyntax) -> None:
    """Add or replace the comment markers used for a language.

    Args:
        language: Language tag (case-insensitive)
        syntax: Comment markers for that language
    """
    _COMMENT_SYNTAX[language.strip().lower()] = syntax


def comment_syntax_for(language: Optional[str]) -> CommentSyntax:
    """Look up comment markers, falling back to the generic rules."""
    if not language:
        return GENERIC_SYNTAX
    return _COMMENT_SYNTAX.get(language.strip().lower(), GENERIC_SYNTAX)


def _normalize_once(text: str, syntax: CommentSyntax) -> str:
    text = syntax.line_pattern.sub("", text)
    block = syntax.block_pattern
    if block is not None:
        text = block.sub("", text)
    text = _WHITESPACE.sub(" ", text)
    text = _QUOTES.sub("", text)
    return text.strip().lower()


def normalize(raw_code: str, language: Optional[str] = None) -> str:
    """Normalize source code into its canonical comparison form.

    Steps, in order: drop line comments, drop block comments, collapse
    whitespace, delete quote characters, trim, lower-case. Deleting a
    quote or a comment can join two characters into a new comment
    marker (``/'/`` becomes ``//``), so the steps are repeated until
    the text stops changing. This keeps the function idempotent.

    Args:
        raw_code: Submission text as typed by the candidate
        language: Language tag selecting the comment markers

    Returns:
        Normalized text, empty for comment-only input
    """
    if not raw_code:
        return ""

    syntax = comment_syntax_for(language)
    current = _normalize_once(raw_code, syntax)
    while True:
        following = _normalize_once(current, syntax)
        if following == current:
            return current
        current = following
