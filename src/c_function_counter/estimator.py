"""Heuristic function-definition counter for C source text.

The count comes from staged text stripping followed by one regex scan over
the residual text. It is an approximation, not a parser:

- A function *declaration* followed by a brace-initialized block on the same
  collapsed line can be counted as a definition.
- Macro-expanded constructs that look like ``type name(...) {`` are counted.
- A parameter list with a nested ``(`` (function-pointer parameters) ends the
  match at the first ``)``; the trailing ``{`` requirement usually, but not
  always, rejects the result.
- Prototypes (no ``{`` after the parameter list) are never counted.

Whitespace is collapsed before matching, so a signature whose return type and
parameter list sit on different lines is still counted. Directive stripping
runs before the collapse because it depends on line structure.
"""

from __future__ import annotations

import re
from typing import Callable

# Line terminators are \n, \r, U+2028 and U+2029.
# Unterminated /* runs to end of input.
_BLOCK_COMMENT = re.compile(r"/\*.*?(?:\*/|\Z)", re.DOTALL)
_LINE_COMMENT = re.compile(r"//[^\n\r\u2028\u2029]*")
_STRING_LITERAL = re.compile(r'"(?:\\[^\n\r\u2028\u2029]|[^"\\])*"')
_CHAR_LITERAL = re.compile(r"'(?:\\[^\n\r\u2028\u2029]|[^'\\])*'")
# A byte order mark counts as whitespace
_DIRECTIVE = re.compile(
    r"(?:^|(?<=[\r\u2028\u2029]))[\s\ufeff]*#[^\n\r\u2028\u2029]*", re.MULTILINE
)
_WHITESPACE = re.compile(r"[\s\ufeff]+")

# type/qualifier tokens, optional pointer stars, name, flat parameter list, "{"
FUNCTION_SIGNATURE = re.compile(
    r"\b(?:[a-zA-Z_][a-zA-Z0-9_]*\s+)+\**\s*[a-zA-Z_][a-zA-Z0-9_]*\s*\([^)]*\)\s*\{",
    re.ASCII,
)


def strip_block_comments(text: str) -> str:
    """Remove ``/* ... */`` comments, stopping at the nearest ``*/``."""
    return _BLOCK_COMMENT.sub("", text)


def strip_line_comments(text: str) -> str:
    """Remove ``//`` comments up to (not including) the newline."""
    return _LINE_COMMENT.sub("", text)


def strip_string_literals(text: str) -> str:
    """Remove double-quoted literals; a backslash escapes any next character."""
    return _STRING_LITERAL.sub("", text)


def strip_char_literals(text: str) -> str:
    """Remove single-quoted literals using the same escape rule as strings."""
    return _CHAR_LITERAL.sub("", text)


def strip_directives(text: str) -> str:
    """Remove lines whose first non-blank character is ``#``."""
    return _DIRECTIVE.sub("", text)


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run, newlines included, with one space."""
    return _WHITESPACE.sub(" ", text)


# Order matters: directives need line structure, so they go before the collapse.
STRIP_STAGES: tuple[Callable[[str], str], ...] = (
    strip_block_comments,
    strip_line_comments,
    strip_string_literals,
    strip_char_literals,
    strip_directives,
    collapse_whitespace,
)


def clean_source(text: str) -> str:
    """Run every stripping stage in order and return the residual text."""
    for stage in STRIP_STAGES:
        text = stage(text)
    return text


def count_signatures(cleaned: str) -> int:
    """Count non-overlapping definition-shaped matches in cleaned text."""
    return sum(1 for _ in FUNCTION_SIGNATURE.finditer(cleaned))


def estimate_function_count(text: str) -> int:
    """Estimate how many function definitions *text* contains.

    Args:
        text: Full contents of one C source file.

    Returns:
        A non-negative count. Empty or non-string input yields 0.
    """
    if not isinstance(text, str) or not text:
        return 0
    return count_signatures(clean_source(text))
