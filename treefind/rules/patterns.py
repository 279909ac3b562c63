#!/usr/bin/env python3
r"""Shell glob patterns for names and paths.

This module provides the glob dialect used by the name/path matchers:
- `*` matches any run of characters except the path separator
- `?` matches one character except the path separator
- `[abc]`, `[a-z]`, `[^a-z]` / `[!a-z]` character classes
- `\c` matches `c` literally
- Case-insensitive mode lower-cases both pattern and subject

Unlike fnmatch, malformed patterns are rejected with GlobSyntaxError
instead of being matched literally.

Example:
    >>> compile_glob("*.py").matches("setup.py")
    True
    >>> compile_glob("[a-").matches("a")
    Traceback (most recent call last):
    ...
    treefind.core.errors.GlobSyntaxError: syntax error in pattern '[a-': ...
"""

import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Tuple

from treefind.core.errors import GlobSyntaxError

_SEPARATORS = "".join(sorted({"/", os.sep}))


@dataclass(frozen=True)
class GlobPattern:
    """A compiled glob pattern."""

    pattern: str
    case_sensitive: bool = True
    compiled: Optional[Pattern[str]] = field(repr=False, compare=False, default=None)

    def matches(self, subject: str) -> bool:
        """Check if the whole subject matches the pattern."""
        if not self.case_sensitive:
            subject = subject.lower()
        return self.compiled.fullmatch(subject) is not None


def compile_glob(pattern: str, case_sensitive: bool = True) -> GlobPattern:
    """Compile a glob pattern.

    Args:
        pattern: Glob pattern (e.g., "*.txt", "src/*/[a-c]?.py")
        case_sensitive: If False, pattern and subjects are lower-cased

    Returns:
        Compiled GlobPattern

    Raises:
        GlobSyntaxError: If the pattern is malformed
    """
    source = pattern if case_sensitive else pattern.lower()
    regex = translate_glob(source)
    return GlobPattern(
        pattern=pattern,
        case_sensitive=case_sensitive,
        compiled=re.compile(regex, re.DOTALL),
    )


def translate_glob(pattern: str) -> str:
    """Translate a glob pattern to an anchored-by-fullmatch regex.

    Raises:
        GlobSyntaxError: If the pattern is malformed
    """
    not_sep = f"[^{re.escape(_SEPARATORS)}]"
    out: List[str] = []
    i, n = 0, len(pattern)

    while i < n:
        c = pattern[i]
        i += 1
        if c == "*":
            # Consecutive stars are one star
            while i < n and pattern[i] == "*":
                i += 1
            out.append(f"{not_sep}*")
        elif c == "?":
            out.append(not_sep)
        elif c == "\\":
            if i >= n:
                raise GlobSyntaxError(pattern, "trailing backslash")
            out.append(re.escape(pattern[i]))
            i += 1
        elif c == "[":
            i = _translate_class(pattern, i, out)
        else:
            out.append(re.escape(c))

    return "".join(out)


def _translate_class(pattern: str, i: int, out: List[str]) -> int:
    """Translate the class starting after `[`; return the index after `]`."""
    n = len(pattern)
    negate = i < n and pattern[i] in "^!"
    if negate:
        i += 1

    items: List[str] = []
    while True:
        if i >= n:
            raise GlobSyntaxError(pattern, "unterminated character class")
        if pattern[i] == "]" and items:
            i += 1
            break
        lo, i = _class_char(pattern, i)
        if i < n and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
            if hi < lo:
                raise GlobSyntaxError(pattern, f"invalid range {lo}-{hi}")
            items.append(f"{re.escape(lo)}-{re.escape(hi)}")
        else:
            items.append(re.escape(lo))

    body = "".join(items)
    out.append(f"[^{body}]" if negate else f"[{body}]")
    return i


def _class_char(pattern: str, i: int) -> Tuple[str, int]:
    n = len(pattern)
    if i >= n:
        raise GlobSyntaxError(pattern, "unterminated character class")
    c = pattern[i]
    if c in "-]":
        raise GlobSyntaxError(pattern, f"unexpected {c!r} in character class")
    if c == "\\":
        i += 1
        if i >= n:
            raise GlobSyntaxError(pattern, "unterminated character class")
        c = pattern[i]
    return c, i + 1
