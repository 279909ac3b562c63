"""treefind Core - Shared types and utilities.

This package holds the value types every other layer builds on:
    from treefind.core import constants
    from treefind.core.entry import EntryInfo
    from treefind.core.errors import FinderError
    from treefind.core.result import MatchResult, WalkControl
    from treefind.core.times import FileTimes
    from treefind.core import validators
"""

# Re-export main module references for convenience
from treefind.core import (
    constants,
    entry,
    errors,
    result,
    times,
    validators,
)

__all__ = [
    "constants",
    "entry",
    "errors",
    "result",
    "times",
    "validators",
]
