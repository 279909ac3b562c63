"""
treefind Core: Predicate results.

A predicate answers with exactly one of three things:
- a match decision (True/False)
- a genuine error (FinderError), handed to the internal error policy
- a walk-control signal (prune, skip, abort), which bypasses every policy

Example:
    >>> def only_small(path, entry):
    ...     return MatchResult.of(entry.st_size < 1024)
    >>> MatchResult.signal(WalkControl.PRUNE).is_control
    True
"""
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from treefind.core.errors import FinderError

if TYPE_CHECKING:
    from treefind.core.entry import EntryInfo


class WalkControl(Enum):
    """Routing instructions that ride the predicate result channel."""

    PRUNE = "prune"  # Do not descend into this directory, exclude it
    SKIP = "skip"  # Exclude this entry only, keep walking
    ABORT = "abort"  # Stop the whole walk


@dataclass(frozen=True)
class MatchResult:
    """Tagged outcome of a predicate evaluation."""

    matched: bool = False
    error: Optional[FinderError] = None
    control: Optional[WalkControl] = None

    @classmethod
    def of(cls, matched: bool) -> "MatchResult":
        return TRUE if matched else FALSE

    @classmethod
    def failure(cls, error: FinderError) -> "MatchResult":
        return cls(error=error)

    @classmethod
    def signal(cls, control: WalkControl) -> "MatchResult":
        return cls(control=control)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_control(self) -> bool:
        return self.control is not None

    @property
    def decided(self) -> bool:
        """True for a plain match decision (no error, no signal)."""
        return self.error is None and self.control is None

    def __bool__(self) -> bool:
        return self.matched and self.decided


TRUE = MatchResult(matched=True)
FALSE = MatchResult(matched=False)

# A predicate inspects one visited entry
Predicate = Callable[[str, "EntryInfo"], MatchResult]
