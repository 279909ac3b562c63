"""
treefind Core: Error types.

Errors raised or returned while walking a tree:
- FinderError: a traversal or predicate-evaluation fault with context
- UnsupportedTimeError: a timestamp kind the filesystem does not record
- GlobSyntaxError: a malformed shell glob
- FinderStateError: a session used in a way its state forbids

error_code_for maps OSError subclasses onto ErrorCode values.
"""
from typing import TYPE_CHECKING, Any, Dict, Optional

from treefind.core.constants import ErrorCode, FileTimeType

if TYPE_CHECKING:
    from treefind.core.entry import EntryInfo


class FinderError(Exception):
    """Error raised by the walk or by a matcher, with positional context."""

    def __init__(
        self,
        info: str = "",
        *,
        matcher: str = "",
        path: str = "",
        err: Optional[BaseException] = None,
        entry: Optional["EntryInfo"] = None,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    ):
        """Initialize FinderError.

        Args:
            info: Matcher specific information (the pattern, missing capability...)
            matcher: Name of the matcher that raised the error
            path: Path being processed
            err: Underlying error, if any
            entry: Entry being processed, if available
            error_code: Associated error code
        """
        self.info = info
        self.matcher = matcher
        self.path = path
        self.err = err
        self.entry = entry
        self.error_code = error_code
        super().__init__(self._render())
        if err is not None:
            self.__cause__ = err

    def _render(self) -> str:
        parts = [f"treefind: error processing '{self.path}'"]
        if self.matcher:
            parts.append(f"in {self.matcher}")
        if self.info:
            parts.append(f"({self.info})")
        msg = " ".join(parts)
        if self.err is not None:
            msg = f"{msg}: {self.err}"
        return msg

    def context(self) -> Dict[str, Any]:
        """Return the error's context as logging key-value pairs."""
        return {
            "matcher": self.matcher or "-",
            "path": self.path,
            "info": self.info or "-",
            "code": self.error_code.name,
        }


class UnsupportedTimeError(FinderError):
    """A timestamp kind is not recorded by the filesystem holding the entry."""

    def __init__(self, time_type: FileTimeType, *, matcher: str = "", path: str = "", entry=None):
        self.time_type = time_type
        super().__init__(
            f"filesystem does not support {_TIME_NAMES[time_type]} time",
            matcher=matcher,
            path=path,
            entry=entry,
            error_code=ErrorCode.UNSUPPORTED,
        )


_TIME_NAMES = {
    FileTimeType.CREATED: "birth",
    FileTimeType.ACCESSED: "access",
    FileTimeType.MODIFIED: "modification",
    FileTimeType.CHANGED: "change",
}


class GlobSyntaxError(ValueError):
    """Malformed shell glob pattern."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"syntax error in pattern {pattern!r}: {reason}")


class FinderStateError(RuntimeError):
    """Session mutated or reused while a walk is in progress."""


def error_code_for(err: OSError) -> ErrorCode:
    """Map an OSError to the closest ErrorCode."""
    if isinstance(err, FileNotFoundError):
        return ErrorCode.NOT_FOUND
    if isinstance(err, PermissionError):
        return ErrorCode.PERMISSION_DENIED
    return ErrorCode.IO_ERROR
