"""
treefind Core: Timestamp extraction.

Normalizes the four timestamp kinds an entry may carry. Access and
modification times are always present; birth and change times depend on
the platform and filesystem, so callers ask `has_birth_time` /
`has_change_time` before reading them, or handle UnsupportedTimeError.

Example:
    >>> times = FileTimes.from_stat(os.lstat("setup.py"))
    >>> times.get(FileTimeType.MODIFIED)
    datetime.datetime(2024, 11, 12, 9, 30, tzinfo=datetime.timezone.utc)
"""
import os
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Union

from treefind.core.constants import FileTimeType
from treefind.core.errors import UnsupportedTimeError

# st_ctime is the creation time on Windows, not a metadata change time
_HAS_CHANGE_TIME = sys.platform != "win32"


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _from_ns(ns: int) -> datetime:
    return _EPOCH + timedelta(microseconds=ns // 1000)


def _to_ns(when: datetime) -> int:
    return (when - _EPOCH) // timedelta(microseconds=1) * 1000


def _birth_ns(st: os.stat_result) -> Optional[int]:
    ns = getattr(st, "st_birthtime_ns", None)
    if ns is None:
        seconds = getattr(st, "st_birthtime", None)
        if seconds is not None:
            ns = round(seconds * 1_000_000_000)
    return ns


@dataclass(frozen=True)
class FileTimes:
    """Timestamps of one filesystem entry, all timezone-aware (UTC).

    datetime stops at microseconds; values read from a stat result also
    keep the exact nanosecond counts in `nanos`, which `get_ns` prefers.
    """

    atime: datetime
    mtime: datetime
    ctime: Optional[datetime] = None
    birthtime: Optional[datetime] = None
    nanos: Dict[FileTimeType, int] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_stat(cls, st: os.stat_result) -> "FileTimes":
        """Build from an os.stat_result, probing for optional fields."""
        nanos = {
            FileTimeType.ACCESSED: st.st_atime_ns,
            FileTimeType.MODIFIED: st.st_mtime_ns,
        }
        if _HAS_CHANGE_TIME:
            nanos[FileTimeType.CHANGED] = st.st_ctime_ns
        birth = _birth_ns(st)
        if birth is not None:
            nanos[FileTimeType.CREATED] = birth

        return cls(
            atime=_from_ns(st.st_atime_ns),
            mtime=_from_ns(st.st_mtime_ns),
            ctime=_from_ns(st.st_ctime_ns) if _HAS_CHANGE_TIME else None,
            birthtime=_from_ns(birth) if birth is not None else None,
            nanos=nanos,
        )

    @property
    def has_birth_time(self) -> bool:
        return self.birthtime is not None

    @property
    def has_change_time(self) -> bool:
        return self.ctime is not None

    def access_time(self) -> datetime:
        return self.atime

    def modify_time(self) -> datetime:
        return self.mtime

    def change_time(self) -> datetime:
        """Return the metadata change time.

        Raises:
            UnsupportedTimeError: If the filesystem does not record it
        """
        if self.ctime is None:
            raise UnsupportedTimeError(FileTimeType.CHANGED)
        return self.ctime

    def birth_time(self) -> datetime:
        """Return the creation time.

        Raises:
            UnsupportedTimeError: If the filesystem does not record it
        """
        if self.birthtime is None:
            raise UnsupportedTimeError(FileTimeType.CREATED)
        return self.birthtime

    def supports(self, kind: FileTimeType) -> bool:
        """Return True if `kind` can be read from this value."""
        if kind == FileTimeType.CREATED:
            return self.has_birth_time
        if kind == FileTimeType.CHANGED:
            return self.has_change_time
        return True

    def get(self, kind: FileTimeType) -> datetime:
        """Return the timestamp of the given kind.

        Args:
            kind: Timestamp kind (FileTimeType or its letter)

        Raises:
            UnsupportedTimeError: If the kind is not recorded
            ValueError: If kind is not a timestamp kind
        """
        kind = FileTimeType(kind)
        if kind == FileTimeType.ACCESSED:
            return self.access_time()
        elif kind == FileTimeType.MODIFIED:
            return self.modify_time()
        elif kind == FileTimeType.CHANGED:
            return self.change_time()
        return self.birth_time()

    def get_ns(self, kind: Union[FileTimeType, str]) -> int:
        """Return the timestamp of the given kind as nanoseconds since the epoch.

        Raises:
            UnsupportedTimeError: If the kind is not recorded
        """
        when = self.get(kind)
        return self.nanos.get(FileTimeType(kind), _to_ns(when))
