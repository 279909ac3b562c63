#!/usr/bin/env python3
"""Tests for timestamp extraction."""

import os
import sys
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from treefind.core.constants import FileTimeType
from treefind.core.errors import UnsupportedTimeError
from treefind.core.times import FileTimes

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2024, 1, 2, tzinfo=timezone.utc)


class TestFileTimes:
    """Tests for the FileTimes value."""

    def test_access_and_modify_always_available(self):
        """Access and modify times need no capability."""
        times = FileTimes(atime=T0, mtime=T1)
        assert times.access_time() == T0
        assert times.modify_time() == T1
        assert times.supports(FileTimeType.ACCESSED)
        assert times.supports(FileTimeType.MODIFIED)

    def test_missing_birth_time_raises_distinct_error(self):
        """Birth time absence is reported as UnsupportedTimeError."""
        times = FileTimes(atime=T0, mtime=T0, ctime=T0)
        assert not times.has_birth_time
        with pytest.raises(UnsupportedTimeError) as exc_info:
            times.birth_time()
        assert exc_info.value.time_type == FileTimeType.CREATED
        assert "birth" in str(exc_info.value)

    def test_missing_change_time_raises_distinct_error(self):
        """Change time absence is reported as UnsupportedTimeError."""
        times = FileTimes(atime=T0, mtime=T0)
        assert not times.has_change_time
        with pytest.raises(UnsupportedTimeError) as exc_info:
            times.get(FileTimeType.CHANGED)
        assert exc_info.value.time_type == FileTimeType.CHANGED

    def test_get_by_letter(self):
        """Kinds can be given by their -newerXY letter."""
        times = FileTimes(atime=T0, mtime=T1, ctime=T0, birthtime=T1)
        assert times.get("a") == T0
        assert times.get("m") == T1
        assert times.get("c") == T0
        assert times.get("B") == T1

    def test_get_unknown_kind(self):
        """Unknown kinds are rejected."""
        times = FileTimes(atime=T0, mtime=T0)
        with pytest.raises(ValueError):
            times.get("x")

    def test_supports_optional_kinds(self):
        """supports() reflects which optional kinds are present."""
        times = FileTimes(atime=T0, mtime=T0, birthtime=T1)
        assert times.supports(FileTimeType.CREATED)
        assert not times.supports(FileTimeType.CHANGED)


class TestFromStat:
    """Tests for building FileTimes from stat results."""

    def test_from_real_stat(self, temp_dir):
        """A real file yields timezone-aware access and modify times."""
        path = temp_dir / "f"
        path.write_text("x")
        os.utime(path, (1_700_000_000, 1_700_000_100))

        times = FileTimes.from_stat(os.stat(path))
        assert times.atime == datetime.fromtimestamp(1_700_000_000, tz=timezone.utc)
        assert times.mtime == datetime.fromtimestamp(1_700_000_100, tz=timezone.utc)
        assert times.mtime.tzinfo is not None

    def test_birth_time_read(self):
        """st_birthtime is used when the stat result carries it."""
        st = SimpleNamespace(st_atime_ns=0, st_mtime_ns=0, st_ctime_ns=0, st_birthtime=86400)
        times = FileTimes.from_stat(st)
        assert times.has_birth_time
        assert times.birth_time() == datetime(1970, 1, 2, tzinfo=timezone.utc)

    def test_no_birth_time_field(self):
        """Without st_birthtime, birth time is unsupported."""
        st = SimpleNamespace(st_atime_ns=0, st_mtime_ns=0, st_ctime_ns=0)
        assert not FileTimes.from_stat(st).has_birth_time

    @pytest.mark.skipif(sys.platform == "win32", reason="ctime is creation time on Windows")
    def test_change_time_on_posix(self):
        """st_ctime is the change time on POSIX systems."""
        st = SimpleNamespace(st_atime_ns=0, st_mtime_ns=0, st_ctime_ns=60_000_000_000)
        times = FileTimes.from_stat(st)
        assert times.change_time() == datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)

    def test_nanoseconds_kept(self):
        """Sub-microsecond differences survive in get_ns."""
        base = 1_700_000_000_000_000_000
        earlier = FileTimes.from_stat(SimpleNamespace(st_atime_ns=base, st_mtime_ns=base, st_ctime_ns=base))
        later = FileTimes.from_stat(SimpleNamespace(st_atime_ns=base, st_mtime_ns=base + 1, st_ctime_ns=base))

        assert earlier.mtime == later.mtime
        assert later.get_ns(FileTimeType.MODIFIED) == base + 1
        assert later.get_ns("m") > earlier.get_ns("m")
        assert later.mtime == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)

    def test_birth_time_ns_preferred(self):
        """st_birthtime_ns wins over the float st_birthtime."""
        st = SimpleNamespace(
            st_atime_ns=0, st_mtime_ns=0, st_ctime_ns=0, st_birthtime=1.0, st_birthtime_ns=1_000_000_007
        )
        assert FileTimes.from_stat(st).get_ns(FileTimeType.CREATED) == 1_000_000_007


class TestGetNs:
    """Tests for nanosecond access on hand-built values."""

    def test_derived_from_datetime(self):
        """Without stat nanoseconds, get_ns is derived from the datetime."""
        times = FileTimes(atime=T0, mtime=T1)
        assert times.get_ns(FileTimeType.MODIFIED) == int(T1.timestamp()) * 1_000_000_000

    def test_unsupported_kind(self):
        times = FileTimes(atime=T0, mtime=T0)
        with pytest.raises(UnsupportedTimeError):
            times.get_ns(FileTimeType.CREATED)
