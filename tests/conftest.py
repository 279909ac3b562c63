"""Shared pytest fixtures for treefind tests."""
import errno
import os
import stat
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Generator, List, Optional, Set

import pytest

from treefind.core.entry import EntryInfo
from treefind.core.times import FileTimes
from treefind.finder import Finder
from treefind.ownership import Identity
from treefind.walker import FileSystem

# Fixed "now" for in-memory trees
EPOCH = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def not_a_directory(path: str) -> NotADirectoryError:
    return NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), path)


class MemoryFileSystem(FileSystem):
    """In-memory filesystem with fully controllable metadata.

    Paths use "/" and are stored verbatim; parents must be added before
    children.
    """

    sep = "/"

    def __init__(self):
        self.nodes: Dict[str, EntryInfo] = {}
        self.unreadable: Set[str] = set()  # listdir raises PermissionError
        self.vanished: Set[str] = set()  # listed by the parent, lstat fails
        self.stat_calls: List[str] = []

    def _add(
        self,
        path: str,
        mode: int,
        size: int = 0,
        blocks: Optional[int] = None,
        uid: Optional[int] = 1000,
        gid: Optional[int] = 1000,
        times: Optional[FileTimes] = None,
    ) -> str:
        if times is None:
            times = FileTimes(atime=EPOCH, mtime=EPOCH, ctime=EPOCH)
        if blocks is None:
            blocks = (size + 511) // 512
        self.nodes[path] = EntryInfo(
            name=self.basename(path),
            st_mode=mode,
            st_size=size,
            st_nlink=1,
            st_uid=uid,
            st_gid=gid,
            st_blocks=blocks,
            times=times,
        )
        return path

    def add_dir(self, path: str, **meta) -> str:
        return self._add(path, stat.S_IFDIR | 0o755, size=4096, blocks=8, **meta)

    def add_file(self, path: str, size: int = 0, **meta) -> str:
        return self._add(path, stat.S_IFREG | 0o644, size=size, **meta)

    def add_symlink(self, path: str, **meta) -> str:
        return self._add(path, stat.S_IFLNK | 0o777, size=7, blocks=0, **meta)

    def add_fifo(self, path: str, **meta) -> str:
        return self._add(path, stat.S_IFIFO | 0o644, **meta)

    def lstat(self, path: str) -> EntryInfo:
        self.stat_calls.append(path)
        if path in self.vanished or path not in self.nodes:
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), path)
        return self.nodes[path]

    def stat(self, path: str) -> EntryInfo:
        return self.lstat(path)

    def listdir(self, path: str) -> List[str]:
        if path in self.unreadable:
            raise PermissionError(errno.EACCES, os.strerror(errno.EACCES), path)
        entry = self.lstat(path)
        if not entry.is_dir:
            raise not_a_directory(path)
        prefix = path + self.sep
        names = {
            p[len(prefix):]
            for p in list(self.nodes) + list(self.vanished)
            if p.startswith(prefix) and self.sep not in p[len(prefix):]
        }
        return sorted(names)


class FakeOwners:
    """Ownership resolver backed by dictionaries."""

    def __init__(self, users: Optional[Dict[int, str]] = None, groups: Optional[Dict[int, str]] = None):
        self.users = users or {}
        self.groups = groups or {}

    def user(self, uid: int) -> Identity:
        return Identity(id=str(uid), name=self.users.get(uid))

    def group(self, gid: int) -> Identity:
        return Identity(id=str(gid), name=self.groups.get(gid))


def times_at(offset: timedelta, birth: Optional[timedelta] = None) -> FileTimes:
    """FileTimes with every kind at EPOCH + offset, birth optionally elsewhere."""
    when = EPOCH + offset
    return FileTimes(
        atime=when,
        mtime=when,
        ctime=when,
        birthtime=EPOCH + birth if birth is not None else None,
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def example_tree(temp_dir: Path) -> Path:
    """root/a.txt (empty), root/b.dat (4096 bytes), root/sub/c.txt."""
    root = temp_dir / "root"
    root.mkdir()
    (root / "a.txt").write_text("")
    (root / "b.dat").write_bytes(b"\0" * 4096)
    (root / "sub").mkdir()
    (root / "sub" / "c.txt").write_text("hello")
    return root


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """The example tree in memory, rooted at "root"."""
    fs = MemoryFileSystem()
    fs.add_dir("root")
    fs.add_file("root/a.txt")
    fs.add_file("root/b.dat", size=4096)
    fs.add_dir("root/sub")
    fs.add_file("root/sub/c.txt", size=5)
    return fs


@pytest.fixture
def finder() -> Finder:
    """A fresh session with default policies."""
    return Finder()


@pytest.fixture
def strict_finder() -> Finder:
    """A session that stops on every error."""
    return Finder(
        walk_error_handler=lambda err: False,
        internal_error_handler=lambda err: False,
    )


@pytest.fixture
def lenient_finder() -> Finder:
    """A session that continues past every error."""
    return Finder(
        walk_error_handler=lambda err: True,
        internal_error_handler=lambda err: True,
    )
