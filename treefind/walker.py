"""
Directory walking for treefind.

Defines the filesystem contract the finder walks over and the depth-first,
pre-order walk itself. Siblings are visited in sorted name order and
symbolic links are never followed below the root.

Example:
    >>> def visit(path, entry):
    ...     print(path)
    >>> walk_tree(LocalFileSystem(), "src", visit, on_error)
"""
import os
from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional, Tuple

from treefind.core.entry import EntryInfo
from treefind.core.result import WalkControl

# Called once per visited entry; the returned signal steers the walk
VisitFn = Callable[[str, EntryInfo], Optional[WalkControl]]
# Called for traversal failures; entry is None when the path could not be stat'ed
ErrorFn = Callable[[str, Optional[EntryInfo], OSError], Optional[WalkControl]]


class FileSystem(ABC):
    """
    Read-only filesystem interface used by the walk and by matchers.

    Implementations raise OSError (or a subclass) for unreadable paths.
    """

    sep: str = "/"

    @abstractmethod
    def lstat(self, path: str) -> EntryInfo:
        """Metadata of `path` itself, not following a final symlink."""

    @abstractmethod
    def stat(self, path: str) -> EntryInfo:
        """Metadata of `path`, following symlinks."""

    @abstractmethod
    def listdir(self, path: str) -> List[str]:
        """Names in directory `path`, sorted."""

    def join(self, parent: str, name: str) -> str:
        if parent.endswith(self.sep):
            return parent + name
        return f"{parent}{self.sep}{name}"

    def basename(self, path: str) -> str:
        stripped = path.rstrip(self.sep)
        if not stripped:
            return path
        return stripped.rsplit(self.sep, 1)[-1]


class LocalFileSystem(FileSystem):
    """The operating system's filesystem."""

    sep = os.sep

    def lstat(self, path: str) -> EntryInfo:
        return EntryInfo.from_stat(self.basename(path), os.lstat(path))

    def stat(self, path: str) -> EntryInfo:
        return EntryInfo.from_stat(self.basename(path), os.stat(path))

    def listdir(self, path: str) -> List[str]:
        return sorted(os.listdir(path))

    def join(self, parent: str, name: str) -> str:
        return os.path.join(parent, name)


def walk_tree(filesystem: FileSystem, root: str, visit: VisitFn, on_error: ErrorFn) -> bool:
    """Walk `root` depth first, calling `visit` for every entry in pre-order.

    `visit` may return PRUNE to keep the walk out of a directory, or ABORT to
    end it; any other return value continues. Traversal failures go to
    `on_error`: the root failing to stat (entry None), a child vanishing
    between listing and stat (entry None) and a directory that cannot be
    listed (entry given, its children are not visited). `on_error` may
    raise to stop the walk or return ABORT.

    Returns:
        False if the walk was aborted, True if it ran to completion
    """
    try:
        root_entry = filesystem.stat(root)
    except OSError as e:
        on_error(root, None, e)
        return True

    stack: List[Tuple[str, Iterator[str]]] = []

    def enter(path: str, entry: EntryInfo) -> Optional[WalkControl]:
        control = visit(path, entry)
        if control is WalkControl.ABORT:
            return control
        if control is WalkControl.PRUNE or not entry.is_dir:
            return None
        try:
            names = filesystem.listdir(path)
        except OSError as e:
            return on_error(path, entry, e)
        stack.append((path, iter(names)))
        return None

    # A symlinked root is followed, but only directories are descended
    if enter(root, root_entry) is WalkControl.ABORT:
        return False

    while stack:
        parent, names = stack[-1]
        name = next(names, None)
        if name is None:
            stack.pop()
            continue

        child = filesystem.join(parent, name)
        try:
            entry = filesystem.lstat(child)
        except OSError as e:
            if on_error(child, None, e) is WalkControl.ABORT:
                return False
            continue

        if enter(child, entry) is WalkControl.ABORT:
            return False

    return True
