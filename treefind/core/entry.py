"""
treefind Core: Entry metadata.

EntryInfo is the read-only view of one visited path that every matcher
receives. Filesystem backends build it from a stat result.
"""
import os
import stat
from dataclasses import dataclass
from typing import Optional

from treefind.core.constants import FileType
from treefind.core.times import FileTimes


@dataclass(frozen=True)
class EntryInfo:
    """Metadata of a filesystem entry, matching os.stat_result fields."""

    name: str  # Final path component
    st_mode: int  # File mode (type and permissions)
    st_size: int  # Logical size in bytes
    st_nlink: int  # Number of hard links
    st_uid: Optional[int]  # Owner, None where the platform has no uids
    st_gid: Optional[int]  # Group, None where the platform has no gids
    st_blocks: Optional[int]  # Allocated 512-byte blocks, None if unknown
    times: FileTimes

    @classmethod
    def from_stat(cls, name: str, st: os.stat_result) -> "EntryInfo":
        """Build entry metadata from an os.stat_result."""
        return cls(
            name=name,
            st_mode=st.st_mode,
            st_size=st.st_size,
            st_nlink=st.st_nlink,
            st_uid=getattr(st, "st_uid", None),
            st_gid=getattr(st, "st_gid", None),
            st_blocks=getattr(st, "st_blocks", None),
            times=FileTimes.from_stat(st),
        )

    @property
    def type_bits(self) -> int:
        """Return the S_IFMT portion of the mode."""
        return stat.S_IFMT(self.st_mode)

    @property
    def file_type(self) -> FileType:
        return FileType.from_mode(self.st_mode)

    @property
    def is_dir(self) -> bool:
        """Check if this is a directory."""
        return stat.S_ISDIR(self.st_mode)

    @property
    def is_file(self) -> bool:
        """Check if this is a regular file."""
        return stat.S_ISREG(self.st_mode)

    @property
    def is_symlink(self) -> bool:
        """Check if this is a symbolic link."""
        return stat.S_ISLNK(self.st_mode)
