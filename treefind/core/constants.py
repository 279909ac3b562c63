"""
treefind Core: Constants and Type Definitions

This module provides library-wide constants, error codes, and the small
enumerations shared by the matchers and the traversal controller.
"""
import stat
from enum import Enum, IntEnum
from typing import TypeAlias

# Version information
TREEFIND_VERSION = "1.0.0"
TREEFIND_API_VERSION = 1


# Error codes (0-9 range)
class ErrorCode(IntEnum):
    """Standardized error codes for treefind operations."""

    SUCCESS = 0  # Operation completed successfully
    INVALID_INPUT = 1  # Bad pattern, unknown unit or comparison
    NOT_FOUND = 2  # File or reference path doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    UNSUPPORTED = 4  # Capability missing on this filesystem
    DEPENDENCY_ERROR = 5  # Missing OS service (user/group database)
    INTERNAL_ERROR = 6  # Bug in treefind or in a caller callback
    IO_ERROR = 7  # Other I/O failure reaching an entry


# Type aliases for clarity
FilePath: TypeAlias = str
GlobPattern: TypeAlias = str


class FileTimeType(str, Enum):
    """Timestamp kinds, lettered as in `find -newerXY`."""

    CREATED = "B"  # Birth time
    ACCESSED = "a"
    MODIFIED = "m"
    CHANGED = "c"  # Metadata change time


class Comparison(str, Enum):
    """Comparison modes for size and relative-time matchers."""

    LESS_THAN = "lt"
    GREATER_THAN = "gt"
    EQUAL = "eq"


class SizeUnit(IntEnum):
    """Size units in bytes, lettered as in `find -size`."""

    BYTE = 1
    KB = 1024
    BLOCK = 2 * 1024
    MB = 1024**2
    GB = 1024**3
    TB = 1024**4
    PB = 1024**5

    @classmethod
    def from_suffix(cls, suffix: str) -> "SizeUnit":
        """Look up a unit by its `find -size` suffix.

        Raises:
            KeyError: If the suffix is unknown
        """
        return _SIZE_SUFFIXES[suffix]


_SIZE_SUFFIXES = {
    "c": SizeUnit.BYTE,
    "b": SizeUnit.BLOCK,
    "k": SizeUnit.KB,
    "M": SizeUnit.MB,
    "G": SizeUnit.GB,
    "T": SizeUnit.TB,
    "P": SizeUnit.PB,
}

# Sparse detection always counts st_blocks in 512-byte units
STAT_BLOCK_SIZE = 512


# File type classification
class FileType(Enum):
    """File type classification from mode bits."""

    REGULAR = "f"
    DIRECTORY = "d"
    SYMLINK = "l"
    BLOCK_DEVICE = "b"
    CHARACTER_DEVICE = "c"
    FIFO = "p"
    SOCKET = "s"
    UNKNOWN = "?"

    @classmethod
    def from_mode(cls, mode: int) -> "FileType":
        """Determine file type from mode."""
        if stat.S_ISREG(mode):
            return cls.REGULAR
        elif stat.S_ISDIR(mode):
            return cls.DIRECTORY
        elif stat.S_ISLNK(mode):
            return cls.SYMLINK
        elif stat.S_ISBLK(mode):
            return cls.BLOCK_DEVICE
        elif stat.S_ISCHR(mode):
            return cls.CHARACTER_DEVICE
        elif stat.S_ISFIFO(mode):
            return cls.FIFO
        elif stat.S_ISSOCK(mode):
            return cls.SOCKET
        else:
            return cls.UNKNOWN

    @property
    def mode_bits(self) -> int:
        """Return the S_IFMT bits for this type (0 for UNKNOWN)."""
        return _TYPE_BITS.get(self, 0)


_TYPE_BITS = {
    FileType.REGULAR: stat.S_IFREG,
    FileType.DIRECTORY: stat.S_IFDIR,
    FileType.SYMLINK: stat.S_IFLNK,
    FileType.BLOCK_DEVICE: stat.S_IFBLK,
    FileType.CHARACTER_DEVICE: stat.S_IFCHR,
    FileType.FIFO: stat.S_IFIFO,
    FileType.SOCKET: stat.S_IFSOCK,
}


# Resource limits and defaults
class Limits:
    """Default values used by the session and its collaborators."""

    # Initial capacity hint for the matched path list
    DEFAULT_CAPACITY = 100

    # Ownership lookup cache
    OWNER_CACHE_ENTRIES = 1024
    OWNER_CACHE_TTL = 300  # seconds


# Configuration keys
class ConfigKey:
    """Configuration key constants."""

    ROOT = "treefind"
    CACHE_COMPARE_FILE = "cache_compare_file"
    CRITERIA = "criteria"

    ERRORS = "errors"
    CONTINUE_ON_WALK_ERROR = "continue_on_walk_error"
    CONTINUE_ON_INTERNAL_ERROR = "continue_on_internal_error"

    LOGGING = "logging"
    LOG_LEVEL = "level"
    LOG_FILE = "file"

    OWNERSHIP = "ownership"
    CACHE_ENTRIES = "cache_entries"
    TTL_SECONDS = "ttl_seconds"


# Default configuration values
DEFAULT_CONFIG = {
    ConfigKey.ROOT: {
        ConfigKey.CACHE_COMPARE_FILE: False,
        ConfigKey.ERRORS: {
            ConfigKey.CONTINUE_ON_WALK_ERROR: True,
            ConfigKey.CONTINUE_ON_INTERNAL_ERROR: False,
        },
        ConfigKey.LOGGING: {
            ConfigKey.LOG_LEVEL: "WARNING",
            ConfigKey.LOG_FILE: None,
        },
        ConfigKey.OWNERSHIP: {
            ConfigKey.CACHE_ENTRIES: Limits.OWNER_CACHE_ENTRIES,
            ConfigKey.TTL_SECONDS: Limits.OWNER_CACHE_TTL,
        },
    }
}
