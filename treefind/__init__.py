"""treefind: composable file-tree search.

Walk a directory tree and collect the paths matching a chain of find-style
predicates:

    >>> from treefind import Finder
    >>> finder = Finder()
    >>> finder.name("*.log").size(10, "M", "gt").find("/var/log")

Predicates can also be built individually and combined:

    >>> from treefind import matchers, or_
    >>> finder.add(or_(matchers.name(finder, "*.c"), matchers.name(finder, "*.h")))
"""

from treefind.core.constants import TREEFIND_VERSION, Comparison, ErrorCode, FileTimeType, FileType, SizeUnit
from treefind.core.entry import EntryInfo
from treefind.core.errors import FinderError, FinderStateError, GlobSyntaxError, UnsupportedTimeError
from treefind.core.result import MatchResult, Predicate, WalkControl
from treefind.core.times import FileTimes
from treefind.core.validators import ValidationError
from treefind.finder import (
    Finder,
    WalkStats,
    default_found,
    default_internal_error_handler,
    default_walk_error_handler,
    logging_error_handler,
)
from treefind.infrastructure.config_manager import ConfigError, ConfigManager
from treefind.rules import matchers
from treefind.rules.boolean import and_, not_, or_
from treefind.rules.loader import build_predicate
from treefind.walker import FileSystem, LocalFileSystem, walk_tree

__version__ = TREEFIND_VERSION

__all__ = [
    "__version__",
    # Session
    "Finder",
    "WalkStats",
    "default_found",
    "default_walk_error_handler",
    "default_internal_error_handler",
    "logging_error_handler",
    # Predicates
    "Predicate",
    "MatchResult",
    "WalkControl",
    "matchers",
    "and_",
    "or_",
    "not_",
    "build_predicate",
    # Values
    "EntryInfo",
    "FileTimes",
    "FileTimeType",
    "FileType",
    "SizeUnit",
    "Comparison",
    "ErrorCode",
    # Filesystems
    "FileSystem",
    "LocalFileSystem",
    "walk_tree",
    # Errors
    "FinderError",
    "UnsupportedTimeError",
    "GlobSyntaxError",
    "FinderStateError",
    "ValidationError",
    "ConfigError",
    "ConfigManager",
]
