#!/usr/bin/env python3
"""Traversal controller for treefind.

A Finder is a search session: an ordered chain of predicates, the error
policies and the found callback, plus the state of the current walk (root,
filesystem, start time, matched paths). The chain is a conjunction
evaluated left to right; an empty chain matches everything, as find does.

Per visited entry the controller:
- evaluates the chain, stopping at the first non-match, error or signal
- routes walk-control signals straight to the walk (prune, skip, abort)
- hands predicate errors to `internal_error_handler` once
- calls `found` for full matches and records the path if it agrees

Traversal errors go to `walk_error_handler`. A handler returning True
swallows the error; False makes `find` raise it.

Example:
    >>> finder = Finder()
    >>> finder.name("*.txt").file().find("docs")
    ['docs/a.txt', 'docs/sub/c.txt']
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional, Pattern, Tuple, Union

from treefind.core.constants import Comparison, ConfigKey, FileTimeType, FileType, SizeUnit
from treefind.core.entry import EntryInfo
from treefind.core.errors import FinderError, FinderStateError, error_code_for
from treefind.core.result import MatchResult, Predicate, WalkControl
from treefind.core.times import FileTimes
from treefind.infrastructure.cache_manager import CacheConfig
from treefind.infrastructure.config_manager import ConfigManager, get_config_manager
from treefind.infrastructure.logger import Logger, LogLevel, configure_logging, get_logger
from treefind.ownership import OwnershipResolver
from treefind.rules import boolean, matchers
from treefind.rules.loader import build_predicate
from treefind.walker import FileSystem, LocalFileSystem, walk_tree

# found(path, entry): True records the path, False rejects it, a signal steers the walk
FoundFn = Callable[[str, EntryInfo], Union[bool, WalkControl, MatchResult]]
# handler(err): True swallows the error and continues, False stops the walk
ErrorHandler = Callable[[FinderError], bool]


def default_found(path: str, entry: EntryInfo) -> bool:
    """Record every entry that passes the predicate chain."""
    return True


def logging_error_handler(
    kind: str, proceed: bool, level: LogLevel, logger: Optional[Logger] = None
) -> ErrorHandler:
    """Build an error handler that logs the error and returns `proceed`.

    Args:
        kind: Error kind used in the log message ("walk", "internal")
        proceed: Value the handler returns
        level: Log level for the message
        logger: Logger to write to; the global logger if omitted
    """
    outcome = "continuing" if proceed else "stopping"

    def handle(err: FinderError) -> bool:
        (logger or get_logger()).log(
            level,
            f"{kind} error, {outcome}",
            error=err.err if err.err is not None else str(err),
            **err.context(),
        )
        return proceed

    return handle


default_walk_error_handler = logging_error_handler("walk", True, LogLevel.WARNING)
default_internal_error_handler = logging_error_handler("internal", False, LogLevel.ERROR)


@dataclass
class WalkStats:
    """Counters kept across the walks of a session until reset()."""

    visited: int = 0
    matched: int = 0
    pruned: int = 0
    walk_errors: int = 0  # Suppressed by walk_error_handler
    internal_errors: int = 0  # Suppressed by internal_error_handler

    def to_dict(self) -> Dict[str, int]:
        return {
            "visited": self.visited,
            "matched": self.matched,
            "pruned": self.pruned,
            "walk_errors": self.walk_errors,
            "internal_errors": self.internal_errors,
        }


class Finder:
    """A file-tree search session.

    Attributes:
        paths: Matched paths in visitation order; grows across walks until reset()
        root: Root of the current or last walk
        filesystem: Filesystem of the current or last walk
        started: Start time of the current or last walk (UTC)
        aborted: True if the last walk was ended by an ABORT signal
        cache_compare_file: Read `newer` reference times once per walk
        stats: WalkStats counters
        owners: uid/gid name resolver used by owner/group
        found: Callback deciding whether a full match is recorded
        walk_error_handler: Policy for traversal errors
        internal_error_handler: Policy for predicate errors
    """

    def __init__(
        self,
        found: Optional[FoundFn] = None,
        walk_error_handler: Optional[ErrorHandler] = None,
        internal_error_handler: Optional[ErrorHandler] = None,
        cache_compare_file: bool = False,
        owners: Optional[OwnershipResolver] = None,
        logger: Optional[Logger] = None,
    ):
        self.logger = logger or get_logger()
        self.found: FoundFn = found or default_found
        self.walk_error_handler: ErrorHandler = walk_error_handler or logging_error_handler(
            "walk", True, LogLevel.WARNING, self.logger
        )
        self.internal_error_handler: ErrorHandler = internal_error_handler or logging_error_handler(
            "internal", False, LogLevel.ERROR, self.logger
        )
        self.cache_compare_file = cache_compare_file
        self.owners = owners or OwnershipResolver()

        self.paths: List[str] = []
        self.root = ""
        self.filesystem: FileSystem = LocalFileSystem()
        self.started: Optional[datetime] = None
        self.aborted = False
        self.stats = WalkStats()

        self._predicates: List[Predicate] = []
        self._compare_times: Dict[str, FileTimes] = {}
        self._walking = False

    @classmethod
    def from_config(cls, config: Optional[ConfigManager] = None) -> "Finder":
        """Build a session from configuration.

        Applies the `treefind` section: error policies, logging, the
        ownership cache, cache_compare_file and, if present, `criteria`.

        Raises:
            ConfigError: If the configuration is invalid
            ValidationError: If `criteria` cannot be built
        """
        config = config or get_config_manager()
        config.validate()
        section = config.section()

        log_section = section.get(ConfigKey.LOGGING, {})
        logger = configure_logging(
            log_section.get(ConfigKey.LOG_LEVEL) or LogLevel.WARNING,
            log_section.get(ConfigKey.LOG_FILE),
        )

        errors = section.get(ConfigKey.ERRORS, {})
        ownership = section.get(ConfigKey.OWNERSHIP, {})
        cache_config = CacheConfig()
        if ownership.get(ConfigKey.CACHE_ENTRIES) is not None:
            cache_config.max_entries = ownership[ConfigKey.CACHE_ENTRIES]
        if ownership.get(ConfigKey.TTL_SECONDS) is not None:
            cache_config.ttl_seconds = ownership[ConfigKey.TTL_SECONDS]

        finder = cls(
            walk_error_handler=logging_error_handler(
                "walk", errors.get(ConfigKey.CONTINUE_ON_WALK_ERROR, True), LogLevel.WARNING, logger
            ),
            internal_error_handler=logging_error_handler(
                "internal", errors.get(ConfigKey.CONTINUE_ON_INTERNAL_ERROR, False), LogLevel.ERROR, logger
            ),
            cache_compare_file=section.get(ConfigKey.CACHE_COMPARE_FILE, False),
            owners=OwnershipResolver(cache_config),
            logger=logger,
        )

        criteria = section.get(ConfigKey.CRITERIA)
        if criteria:
            finder.add(build_predicate(finder, criteria))
        return finder

    # Predicate chain

    @property
    def predicates(self) -> Tuple[Predicate, ...]:
        return tuple(self._predicates)

    def add(self, predicate: Predicate) -> "Finder":
        """Append a predicate to the chain.

        Raises:
            FinderStateError: If a walk is in progress
        """
        if self._walking:
            raise FinderStateError("cannot add predicates while a walk is in progress")
        self._predicates.append(predicate)
        return self

    def evaluate(self, path: str, entry: EntryInfo) -> MatchResult:
        """Evaluate the predicate chain for one entry."""
        return boolean.evaluate_all(self._predicates, path, entry)

    # Walking

    def find(self, root: str) -> List[str]:
        """Walk `root` on the local filesystem and return the matched paths.

        Raises:
            FinderError: If an error policy stopped the walk
            FinderStateError: If called from inside a running walk
        """
        return self.find_fs(root, LocalFileSystem())

    def find_fs(self, root: str, filesystem: FileSystem) -> List[str]:
        """Walk `root` on `filesystem` and return the matched paths.

        Matches of earlier walks on this session stay in the result until
        reset(). An ABORT signal ends the walk without error and sets
        `aborted`.

        Raises:
            FinderError: If an error policy stopped the walk
            FinderStateError: If called from inside a running walk
        """
        if self._walking:
            raise FinderStateError("a walk is already in progress")

        self.root = root
        self.filesystem = filesystem
        self.started = datetime.now(timezone.utc)
        self.aborted = False
        self._compare_times.clear()

        self.logger.debug("walk started", root=root, predicates=len(self._predicates))
        self._walking = True
        try:
            with self.logger.add_context(root=root):
                completed = walk_tree(filesystem, root, self._visit, self._walk_error)
        finally:
            self._walking = False

        self.aborted = not completed
        self.logger.debug("walk finished", root=root, aborted=self.aborted, **self.stats.to_dict())
        return list(self.paths)

    def reset(self) -> None:
        """Forget matches and walk state; keep predicates, callback and handlers.

        Raises:
            FinderStateError: If a walk is in progress
        """
        if self._walking:
            raise FinderStateError("cannot reset while a walk is in progress")
        self.paths = []
        self.root = ""
        self.started = None
        self.aborted = False
        self.stats = WalkStats()
        self._compare_times.clear()

    def now(self) -> datetime:
        """The walk start time, or the current time outside a walk."""
        return self.started or datetime.now(timezone.utc)

    def path_depth(self, path: str) -> int:
        """Depth of `path` below the walk root (the root itself is 0)."""
        tail = path[len(self.root):] if path.startswith(self.root) else path
        components = tail.split(self.filesystem.sep)
        if components[0] == "":
            return len(components) - 1
        return len(components)

    def reference_times(self, reference: str) -> FileTimes:
        """Timestamps of a `newer` reference, memoised per walk if enabled.

        Raises:
            OSError: If the reference cannot be stat'ed
        """
        if not self.cache_compare_file:
            return self.filesystem.stat(reference).times

        times = self._compare_times.get(reference)
        if times is None:
            times = self.filesystem.stat(reference).times
            self._compare_times[reference] = times
        return times

    def _visit(self, path: str, entry: EntryInfo) -> Optional[WalkControl]:
        self.stats.visited += 1
        try:
            result = self.evaluate(path, entry)
        except FinderStateError:
            raise
        except FinderError as e:
            self._internal_error(e)
            return None
        except Exception as e:
            self._internal_error(FinderError("predicate failed", matcher="predicate", path=path, err=e, entry=entry))
            return None
        return self._settle(path, entry, result, self._record)

    def _record(self, path: str, entry: EntryInfo) -> Optional[WalkControl]:
        try:
            outcome = self.found(path, entry)
        except FinderStateError:
            raise
        except FinderError as e:
            self._internal_error(e)
            return None
        except Exception as e:
            self._internal_error(FinderError("found callback failed", matcher="found", path=path, err=e, entry=entry))
            return None

        if isinstance(outcome, WalkControl):
            outcome = MatchResult.signal(outcome)
        elif not isinstance(outcome, MatchResult):
            outcome = MatchResult.of(bool(outcome))
        return self._settle(path, entry, outcome, self._append)

    def _append(self, path: str, entry: EntryInfo) -> None:
        self.paths.append(path)
        self.stats.matched += 1

    def _settle(
        self,
        path: str,
        entry: EntryInfo,
        result: MatchResult,
        on_match: Callable[[str, EntryInfo], Optional[WalkControl]],
    ) -> Optional[WalkControl]:
        if result.is_control:
            return self._signal(path, result.control)
        if result.is_error:
            self._internal_error(result.error)
            return None
        if result.matched:
            return on_match(path, entry)
        return None

    def _signal(self, path: str, control: WalkControl) -> WalkControl:
        if control is WalkControl.PRUNE:
            self.stats.pruned += 1
        elif control is WalkControl.ABORT:
            self.logger.info("walk aborted", path=path)
        return control

    def _internal_error(self, error: FinderError) -> None:
        if not self.internal_error_handler(error):
            raise error
        self.stats.internal_errors += 1

    def _walk_error(self, path: str, entry: Optional[EntryInfo], err: OSError) -> Optional[WalkControl]:
        error = FinderError(matcher="walk", path=path, err=err, entry=entry, error_code=error_code_for(err))
        proceed = self.walk_error_handler(error)
        # Nothing to walk if the root itself is unreadable
        if entry is None and path == self.root:
            raise error
        if not proceed:
            raise error
        self.stats.walk_errors += 1
        return None

    # Fluent predicate builders

    def name(self, pattern: str) -> "Finder":
        return self.add(matchers.name(self, pattern))

    def iname(self, pattern: str) -> "Finder":
        return self.add(matchers.iname(self, pattern))

    def path(self, pattern: str) -> "Finder":
        return self.add(matchers.path(self, pattern))

    def ipath(self, pattern: str) -> "Finder":
        return self.add(matchers.ipath(self, pattern))

    def regex(self, pattern: Union[str, Pattern[str]]) -> "Finder":
        return self.add(matchers.regex(self, pattern))

    def type(self, kind: Union[FileType, str, int]) -> "Finder":
        return self.add(matchers.type_(self, kind))

    def dir(self) -> "Finder":
        return self.add(matchers.dir(self))

    def file(self) -> "Finder":
        return self.add(matchers.file(self))

    def symlink(self) -> "Finder":
        return self.add(matchers.symlink(self))

    def depth(self, n: int) -> "Finder":
        return self.add(matchers.depth(self, n))

    def min_depth(self, n: int) -> "Finder":
        return self.add(matchers.min_depth(self, n))

    def max_depth(self, n: int) -> "Finder":
        return self.add(matchers.max_depth(self, n))

    def owner(self, user: Union[str, int]) -> "Finder":
        return self.add(matchers.owner(self, user))

    def group(self, group_name: Union[str, int]) -> "Finder":
        return self.add(matchers.group(self, group_name))

    def size(
        self,
        amount: int,
        unit: Union[SizeUnit, str, int] = SizeUnit.BYTE,
        comparison: Union[Comparison, str] = Comparison.EQUAL,
    ) -> "Finder":
        return self.add(matchers.size(self, amount, unit, comparison))

    def empty(self) -> "Finder":
        return self.add(matchers.empty(self))

    def sparse(self) -> "Finder":
        return self.add(matchers.sparse(self))

    def newer(
        self,
        time_type: Union[FileTimeType, str],
        reference: str,
        reference_time_type: Optional[Union[FileTimeType, str]] = None,
    ) -> "Finder":
        return self.add(matchers.newer(self, time_type, reference, reference_time_type))

    def amin(self, duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL) -> "Finder":
        return self.add(matchers.amin(self, duration, comparison))

    def cmin(self, duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL) -> "Finder":
        return self.add(matchers.cmin(self, duration, comparison))

    def mmin(self, duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL) -> "Finder":
        return self.add(matchers.mmin(self, duration, comparison))

    def bmin(self, duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL) -> "Finder":
        return self.add(matchers.bmin(self, duration, comparison))

    def prune(self) -> "Finder":
        return self.add(matchers.prune(self))

    def deadline(self, seconds: float) -> "Finder":
        return self.add(matchers.deadline(self, seconds))

    def and_(self, *predicates: Predicate) -> "Finder":
        return self.add(boolean.and_(*predicates))

    def or_(self, *predicates: Predicate) -> "Finder":
        return self.add(boolean.or_(*predicates))

    def not_(self, predicate: Predicate) -> "Finder":
        return self.add(boolean.not_(predicate))
