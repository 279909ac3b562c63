#!/usr/bin/env python3
"""Predicate constructors for treefind.

Every constructor takes the finder session first, then its own settings,
and returns a Predicate: a callable `(path, entry) -> MatchResult`.
Configuration problems (bad glob, unknown unit or comparison) do not raise
at construction; the predicate reports them as an error on evaluation so
that the session's internal error policy decides what happens.

Matchers mirror Unix find:
- name / iname / path / ipath / regex: pattern tests
- dir / file / symlink / type_: file type tests
- depth / min_depth / max_depth: position relative to the walk root
- owner / group: ownership by name or numeric id
- size / empty / sparse: size tests
- newer / amin / cmin / mmin / bmin: timestamp tests
- prune / deadline: walk control

Example:
    >>> finder = Finder()
    >>> finder.add(name(finder, "*.txt")).add(size(finder, 2, SizeUnit.KB, Comparison.LESS_THAN))
    >>> finder.find("docs")
"""

import math
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable, Optional, Pattern, Union

from treefind.core.constants import Comparison, ErrorCode, FileTimeType, FileType, SizeUnit, STAT_BLOCK_SIZE
from treefind.core.entry import EntryInfo
from treefind.core.errors import FinderError, GlobSyntaxError, UnsupportedTimeError, error_code_for
from treefind.core.result import FALSE, TRUE, MatchResult, Predicate, WalkControl
from treefind.core.validators import (
    ValidationError,
    validate_comparison,
    validate_depth,
    validate_file_type,
    validate_regex,
    validate_time_type,
)
from treefind.rules.patterns import compile_glob

if TYPE_CHECKING:
    from treefind.finder import Finder


def _failing(matcher: str, info: str, err: Exception) -> Predicate:
    """Predicate that reports a configuration error on every evaluation."""

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return MatchResult.failure(
            FinderError(info, matcher=matcher, path=path, err=err, entry=entry, error_code=ErrorCode.INVALID_INPUT)
        )

    return match


def _compare(actual: int, expected: int, comparison: Comparison) -> bool:
    if comparison == Comparison.LESS_THAN:
        return actual < expected
    elif comparison == Comparison.GREATER_THAN:
        return actual > expected
    return actual == expected


# Pattern matchers


def _glob(matcher: str, pattern: str, case_sensitive: bool, subject: Callable[[str, EntryInfo], str]) -> Predicate:
    try:
        glob = compile_glob(pattern, case_sensitive=case_sensitive)
    except GlobSyntaxError as e:
        return _failing(matcher, pattern, e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return MatchResult.of(glob.matches(subject(path, entry)))

    return match


def _entry_name(path: str, entry: EntryInfo) -> str:
    return entry.name


def _whole_path(path: str, entry: EntryInfo) -> str:
    return path


def name(finder: "Finder", pattern: str) -> Predicate:
    """Match the final path component against a shell glob (find -name)."""
    return _glob("name", pattern, True, _entry_name)


def iname(finder: "Finder", pattern: str) -> Predicate:
    """Case-insensitive `name` (find -iname)."""
    return _glob("iname", pattern, False, _entry_name)


def path(finder: "Finder", pattern: str) -> Predicate:
    """Match the whole path against a shell glob (find -path).

    `*` does not cross separators, so "src/*.py" only matches direct
    children of src.
    """
    return _glob("path", pattern, True, _whole_path)


def ipath(finder: "Finder", pattern: str) -> Predicate:
    """Case-insensitive `path` (find -ipath)."""
    return _glob("ipath", pattern, False, _whole_path)


def regex(finder: "Finder", pattern: Union[str, Pattern[str]]) -> Predicate:
    """Search the whole path with a regular expression (find -regex).

    Args:
        finder: Session the predicate belongs to
        pattern: Regex source or compiled pattern; use (?i) for case folding
    """
    try:
        compiled = validate_regex(pattern)
    except ValidationError as e:
        return _failing("regex", str(pattern), e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return MatchResult.of(compiled.search(path) is not None)

    return match


# Type matchers


def type_(finder: "Finder", kind: Union[FileType, str, int]) -> Predicate:
    """Match entries of one file type (find -type).

    Args:
        finder: Session the predicate belongs to
        kind: FileType, its letter ("f", "d", "l", ...) or raw S_IFMT bits
    """
    if isinstance(kind, int) and not isinstance(kind, bool):
        bits = kind
    else:
        try:
            bits = validate_file_type(kind).mode_bits
        except ValidationError as e:
            return _failing("type", str(kind), e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return MatchResult.of(entry.type_bits == bits)

    return match


def dir(finder: "Finder") -> Predicate:
    """Match directories."""
    return type_(finder, FileType.DIRECTORY)


def file(finder: "Finder") -> Predicate:
    """Match regular files."""
    return type_(finder, FileType.REGULAR)


def symlink(finder: "Finder") -> Predicate:
    """Match symbolic links."""
    return type_(finder, FileType.SYMLINK)


# Depth matchers


def _depth(matcher: str, finder: "Finder", bound: int, accept: Callable[[int, int], bool]) -> Predicate:
    try:
        bound = validate_depth(bound)
    except ValidationError as e:
        return _failing(matcher, str(bound), e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return MatchResult.of(accept(finder.path_depth(path), bound))

    return match


def depth(finder: "Finder", n: int) -> Predicate:
    """Match entries exactly `n` levels below the walk root (root is 0)."""
    return _depth("depth", finder, n, lambda d, b: d == b)


def min_depth(finder: "Finder", n: int) -> Predicate:
    """Match entries at least `n` levels below the walk root."""
    return _depth("min_depth", finder, n, lambda d, b: d >= b)


def max_depth(finder: "Finder", n: int) -> Predicate:
    """Match entries at most `n` levels below the walk root.

    The walk still descends past `n`; add `prune` to stop it.
    """
    return _depth("max_depth", finder, n, lambda d, b: d <= b)


# Ownership matchers


def owner(finder: "Finder", user: Union[str, int]) -> Predicate:
    """Match entries owned by a user name or numeric uid (find -user)."""
    wanted = str(user)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        if entry.st_uid is None:
            return MatchResult.failure(
                FinderError(wanted, matcher="owner", path=path, entry=entry, error_code=ErrorCode.UNSUPPORTED)
            )
        return MatchResult.of(finder.owners.user(entry.st_uid).matches(wanted))

    return match


def group(finder: "Finder", group_name: Union[str, int]) -> Predicate:
    """Match entries belonging to a group name or numeric gid (find -group)."""
    wanted = str(group_name)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        if entry.st_gid is None:
            return MatchResult.failure(
                FinderError(wanted, matcher="group", path=path, entry=entry, error_code=ErrorCode.UNSUPPORTED)
            )
        return MatchResult.of(finder.owners.group(entry.st_gid).matches(wanted))

    return match


# Size matchers


def _size_unit(unit: Union[SizeUnit, str, int]) -> int:
    if isinstance(unit, str):
        try:
            return SizeUnit.from_suffix(unit)
        except KeyError:
            raise ValidationError(f"Invalid size unit: {unit}. Must be one of c, b, k, M, G, T, P")
    if isinstance(unit, int) and not isinstance(unit, bool) and unit > 0:
        return int(unit)
    raise ValidationError(f"Invalid size unit: {unit!r}")


def size(
    finder: "Finder",
    amount: int,
    unit: Union[SizeUnit, str, int] = SizeUnit.BYTE,
    comparison: Union[Comparison, str] = Comparison.EQUAL,
) -> Predicate:
    """Compare the entry size, rounded up to whole units (find -size).

    A 1.5 KB file is 2 in KB units, so size(finder, 1, SizeUnit.KB) does not
    match it.

    Args:
        finder: Session the predicate belongs to
        amount: Size to compare against, in units
        unit: SizeUnit, `find -size` suffix letter or a byte count
        comparison: LESS_THAN, GREATER_THAN or EQUAL
    """
    try:
        unit_bytes = _size_unit(unit)
        mode = validate_comparison(comparison)
    except ValidationError as e:
        return _failing("size", f"{amount} {unit}", e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        scaled = -(-entry.st_size // unit_bytes)
        return MatchResult.of(_compare(scaled, amount, mode))

    return match


def empty(finder: "Finder") -> Predicate:
    """Match empty regular files and directories without entries (find -empty)."""

    def match(path: str, entry: EntryInfo) -> MatchResult:
        if entry.is_dir:
            try:
                names = finder.filesystem.listdir(path)
            except OSError as e:
                return MatchResult.failure(
                    FinderError(
                        "cannot list directory",
                        matcher="empty",
                        path=path,
                        err=e,
                        entry=entry,
                        error_code=error_code_for(e),
                    )
                )
            return MatchResult.of(not names)
        if entry.is_file:
            return MatchResult.of(entry.st_size == 0)
        return FALSE

    return match


def sparse(finder: "Finder") -> Predicate:
    """Match files occupying fewer allocated bytes than their size."""

    def match(path: str, entry: EntryInfo) -> MatchResult:
        if entry.st_blocks is None:
            return FALSE
        return MatchResult.of(entry.st_blocks * STAT_BLOCK_SIZE < entry.st_size)

    return match


# Time matchers


def newer(
    finder: "Finder",
    time_type: Union[FileTimeType, str],
    reference: str,
    reference_time_type: Optional[Union[FileTimeType, str]] = None,
) -> Predicate:
    """Match entries whose timestamp is strictly after the reference's (find -newerXY).

    Args:
        finder: Session the predicate belongs to
        time_type: Timestamp of the visited entry to compare (X)
        reference: Path of the reference entry, stat'ed through the session filesystem
        reference_time_type: Timestamp of the reference (Y); defaults to time_type

    The reference is stat'ed on every evaluation unless the session has
    `cache_compare_file` set, in which case its times are read once per walk.
    """
    try:
        kind = validate_time_type(time_type)
        ref_kind = validate_time_type(reference_time_type if reference_time_type is not None else time_type)
    except ValidationError as e:
        return _failing("newer", reference, e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        try:
            ref_times = finder.reference_times(reference)
        except OSError as e:
            return MatchResult.failure(
                FinderError(
                    f"cannot stat reference {reference}",
                    matcher="newer",
                    path=path,
                    err=e,
                    entry=entry,
                    error_code=error_code_for(e),
                )
            )

        try:
            entry_time = entry.times.get_ns(kind)
            ref_time = ref_times.get_ns(ref_kind)
        except UnsupportedTimeError as e:
            return MatchResult.failure(UnsupportedTimeError(e.time_type, matcher="newer", path=path, entry=entry))

        return MatchResult.of(entry_time > ref_time)

    return match


def _whole_minutes(duration: Union[timedelta, int, float]) -> int:
    """Round a duration to the nearest whole minute, halves rounding up."""
    if isinstance(duration, timedelta):
        seconds = duration.total_seconds()
    elif isinstance(duration, (int, float)) and not isinstance(duration, bool):
        seconds = duration * 60
    else:
        raise ValidationError(f"Duration must be timedelta or minutes, got {type(duration).__name__}")
    if seconds < 0:
        raise ValidationError(f"Duration cannot be negative: {duration}")
    return math.floor(seconds / 60 + 0.5)


def _relative_time(
    matcher: str,
    finder: "Finder",
    kind: FileTimeType,
    duration: Union[timedelta, int, float],
    comparison: Union[Comparison, str],
) -> Predicate:
    try:
        wanted = _whole_minutes(duration)
        mode = validate_comparison(comparison)
    except ValidationError as e:
        return _failing(matcher, str(duration), e)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        try:
            then = entry.times.get(kind)
        except UnsupportedTimeError:
            return MatchResult.failure(UnsupportedTimeError(kind, matcher=matcher, path=path, entry=entry))

        age = _whole_minutes(abs(finder.now() - then))
        return MatchResult.of(_compare(age, wanted, mode))

    return match


def amin(
    finder: "Finder", duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL
) -> Predicate:
    """Compare minutes since last access (find -amin).

    Args:
        finder: Session the predicate belongs to
        duration: timedelta, or a number of minutes
        comparison: LESS_THAN, GREATER_THAN or EQUAL
    """
    return _relative_time("amin", finder, FileTimeType.ACCESSED, duration, comparison)


def cmin(
    finder: "Finder", duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL
) -> Predicate:
    """Compare minutes since last metadata change (find -cmin)."""
    return _relative_time("cmin", finder, FileTimeType.CHANGED, duration, comparison)


def mmin(
    finder: "Finder", duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL
) -> Predicate:
    """Compare minutes since last modification (find -mmin)."""
    return _relative_time("mmin", finder, FileTimeType.MODIFIED, duration, comparison)


def bmin(
    finder: "Finder", duration: Union[timedelta, int, float], comparison: Union[Comparison, str] = Comparison.EQUAL
) -> Predicate:
    """Compare minutes since creation. Errors where birth time is not recorded."""
    return _relative_time("bmin", finder, FileTimeType.CREATED, duration, comparison)


# Walk control


def prune(finder: "Finder") -> Predicate:
    """Keep the walk out of every directory reaching this predicate (find -prune).

    Pruned entries are never reported. Place it after a filter, e.g.
    or_(and_(name(f, ".git"), prune(f)), file(f)).
    """

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return MatchResult.signal(WalkControl.PRUNE)

    return match


def deadline(finder: "Finder", seconds: float) -> Predicate:
    """Abort the walk once it has run longer than `seconds`."""
    limit = timedelta(seconds=seconds)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        if datetime.now(timezone.utc) - finder.now() > limit:
            return MatchResult.signal(WalkControl.ABORT)
        return TRUE

    return match
