"""Logical composition of predicates.

and_, or_ and not_ build new predicates from existing ones. Operands are
evaluated left to right and evaluation stops at the first result that
settles the outcome. An error or walk-control signal from an operand is
returned unchanged and ends evaluation; not_ never inverts either.

Example:
    >>> finder.add(or_(name(finder, "*.py"), and_(file(finder), empty(finder))))
"""

from typing import Iterable

from treefind.core.entry import EntryInfo
from treefind.core.result import FALSE, TRUE, MatchResult, Predicate


def evaluate_all(predicates: Iterable[Predicate], path: str, entry: EntryInfo) -> MatchResult:
    """Conjunction of `predicates` for one entry; empty input matches."""
    for predicate in predicates:
        result = predicate(path, entry)
        if not result.decided or not result.matched:
            return result
    return TRUE


def evaluate_any(predicates: Iterable[Predicate], path: str, entry: EntryInfo) -> MatchResult:
    """Disjunction of `predicates` for one entry; empty input does not match."""
    for predicate in predicates:
        result = predicate(path, entry)
        if not result.decided or result.matched:
            return result
    return FALSE


def and_(*predicates: Predicate) -> Predicate:
    """Match when every operand matches."""
    operands = tuple(predicates)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return evaluate_all(operands, path, entry)

    return match


def or_(*predicates: Predicate) -> Predicate:
    """Match when any operand matches."""
    operands = tuple(predicates)

    def match(path: str, entry: EntryInfo) -> MatchResult:
        return evaluate_any(operands, path, entry)

    return match


def not_(predicate: Predicate) -> Predicate:
    """Invert a match decision; errors and signals pass through."""

    def match(path: str, entry: EntryInfo) -> MatchResult:
        result = predicate(path, entry)
        if not result.decided:
            return result
        return MatchResult.of(not result.matched)

    return match
