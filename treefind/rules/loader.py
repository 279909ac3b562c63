#!/usr/bin/env python3
"""Build predicates from declarative criteria.

Criteria are plain data, typically read from the `treefind.criteria` list
of a YAML config file:

    criteria:
      - any:
          - all: [{name: .git}, prune]
          - {name: "*.py"}
      - {size: "+10k"}
      - {mmin: {minutes: 30, compare: lt}}
      - {newer: {reference: build.stamp, kind: m}}

A criterion is a flag name ("dir", "prune", ...), a single-key mapping
naming a matcher and its argument, or a list (all of its items must
match). Values are validated here so a bad document fails when loaded,
not halfway through a walk.

Example:
    >>> predicate = build_predicate(finder, [{"name": "*.txt"}, "file"])
    >>> finder.add(predicate)
"""

import re
from typing import TYPE_CHECKING, Any, Callable, Dict

from treefind.core.constants import Comparison, SizeUnit
from treefind.core.errors import GlobSyntaxError
from treefind.core.result import Predicate
from treefind.core.validators import (
    ValidationError,
    validate_comparison,
    validate_depth,
    validate_file_type,
    validate_regex,
    validate_size_expression,
    validate_time_type,
)
from treefind.rules import boolean, matchers
from treefind.rules.patterns import compile_glob

if TYPE_CHECKING:
    from treefind.finder import Finder

_MINUTES_EXPR = re.compile(r"^([+-]?)(\d+(?:\.\d+)?)$")

# Criteria that take no argument
_FLAGS: Dict[str, Callable[["Finder"], Predicate]] = {
    "dir": matchers.dir,
    "file": matchers.file,
    "symlink": matchers.symlink,
    "empty": matchers.empty,
    "sparse": matchers.sparse,
    "prune": matchers.prune,
}


def build_predicate(finder: "Finder", criterion: Any) -> Predicate:
    """Convert a criterion document to a predicate.

    Args:
        finder: Session the predicates belong to
        criterion: Flag name, single-key mapping or list of criteria

    Returns:
        Predicate implementing the criterion

    Raises:
        ValidationError: If the criterion is malformed
    """
    if isinstance(criterion, list):
        return boolean.and_(*[build_predicate(finder, item) for item in criterion])

    if isinstance(criterion, str):
        if criterion not in _FLAGS:
            raise ValidationError(f"Unknown criterion: {criterion}")
        return _FLAGS[criterion](finder)

    if not isinstance(criterion, dict) or len(criterion) != 1:
        raise ValidationError(f"Criterion must be a name, a list or a single-key mapping: {criterion!r}")

    ((key, value),) = criterion.items()
    if key in _FLAGS:
        if value is not True:
            raise ValidationError(f"Criterion {key} only accepts true: {value!r}")
        return _FLAGS[key](finder)

    builder = _BUILDERS.get(key)
    if builder is None:
        raise ValidationError(f"Unknown criterion: {key}")
    return builder(finder, key, value)


def _require_str(key: str, value: Any) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"Criterion {key} requires a non-empty string: {value!r}")
    return value


def _build_glob(finder: "Finder", key: str, value: Any) -> Predicate:
    pattern = _require_str(key, value)
    try:
        compile_glob(pattern)
    except GlobSyntaxError as e:
        raise ValidationError(f"Criterion {key}: {e}")
    return getattr(matchers, key)(finder, pattern)


def _build_regex(finder: "Finder", key: str, value: Any) -> Predicate:
    return matchers.regex(finder, validate_regex(_require_str(key, value)))


def _build_type(finder: "Finder", key: str, value: Any) -> Predicate:
    return matchers.type_(finder, validate_file_type(_require_str(key, value)))


def _build_depth(finder: "Finder", key: str, value: Any) -> Predicate:
    return getattr(matchers, key)(finder, validate_depth(value))


def _build_ownership(finder: "Finder", key: str, value: Any) -> Predicate:
    if isinstance(value, bool) or not isinstance(value, (str, int)) or value == "":
        raise ValidationError(f"Criterion {key} requires a name or numeric id: {value!r}")
    return getattr(matchers, key)(finder, value)


def _build_size(finder: "Finder", key: str, value: Any) -> Predicate:
    if isinstance(value, int) and not isinstance(value, bool):
        return matchers.size(finder, value, SizeUnit.BYTE, Comparison.EQUAL)
    comparison, amount, unit = validate_size_expression(value)
    return matchers.size(finder, amount, unit, comparison)


def _build_newer(finder: "Finder", key: str, value: Any) -> Predicate:
    if isinstance(value, str):
        return matchers.newer(finder, "m", _require_str(key, value))
    if not isinstance(value, dict):
        raise ValidationError(f"Criterion newer requires a path or a mapping: {value!r}")

    unknown = set(value) - {"reference", "kind", "reference_kind"}
    if unknown:
        raise ValidationError(f"Unknown newer fields: {', '.join(sorted(unknown))}")
    reference = _require_str("newer.reference", value.get("reference"))
    kind = validate_time_type(value.get("kind", "m"))
    reference_kind = value.get("reference_kind")
    if reference_kind is not None:
        reference_kind = validate_time_type(reference_kind)
    return matchers.newer(finder, kind, reference, reference_kind)


def _build_minutes(finder: "Finder", key: str, value: Any) -> Predicate:
    """amin/cmin/mmin/bmin: 5 (exactly), "+5" (more than), "-5" (less than)
    or {minutes: 5, compare: lt}."""
    if isinstance(value, dict):
        unknown = set(value) - {"minutes", "compare"}
        if unknown:
            raise ValidationError(f"Unknown {key} fields: {', '.join(sorted(unknown))}")
        minutes = value.get("minutes")
        comparison = validate_comparison(value.get("compare", Comparison.EQUAL))
    elif isinstance(value, str):
        match = _MINUTES_EXPR.match(value.strip())
        if not match:
            raise ValidationError(f"Invalid {key} expression: {value}")
        comparison = validate_comparison(match.group(1))
        minutes = float(match.group(2))
    else:
        minutes = value
        comparison = Comparison.EQUAL

    if isinstance(minutes, bool) or not isinstance(minutes, (int, float)) or minutes < 0:
        raise ValidationError(f"Criterion {key} requires a non-negative number of minutes: {minutes!r}")
    return getattr(matchers, key)(finder, minutes, comparison)


def _build_deadline(finder: "Finder", key: str, value: Any) -> Predicate:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ValidationError(f"Criterion deadline requires a positive number of seconds: {value!r}")
    return matchers.deadline(finder, value)


def _build_all(finder: "Finder", key: str, value: Any) -> Predicate:
    if not isinstance(value, list):
        raise ValidationError(f"Criterion {key} requires a list")
    return boolean.and_(*[build_predicate(finder, item) for item in value])


def _build_any(finder: "Finder", key: str, value: Any) -> Predicate:
    if not isinstance(value, list):
        raise ValidationError(f"Criterion {key} requires a list")
    return boolean.or_(*[build_predicate(finder, item) for item in value])


def _build_not(finder: "Finder", key: str, value: Any) -> Predicate:
    return boolean.not_(build_predicate(finder, value))


_BUILDERS: Dict[str, Callable[["Finder", str, Any], Predicate]] = {
    "name": _build_glob,
    "iname": _build_glob,
    "path": _build_glob,
    "ipath": _build_glob,
    "regex": _build_regex,
    "type": _build_type,
    "depth": _build_depth,
    "min_depth": _build_depth,
    "max_depth": _build_depth,
    "owner": _build_ownership,
    "group": _build_ownership,
    "size": _build_size,
    "newer": _build_newer,
    "amin": _build_minutes,
    "cmin": _build_minutes,
    "mmin": _build_minutes,
    "bmin": _build_minutes,
    "deadline": _build_deadline,
    "all": _build_all,
    "any": _build_any,
    "not": _build_not,
}
