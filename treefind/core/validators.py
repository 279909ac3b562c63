"""
treefind Core: Input Validators.

Validation for configuration documents and for the scalar values used to
configure matchers (size expressions, comparisons, time kinds, depths).
"""
import re
from typing import Any, Dict, Pattern, Tuple, Union

from treefind.core.constants import (
    Comparison,
    ConfigKey,
    ErrorCode,
    FileTimeType,
    FileType,
    SizeUnit,
)


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


_SIZE_EXPR = re.compile(r"^([+-]?)(\d+)([a-zA-Z]?)$")
_COMPARISON_ALIASES = {
    "lt": Comparison.LESS_THAN,
    "<": Comparison.LESS_THAN,
    "-": Comparison.LESS_THAN,
    "gt": Comparison.GREATER_THAN,
    ">": Comparison.GREATER_THAN,
    "+": Comparison.GREATER_THAN,
    "eq": Comparison.EQUAL,
    "==": Comparison.EQUAL,
    "": Comparison.EQUAL,
}


def validate_config(config: Dict[str, Any]) -> bool:
    """Validate the `treefind` configuration section.

    Args:
        config: Configuration dictionary (the value under the `treefind` key)

    Returns:
        True if valid

    Raises:
        ValidationError: If configuration is invalid
    """
    if not isinstance(config, dict):
        raise ValidationError("Configuration must be a dictionary")

    if ConfigKey.CACHE_COMPARE_FILE in config:
        if not isinstance(config[ConfigKey.CACHE_COMPARE_FILE], bool):
            raise ValidationError(
                f"{ConfigKey.CACHE_COMPARE_FILE} must be boolean: "
                f"{config[ConfigKey.CACHE_COMPARE_FILE]}"
            )

    if ConfigKey.ERRORS in config:
        validate_error_config(config[ConfigKey.ERRORS])

    if ConfigKey.LOGGING in config:
        validate_logging_config(config[ConfigKey.LOGGING])

    if ConfigKey.OWNERSHIP in config:
        validate_ownership_config(config[ConfigKey.OWNERSHIP])

    if ConfigKey.CRITERIA in config:
        criteria = config[ConfigKey.CRITERIA]
        if criteria is not None and not isinstance(criteria, list):
            raise ValidationError("Criteria must be a list")

    return True


def validate_error_config(errors: Dict[str, Any]) -> bool:
    """Validate error policy configuration.

    Raises:
        ValidationError: If the section is invalid
    """
    if not isinstance(errors, dict):
        raise ValidationError("Error configuration must be a dictionary")

    valid_fields = {ConfigKey.CONTINUE_ON_WALK_ERROR, ConfigKey.CONTINUE_ON_INTERNAL_ERROR}
    unknown_fields = set(errors.keys()) - valid_fields
    if unknown_fields:
        raise ValidationError(
            f"Unknown error configuration fields: {', '.join(sorted(unknown_fields))}"
        )

    for key, value in errors.items():
        if not isinstance(value, bool):
            raise ValidationError(f"Error policy {key} must be boolean: {value}")

    return True


def validate_logging_config(logging_config: Dict[str, Any]) -> bool:
    """Validate logging configuration.

    Raises:
        ValidationError: If the section is invalid
    """
    if not isinstance(logging_config, dict):
        raise ValidationError("Logging configuration must be a dictionary")

    level = logging_config.get(ConfigKey.LOG_LEVEL)
    if level is not None:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if not isinstance(level, str) or level.upper() not in valid_levels:
            raise ValidationError(f"Invalid log level: {level}. Must be one of {valid_levels}")

    log_file = logging_config.get(ConfigKey.LOG_FILE)
    if log_file is not None and not isinstance(log_file, str):
        raise ValidationError(f"Log file must be a string: {log_file}")

    return True


def validate_ownership_config(ownership: Dict[str, Any]) -> bool:
    """Validate ownership lookup cache configuration.

    Raises:
        ValidationError: If the section is invalid
    """
    if not isinstance(ownership, dict):
        raise ValidationError("Ownership configuration must be a dictionary")

    entries = ownership.get(ConfigKey.CACHE_ENTRIES)
    if entries is not None and (not isinstance(entries, int) or entries <= 0):
        raise ValidationError(f"Ownership cache_entries must be positive integer: {entries}")

    ttl = ownership.get(ConfigKey.TTL_SECONDS)
    if ttl is not None and (not isinstance(ttl, (int, float)) or ttl <= 0):
        raise ValidationError(f"Ownership ttl_seconds must be positive number: {ttl}")

    return True


def validate_depth(depth: Any) -> int:
    """Validate a depth bound.

    Returns:
        The depth as int

    Raises:
        ValidationError: If depth is not a non-negative integer
    """
    if isinstance(depth, bool) or not isinstance(depth, int):
        raise ValidationError(f"Depth must be integer, got {type(depth).__name__}")
    if depth < 0:
        raise ValidationError(f"Depth cannot be negative: {depth}")
    return depth


def validate_comparison(value: Union[Comparison, str]) -> Comparison:
    """Normalize a comparison given as enum, name or symbol.

    Raises:
        ValidationError: If the comparison is unknown
    """
    if isinstance(value, Comparison):
        return value
    if isinstance(value, str) and value.lower() in _COMPARISON_ALIASES:
        return _COMPARISON_ALIASES[value.lower()]
    raise ValidationError(f"Unknown comparison: {value!r}")


def validate_time_type(value: Union[FileTimeType, str]) -> FileTimeType:
    """Normalize a timestamp kind given as enum or `-newerXY` letter.

    Raises:
        ValidationError: If the kind is unknown
    """
    try:
        return FileTimeType(value)
    except ValueError:
        raise ValidationError(f"Unknown time type: {value!r}. Must be one of B, a, m, c")


def validate_file_type(value: Union[FileType, str]) -> FileType:
    """Normalize a file type given as enum or `-type` letter.

    Raises:
        ValidationError: If the type is unknown
    """
    try:
        file_type = FileType(value)
    except ValueError:
        raise ValidationError(f"Unknown file type: {value!r}")
    if file_type == FileType.UNKNOWN:
        raise ValidationError("File type '?' cannot be matched")
    return file_type


def validate_size_expression(expr: str) -> Tuple[Comparison, int, SizeUnit]:
    """Parse a `find -size` style expression such as "+10k" or "-3M".

    A missing unit means bytes.

    Returns:
        Tuple of (comparison, amount, unit)

    Raises:
        ValidationError: If the expression is malformed
    """
    if not isinstance(expr, str) or not expr:
        raise ValidationError("Size expression cannot be empty")

    match = _SIZE_EXPR.match(expr.strip())
    if not match:
        raise ValidationError(f"Invalid size expression: {expr}")

    sign, amount, suffix = match.groups()
    try:
        unit = SizeUnit.from_suffix(suffix) if suffix else SizeUnit.BYTE
    except KeyError:
        raise ValidationError(f"Invalid size unit: {suffix}. Must be one of c, b, k, M, G, T, P")

    return _COMPARISON_ALIASES[sign], int(amount), unit


def validate_regex(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    """Validate and compile regex pattern.

    Args:
        pattern: Regex pattern string or compiled pattern

    Returns:
        Compiled regex pattern

    Raises:
        ValidationError: If regex is invalid
    """
    if isinstance(pattern, re.Pattern):
        return pattern

    if not pattern:
        raise ValidationError("Regex pattern cannot be empty")

    try:
        return re.compile(pattern)
    except re.error as e:
        raise ValidationError(f"Failed to compile regex pattern: {e}")
