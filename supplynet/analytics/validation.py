"""
Input Validation for Analytics API
==================================

Provides validation helpers for API parameters with clear error messages.

Usage
-----
    from supplynet.analytics.validation import (
        validate_threshold, validate_max_paths, validate_node_param
    )

    # In API endpoint
    try:
        threshold = validate_threshold(param, "bottleneckThreshold")
        source = validate_node_param(source_param, "source")
    except ValidationError as e:
        return e.to_response()

Error Response Format
--------------------
All validation errors use the same format as errors.py for consistency:

    {
        "success": False,
        "error": {
            "code": "INVALID_PARAMETER",   # or MISSING_PARAMETER
            "message": "Invalid 'maxPaths': ...",
            "httpStatus": 400,
            "details": { "parameter": "...", "value": "..." }
        }
    }
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import Config
from .errors import ErrorCode, invalid_param, missing_param


@dataclass
class ValidationError(Exception):
    """
    Validation error with details for API response.

    Absent required parameters carry MISSING_PARAMETER; everything else
    is INVALID_PARAMETER.
    """

    parameter: str
    message: str
    value: Any = None
    error_code: ErrorCode = ErrorCode.INVALID_PARAMETER

    @classmethod
    def missing(cls, parameter: str) -> "ValidationError":
        return cls(parameter, f"'{parameter}' is required", None, ErrorCode.MISSING_PARAMETER)

    def to_response(self) -> Dict[str, Any]:
        """Convert to API error response dict."""
        if self.error_code is ErrorCode.MISSING_PARAMETER:
            return missing_param(self.parameter)
        return invalid_param(self.parameter, self.message, self.value)

    def __str__(self) -> str:
        return f"Invalid '{self.parameter}': {self.message}"


def validate_positive_int(
    value: Any,
    name: str,
    default: Optional[int] = None,
    min_value: int = 1,
    max_value: Optional[int] = None,
) -> int:
    """
    Validate and convert value to positive integer.

    Args:
        value: Input value (may be string from query param)
        name: Parameter name for error messages
        default: Default value if None or empty
        min_value: Minimum allowed value (default: 1)
        max_value: Maximum allowed value (optional)

    Returns:
        Validated integer

    Raises:
        ValidationError: If value is invalid
    """
    if value is None or value == "":
        if default is not None:
            return default
        raise ValidationError.missing(name)

    try:
        int_val = int(value)
    except (ValueError, TypeError):
        raise ValidationError(name, f"must be an integer, got '{value}'", value)

    if int_val < min_value:
        raise ValidationError(
            name,
            f"must be at least {min_value}, got {int_val}",
            value
        )

    if max_value is not None and int_val > max_value:
        raise ValidationError(
            name,
            f"must be at most {max_value}, got {int_val}",
            value
        )

    return int_val


def validate_threshold(
    value: Any,
    name: str,
    default: Optional[float] = None,
) -> Optional[float]:
    """
    Validate a classifier threshold in [0, 1].

    Returns the default (which may be None, meaning "use config") when
    the parameter is absent.
    """
    if value is None or value == "":
        return default

    try:
        float_val = float(value)
    except (ValueError, TypeError):
        raise ValidationError(name, f"must be a number, got '{value}'", value)

    if not 0.0 <= float_val <= 1.0:
        raise ValidationError(
            name,
            f"must be between 0 and 1, got {float_val}",
            value
        )

    return float_val


def validate_max_paths(value: Any) -> int:
    """Validate maxPaths against Config.PATHS bounds."""
    return validate_positive_int(
        value,
        "maxPaths",
        default=Config.PATHS.DEFAULT_MAX_PATHS,
        min_value=1,
        max_value=Config.PATHS.MAX_PATHS_LIMIT,
    )


def validate_node_param(
    value: Any,
    name: str = "nodeId",
    required: bool = True,
) -> Optional[str]:
    """
    Validate a node id parameter.

    Node ids are free-form strings; surrounding whitespace is stripped.

    Raises:
        ValidationError: If required and missing, or blank after stripping
    """
    if value is None or value == "":
        if required:
            raise ValidationError.missing(name)
        return None

    str_value = str(value).strip()
    if not str_value:
        raise ValidationError(name, "must not be blank", value)

    return str_value


def validate_bool(value: Any, name: str, default: bool = False) -> bool:
    """
    Validate boolean parameter.

    Accepts: true/false, 1/0, yes/no (case insensitive)
    """
    if value is None or value == "":
        return default

    if isinstance(value, bool):
        return value

    str_val = str(value).lower().strip()

    if str_val in ("true", "1", "yes"):
        return True
    if str_val in ("false", "0", "no"):
        return False

    raise ValidationError(
        name,
        f"must be a boolean (true/false), got '{value}'",
        value
    )


def validate_string_choice(
    value: Any,
    name: str,
    choices: list,
    default: Optional[str] = None,
    case_sensitive: bool = False,
) -> str:
    """
    Validate string is one of allowed choices.

    Args:
        value: String value from query param
        name: Parameter name for error messages
        choices: List of allowed values
        default: Default value if None or empty
        case_sensitive: Whether comparison is case-sensitive

    Returns:
        Validated string

    Raises:
        ValidationError: If value is not in choices
    """
    if value is None or value == "":
        if default is not None:
            return default
        raise ValidationError.missing(name)

    str_val = str(value)

    if case_sensitive:
        if str_val in choices:
            return str_val
    else:
        lower_val = str_val.lower()
        for choice in choices:
            if choice.lower() == lower_val:
                return choice

    choices_str = ", ".join(f"'{c}'" for c in choices)
    raise ValidationError(
        name,
        f"must be one of [{choices_str}], got '{value}'",
        value
    )
