"""
Error Handling for the Analysis Engine
======================================

Typed exceptions raised by the core, plus standardized response
formatting for the API layer.

Error Codes
-----------
    INVALID_PARAMETER (400): Bad input parameter
    MISSING_PARAMETER (400): Required parameter absent
    INVALID_REQUEST (400): Request shape makes no sense (e.g. neither
                           a node nor an edge given to a simulation)
    EMPTY_GRAPH (400): Metrics requested over zero nodes
    NOT_FOUND (404): Node or edge absent from the graph
    INTERNAL_ERROR (500): Unexpected internal error
    DATABASE_ERROR (500): Database operation failed

Usage
-----
    from supplynet.analytics.errors import (
        InvalidRequestError, api_success, not_found
    )

    # Raise typed exceptions
    if node_id is None and edge is None:
        raise InvalidRequestError(
            "Provide either a node id or an edge pair",
            details={"nodeId": node_id, "edge": edge},
        )

    # Build consistent responses
    return api_success(data)
    return not_found("Node", node_id)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standard error codes for API responses."""

    # Client errors (4xx)
    INVALID_PARAMETER = ("INVALID_PARAMETER", 400, "Invalid or malformed parameter")
    MISSING_PARAMETER = ("MISSING_PARAMETER", 400, "Required parameter missing")
    INVALID_REQUEST = ("INVALID_REQUEST", 400, "Invalid analysis request")
    EMPTY_GRAPH = ("EMPTY_GRAPH", 400, "No nodes found. Please upload data first.")
    NOT_FOUND = ("NOT_FOUND", 404, "Requested resource not found")

    # Server errors (5xx)
    INTERNAL_ERROR = ("INTERNAL_ERROR", 500, "An internal error occurred")
    DATABASE_ERROR = ("DATABASE_ERROR", 500, "Database operation failed")

    def __init__(self, code: str, http_status: int, default_message: str):
        self.code = code
        self.http_status = http_status
        self.default_message = default_message


@dataclass
class AnalyticsError(Exception):
    """Exception with error code for API responses."""

    error_code: ErrorCode
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"[{self.error_code.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        result = {
            "success": False,
            "error": {
                "code": self.error_code.code,
                "message": self.message,
                "httpStatus": self.error_code.http_status,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class EmptyGraphError(AnalyticsError):
    """Metrics were requested over a graph with no nodes."""

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            ErrorCode.EMPTY_GRAPH,
            message or ErrorCode.EMPTY_GRAPH.default_message,
            details,
        )


class InvalidRequestError(AnalyticsError):
    """Malformed analysis request (wrong types, neither/both targets, ...)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.INVALID_REQUEST, message, details)


class NotFoundError(AnalyticsError):
    """
    A node or edge is absent from the graph.

    Only raised under strict policies; the default behaviour absorbs
    missing targets as a no-op or empty result.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.NOT_FOUND, message, details)


class DatabaseError(AnalyticsError):
    """A persistence operation failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(ErrorCode.DATABASE_ERROR, message, details)


def api_success(data: Any, **kwargs) -> Dict[str, Any]:
    """
    Build a successful API response.

    Args:
        data: The response data
        **kwargs: Additional top-level fields to include

    Returns:
        Dict with success=True and data

    Example:
        >>> api_success(bottlenecks, count=len(bottlenecks))
        {"success": True, "data": [...], "count": 3}
    """
    result = {"success": True, "data": data}
    result.update(kwargs)
    return result


def api_error(
    error_code: ErrorCode,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build an error API response.

    Args:
        error_code: The ErrorCode enum value
        message: Custom error message (uses default if not provided)
        details: Additional error details

    Returns:
        Dict with success=False and error info
    """
    msg = message or error_code.default_message

    result = {
        "success": False,
        "error": {
            "code": error_code.code,
            "message": msg,
            "httpStatus": error_code.http_status,
        }
    }

    if details:
        result["error"]["details"] = details

    return result


def api_error_from_exception(
    exc: Exception,
    default_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
) -> Dict[str, Any]:
    """
    Build error response from an exception.

    If the exception is an AnalyticsError, uses its error code.
    Otherwise, uses the default code with the exception message.
    """
    if isinstance(exc, AnalyticsError):
        return exc.to_dict()

    return api_error(default_code, str(exc))


# Common validation error helpers

def invalid_param(param_name: str, reason: str, value: Any = None) -> Dict[str, Any]:
    """Shorthand for invalid parameter errors."""
    return api_error(
        ErrorCode.INVALID_PARAMETER,
        f"Invalid '{param_name}': {reason}",
        details={
            "parameter": param_name,
            "value": str(value) if value is not None else None,
        }
    )


def missing_param(param_name: str) -> Dict[str, Any]:
    """Shorthand for missing parameter errors."""
    return api_error(
        ErrorCode.MISSING_PARAMETER,
        f"Required parameter '{param_name}' is missing",
        details={"parameter": param_name}
    )


def not_found(resource: str, identifier: str) -> Dict[str, Any]:
    """Shorthand for not found errors."""
    return api_error(
        ErrorCode.NOT_FOUND,
        f"{resource} '{identifier}' not found",
        details={"resource": resource, "identifier": identifier}
    )
