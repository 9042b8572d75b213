"""
Custom error types for Terminology Search.

This module provides specific error classes for different failure scenarios,
enabling better error handling and more informative error messages.
"""

from typing import Any


class TerminologySearchError(Exception):
    """Base exception for all Terminology Search errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# Terminology Server Errors


class GatewayError(TerminologySearchError):
    """
    Base exception for failed terminology server requests.

    `status` is the HTTP status code (None when no response was received)
    and `body` the parsed error body when the server sent one.
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        body: Any = None,
        operation: str | None = None,
    ):
        self.status = status
        self.body = body
        self.operation = operation
        super().__init__(
            message,
            details={"status": status, "operation": operation},
        )


class TransportError(GatewayError):
    """Raised when the request failed without a structured error body."""

    def __init__(
        self,
        status: int | None = None,
        operation: str | None = None,
        reason: str | None = None,
    ):
        message = str(status) if status is not None else (reason or "Connection failed")
        super().__init__(message, status=status, operation=operation)
        self.reason = reason


class StructuredServerError(GatewayError):
    """Raised when the server answered with a JSON error body (e.g. OperationOutcome)."""

    def __init__(self, status: int, body: Any, raw: str, operation: str | None = None):
        super().__init__(raw, status=status, body=body, operation=operation)


class ParseError(GatewayError):
    """Raised when a successful response body is not valid JSON."""

    def __init__(self, status: int, raw: str, operation: str | None = None):
        super().__init__(
            f"Invalid JSON in response from {operation or 'terminology server'}",
            status=status,
            operation=operation,
        )
        self.raw = raw


# ECL Builder Errors


class EclBuilderError(TerminologySearchError):
    """Base exception for ECL filter row errors."""

    pass


class UnknownEclOperatorError(EclBuilderError):
    """Raised when a filter row names an operator outside the catalogue."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(
            f"Unknown ECL operator: {operator}",
            details={"operator": operator},
        )


class InvalidFilterRowError(EclBuilderError):
    """Raised when a filter row cannot be removed or edited."""

    def __init__(self, index: int, reason: str):
        self.index = index
        super().__init__(
            f"Invalid filter row {index}: {reason}",
            details={"index": index, "reason": reason},
        )


# Pagination Errors


class InvalidPageError(TerminologySearchError):
    """Raised when a page outside the current result set is requested."""

    def __init__(self, page: int, page_count: int | None = None):
        self.page = page
        self.page_count = page_count
        message = f"Invalid page: {page}"
        if page_count is not None:
            message += f" (available pages: 1-{page_count})"
        else:
            message += " (no paginated search on this surface)"
        super().__init__(message, details={"page": page, "page_count": page_count})
