"""
Error model for JobTracker tools.

Provides structured error codes and sanitized error messages.
"""

import re
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    """Structured error codes returned by every tool."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    DB_ERROR = "DB_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ToolError(Exception):
    """Base exception for tool errors with structured error information."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: bool = False,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize a tool error.

        Args:
            code: The error code
            message: Human-readable error message
            retryable: Whether the operation can be retried
            original_error: The original exception if this wraps another error
        """
        self.code = code
        self.message = message
        self.retryable = retryable
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary format for MCP response."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable
            }
        }


def sanitize_sql_error(error_msg: str) -> str:
    """
    Sanitize SQL error messages to remove statements and absolute paths.

    Args:
        error_msg: The original error message

    Returns:
        Sanitized error message
    """
    sanitized = re.sub(r'SQL:.*', '', error_msg, flags=re.IGNORECASE)
    sanitized = re.sub(
        r'\b(SELECT|INSERT|UPDATE|DELETE)\b.*', '[SQL query]', sanitized, flags=re.IGNORECASE
    )
    sanitized = re.sub(r'/[^\s]+/', '[path]/', sanitized)
    return sanitized.strip()


def sanitize_stack_trace(error_msg: str) -> str:
    """Keep only the first line of a multi-line error message."""
    lines = error_msg.split('\n')
    if lines:
        return lines[0].strip()
    return error_msg


def create_validation_error(message: str) -> ToolError:
    """
    Create a validation error.

    Validation errors are raised before any mutation and are never retryable.
    """
    return ToolError(
        code=ErrorCode.VALIDATION_ERROR,
        message=message,
        retryable=False
    )


def create_not_found_error(resource: str, identifier: str) -> ToolError:
    """Create a not-found error for an owned record (application, profile)."""
    return ToolError(
        code=ErrorCode.NOT_FOUND,
        message=f"{resource} not found: {identifier}",
        retryable=False
    )


def create_unauthorized_error(message: str = "Authentication required") -> ToolError:
    """Create an authorization error; the caller must re-authenticate."""
    return ToolError(
        code=ErrorCode.UNAUTHORIZED,
        message=message,
        retryable=False
    )


def create_db_error(
    message: str, retryable: bool = False, original_error: Optional[Exception] = None
) -> ToolError:
    """
    Create a database error.

    Args:
        message: Description of the database error
        retryable: Whether the operation can be retried
        original_error: The original exception

    Returns:
        ToolError with DB_ERROR code
    """
    sanitized_message = sanitize_sql_error(message)
    sanitized_message = sanitize_stack_trace(sanitized_message)

    return ToolError(
        code=ErrorCode.DB_ERROR,
        message=f"Database error: {sanitized_message}",
        retryable=retryable,
        original_error=original_error
    )


def create_storage_error(
    message: str, retryable: bool = True, original_error: Optional[Exception] = None
) -> ToolError:
    """Create a blob storage error (uploads, purges)."""
    sanitized_message = sanitize_stack_trace(message)
    sanitized_message = re.sub(r'/[^\s]+/', '[path]/', sanitized_message)
    return ToolError(
        code=ErrorCode.STORAGE_ERROR,
        message=f"Storage error: {sanitized_message}",
        retryable=retryable,
        original_error=original_error
    )


def create_internal_error(message: str, original_error: Optional[Exception] = None) -> ToolError:
    """
    Create an internal error for unexpected exceptions.

    Args:
        message: Description of the internal error
        original_error: The original exception

    Returns:
        ToolError with INTERNAL_ERROR code
    """
    sanitized_message = sanitize_stack_trace(message)

    return ToolError(
        code=ErrorCode.INTERNAL_ERROR,
        message=f"Internal error: {sanitized_message}",
        retryable=True,
        original_error=original_error
    )
