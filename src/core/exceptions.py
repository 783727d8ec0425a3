"""Structured exception hierarchy for consistent error handling.

This module defines the exception system used by the response dispatch
layer, providing a rich error model that supports debugging, monitoring,
and client communication.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **PacksendError**: Base exception with rich context and fingerprinting
- **Specialized exceptions**: Configuration defects, cancelled writes,
  double writes and endpoint validation failures

Configuration errors are setup defects and are never retried. Cancellation
is a distinct outcome from success and from other failures, so callers can
tell an aborted write apart from a broken one.
"""

import hashlib
import traceback
from collections.abc import Sequence
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the dispatch layer.

    These error codes provide consistent identification of error types
    across the application, enabling proper error handling and monitoring.
    """

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    """A required collaborator (link generator, interceptor) was not configured."""

    # Response lifecycle errors
    RESPONSE_CANCELLED = "RESPONSE_CANCELLED"
    """The response write was aborted because its cancellation token fired."""

    RESPONSE_ALREADY_SENT = "RESPONSE_ALREADY_SENT"
    """A second response was written to a transport that already started one."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""


class Severity(Enum):
    """Severity levels for errors raised by the dispatch layer.

    These severity levels help categorize the impact and urgency of errors,
    enabling appropriate handling, monitoring, and alerting strategies.
    """

    LOW = "LOW"
    """Low severity errors that don't significantly impact functionality."""

    MEDIUM = "MEDIUM"
    """Medium severity errors that may affect some features but not critical ops."""

    HIGH = "HIGH"
    """High severity errors impacting critical functionality or data integrity."""

    CRITICAL = "CRITICAL"
    """Critical errors requiring immediate attention, may cause system failures."""


class PacksendError(Exception):
    """Base exception class for all Packsend exceptions.

    All custom exceptions in the application should inherit from this class
    to ensure consistent error handling and formatting.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Capture stack trace at creation time
        self.stack_trace = traceback.format_stack()[:-1]  # Exclude this frame

        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Creates a hash based on the error type and the location where it was raised,
        allowing similar errors to be grouped together in monitoring systems.

        Returns:
            str: A hash string for error grouping
        """
        max_frames = 5
        relevant_frames = (
            self.stack_trace[-max_frames:]
            if len(self.stack_trace) > max_frames
            else self.stack_trace
        )

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"

        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Determine if this is an expected error based on severity.

        Returns:
            bool: True if the error is expected (LOW or MEDIUM severity)
        """
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Determine if this error should trigger alerts.

        Returns:
            bool: True if the error should trigger alerts (HIGH or CRITICAL severity)
        """
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        """Return a string representation of the exception.

        Returns:
            str: A formatted string containing the error code and message
        """
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: A string showing the class name, error code, message, severity,
                and context
        """
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ConfigurationError(PacksendError):
    """Exception raised when a required collaborator has not been configured.

    Raised when the link generator is missing from the response context or
    when an intercepted send is attempted without any response interceptor.
    These are setup defects, so the severity is CRITICAL and they are never
    retried.

    Args:
        message: Description of the missing configuration
        error_code: Error code (defaults to CONFIGURATION_ERROR)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFIGURATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.CRITICAL, context, cause)


class ResponseCancelledError(PacksendError):
    """Exception raised when a response write is aborted by its cancellation token.

    Args:
        message: Description of the aborted write
        reason: The reason recorded on the cancellation token, if any
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str = "Response write was cancelled",
        reason: str | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.reason = reason
        merged = {"reason": reason} if reason else {}
        merged.update(context or {})
        super().__init__(
            ErrorCode.RESPONSE_CANCELLED, message, Severity.LOW, merged, cause
        )


class ResponseAlreadySentError(PacksendError):
    """Exception raised when a response is written twice to the same transport.

    Args:
        message: Description of the double write
        context: Additional context information about the error
    """

    def __init__(
        self,
        message: str = "A response has already been sent for this request",
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.RESPONSE_ALREADY_SENT, message, Severity.HIGH, context
        )


class ValidationFailureError(PacksendError):
    """Exception raised when an endpoint collected validation failures.

    Args:
        failures: The validation failures collected by the endpoint
        message: Description of the validation failure
    """

    def __init__(
        self,
        failures: Sequence[Any],
        message: str = "One or more validation errors occurred",
    ) -> None:
        self.failures = list(failures)
        super().__init__(ErrorCode.VALIDATION_ERROR, message, Severity.LOW)
