"""Custom exceptions for the recommendation engine.

Every error raised by the engine derives from RecommenderError and carries an
HTTP status code so the API layer can render it without a lookup table.
"""

from typing import Any, Dict, Optional


class RecommenderError(Exception):
    """Base exception for recommendation engine errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class InvalidArgument(RecommenderError):
    """Raised when a caller passes an unusable argument, e.g. a negative limit."""

    def __init__(self, name: str, value: Any, reason: str):
        message = f"Invalid value for '{name}': {value!r} ({reason})"
        super().__init__(
            message=message,
            status_code=400,
            details={"argument": name, "value": repr(value), "reason": reason},
        )


class InvalidConfiguration(RecommenderError):
    """Raised when the engine is configured with an unusable lookback or weight table."""

    def __init__(self, setting: str, reason: str, details: Optional[Dict[str, Any]] = None):
        message = f"Invalid configuration for '{setting}': {reason}"
        super().__init__(
            message=message,
            status_code=500,
            details=details or {"setting": setting, "reason": reason},
        )


class StoreUnavailable(RecommenderError):
    """Raised when the event store cannot return the requested events."""

    def __init__(self, user_id: str, error: Optional[Exception] = None, reason: Optional[str] = None):
        cause = reason or (str(error) if error is not None else "unknown error")
        message = f"Event store unavailable while fetching events for user '{user_id}': {cause}"
        details: Dict[str, Any] = {"user_id": user_id, "error": cause}
        if error is not None:
            details["error_type"] = type(error).__name__
        super().__init__(
            message=message,
            status_code=503,
            details=details,
        )
