"""
Base Exception Class

This module contains the base exception class that all response cache
exceptions inherit from. Specialised exceptions live in their themed modules.
"""

from typing import Any

from response_cache.core.logging.logger import get_request_id


class ResponseCacheError(Exception):
    """
    Base exception for all response cache errors.

    Attributes:
        message: Error message
        request_id: Request ID for correlation; defaults to the ID of the
            request being handled, if any
        details: Additional error details (dict)

    Example:
        raise StoreOperationError(
            "SET failed",
            details={"key": "/items", "command": "SET"},
        )
    """

    def __init__(
        self, message: str, request_id: str | None = None, details: dict[str, Any] | None = None
    ):
        self.message = message
        self.request_id = request_id or get_request_id()
        self.details = (details or {}).copy()
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for logging/API responses.

        Returns:
            Dict with error_type, message, request_id, and details
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "request_id": self.request_id,
            "details": self.details,
        }

    def with_context(self, **context) -> "ResponseCacheError":
        """
        Add additional context to the error details.

        Returns:
            Self (for method chaining)
        """
        self.details.update(context)
        return self

    def __repr__(self) -> str:
        details_str = f", details={self.details}" if self.details else ""
        request_id_str = f", request_id='{self.request_id}'" if self.request_id else ""
        return f"{self.__class__.__name__}(message='{self.message}'{request_id_str}{details_str})"

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        message: str | None = None,
        request_id: str | None = None,
        **details
    ) -> "ResponseCacheError":
        """
        Create an error of this class from another exception.

        Useful for wrapping redis or pydantic exceptions with context.

        Example:
            >>> try:
            ...     await client.get(key)
            ... except redis.ConnectionError as e:
            ...     raise StoreConnectionClosedError.from_exception(e, key=key)
        """
        error_message = message or str(exc)
        error_details = {
            "original_error": exc.__class__.__name__,
            "original_message": str(exc),
            **details
        }
        return cls(error_message, request_id=request_id, details=error_details)


class ConfigurationError(ResponseCacheError):
    """Raised when cache configuration is invalid or missing."""
    pass
