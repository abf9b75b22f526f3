"""Structured exception hierarchy for field migrations.

Each error carries enough context (cursor, chunk position, HTTP status,
response body) to diagnose a failed run and re-run it by hand.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "MigrationError",
    "FetchError",
    "ChunkWriteError",
    "CommitError",
    "ConfigurationError",
    "excerpt",
]

# Response bodies are truncated to this many characters in messages
BODY_EXCERPT_CHARS = 500


def excerpt(text: Optional[str], limit: int = BODY_EXCERPT_CHARS) -> Optional[str]:
    """Shorten text for inclusion in log lines and error messages."""
    if text is None:
        return None
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... ({len(text) - limit} more chars)"


class MigrationError(Exception):
    """Base exception for all migration errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        self.suggestion = suggestion

        parts = [message]

        if self.details:
            parts.append("\nDetails:")
            parts.extend(f"  {k}: {v}" for k, v in self.details.items())

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging and reports."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class _StoreRequestError(MigrationError):
    """Shared shape for errors raised by a failed store request."""

    def __init__(
        self,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        self.cause = cause
        self.status_code = status_code
        self.response_body = response_body

        details = kwargs.pop("details", {})
        if status_code is not None:
            details["status_code"] = status_code
        if response_body:
            details["response_body"] = excerpt(response_body)
        if cause is not None:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, details=details, **kwargs)


class FetchError(_StoreRequestError):
    """A page could not be fetched from the store.

    Fatal to the fetch phase only: the run continues with the records
    collected before the failing page.
    """

    def __init__(self, message: str, *, cursor: str, **kwargs: Any) -> None:
        self.cursor = cursor
        details = kwargs.pop("details", {})
        details["cursor"] = cursor
        kwargs.setdefault(
            "suggestion",
            "Check that the store is reachable and the source field exists "
            "in the schema, then re-run the migration.",
        )
        super().__init__(message, details=details, **kwargs)


class ChunkWriteError(_StoreRequestError):
    """A single chunk of updates was rejected or never acknowledged.

    Recorded against the run; the remaining chunks are still submitted.
    """

    def __init__(
        self,
        message: str,
        *,
        chunk_index: int,
        chunk_size: int,
        **kwargs: Any,
    ) -> None:
        self.chunk_index = chunk_index
        self.chunk_size = chunk_size
        details = kwargs.pop("details", {})
        details["chunk_index"] = chunk_index
        details["chunk_size"] = chunk_size
        super().__init__(message, details=details, **kwargs)


class CommitError(_StoreRequestError):
    """The final commit failed.

    Writes acknowledged before the commit may not be durable or visible.
    """

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault(
            "suggestion",
            "Issue a manual commit against the store or re-run the migration; "
            "set-updates are safe to apply again.",
        )
        super().__init__(message, **kwargs)


class ConfigurationError(MigrationError):
    """Error in migration configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value

        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = repr(value)

        super().__init__(message, details=details, **kwargs)
