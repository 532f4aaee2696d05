"""Custom exceptions for bintext."""

from typing import Any


class BinTextError(Exception):
    """Base exception for all bintext errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(BinTextError):
    """Configuration-related errors."""

    pass
