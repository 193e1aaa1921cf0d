"""
Exception hierarchy for RepoLingo.

Engine and configuration problems get their own types so the pipeline can
turn recoverable ones into marked outcomes and let the rest propagate.
"""

from __future__ import annotations
from typing import Optional, Dict, Any, List


class RepoLingoError(Exception):
    """Base exception for all RepoLingo errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = False,
        suggestion: Optional[str] = None
    ):
        """
        Initialize error.

        Args:
            message: Human-readable error message
            details: Additional error details
            recoverable: Whether error can be recovered from
            suggestion: Suggested fix or workaround
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.suggestion = suggestion

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
            "suggestion": self.suggestion
        }

    def __str__(self) -> str:
        result = self.message
        if self.suggestion:
            result += f"\nSuggestion: {self.suggestion}"
        return result


class EngineError(RepoLingoError):
    """Raised when a translation engine call fails."""

    def __init__(
        self,
        engine: str,
        message: str,
        original_error: Optional[Exception] = None
    ):
        """
        Initialize engine error.

        Args:
            engine: Engine name
            message: Error message
            original_error: Original exception if any
        """
        full_message = f"Engine '{engine}' failed: {message}"
        details = {
            "engine": engine,
            "original_error": str(original_error) if original_error else None,
        }
        super().__init__(full_message, details, recoverable=True)
        self.engine = engine
        self.original_error = original_error


class EngineUnavailableError(EngineError):
    """Raised when an engine is called without credentials or endpoint."""

    def __init__(self, engine: str, missing: Optional[str] = None):
        message = "engine is not configured"
        if missing:
            message += f" (missing {missing})"
        super().__init__(engine, message)
        self.missing = missing
        if missing:
            self.suggestion = f"Set {missing} in the environment or in the config file."


class ConfigurationError(RepoLingoError):
    """Raised when configuration or call arguments are invalid."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        invalid_value: Optional[Any] = None,
        valid_values: Optional[List[Any]] = None
    ):
        details = {
            "config_key": config_key,
            "invalid_value": invalid_value,
            "valid_values": valid_values
        }

        suggestion = None
        if config_key and valid_values:
            suggestion = f"Valid values for {config_key}: {', '.join(map(str, valid_values))}"
        elif config_key:
            suggestion = f"Check configuration for '{config_key}'"

        super().__init__(message, details, recoverable=False, suggestion=suggestion)
        self.config_key = config_key
        self.invalid_value = invalid_value
        self.valid_values = valid_values


class MaskingError(RepoLingoError):
    """Raised when Markdown masking cannot proceed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {"original_error": str(original_error) if original_error else None}
        super().__init__(message, details, recoverable=True)
        self.original_error = original_error


class CacheError(RepoLingoError):
    """Raised when cache operations fail."""

    def __init__(
        self,
        message: str,
        cache_type: Optional[str] = None,
        operation: Optional[str] = None
    ):
        details = {
            "cache_type": cache_type,
            "operation": operation
        }
        suggestion = "Cache errors are non-fatal. The pipeline continues without caching."

        super().__init__(message, details, recoverable=True, suggestion=suggestion)
        self.cache_type = cache_type
        self.operation = operation
