"""
Exception hierarchy for the Researchly AI session layer.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging, and
carry an ErrorKind that is reported to realtime clients as the error code.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Named failure categories surfaced to clients."""

    NOT_FOUND = "not_found"
    PRECONDITION_FAILED = "precondition_failed"
    PROVIDER_ERROR = "provider_error"
    STORAGE_ERROR = "storage_error"
    AUTH_ERROR = "auth_error"


class ResearchlyException(Exception):
    """Base exception for all Researchly application errors."""

    kind: ErrorKind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class NotFoundError(ResearchlyException):
    """
    Raised when a resource is absent or not owned by the caller.

    Both cases produce the same error so existence is never leaked.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str = "Paper not found",
        resource_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            message: Error message
            resource_id: Identifier that was looked up
            details: Additional context
        """
        details = details or {}
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, details)


class PreconditionFailedError(ResearchlyException):
    """Raised when a resource exists but lacks required content."""

    kind = ErrorKind.PRECONDITION_FAILED


class ProviderError(ResearchlyException):
    """Raised when an upstream model, cache, index or document call fails."""

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            provider: Upstream system that failed (model, cache, index, documents)
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class CacheTooSmallError(ProviderError):
    """Raised when a document is below the provider's minimum cacheable size."""

    def __init__(self, message: str = "Document below minimum cacheable size", details: dict[str, Any] | None = None) -> None:
        super().__init__(message, provider="cache", details=details)


class VectorStoreError(ProviderError):
    """Raised when vector index operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, provider="vector_index", details=details)


class StorageError(ResearchlyException):
    """Raised when local persistence (sessions, papers, notes) fails."""

    kind = ErrorKind.STORAGE_ERROR

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize storage error.

        Args:
            message: Error message
            operation: Persistence operation that failed
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class AuthError(ResearchlyException):
    """Raised when a connection credential is missing, expired or invalid."""

    kind = ErrorKind.AUTH_ERROR
