"""
Exception hierarchy for the curriculum knowledge core.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and a category used
to render typed {message, category} error responses.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class CurriculumRAGException(Exception):
    """Base exception for all knowledge core errors."""

    category: str = "server"

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

    def to_dict(self) -> dict[str, str]:
        """Render as the public error payload."""
        return {"message": self.message, "category": self.category}


class ValidationError(CurriculumRAGException):
    """Raised when input validation fails."""

    category = "validation"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class AuthError(CurriculumRAGException):
    """Raised when no valid requesting identity is available."""

    category = "auth"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class PermissionDeniedError(AuthError):
    """Raised when the identity may not modify the target resource."""

    def __init__(self, message: str, resource_id: str | None = None) -> None:
        super().__init__(message)
        if resource_id:
            self.details["resource_id"] = resource_id


class NotFoundError(CurriculumRAGException):
    """Raised when a requested resource does not exist."""

    category = "not_found"


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize document not found error.

        Args:
            document_id: ID of the missing document
            details: Additional context
        """
        details = details or {}
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DatasetNotFoundError(NotFoundError):
    """Raised when an evaluation dataset cannot be found."""

    def __init__(self, dataset_id: str, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["dataset_id"] = dataset_id
        super().__init__(f"Dataset not found: {dataset_id}", details)


class ProviderError(CurriculumRAGException):
    """Raised when an embedding or LLM provider call fails."""

    category = "provider"

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
            provider: Provider role that failed (embedding, synthesis, scoring)
            details: Additional context
        """
        details = details or {}
        if provider:
            details["provider"] = provider
        super().__init__(message, details)


class RateLimitError(CurriculumRAGException):
    """Raised when an identity exceeds its request allowance."""

    category = "rate_limit"

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None) -> None:
        details = {}
        if retry_after is not None:
            details["retry_after"] = round(retry_after, 2)
        super().__init__(message, details)
        self.retry_after = retry_after


class BudgetExceededError(CurriculumRAGException):
    """Raised when an identity has spent its budget for the period."""

    category = "budget"

    def __init__(self, message: str = "Budget limit exceeded") -> None:
        super().__init__(message)


class ScoringError(CurriculumRAGException):
    """Raised when a single evaluation question cannot be scored."""

    category = "scoring"

    def __init__(
        self,
        message: str,
        question: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if question:
            details["question"] = question
        super().__init__(message, details)
