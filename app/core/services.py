"""
Base service layer patterns for business logic encapsulation.

This module provides foundational patterns for the service layer:
- ServiceResult: Standard result wrapper for consistent success/failure handling
- BaseService: Base class with common service utilities

Service Layer Philosophy:
    Services encapsulate business logic separate from views and models.
    Views handle HTTP concerns, models handle data, services handle logic.

Pattern Comparison:
    - ServiceResult: Use for expected failures (validation, business rules,
      unavailable collaborators)
    - Exceptions: Use for unexpected failures (database errors, bugs)

Usage:
    from core.services import BaseService, ServiceResult

    class PayoutDocumentService(BaseService):
        def get_payout_document(self, payout_document_id, merchant_id):
            document = self.repository.get_for_merchant(
                payout_document_id, merchant_id
            )
            if document is None:
                return ServiceResult.failure(
                    "Payout document not found",
                    error_code="PAYOUT_NOT_FOUND",
                    error_kind="not_found",
                )
            return ServiceResult.success(document)

    # In view
    result = service.get_payout_document(document_id, merchant_id)
    if result.success:
        return Response(PayoutDocumentSerializer(result.data).data)
    return Response(result.to_response(), status=404)

Related:
    - core.exceptions: For unexpected/exceptional errors
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Generic, TypeVar

from django.db import transaction

if TYPE_CHECKING:
    from collections.abc import Generator
    from typing import Any

    from core.exceptions import BaseApplicationError

# Generic type for ServiceResult data
T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """
    Standard result wrapper for service operations.

    Provides consistent success/failure handling without exceptions.
    Use this for expected failures (validation errors, business rule violations).

    Attributes:
        success: Whether the operation succeeded
        data: Result data if successful (None if failed)
        error: Error message if failed (None if successful)
        error_code: Machine-readable error code for client handling
        error_kind: Coarse error category (validation, not_found, state,
            dependency, system) used to pick a transport status
        errors: Field-level errors for validation failures

    Usage:
        # Success case
        return ServiceResult.success(document)

        # Failure case
        return ServiceResult.failure(
            "Sources not found",
            error_code="PAYOUT_SOURCES_NOT_FOUND",
            error_kind="not_found",
        )

        # Check result
        result = service.create_payout_document(...)
        if result.success:
            document = result.data
        else:
            print(f"Error: {result.error} ({result.error_code})")
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: str | None = None
    error_kind: str | None = None
    errors: dict[str, list[str]] | None = field(default=None)

    @classmethod
    def success(cls, data: T) -> ServiceResult[T]:
        """
        Create a successful result.

        Args:
            data: The result data

        Returns:
            ServiceResult with success=True and data set
        """
        return cls(success=True, data=data)

    @classmethod
    def failure(
        cls,
        error: str,
        error_code: str | None = None,
        errors: dict[str, list[str]] | None = None,
        error_kind: str | None = None,
    ) -> ServiceResult[T]:
        """
        Create a failed result.

        Args:
            error: Human-readable error message
            error_code: Machine-readable error code for client handling
            errors: Field-level errors (for validation failures)
            error_kind: Error category for transport mapping

        Returns:
            ServiceResult with success=False and error details

        Example:
            return ServiceResult.failure(
                "Not enough balance for payout",
                error_code="PAYOUT_INSUFFICIENT_BALANCE",
                error_kind="validation",
            )
        """
        return cls(
            success=False,
            error=error,
            error_code=error_code,
            error_kind=error_kind,
            errors=errors,
        )

    @classmethod
    def from_exception(cls, exc: Exception, error_code: str | None = None) -> ServiceResult[T]:
        """
        Create a failed result from an exception.

        Application errors keep their own error code and, when they carry
        one, their error kind. Other exceptions are reported under the
        upper-cased class name.

        Args:
            exc: The caught exception
            error_code: Optional error code override

        Returns:
            ServiceResult with error details from exception
        """
        message = getattr(exc, "message", None) or str(exc)
        kind = getattr(exc, "kind", None)
        return cls(
            success=False,
            error=message,
            error_code=error_code
            or getattr(exc, "error_code", None)
            or exc.__class__.__name__.upper(),
            error_kind=getattr(kind, "value", kind),
        )

    def to_response(self) -> dict[str, Any]:
        """
        Convert to API response format.

        Returns:
            Dict with success status and data or error details
        """
        if self.success:
            return {"success": True, "data": self.data}

        response: dict[str, Any] = {
            "success": False,
            "error": self.error,
        }
        if self.error_code:
            response["error_code"] = self.error_code
        if self.error_kind:
            response["error_kind"] = self.error_kind
        if self.errors:
            response["errors"] = self.errors
        return response

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.success


class BaseService:
    """
    Base class for service layer classes.

    Provides common utilities for services:
    - Logging setup per service
    - Database transaction management
    - Exception to result conversion

    Design Notes:
        - Services hold no request state; collaborators are injected once
        - Use ServiceResult for expected failures
        - Raise exceptions for unexpected failures
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """
        Get logger for this service.

        Returns a logger named after the service class for
        easy filtering in logs.
        """
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    @contextmanager
    def atomic(cls) -> Generator[None, None, None]:
        """
        Execute operations in a database transaction.

        All database operations within this context manager are
        wrapped in a transaction. If any operation fails, all
        changes are rolled back.

        Example:
            with cls.atomic():
                document.save()
                PayoutDocumentChange.objects.create(...)
                # If the change record fails, the document write is rolled back
        """
        with transaction.atomic():
            yield

    @classmethod
    def handle_exception(
        cls,
        exc: BaseApplicationError | Exception,
        context: str = "",
        log_level: int = logging.ERROR,
    ) -> ServiceResult:
        """
        Convert exception to ServiceResult with logging.

        Args:
            exc: The caught exception
            context: Operation name for logging
            log_level: Logging level (default ERROR)

        Returns:
            ServiceResult with error details
        """
        logger = cls.get_logger()
        message = f"{context}: {exc}" if context else str(exc)
        logger.log(
            log_level,
            message,
            extra={
                "operation": context,
                "error_code": getattr(exc, "error_code", None),
                "details": getattr(exc, "details", None),
            },
            exc_info=log_level >= logging.ERROR,
        )
        return ServiceResult.from_exception(exc)


__all__ = [
    "BaseService",
    "ServiceResult",
]
