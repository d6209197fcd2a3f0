"""
Payout-specific exceptions.

Every payout error carries a stable machine-readable ``error_code`` and an
explicit ``kind`` (ErrorKind). Internal components raise these errors; the
public PayoutDocumentService catches PayoutError at the operation boundary
and turns it into a ServiceResult failure, so callers never classify
errors by runtime type.

Exception Hierarchy:
    PayoutError (base, kind=system)
    ├── PayoutValidationError (kind=validation, also core ValidationError)
    │   ├── NoSourcesError
    │   ├── SourcesInconsistentCurrencyError
    │   ├── AmountInvalidError
    │   ├── InsufficientBalanceError
    │   ├── ManualPayoutsDisabledError
    │   └── AutoPayoutsDisabledError
    ├── PayoutLookupError (kind=not_found, also core NotFoundError)
    │   ├── PayoutNotFoundError
    │   ├── SourcesNotFoundError
    │   └── MerchantNotFoundError
    ├── PayoutStateError (kind=state, also core ConflictError)
    │   ├── SignatureAlreadySignedError
    │   ├── InvalidPayoutError
    │   ├── StatusChangeForbiddenError
    │   └── LockAcquisitionError
    ├── PayoutDependencyError (kind=dependency, also core ExternalServiceError)
    │   ├── CollaboratorUnavailableError - transport level failure
    │   ├── SignatureCreationFailedError
    │   ├── SignUrlRequestFailedError
    │   ├── BalanceFetchFailedError
    │   ├── SourcesFetchFailedError
    │   ├── MerchantFetchFailedError
    │   ├── NetRevenueCalculationFailedError
    │   └── OrderStatCalculationFailedError
    ├── CollaboratorBusinessError - structured error returned by a collaborator
    └── PayoutSystemError (kind=system)
        ├── PersistenceError
        ├── CacheError
        └── BalanceUpdateFailedError

Usage:
    from payouts.exceptions import InsufficientBalanceError, PayoutError

    try:
        governance.apply(merchant, aggregated)
    except PayoutError as e:
        return ServiceResult.failure(e.message, e.error_code, error_kind=e.kind.value)
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from core.exceptions import (
    BaseApplicationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

if TYPE_CHECKING:
    from decimal import Decimal
    from typing import Any


class ErrorKind(str, Enum):
    """Coarse error taxonomy used to pick a transport status."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    STATE = "state"
    DEPENDENCY = "dependency"
    SYSTEM = "system"


# =============================================================================
# Base Classes
# =============================================================================


class PayoutError(BaseApplicationError):
    """
    Base exception for all payout operations.

    Attributes:
        kind: ErrorKind category of this error
    """

    default_error_code: str = "PAYOUT_ERROR"
    kind: ErrorKind = ErrorKind.SYSTEM


class PayoutValidationError(PayoutError, ValidationError):
    """A business rule rejected the request."""

    default_error_code: str = "PAYOUT_VALIDATION_ERROR"
    kind = ErrorKind.VALIDATION


class PayoutLookupError(PayoutError, NotFoundError):
    """A required entity does not exist."""

    default_error_code: str = "PAYOUT_LOOKUP_ERROR"
    kind = ErrorKind.NOT_FOUND


class PayoutStateError(PayoutError, ConflictError):
    """The document's current state does not allow the operation."""

    default_error_code: str = "PAYOUT_STATE_ERROR"
    kind = ErrorKind.STATE


class PayoutDependencyError(PayoutError, ExternalServiceError):
    """A collaborator could not be reached or failed unexpectedly."""

    default_error_code: str = "PAYOUT_DEPENDENCY_ERROR"
    kind = ErrorKind.DEPENDENCY


class PayoutSystemError(PayoutError):
    """Persistence, cache or post-commit side effect failure."""

    default_error_code: str = "PAYOUT_SYSTEM_ERROR"
    kind = ErrorKind.SYSTEM


# =============================================================================
# Validation
# =============================================================================


class NoSourcesError(PayoutValidationError):
    """Raised when a payout is requested without any source reports."""

    default_error_code: str = "PAYOUT_NO_SOURCES"


class SourcesInconsistentCurrencyError(PayoutValidationError):
    """Raised when resolved source reports span more than one currency."""

    default_error_code: str = "PAYOUT_SOURCES_INCONSISTENT_CURRENCY"


class AmountInvalidError(PayoutValidationError):
    """Raised when the payable amount after the rolling reserve is not positive."""

    default_error_code: str = "PAYOUT_AMOUNT_INVALID"


class InsufficientBalanceError(PayoutValidationError):
    """
    Raised when the aggregated amount exceeds the merchant's available balance.

    Attributes:
        required: Aggregated source amount
        available: Debit minus credit at the time of the check
    """

    default_error_code: str = "PAYOUT_INSUFFICIENT_BALANCE"

    def __init__(
        self,
        merchant_id: str,
        required: Decimal,
        available: Decimal,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.required = required
        self.available = available

        full_details = {
            "merchant_id": merchant_id,
            "required": str(required),
            "available": str(available),
        }
        if details:
            full_details.update(details)

        super().__init__(
            message="Not enough balance for payout",
            error_code=error_code,
            details=full_details,
        )


class ManualPayoutsDisabledError(PayoutValidationError):
    """Raised on a manual creation for a merchant on automatic payouts."""

    default_error_code: str = "PAYOUT_MANUAL_PAYOUTS_DISABLED"


class AutoPayoutsDisabledError(PayoutValidationError):
    """Raised on an automatic creation for a merchant on manual payouts."""

    default_error_code: str = "PAYOUT_AUTO_PAYOUTS_DISABLED"


# =============================================================================
# Not Found
# =============================================================================


class PayoutNotFoundError(PayoutLookupError):
    """Raised when no payout document matches a lookup or query."""

    default_error_code: str = "PAYOUT_NOT_FOUND"


class SourcesNotFoundError(PayoutLookupError):
    """Raised when none of the requested source reports is accepted."""

    default_error_code: str = "PAYOUT_SOURCES_NOT_FOUND"


class MerchantNotFoundError(PayoutLookupError):
    """Raised when the merchant profile does not exist."""

    default_error_code: str = "PAYOUT_MERCHANT_NOT_FOUND"


# =============================================================================
# State
# =============================================================================


class SignatureAlreadySignedError(PayoutStateError):
    """Raised when a sign URL is requested for a signer who already signed."""

    default_error_code: str = "PAYOUT_ALREADY_SIGNED"


class InvalidPayoutError(PayoutStateError):
    """Raised when a signature operation targets a document without signature data."""

    default_error_code: str = "PAYOUT_INVALID"


class StatusChangeForbiddenError(PayoutStateError):
    """Raised when the requested status change is not a legal transition."""

    default_error_code: str = "PAYOUT_STATUS_CHANGE_FORBIDDEN"


class LockAcquisitionError(PayoutStateError):
    """
    Raised when a distributed lock cannot be acquired.

    Indicates another process holds the lock for the same merchant.
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"


# =============================================================================
# Dependency
# =============================================================================


class CollaboratorUnavailableError(PayoutDependencyError):
    """
    Raised by adapters when a collaborator cannot be reached.

    Covers connection errors, timeouts, 5xx responses and unparseable
    bodies. Components translate it into their own dependency error.
    """

    default_error_code: str = "COLLABORATOR_UNAVAILABLE"


class SignatureCreationFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_SIGNATURE_CREATION_FAILED"


class SignUrlRequestFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_SIGN_URL_REQUEST_FAILED"


class BalanceFetchFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_BALANCE_FETCH_FAILED"


class SourcesFetchFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_SOURCES_FETCH_FAILED"


class MerchantFetchFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_MERCHANT_FETCH_FAILED"


class NetRevenueCalculationFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_NET_REVENUE_CALCULATION_FAILED"


class OrderStatCalculationFailedError(PayoutDependencyError):
    default_error_code: str = "PAYOUT_ORDER_STAT_CALCULATION_FAILED"


# =============================================================================
# Collaborator Business Errors
# =============================================================================


class CollaboratorBusinessError(PayoutError):
    """
    Structured error returned by a collaborator.

    Carries the collaborator's own code and message and is passed through
    to the caller unchanged.

    Example:
        raise CollaboratorBusinessError(
            "signer rejected the template",
            error_code="ds000003",
            details={"service": "document_signer"},
        )
    """

    default_error_code: str = "COLLABORATOR_BUSINESS_ERROR"
    kind = ErrorKind.VALIDATION


# =============================================================================
# System
# =============================================================================


class PersistenceError(PayoutSystemError):
    default_error_code: str = "PAYOUT_PERSISTENCE_FAILED"


class CacheError(PayoutSystemError):
    default_error_code: str = "PAYOUT_CACHE_FAILED"


class BalanceUpdateFailedError(PayoutSystemError):
    """
    Raised when the balance recompute after a mutation fails.

    The mutation itself has already been persisted with its change record.
    """

    default_error_code: str = "PAYOUT_BALANCE_UPDATE_FAILED"


__all__ = [
    "AmountInvalidError",
    "AutoPayoutsDisabledError",
    "BalanceFetchFailedError",
    "BalanceUpdateFailedError",
    "CacheError",
    "CollaboratorBusinessError",
    "CollaboratorUnavailableError",
    "ErrorKind",
    "InsufficientBalanceError",
    "InvalidPayoutError",
    "LockAcquisitionError",
    "ManualPayoutsDisabledError",
    "MerchantFetchFailedError",
    "MerchantNotFoundError",
    "NetRevenueCalculationFailedError",
    "NoSourcesError",
    "OrderStatCalculationFailedError",
    "PayoutDependencyError",
    "PayoutError",
    "PayoutLookupError",
    "PayoutNotFoundError",
    "PayoutStateError",
    "PayoutSystemError",
    "PayoutValidationError",
    "PersistenceError",
    "SignUrlRequestFailedError",
    "SignatureAlreadySignedError",
    "SignatureCreationFailedError",
    "SourcesFetchFailedError",
    "SourcesInconsistentCurrencyError",
    "SourcesNotFoundError",
    "StatusChangeForbiddenError",
]
