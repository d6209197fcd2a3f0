"""
State transition manager for payout documents.

Owns the legality of status changes and decides when a mutation needs a
balance recompute. Every accepted mutation goes through the repository,
which writes exactly one change record with it; a request that changes
nothing writes nothing.

Mutation sources:
    Signer webhook
        Sets the merchant/PSP signed flags (only ever false -> true) and
        the signed document URL. Becoming fully signed for the first time
        triggers one balance recompute.
    Administrative correction
        Changes the supplied subset of status, transaction and failure
        fields whose values differ. Landing in pending, in_progress or
        paid through a status change triggers a balance recompute.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django_fsm import TransitionNotAllowed

from core.services import BaseService

from payouts.exceptions import (
    InvalidPayoutError,
    PayoutValidationError,
    StatusChangeForbiddenError,
)
from payouts.state_machines import (
    BALANCE_AFFECTING_STATUSES,
    ChangeSource,
    PayoutDocumentStatus,
)
from payouts.types import UpdateResult

if TYPE_CHECKING:
    from payouts.models import PayoutDocument
    from payouts.services.balance import BalanceGovernance
    from payouts.services.repository import PayoutDocumentRepository


# Target status -> PayoutDocument transition method
TRANSITION_METHODS = {
    PayoutDocumentStatus.PENDING: "return_to_pending",
    PayoutDocumentStatus.IN_PROGRESS: "start_processing",
    PayoutDocumentStatus.PAID: "mark_paid",
    PayoutDocumentStatus.SKIP: "mark_skipped",
    PayoutDocumentStatus.FAILED: "mark_failed",
}

# Correction fields that are plain values, not state transitions
DETAIL_FIELDS = (
    "transaction",
    "failure_code",
    "failure_message",
    "failure_transaction",
)


class StateTransitionManager(BaseService):
    """Applies signer webhook updates and administrative corrections."""

    def __init__(
        self,
        repository: PayoutDocumentRepository,
        governance: BalanceGovernance,
    ) -> None:
        self.repository = repository
        self.governance = governance

    def transition(self, document: PayoutDocument, target: str) -> None:
        """
        Move ``document`` to ``target`` in memory.

        Raises:
            PayoutValidationError: target is not a known status
            StatusChangeForbiddenError: the transition is not allowed
        """
        method_name = TRANSITION_METHODS.get(target)
        if method_name is None:
            raise PayoutValidationError(
                "Unknown payout document status",
                error_code="PAYOUT_INVALID_STATUS",
                details={"status": target},
            )

        current = document.status
        try:
            getattr(document, method_name)()
        except TransitionNotAllowed as e:
            raise StatusChangeForbiddenError(
                "Status change is forbidden",
                details={
                    "payout_document_id": str(document.id),
                    "current_status": current,
                    "target_status": target,
                },
            ) from e

    def apply_signatures(
        self,
        document: PayoutDocument,
        has_merchant_signature: bool,
        has_psp_signature: bool,
        signed_document_file_url: str | None,
        ip: str | None,
    ) -> UpdateResult:
        """
        Record signer progress reported by the document signer.

        Raises:
            InvalidPayoutError: the document has no signature workflow
            BalanceUpdateFailedError: recompute failed after the update was saved
        """
        signature = document.signature
        if signature is None:
            raise InvalidPayoutError(
                "Payout document has no signature data",
                details={"payout_document_id": str(document.id)},
            )

        was_fully_signed = document.is_fully_signed
        modified = False

        if has_merchant_signature and not document.has_merchant_signature:
            document.has_merchant_signature = True
            modified = True

        if has_psp_signature and not document.has_psp_signature:
            document.has_psp_signature = True
            modified = True

        if (
            signed_document_file_url
            and signed_document_file_url != signature.signed_document_file_url
        ):
            signature.signed_document_file_url = signed_document_file_url
            document.signature = signature
            modified = True

        if not modified:
            return UpdateResult(document=document, modified=False)

        persisted = self.repository.update(document, ip, ChangeSource.SIGNER_WEBHOOK)

        if not was_fully_signed and persisted.is_fully_signed:
            self.get_logger().info(
                "Payout document fully signed",
                extra={
                    "payout_document_id": str(persisted.id),
                    "merchant_id": persisted.merchant_id,
                },
            )
            self.governance.recompute(persisted.merchant_id)

        return UpdateResult(document=persisted, modified=True)

    def apply_correction(
        self,
        document: PayoutDocument,
        ip: str | None,
        status: str | None = None,
        transaction: str | None = None,
        failure_code: str | None = None,
        failure_message: str | None = None,
        failure_transaction: str | None = None,
    ) -> UpdateResult:
        """
        Apply an administrative correction.

        Only supplied values that differ from the current ones are applied.
        Nothing to apply returns ``modified=False`` and writes no change record.

        Raises:
            PayoutValidationError: status is not a known status
            StatusChangeForbiddenError: the status transition is not allowed
            BalanceUpdateFailedError: recompute failed after the update was saved
        """
        changed: list[str] = []

        if status is not None and status != document.status:
            self.transition(document, status)
            changed.append("status")

        values = {
            "transaction": transaction,
            "failure_code": failure_code,
            "failure_message": failure_message,
            "failure_transaction": failure_transaction,
        }
        for field_name in DETAIL_FIELDS:
            value = values[field_name]
            if value is not None and value != getattr(document, field_name):
                setattr(document, field_name, value)
                changed.append(field_name)

        if not changed:
            return UpdateResult(document=document, modified=False)

        persisted = self.repository.update(document, ip, ChangeSource.ADMIN)

        self.get_logger().info(
            "Payout document corrected",
            extra={
                "payout_document_id": str(persisted.id),
                "changed_fields": changed,
                "status": persisted.status,
            },
        )

        if "status" in changed and persisted.status in BALANCE_AFFECTING_STATUSES:
            self.governance.recompute(persisted.merchant_id)

        return UpdateResult(document=persisted, modified=True)


__all__ = [
    "DETAIL_FIELDS",
    "TRANSITION_METHODS",
    "StateTransitionManager",
]
