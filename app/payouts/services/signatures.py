"""
Signature orchestration for payout documents.

Each non-skipped payout document carries one two-signer request at the
document signer: the merchant's authorized contact and the platform (PSP).
Each signer has its own sign URL and expiry. A stored URL that has not
expired is returned as is without calling the signer, which keeps sign
URL requests from consuming the signer's quota.

Usage:
    orchestrator = SignatureOrchestrator(signer, repository)

    document.signature = orchestrator.create_workflow(merchant, document, statistics)

    result = orchestrator.get_sign_url(document, SignerType.MERCHANT, ip="10.0.0.1")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from core.services import BaseService

from payouts.exceptions import (
    CollaboratorUnavailableError,
    InvalidPayoutError,
    PayoutValidationError,
    SignatureAlreadySignedError,
    SignatureCreationFailedError,
    SignUrlRequestFailedError,
)
from payouts.state_machines import ChangeSource, SignerType
from payouts.types import SignatureData, Signer, SignUrlResult

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from payouts.models import PayoutDocument
    from payouts.protocols import DocumentSigner
    from payouts.services.repository import PayoutDocumentRepository
    from payouts.types import Merchant, PeriodStatistics


# Action identifier attached to every payout signature request
SIGNATURE_ACTION = "payout_document"


class SignatureOrchestrator(BaseService):
    """Creates and renews the two-signer workflow of a payout document."""

    def __init__(
        self,
        signer: DocumentSigner,
        repository: PayoutDocumentRepository,
        clock: Callable[[], datetime] = timezone.now,
    ) -> None:
        self.signer = signer
        self.repository = repository
        self.clock = clock

    def create_workflow(
        self,
        merchant: Merchant,
        document: PayoutDocument,
        statistics: Sequence[PeriodStatistics],
    ) -> SignatureData:
        """
        Open a signature request for ``document``.

        The document id must already be assigned; it is sent as metadata.

        Raises:
            SignatureCreationFailedError: the signer could not be reached
            CollaboratorBusinessError: the signer rejected the request
        """
        signers = [
            Signer(
                email=merchant.contact_email,
                name=merchant.contact_name,
                role=SignerType.MERCHANT,
            ),
            Signer(
                email=settings.PAYOUT_PSP_SIGNER_EMAIL,
                name=settings.PAYOUT_PSP_SIGNER_NAME,
                role=SignerType.PSP,
            ),
        ]
        metadata = {
            "action": SIGNATURE_ACTION,
            "payout_document_id": str(document.id),
            "merchant_id": merchant.id,
            "statistics": [entry.to_metadata() for entry in statistics],
        }

        try:
            result = self.signer.create_signature(
                settings.PAYOUT_SIGNATURE_TEMPLATE, signers, metadata
            )
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Signature request creation failed",
                extra={
                    "operation": "create_signature",
                    "service": "document_signer",
                    "payout_document_id": str(document.id),
                    "merchant_id": merchant.id,
                },
                exc_info=True,
            )
            raise SignatureCreationFailedError(
                "Unable to create signature request",
                details={"payout_document_id": str(document.id)},
            ) from e

        self.get_logger().info(
            "Signature request created",
            extra={
                "payout_document_id": str(document.id),
                "signature_request_id": result.signature_request_id,
            },
        )
        return SignatureData.from_request(result)

    def get_sign_url(
        self, document: PayoutDocument, signer_type: str, ip: str | None
    ) -> SignUrlResult:
        """
        Return a usable sign URL for one signer.

        A stored URL that has not expired is returned without calling the
        signer. Otherwise a fresh URL is requested and persisted on the
        document.

        Raises:
            InvalidPayoutError: the document has no signature workflow
            SignatureAlreadySignedError: the signer already signed
            SignUrlRequestFailedError: the signer could not be reached
        """
        signature = document.signature
        if signature is None:
            raise InvalidPayoutError(
                "Payout document has no signature data",
                details={"payout_document_id": str(document.id)},
            )

        if signer_type == SignerType.MERCHANT:
            stored = signature.merchant_sign_url
            signature_id = signature.merchant_signature_id
            already_signed = document.has_merchant_signature
            change_source = ChangeSource.MERCHANT
        elif signer_type == SignerType.PSP:
            stored = signature.psp_sign_url
            signature_id = signature.psp_signature_id
            already_signed = document.has_psp_signature
            change_source = ChangeSource.ADMIN
        else:
            raise PayoutValidationError(
                "Unknown signer type",
                error_code="PAYOUT_INVALID_SIGNER_TYPE",
                details={"signer_type": signer_type},
            )

        if stored is not None and stored.is_valid(self.clock()):
            return SignUrlResult(sign_url=stored.sign_url, expires_at=stored.expires_at)

        if already_signed:
            raise SignatureAlreadySignedError(
                "Payout document already signed by this signer",
                details={
                    "payout_document_id": str(document.id),
                    "signer_type": signer_type,
                },
            )

        try:
            fresh = self.signer.get_signature_url(signature_id)
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Sign URL request failed",
                extra={
                    "operation": "get_signature_url",
                    "service": "document_signer",
                    "payout_document_id": str(document.id),
                    "signature_id": signature_id,
                },
                exc_info=True,
            )
            raise SignUrlRequestFailedError(
                "Unable to get sign URL",
                details={"payout_document_id": str(document.id)},
            ) from e

        if signer_type == SignerType.MERCHANT:
            signature.merchant_sign_url = fresh
        else:
            signature.psp_sign_url = fresh
        document.signature = signature
        self.repository.update(document, ip, change_source)

        self.get_logger().info(
            "Sign URL renewed",
            extra={
                "payout_document_id": str(document.id),
                "signer_type": signer_type,
                "expires_at": fresh.expires_at.isoformat(),
            },
        )
        return SignUrlResult(sign_url=fresh.sign_url, expires_at=fresh.expires_at)


__all__ = [
    "SIGNATURE_ACTION",
    "SignatureOrchestrator",
]
