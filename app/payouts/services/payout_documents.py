"""
Public payout document operations.

PayoutDocumentService is the entry point for every payout operation. It
wires the internal components together from a PayoutContext and turns
PayoutError raised inside them into ServiceResult failures, so callers
branch on ``result.success`` and ``result.error_kind`` only.

Creation flow:
    merchant profile -> SourceAggregator -> BalanceGovernance
        -> PayoutStatisticsService -> SignatureOrchestrator
        -> PayoutDocumentRepository.insert

Skipped documents (amount below the merchant minimum) are persisted
without a signature workflow. Their statistics are still computed, so a
statistics outage fails the creation either way.

Usage:
    from payouts.context import build_payout_context
    from payouts.services import PayoutDocumentService

    service = PayoutDocumentService(build_payout_context())
    result = service.create_payout_document(
        merchant_id="m-1",
        source_ids=["r-1", "r-2"],
        description="March royalties",
        ip="10.0.0.1",
    )
    if result.success:
        document = result.data
"""

from __future__ import annotations

import logging
import uuid
from contextlib import nullcontext
from datetime import timedelta
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService, ServiceResult

from payouts.exceptions import (
    AutoPayoutsDisabledError,
    CollaboratorUnavailableError,
    ErrorKind,
    ManualPayoutsDisabledError,
    MerchantFetchFailedError,
    MerchantNotFoundError,
    PayoutError,
)
from payouts.locks import DistributedLock
from payouts.models import PayoutDocument
from payouts.services.balance import BalanceGovernance
from payouts.services.signatures import SignatureOrchestrator
from payouts.services.sources import SourceAggregator
from payouts.services.statistics import PayoutStatisticsService
from payouts.services.transitions import StateTransitionManager
from payouts.state_machines import ChangeSource

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime

    from payouts.context import PayoutContext
    from payouts.types import (
        Merchant,
        Page,
        PayoutDocumentFilter,
        RoyaltyReportSource,
        SignUrlResult,
        UpdateResult,
    )


# Expected failures are logged as warnings, everything else as errors
QUIET_ERROR_KINDS = {ErrorKind.VALIDATION, ErrorKind.NOT_FOUND, ErrorKind.STATE}


class PayoutDocumentService(BaseService):
    """
    Payout document operations over one PayoutContext.

    Each public method returns a ServiceResult and never raises PayoutError.
    """

    def __init__(self, context: PayoutContext) -> None:
        self.context = context
        self.repository = context.repository
        self.aggregator = SourceAggregator(context.sources)
        self.governance = BalanceGovernance(context.balances, context.balance_recompute)
        self.statistics = PayoutStatisticsService(context.statistics)
        self.signatures = SignatureOrchestrator(
            context.signer, context.repository, clock=context.clock
        )
        self.transitions = StateTransitionManager(context.repository, self.governance)

    def _failure(self, exc: PayoutError, operation: str) -> ServiceResult:
        level = logging.WARNING if exc.kind in QUIET_ERROR_KINDS else logging.ERROR
        return self.handle_exception(exc, operation, log_level=level)

    # =========================================================================
    # Creation
    # =========================================================================

    def create_payout_document(
        self,
        merchant_id: str,
        source_ids: Sequence[str],
        description: str,
        ip: str | None,
        is_auto_generation: bool = False,
    ) -> ServiceResult[PayoutDocument]:
        """
        Create a payout document from accepted royalty reports.

        Args:
            merchant_id: Merchant requesting the payout
            source_ids: Royalty report ids to pay out
            description: Free-text description
            ip: Origin IP recorded in the change record
            is_auto_generation: True for automatic payout runs

        Returns:
            ServiceResult with the persisted PayoutDocument

        Error codes:
            PAYOUT_NO_SOURCES, PAYOUT_SOURCES_NOT_FOUND,
            PAYOUT_SOURCES_INCONSISTENT_CURRENCY, PAYOUT_INSUFFICIENT_BALANCE,
            PAYOUT_AMOUNT_INVALID, PAYOUT_MERCHANT_NOT_FOUND,
            PAYOUT_MANUAL_PAYOUTS_DISABLED, PAYOUT_AUTO_PAYOUTS_DISABLED,
            LOCK_ACQUISITION_FAILED, dependency and system codes
        """
        self.get_logger().info(
            "Creating payout document",
            extra={
                "merchant_id": merchant_id,
                "source_ids": list(source_ids or []),
                "is_auto_generation": is_auto_generation,
            },
        )

        try:
            with self._creation_lock(merchant_id):
                document = self._create(
                    merchant_id, source_ids, description, ip, is_auto_generation
                )
        except PayoutError as e:
            return self._failure(e, "create_payout_document")

        return ServiceResult.success(document)

    def _creation_lock(self, merchant_id: str) -> DistributedLock | nullcontext:
        if not getattr(settings, "PAYOUT_SERIALIZE_CREATION_PER_MERCHANT", False):
            return nullcontext()
        return DistributedLock(
            f"payout:create:{merchant_id}",
            ttl=settings.PAYOUT_CREATION_LOCK_TTL,
            timeout=settings.PAYOUT_CREATION_LOCK_TIMEOUT,
        )

    def _create(
        self,
        merchant_id: str,
        source_ids: Sequence[str],
        description: str,
        ip: str | None,
        is_auto_generation: bool,
    ) -> PayoutDocument:
        merchant = self._get_merchant(merchant_id)

        # The merchant is on exactly one of manual or automatic payouts
        if merchant.manual_payouts_enabled == is_auto_generation:
            if is_auto_generation:
                raise AutoPayoutsDisabledError(
                    "Automatic payouts are disabled for this merchant",
                    details={"merchant_id": merchant_id},
                )
            raise ManualPayoutsDisabledError(
                "Manual payouts are disabled for this merchant",
                details={"merchant_id": merchant_id},
            )

        aggregated = self.aggregator.aggregate(merchant_id, source_ids)
        decision = self.governance.evaluate(merchant, aggregated)

        document = PayoutDocument(
            id=uuid.uuid4(),
            merchant_id=merchant_id,
            status=decision.status,
            amount=decision.amount,
            currency=aggregated.currency,
            source_ids=aggregated.source_ids,
            description=description or "",
            arrival_date=self._arrival_date(),
            period_from=aggregated.period_from,
            period_to=aggregated.period_to,
            destination=dict(merchant.banking),
            company_name=merchant.company_name,
            agreement_number=merchant.agreement_number,
        )

        # Statistics failures abort creation, skipped documents included
        statistics = self.statistics.compute(merchant_id, aggregated.periods)
        if not decision.is_skip:
            document.signature = self.signatures.create_workflow(
                merchant, document, statistics
            )

        source = ChangeSource.ADMIN if is_auto_generation else ChangeSource.MERCHANT
        return self.repository.insert(document, ip, source)

    def _get_merchant(self, merchant_id: str) -> Merchant:
        try:
            merchant = self.context.merchants.get_merchant(merchant_id)
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Unable to load merchant profile",
                extra={
                    "operation": "get_merchant",
                    "service": "merchant_profile",
                    "merchant_id": merchant_id,
                },
                exc_info=True,
            )
            raise MerchantFetchFailedError(
                "Unable to get merchant",
                details={"merchant_id": merchant_id},
            ) from e

        if merchant is None:
            raise MerchantNotFoundError(
                "Merchant not found",
                details={"merchant_id": merchant_id},
            )
        return merchant

    def _arrival_date(self) -> datetime:
        """End of the current day plus PAYOUT_ARRIVAL_DAYS."""
        end_of_day = self.context.clock().replace(
            hour=23, minute=59, second=59, microsecond=999999
        )
        return end_of_day + timedelta(days=getattr(settings, "PAYOUT_ARRIVAL_DAYS", 5))

    # =========================================================================
    # Mutations
    # =========================================================================

    def update_payout_document_signatures(
        self,
        payout_document_id: str,
        has_merchant_signature: bool,
        has_psp_signature: bool,
        signed_document_file_url: str | None = None,
        ip: str | None = None,
    ) -> ServiceResult[PayoutDocument]:
        """
        Apply signer progress reported by the document signer webhook.

        Returns:
            ServiceResult with the current PayoutDocument, changed or not
        """
        try:
            document = self.repository.get_by_id(payout_document_id)
            result = self.transitions.apply_signatures(
                document,
                has_merchant_signature=has_merchant_signature,
                has_psp_signature=has_psp_signature,
                signed_document_file_url=signed_document_file_url,
                ip=ip,
            )
        except PayoutError as e:
            return self._failure(e, "update_payout_document_signatures")

        return ServiceResult.success(result.document)

    def update_payout_document(
        self,
        payout_document_id: str,
        status: str | None = None,
        transaction: str | None = None,
        failure_code: str | None = None,
        failure_message: str | None = None,
        failure_transaction: str | None = None,
        ip: str | None = None,
    ) -> ServiceResult[UpdateResult]:
        """
        Apply an administrative correction.

        Returns:
            ServiceResult with an UpdateResult; ``modified`` is False when
            every supplied value already matched
        """
        try:
            document = self.repository.get_by_id(payout_document_id)
            result = self.transitions.apply_correction(
                document,
                ip,
                status=status,
                transaction=transaction,
                failure_code=failure_code,
                failure_message=failure_message,
                failure_transaction=failure_transaction,
            )
        except PayoutError as e:
            return self._failure(e, "update_payout_document")

        return ServiceResult.success(result)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_payout_documents(
        self,
        filters: PayoutDocumentFilter,
        limit: int | None = None,
        offset: int = 0,
    ) -> ServiceResult[Page]:
        """Query documents newest first; zero matches is PAYOUT_NOT_FOUND."""
        if not limit or limit <= 0:
            limit = getattr(settings, "PAYOUT_QUERY_DEFAULT_LIMIT", 100)
        offset = max(offset or 0, 0)

        try:
            page = self.repository.query(filters, limit=limit, offset=offset)
        except PayoutError as e:
            return self._failure(e, "get_payout_documents")

        return ServiceResult.success(page)

    def get_payout_document(
        self, payout_document_id: str, merchant_id: str
    ) -> ServiceResult[PayoutDocument]:
        try:
            document = self.repository.get_for_merchant(payout_document_id, merchant_id)
        except PayoutError as e:
            return self._failure(e, "get_payout_document")

        return ServiceResult.success(document)

    def get_payout_document_royalty_reports(
        self, payout_document_id: str, merchant_id: str
    ) -> ServiceResult[list[RoyaltyReportSource]]:
        """Return the royalty reports a merchant's payout document was built from."""
        try:
            document = self.repository.get_for_merchant(payout_document_id, merchant_id)
            reports = self.aggregator.reports_for(merchant_id, document.source_ids)
        except PayoutError as e:
            return self._failure(e, "get_payout_document_royalty_reports")

        return ServiceResult.success(reports)

    def get_payout_document_sign_url(
        self, payout_document_id: str, signer_type: str, ip: str | None
    ) -> ServiceResult[SignUrlResult]:
        """
        Return a sign URL for the merchant or PSP signer.

        A stored URL that has not expired is returned without calling the
        document signer.
        """
        try:
            document = self.repository.get_by_id(payout_document_id)
            sign_url = self.signatures.get_sign_url(document, signer_type, ip)
        except PayoutError as e:
            return self._failure(e, "get_payout_document_sign_url")

        return ServiceResult.success(sign_url)


__all__ = [
    "PayoutDocumentService",
]
