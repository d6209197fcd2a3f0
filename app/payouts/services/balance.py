"""
Balance governance for payout documents.

Checks a proposed payout against the merchant's ledger snapshot and
decides the payable amount and initial status. Also triggers the external
balance recompute after balance-affecting mutations.

Rules:
    available = debit - credit
    aggregated > available            -> InsufficientBalanceError
    amount = aggregated - rolling_reserve
    amount <= 0                       -> AmountInvalidError
    amount < merchant minimum payout  -> status SKIP (no signature workflow)
    otherwise                         -> status PENDING
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from core.services import BaseService

from payouts.exceptions import (
    AmountInvalidError,
    BalanceFetchFailedError,
    BalanceUpdateFailedError,
    CollaboratorUnavailableError,
    InsufficientBalanceError,
    PayoutError,
)
from payouts.state_machines import PayoutDocumentStatus

if TYPE_CHECKING:
    from payouts.protocols import BalanceRecompute, MerchantBalanceReader
    from payouts.types import AggregatedSources, Merchant


@dataclass(frozen=True)
class BalanceDecision:
    """Payable amount and initial status of a new payout document."""

    amount: Decimal
    status: str

    @property
    def is_skip(self) -> bool:
        return self.status == PayoutDocumentStatus.SKIP


class BalanceGovernance(BaseService):
    """Enforces payability against the merchant balance."""

    def __init__(
        self,
        balances: MerchantBalanceReader,
        recompute: BalanceRecompute,
    ) -> None:
        self.balances = balances
        self.recompute_service = recompute

    def evaluate(self, merchant: Merchant, aggregated: AggregatedSources) -> BalanceDecision:
        """
        Decide the payable amount for ``aggregated`` sources.

        Raises:
            BalanceFetchFailedError: the balance source is unavailable
            InsufficientBalanceError: aggregated amount exceeds debit - credit
            AmountInvalidError: amount after the rolling reserve is not positive
        """
        try:
            balance = self.balances.get_balance(merchant.id)
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Unable to load merchant balance",
                extra={
                    "operation": "get_balance",
                    "service": "merchant_balance",
                    "merchant_id": merchant.id,
                },
                exc_info=True,
            )
            raise BalanceFetchFailedError(
                "Unable to get merchant balance",
                details={"merchant_id": merchant.id},
            ) from e

        if aggregated.amount > balance.available:
            raise InsufficientBalanceError(
                merchant.id,
                required=aggregated.amount,
                available=balance.available,
            )

        amount = aggregated.amount - balance.rolling_reserve
        if amount <= 0:
            raise AmountInvalidError(
                "Payout amount is invalid",
                details={
                    "aggregated": str(aggregated.amount),
                    "rolling_reserve": str(balance.rolling_reserve),
                },
            )

        if amount < merchant.min_payout_amount:
            self.get_logger().info(
                "Payout amount below merchant minimum, document will be skipped",
                extra={
                    "merchant_id": merchant.id,
                    "amount": str(amount),
                    "min_payout_amount": str(merchant.min_payout_amount),
                },
            )
            return BalanceDecision(amount=amount, status=PayoutDocumentStatus.SKIP)

        return BalanceDecision(amount=amount, status=PayoutDocumentStatus.PENDING)

    def recompute(self, merchant_id: str) -> None:
        """
        Ask the ledger to recalculate the merchant balance.

        Raises:
            BalanceUpdateFailedError: the recompute collaborator failed
        """
        try:
            self.recompute_service.recompute(merchant_id)
        except PayoutError as e:
            self.get_logger().error(
                "Merchant balance update failed",
                extra={
                    "operation": "recompute",
                    "service": "merchant_balance",
                    "merchant_id": merchant_id,
                    "error_code": e.error_code,
                },
                exc_info=True,
            )
            raise BalanceUpdateFailedError(
                "Merchant balance update failed",
                details={"merchant_id": merchant_id, "cause": e.error_code},
            ) from e

        self.get_logger().info(
            "Merchant balance recomputed",
            extra={"merchant_id": merchant_id},
        )


__all__ = [
    "BalanceDecision",
    "BalanceGovernance",
]
