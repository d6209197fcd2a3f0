"""
Protocols for the collaborators consumed by the payout engine.

Each protocol names the narrow interface one service depends on. The
default implementations live in payouts.adapters and talk to the billing
and document signer services over HTTP; tests substitute in-memory fakes.

Error contract for every collaborator method:
    - CollaboratorUnavailableError when the collaborator cannot be reached
    - CollaboratorBusinessError when it answers with a structured error
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from decimal import Decimal
    from typing import Any

    from payouts.types import (
        Merchant,
        MerchantBalance,
        RoyaltyReportSource,
        SignatureRequestResult,
        Signer,
        SignUrl,
    )


@runtime_checkable
class RoyaltyReportSourceReader(Protocol):
    def find_accepted(
        self, merchant_id: str, source_ids: Sequence[str]
    ) -> list[RoyaltyReportSource]:
        """Return accepted reports among source_ids, sorted by period start."""
        ...

    def find_by_ids(
        self, merchant_id: str, source_ids: Sequence[str]
    ) -> list[RoyaltyReportSource]:
        """Return the merchant's reports among source_ids in any status."""
        ...


@runtime_checkable
class MerchantBalanceReader(Protocol):
    def get_balance(self, merchant_id: str) -> MerchantBalance:
        ...


@runtime_checkable
class BalanceRecompute(Protocol):
    def recompute(self, merchant_id: str) -> None:
        """Recalculate the merchant balance including in-flight payouts."""
        ...


@runtime_checkable
class MerchantProfileReader(Protocol):
    def get_merchant(self, merchant_id: str) -> Merchant | None:
        """Return the merchant profile, or None if it does not exist."""
        ...


@runtime_checkable
class OrderStatisticsSource(Protocol):
    def net_revenue_by_country(
        self, merchant_id: str, period_from: datetime, period_to: datetime
    ) -> dict[str, Decimal]:
        """Net revenue of processed orders in the window, grouped by country."""
        ...

    def item_order_counts(
        self, merchant_id: str, period_from: datetime, period_to: datetime
    ) -> dict[str, int]:
        """Order counts in the window, grouped by item name."""
        ...


@runtime_checkable
class DocumentSigner(Protocol):
    def create_signature(
        self,
        template: str,
        signers: Sequence[Signer],
        metadata: dict[str, Any],
    ) -> SignatureRequestResult:
        ...

    def get_signature_url(self, signature_id: str) -> SignUrl:
        ...


__all__ = [
    "BalanceRecompute",
    "DocumentSigner",
    "MerchantBalanceReader",
    "MerchantProfileReader",
    "OrderStatisticsSource",
    "RoyaltyReportSourceReader",
]
