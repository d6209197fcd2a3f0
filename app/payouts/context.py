"""
Composition of the payout engine's collaborators.

PayoutContext holds every external collaborator the payout services need.
It is built once (per process or per test) and passed by reference; the
services keep no module-level state.

Collaborators are configured in settings as dotted paths:

    PAYOUT_COLLABORATORS = {
        "sources": "payouts.adapters.BillingServiceClient",
        "balances": "payouts.adapters.BillingServiceClient",
        "balance_recompute": "payouts.adapters.BillingServiceClient",
        "statistics": "payouts.adapters.BillingServiceClient",
        "merchants": "payouts.adapters.BillingServiceClient",
        "signer": "payouts.adapters.DocumentSignerAdapter",
    }

Roles that name the same class share one instance.

Usage:
    from payouts.context import build_payout_context

    context = build_payout_context()
    service = PayoutDocumentService(context)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils import timezone
from django.utils.module_loading import import_string

from payouts.protocols import (
    BalanceRecompute,
    DocumentSigner,
    MerchantBalanceReader,
    MerchantProfileReader,
    OrderStatisticsSource,
    RoyaltyReportSourceReader,
)
from payouts.services.repository import PayoutDocumentRepository

# Context attribute -> protocol its collaborator must satisfy
COLLABORATOR_ROLES: dict[str, type] = {
    "sources": RoyaltyReportSourceReader,
    "balances": MerchantBalanceReader,
    "balance_recompute": BalanceRecompute,
    "statistics": OrderStatisticsSource,
    "signer": DocumentSigner,
    "merchants": MerchantProfileReader,
}


@dataclass
class PayoutContext:
    """
    Collaborators of one payout engine instance.

    Attributes:
        sources: Accepted royalty report lookup
        balances: Merchant ledger snapshot
        balance_recompute: Ledger recompute trigger
        statistics: Grouped revenue and order aggregates
        signer: Electronic signature provider
        merchants: Merchant profile lookup
        repository: Payout document persistence
        clock: Current time, timezone aware
    """

    sources: RoyaltyReportSourceReader
    balances: MerchantBalanceReader
    balance_recompute: BalanceRecompute
    statistics: OrderStatisticsSource
    signer: DocumentSigner
    merchants: MerchantProfileReader
    repository: PayoutDocumentRepository = field(default_factory=PayoutDocumentRepository)
    clock: Callable[[], datetime] = timezone.now


def build_payout_context(collaborators: dict[str, str] | None = None) -> PayoutContext:
    """
    Build a PayoutContext from dotted collaborator paths.

    Args:
        collaborators: Role -> dotted path mapping
            (defaults to settings.PAYOUT_COLLABORATORS)

    Raises:
        ImproperlyConfigured: If a role is missing or its class does not
            implement the role's protocol
    """
    paths = collaborators if collaborators is not None else settings.PAYOUT_COLLABORATORS

    instances: dict[str, Any] = {}
    resolved: dict[str, Any] = {}
    for role, protocol in COLLABORATOR_ROLES.items():
        path = paths.get(role)
        if not path:
            raise ImproperlyConfigured(f"PAYOUT_COLLABORATORS is missing '{role}'")

        if path not in instances:
            instances[path] = import_string(path)()
        instance = instances[path]

        if not isinstance(instance, protocol):
            raise ImproperlyConfigured(
                f"{path} does not implement {protocol.__name__} for '{role}'"
            )
        resolved[role] = instance

    return PayoutContext(**resolved)


__all__ = [
    "COLLABORATOR_ROLES",
    "PayoutContext",
    "build_payout_context",
]
