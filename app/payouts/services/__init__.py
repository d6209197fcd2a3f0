"""
Payout services.

PayoutDocumentService is the public entry point. The remaining services
are its internal components and are exported for direct use in tests and
management tooling.
"""

from payouts.services.balance import BalanceDecision, BalanceGovernance
from payouts.services.payout_documents import PayoutDocumentService
from payouts.services.repository import PayoutDocumentRepository
from payouts.services.signatures import SignatureOrchestrator
from payouts.services.sources import SourceAggregator
from payouts.services.statistics import PayoutStatisticsService
from payouts.services.transitions import StateTransitionManager

__all__ = [
    "BalanceDecision",
    "BalanceGovernance",
    "PayoutDocumentRepository",
    "PayoutDocumentService",
    "PayoutStatisticsService",
    "SignatureOrchestrator",
    "SourceAggregator",
    "StateTransitionManager",
]
