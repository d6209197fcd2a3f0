"""
State machine enums and helpers for payout models.
"""

from payouts.state_machines.states import (
    BALANCE_AFFECTING_STATUSES,
    ChangeSource,
    PayoutDocumentStatus,
    SignerType,
)

__all__ = [
    "BALANCE_AFFECTING_STATUSES",
    "ChangeSource",
    "PayoutDocumentStatus",
    "SignerType",
]
