"""
Payout domain models.

- PayoutDocument: Payable statement built from accepted royalty reports
- PayoutDocumentChange: Append-only audit record of document mutations
"""

from payouts.models.payout_document import PayoutDocument
from payouts.models.payout_document_change import PayoutDocumentChange

__all__ = [
    "PayoutDocument",
    "PayoutDocumentChange",
]
