"""
Collaborator adapters for the payout engine.

Usage:
    from payouts.adapters import BillingServiceClient, DocumentSignerAdapter

    billing = BillingServiceClient()
    merchant = billing.get_merchant("m-1")
"""

from payouts.adapters.billing_client import BillingServiceClient
from payouts.adapters.document_signer import (
    DocumentSignerAdapter,
    compute_webhook_signature,
    verify_webhook_signature,
)
from payouts.adapters.http import JsonHttpClient

__all__ = [
    "BillingServiceClient",
    "DocumentSignerAdapter",
    "JsonHttpClient",
    "compute_webhook_signature",
    "verify_webhook_signature",
]
