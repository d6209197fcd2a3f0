"""
Document signer webhook endpoint.

The document signer reports signature progress by POSTing JSON to this
endpoint. The view:
1. Verifies the HMAC-SHA256 signature of the raw body
2. Validates the payload
3. Applies the signature flags through PayoutDocumentService
4. Returns a plain status response

Usage:
    # In urls.py
    from payouts.webhooks import signer_webhook

    urlpatterns = [
        path("webhooks/signer/", signer_webhook, name="signer_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging

from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from core.helpers import get_client_ip

from payouts.adapters import verify_webhook_signature
from payouts.serializers import SignerWebhookSerializer
from payouts.views import ERROR_KIND_STATUS, get_payout_service

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signer-Signature"


@csrf_exempt
@require_POST
def signer_webhook(request: HttpRequest) -> HttpResponse:
    """
    Receive signature progress from the document signer.

    Security:
    - Signature verification prevents spoofed webhooks
    - CSRF exemption required for external webhooks
    - Only POST requests accepted

    Idempotency:
    - Flags only move from false to true, so a repeated event changes
      nothing and writes no change record

    Returns:
        HttpResponse with status:
        - 200: Event applied (or nothing to change)
        - 400: Missing/invalid signature or payload
        - 404: Unknown payout document
        - 409: Document has no signature workflow
        - 5xx: Persistence or balance recompute failure
    """
    payload = request.body
    signature = request.headers.get(SIGNATURE_HEADER, "")

    if not signature:
        logger.warning(f"Webhook received without {SIGNATURE_HEADER} header")
        return HttpResponse("Missing signature", status=400)

    if not verify_webhook_signature(payload, signature):
        logger.warning("Signer webhook signature verification failed")
        return HttpResponse("Invalid signature", status=400)

    try:
        event_data = json.loads(payload)
    except ValueError:
        logger.warning("Signer webhook body is not valid JSON")
        return HttpResponse("Invalid payload", status=400)

    serializer = SignerWebhookSerializer(data=event_data)
    if not serializer.is_valid():
        logger.warning(
            "Signer webhook payload rejected",
            extra={"errors": serializer.errors},
        )
        return HttpResponse("Invalid payload", status=400)

    data = serializer.validated_data
    payout_document_id = str(data["payout_document_id"])

    logger.info(
        "Received signer webhook",
        extra={
            "payout_document_id": payout_document_id,
            "has_merchant_signature": data["has_merchant_signature"],
            "has_psp_signature": data["has_psp_signature"],
        },
    )

    result = get_payout_service().update_payout_document_signatures(
        payout_document_id,
        has_merchant_signature=data["has_merchant_signature"],
        has_psp_signature=data["has_psp_signature"],
        signed_document_file_url=data["signed_document_file_url"],
        ip=get_client_ip(request),
    )

    if not result.success:
        return HttpResponse(
            result.error_code or "Error",
            status=ERROR_KIND_STATUS.get(result.error_kind, 500),
        )

    return HttpResponse("Accepted", status=200)


__all__ = [
    "SIGNATURE_HEADER",
    "signer_webhook",
]
