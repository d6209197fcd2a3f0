"""
Document signer adapter.

Creates two-signer signature requests, fetches per-signer sign URLs and
verifies webhook signatures from the document signer service.

Endpoints:
    POST /signatures                -> signature_request_id,
                                       merchant_signature_id, ps_signature_id,
                                       details_url, files_url
    GET  /signatures/{id}/url       -> sign_url, expires_at

Configuration (via settings):
    DOCUMENT_SIGNER_URL: Service root
    DOCUMENT_SIGNER_API_KEY: Bearer token
    DOCUMENT_SIGNER_TIMEOUT_SECONDS: Per-request timeout (default: 10)
    DOCUMENT_SIGNER_WEBHOOK_SECRET: HMAC-SHA256 key for webhook bodies
"""

from __future__ import annotations

import hashlib
import hmac
from typing import TYPE_CHECKING

from django.conf import settings
from payouts.adapters.http import JsonHttpClient
from payouts.exceptions import CollaboratorUnavailableError
from payouts.types import SignatureRequestResult, SignUrl, parse_aware_datetime

if TYPE_CHECKING:
    from collections.abc import Sequence
    from typing import Any

    import requests

    from payouts.types import Signer


SERVICE_NAME = "document_signer"


def compute_webhook_signature(payload: bytes, secret: str) -> str:
    """Hex HMAC-SHA256 of ``payload`` keyed by ``secret``."""
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_webhook_signature(
    payload: bytes, signature: str | None, secret: str | None = None
) -> bool:
    """
    Check a webhook body against its X-Signer-Signature header.

    Returns False when no secret is configured.
    """
    secret = secret if secret is not None else settings.DOCUMENT_SIGNER_WEBHOOK_SECRET
    if not secret or not signature:
        return False
    return hmac.compare_digest(compute_webhook_signature(payload, secret), signature)


class DocumentSignerAdapter:
    """
    HTTP client for the document signer service.

    Args:
        base_url: Defaults to settings.DOCUMENT_SIGNER_URL
        api_key: Defaults to settings.DOCUMENT_SIGNER_API_KEY
        timeout: Defaults to settings.DOCUMENT_SIGNER_TIMEOUT_SECONDS
        session: Optional requests.Session (tests pass a mock)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.http = JsonHttpClient(
            base_url if base_url is not None else settings.DOCUMENT_SIGNER_URL,
            api_key=api_key if api_key is not None else settings.DOCUMENT_SIGNER_API_KEY,
            timeout=(
                timeout
                if timeout is not None
                else getattr(settings, "DOCUMENT_SIGNER_TIMEOUT_SECONDS", 10)
            ),
            service_name=SERVICE_NAME,
            session=session,
        )

    def create_signature(
        self,
        template: str,
        signers: Sequence[Signer],
        metadata: dict[str, Any],
    ) -> SignatureRequestResult:
        body = self.http.post(
            "/signatures",
            {
                "template": template,
                "signers": [
                    {"email": signer.email, "name": signer.name, "role": str(signer.role)}
                    for signer in signers
                ],
                "metadata": metadata,
            },
        )

        try:
            return SignatureRequestResult(
                signature_request_id=body["signature_request_id"],
                merchant_signature_id=body["merchant_signature_id"],
                psp_signature_id=body["ps_signature_id"],
                details_url=body.get("details_url", ""),
                files_url=body.get("files_url", ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise self._malformed("create_signature") from e

    def get_signature_url(self, signature_id: str) -> SignUrl:
        body = self.http.get(f"/signatures/{signature_id}/url")

        try:
            expires_at = parse_aware_datetime(body["expires_at"])
            sign_url = body["sign_url"]
        except (KeyError, TypeError, ValueError) as e:
            raise self._malformed("get_signature_url") from e

        if expires_at is None or not sign_url:
            raise self._malformed("get_signature_url")
        return SignUrl(sign_url=sign_url, expires_at=expires_at)

    def _malformed(self, operation: str) -> CollaboratorUnavailableError:
        self.http.get_logger().error(
            "Document signer returned an unexpected payload",
            extra={"service": SERVICE_NAME, "operation": operation},
        )
        return CollaboratorUnavailableError(
            "document_signer returned an unexpected payload",
            details={"service": SERVICE_NAME, "operation": operation},
        )


__all__ = [
    "DocumentSignerAdapter",
    "compute_webhook_signature",
    "verify_webhook_signature",
]
