"""
End-to-end payout document lifecycle through the HTTP API.

Flow covered:
    create -> merchant sign URL (cached) -> signer webhook (fully signed)
        -> admin moves it to in_progress -> admin marks it paid

Collaborators are the in-memory fakes; everything else (views, service,
repository, audit trail) runs for real against the test database.
"""

import json

import pytest
from django.test import Client
from django.urls import reverse

from payouts.adapters import compute_webhook_signature
from payouts.audit import compute_snapshot_hash
from payouts.models import PayoutDocument, PayoutDocumentChange
from payouts.state_machines import ChangeSource, PayoutDocumentStatus
from payouts.tests.fakes import MERCHANT_ID

SECRET = "lifecycle-secret"


@pytest.fixture(autouse=True)
def webhook_secret(settings):
    settings.DOCUMENT_SIGNER_WEBHOOK_SECRET = SECRET


def send_signer_event(payload):
    body = json.dumps(payload).encode()
    return Client().post(
        reverse("payouts:signer_webhook"),
        data=body,
        content_type="application/json",
        HTTP_X_SIGNER_SIGNATURE=compute_webhook_signature(body, SECRET),
    )


class TestPayoutDocumentLifecycle:
    def test_create_sign_and_pay(self, staff_client, api_service, billing, signer):
        created = staff_client.post(
            reverse("payouts:document_list"),
            {"merchant_id": MERCHANT_ID, "source_ids": ["report-1", "report-2"]},
            format="json",
        )
        assert created.status_code == 201
        document_id = created.json()["id"]
        sign_url_path = reverse(
            "payouts:document_sign_url", kwargs={"payout_document_id": document_id}
        )
        detail_path = reverse(
            "payouts:document_detail", kwargs={"payout_document_id": document_id}
        )

        # Second request inside the validity window reuses the stored URL
        first_url = staff_client.get(sign_url_path, {"signer_type": "merchant"}).json()
        second_url = staff_client.get(sign_url_path, {"signer_type": "merchant"}).json()
        assert first_url == second_url
        assert signer.url_calls == ["sig-merchant-1"]

        signed = send_signer_event(
            {
                "payout_document_id": document_id,
                "has_merchant_signature": True,
                "has_psp_signature": True,
                "signed_document_file_url": "https://signer.example/files/1.pdf",
            }
        )
        assert signed.status_code == 200
        assert billing.recompute_calls == [MERCHANT_ID]

        in_progress = staff_client.patch(detail_path, {"status": "in_progress"}, format="json")
        paid = staff_client.patch(
            detail_path, {"status": "paid", "transaction": "bank-tx-9"}, format="json"
        )
        assert in_progress.json()["modified"] is True
        assert paid.json()["document"]["status"] == PayoutDocumentStatus.PAID
        assert billing.recompute_calls == [MERCHANT_ID] * 3

        document = PayoutDocument.objects.get(id=document_id)
        assert document.is_fully_signed is True
        assert document.signature.signed_document_file_url.endswith("/1.pdf")
        assert document.paid_at is not None

        changes = PayoutDocumentChange.objects.filter(payout_document=document)
        assert sorted(changes.values_list("source", flat=True)) == sorted(
            [
                ChangeSource.MERCHANT,
                ChangeSource.MERCHANT,
                ChangeSource.SIGNER_WEBHOOK,
                ChangeSource.ADMIN,
                ChangeSource.ADMIN,
            ]
        )
        # The last correction recorded the document exactly as it is now
        assert compute_snapshot_hash(document) in set(changes.values_list("hash", flat=True))

    def test_skipped_document_has_no_signature_flow(self, staff_client, api_service, billing):
        billing.set_balance(MERCHANT_ID, debit="1000.00", credit="0.00", rolling_reserve="120.00")

        created = staff_client.post(
            reverse("payouts:document_list"),
            {"merchant_id": MERCHANT_ID, "source_ids": ["report-1", "report-2"]},
            format="json",
        )
        assert created.status_code == 201
        assert created.json()["status"] == PayoutDocumentStatus.SKIP
        assert created.json()["signature_request_id"] is None

        sign_url = staff_client.get(
            reverse(
                "payouts:document_sign_url",
                kwargs={"payout_document_id": created.json()["id"]},
            ),
            {"signer_type": "psp"},
        )
        assert sign_url.status_code == 409
        assert sign_url.json()["error_code"] == "PAYOUT_INVALID"
