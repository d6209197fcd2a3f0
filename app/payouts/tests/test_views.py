"""
Tests for the payouts API views.

Status mapping under test:
    validation -> 400, not_found -> 404, state -> 409,
    dependency -> 502, system -> 500
"""

import uuid
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status

from payouts.models import PayoutDocumentChange
from payouts.state_machines import ChangeSource, PayoutDocumentStatus
from payouts.tests.factories import PayoutDocumentFactory
from payouts.tests.fakes import MERCHANT_ID, make_report

LIST_URL = "payouts:document_list"


def detail_url(document_id) -> str:
    return reverse("payouts:document_detail", kwargs={"payout_document_id": document_id})


def sign_url(document_id) -> str:
    return reverse("payouts:document_sign_url", kwargs={"payout_document_id": document_id})


def royalty_reports_url(document_id) -> str:
    return reverse(
        "payouts:document_royalty_reports", kwargs={"payout_document_id": document_id}
    )


class TestAuthentication:
    def test_anonymous_requests_are_rejected(self, api_client, db):
        response = api_client.get(reverse(LIST_URL))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_correction_requires_staff(self, authenticated_client, api_service, pending_document):
        response = authenticated_client.patch(
            detail_url(pending_document.id), {"transaction": "tx-1"}, format="json"
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestCreatePayoutDocumentView:
    def test_create_returns_201(self, authenticated_client, api_service):
        response = authenticated_client.post(
            reverse(LIST_URL),
            {
                "merchant_id": MERCHANT_ID,
                "source_ids": ["report-1", "report-2"],
                "description": "Q1 royalties",
            },
            format="json",
            REMOTE_ADDR="192.0.2.10",
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert Decimal(data["amount"]) == Decimal("130.00")
        assert data["status"] == PayoutDocumentStatus.PENDING
        assert data["signature_request_id"] == "sr-1"
        assert data["is_fully_signed"] is False
        change = PayoutDocumentChange.objects.get(payout_document_id=data["id"])
        assert change.ip == "192.0.2.10"
        assert change.source == ChangeSource.MERCHANT

    def test_forwarded_ip_is_recorded(self, authenticated_client, api_service):
        response = authenticated_client.post(
            reverse(LIST_URL),
            {"merchant_id": MERCHANT_ID, "source_ids": ["report-1"]},
            format="json",
            HTTP_X_FORWARDED_FOR="203.0.113.5, 10.0.0.1",
        )

        change = PayoutDocumentChange.objects.get(payout_document_id=response.json()["id"])
        assert change.ip == "203.0.113.5"

    def test_business_rule_failure_is_400(self, authenticated_client, api_service, billing):
        billing.add_report(make_report("report-eur", currency="EUR", month=3))

        response = authenticated_client.post(
            reverse(LIST_URL),
            {"merchant_id": MERCHANT_ID, "source_ids": ["report-1", "report-eur"]},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "PAYOUT_SOURCES_INCONSISTENT_CURRENCY"
        assert response.json()["error_kind"] == "validation"

    def test_unknown_merchant_is_404(self, authenticated_client, api_service):
        response = authenticated_client.post(
            reverse(LIST_URL),
            {"merchant_id": "ghost", "source_ids": ["report-1"]},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_collaborator_outage_is_502(self, authenticated_client, api_service, billing):
        billing.unavailable.add("get_balance")

        response = authenticated_client.post(
            reverse(LIST_URL),
            {"merchant_id": MERCHANT_ID, "source_ids": ["report-1"]},
            format="json",
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        assert response.json()["error_code"] == "PAYOUT_BALANCE_FETCH_FAILED"

    def test_invalid_body_is_400(self, authenticated_client, api_service):
        response = authenticated_client.post(reverse(LIST_URL), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "merchant_id" in response.json()


class TestListPayoutDocumentsView:
    def test_page_with_filters(self, authenticated_client, api_service, db):
        PayoutDocumentFactory.create_batch(2)
        PayoutDocumentFactory(status=PayoutDocumentStatus.PAID)
        PayoutDocumentFactory(merchant_id="merchant-2")

        response = authenticated_client.get(
            reverse(LIST_URL),
            {"merchant_id": MERCHANT_ID, "status": ["pending", "paid"], "limit": 2},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 3
        assert data["limit"] == 2
        assert data["offset"] == 0
        assert len(data["items"]) == 2

    def test_default_limit_is_reported(self, authenticated_client, api_service, db, settings):
        settings.PAYOUT_QUERY_DEFAULT_LIMIT = 25
        PayoutDocumentFactory.create_batch(2)

        response = authenticated_client.get(reverse(LIST_URL))

        assert response.json()["limit"] == 25
        assert len(response.json()["items"]) == 2

    def test_fully_signed_filter(self, authenticated_client, api_service, db):
        signed = PayoutDocumentFactory(has_merchant_signature=True, has_psp_signature=True)
        PayoutDocumentFactory()

        response = authenticated_client.get(reverse(LIST_URL), {"fully_signed": "true"})

        assert [item["id"] for item in response.json()["items"]] == [str(signed.id)]

    def test_no_match_is_404(self, authenticated_client, api_service, db):
        response = authenticated_client.get(reverse(LIST_URL), {"merchant_id": "nobody"})

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "PAYOUT_NOT_FOUND"

    def test_invalid_status_is_400(self, authenticated_client, api_service, db):
        response = authenticated_client.get(reverse(LIST_URL), {"status": "archived"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestPayoutDocumentDetailView:
    def test_get_is_merchant_scoped(self, authenticated_client, api_service, pending_document):
        ok = authenticated_client.get(
            detail_url(pending_document.id), {"merchant_id": MERCHANT_ID}
        )
        other = authenticated_client.get(
            detail_url(pending_document.id), {"merchant_id": "merchant-2"}
        )

        assert ok.status_code == status.HTTP_200_OK
        assert ok.json()["id"] == str(pending_document.id)
        assert other.status_code == status.HTTP_404_NOT_FOUND

    def test_get_requires_merchant_id(self, authenticated_client, api_service, pending_document):
        response = authenticated_client.get(detail_url(pending_document.id))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_correction(self, staff_client, api_service, in_progress_document, billing):
        response = staff_client.patch(
            detail_url(in_progress_document.id),
            {"status": "paid", "transaction": "bank-tx-1"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["modified"] is True
        assert data["document"]["status"] == "paid"
        assert data["document"]["paid_at"] is not None
        assert billing.recompute_calls == [MERCHANT_ID]

    def test_noop_correction(self, staff_client, api_service, pending_document):
        response = staff_client.patch(
            detail_url(pending_document.id), {"status": "pending"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["modified"] is False

    def test_forbidden_transition_is_409(self, staff_client, api_service, db):
        document = PayoutDocumentFactory(status=PayoutDocumentStatus.PAID)

        response = staff_client.patch(
            detail_url(document.id), {"status": "pending"}, format="json"
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "PAYOUT_STATUS_CHANGE_FORBIDDEN"

    def test_unknown_document_is_404(self, staff_client, api_service):
        response = staff_client.patch(
            detail_url(uuid.uuid4()), {"transaction": "tx"}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_recompute_failure_is_500(self, staff_client, api_service, in_progress_document, billing):
        billing.unavailable.add("recompute")

        response = staff_client.patch(
            detail_url(in_progress_document.id), {"status": "paid"}, format="json"
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["error_code"] == "PAYOUT_BALANCE_UPDATE_FAILED"


class TestSignUrlView:
    def test_returns_sign_url(self, authenticated_client, api_service, pending_document, signer):
        response = authenticated_client.get(
            sign_url(pending_document.id), {"signer_type": "merchant"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["sign_url"].startswith("https://signer.example/sign/")
        assert response.json()["expires_at"]
        assert signer.url_calls == ["sig-merchant-1"]

    def test_platform_signer_url_requires_staff(
        self, authenticated_client, api_service, pending_document, signer
    ):
        response = authenticated_client.get(
            sign_url(pending_document.id), {"signer_type": "psp"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert signer.url_calls == []
        assert not PayoutDocumentChange.objects.filter(
            payout_document=pending_document
        ).exists()

    def test_staff_gets_platform_signer_url(
        self, staff_client, api_service, pending_document, signer
    ):
        response = staff_client.get(sign_url(pending_document.id), {"signer_type": "psp"})

        assert response.status_code == status.HTTP_200_OK
        assert signer.url_calls == ["sig-psp-1"]
        change = PayoutDocumentChange.objects.get(payout_document=pending_document)
        assert change.source == ChangeSource.ADMIN

    def test_already_signed_is_409(self, authenticated_client, api_service, db):
        document = PayoutDocumentFactory(has_merchant_signature=True)

        response = authenticated_client.get(sign_url(document.id), {"signer_type": "merchant"})

        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.parametrize("query", [{}, {"signer_type": "auditor"}])
    def test_signer_type_is_validated(self, authenticated_client, api_service, pending_document, query):
        response = authenticated_client.get(sign_url(pending_document.id), query)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestRoyaltyReportsView:
    def test_lists_document_reports(self, authenticated_client, api_service, pending_document):
        response = authenticated_client.get(
            royalty_reports_url(pending_document.id), {"merchant_id": MERCHANT_ID}
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["count"] == 2
        assert [item["id"] for item in data["items"]] == ["report-1", "report-2"]
        assert Decimal(data["items"][0]["amount"]) == Decimal("100.00")

    def test_other_merchant_is_404(self, authenticated_client, api_service, pending_document):
        response = authenticated_client.get(
            royalty_reports_url(pending_document.id), {"merchant_id": "merchant-2"}
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "PAYOUT_NOT_FOUND"

    def test_requires_merchant_id(self, authenticated_client, api_service, pending_document):
        response = authenticated_client.get(royalty_reports_url(pending_document.id))

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_report_outage_is_502(
        self, authenticated_client, api_service, pending_document, billing
    ):
        billing.unavailable.add("find_by_ids")

        response = authenticated_client.get(
            royalty_reports_url(pending_document.id), {"merchant_id": MERCHANT_ID}
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
