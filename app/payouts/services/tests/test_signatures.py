"""
Tests for SignatureOrchestrator.

Covers signature request creation and per-signer sign URL reuse and
renewal.
"""

from datetime import timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from payouts.exceptions import (
    CollaboratorBusinessError,
    InvalidPayoutError,
    PayoutValidationError,
    SignatureAlreadySignedError,
    SignatureCreationFailedError,
    SignUrlRequestFailedError,
)
from payouts.models import PayoutDocument, PayoutDocumentChange
from payouts.services import SignatureOrchestrator
from payouts.services.signatures import SIGNATURE_ACTION
from payouts.state_machines import ChangeSource, SignerType
from payouts.tests.factories import PayoutDocumentFactory


@pytest.fixture
def orchestrator(signer, repository):
    return SignatureOrchestrator(signer, repository)


class TestCreateWorkflow:
    def test_creates_two_signer_request(self, db, orchestrator, signer, merchant, settings):
        settings.PAYOUT_SIGNATURE_TEMPLATE = "payout_v2"
        settings.PAYOUT_PSP_SIGNER_EMAIL = "payouts@psp.example"
        document = PayoutDocumentFactory.build(signature_data=None)

        signature = orchestrator.create_workflow(merchant, document, [])

        assert signature.signature_request_id == "sr-1"
        assert signature.merchant_signature_id == "sig-merchant-1"
        assert signature.psp_signature_id == "sig-psp-1"
        call = signer.create_calls[0]
        assert call["template"] == "payout_v2"
        assert [(s.email, s.role) for s in call["signers"]] == [
            ("jane@acme.example", SignerType.MERCHANT),
            ("payouts@psp.example", SignerType.PSP),
        ]
        assert call["metadata"]["action"] == SIGNATURE_ACTION
        assert call["metadata"]["payout_document_id"] == str(document.id)

    def test_unavailable_signer(self, db, orchestrator, signer, merchant):
        signer.unavailable.add("create_signature")

        with pytest.raises(SignatureCreationFailedError):
            orchestrator.create_workflow(merchant, PayoutDocumentFactory.build(), [])

    def test_signer_business_error_passes_through(self, db, repository, merchant, mocker):
        signer = mocker.Mock()
        signer.create_signature.side_effect = CollaboratorBusinessError(
            "template not found", error_code="ds000003"
        )
        orchestrator = SignatureOrchestrator(signer, repository)

        with pytest.raises(CollaboratorBusinessError) as exc_info:
            orchestrator.create_workflow(merchant, PayoutDocumentFactory.build(), [])

        assert exc_info.value.error_code == "ds000003"


class TestGetSignUrl:
    def test_fetches_and_persists_fresh_url(self, pending_document, orchestrator, signer):
        result = orchestrator.get_sign_url(pending_document, SignerType.MERCHANT, "10.0.0.1")

        assert signer.url_calls == ["sig-merchant-1"]
        fresh = PayoutDocument.objects.get(id=pending_document.id)
        assert fresh.signature.merchant_sign_url.sign_url == result.sign_url
        assert fresh.signature.psp_sign_url is None
        change = PayoutDocumentChange.objects.get(payout_document=fresh)
        assert change.source == ChangeSource.MERCHANT

    def test_valid_stored_url_is_reused(self, pending_document, orchestrator, signer):
        first = orchestrator.get_sign_url(pending_document, SignerType.PSP, None)
        document = PayoutDocument.objects.get(id=pending_document.id)

        second = orchestrator.get_sign_url(document, SignerType.PSP, None)

        assert second == first
        assert signer.url_calls == ["sig-psp-1"]
        assert PayoutDocumentChange.objects.filter(payout_document=document).count() == 1

    def test_expired_url_is_renewed(self, pending_document, orchestrator, signer):
        orchestrator.get_sign_url(pending_document, SignerType.MERCHANT, None)
        document = PayoutDocument.objects.get(id=pending_document.id)

        with freeze_time(timezone.now() + timedelta(hours=2)):
            renewed = orchestrator.get_sign_url(document, SignerType.MERCHANT, None)

        assert signer.url_calls == ["sig-merchant-1", "sig-merchant-1"]
        assert renewed.sign_url.endswith("/2")

    def test_already_signed_signer(self, db, orchestrator, signer):
        document = PayoutDocumentFactory(has_merchant_signature=True)

        with pytest.raises(SignatureAlreadySignedError) as exc_info:
            orchestrator.get_sign_url(document, SignerType.MERCHANT, None)

        assert exc_info.value.error_code == "PAYOUT_ALREADY_SIGNED"
        assert signer.url_calls == []

    def test_other_signer_still_gets_url(self, db, orchestrator):
        document = PayoutDocumentFactory(has_merchant_signature=True)

        result = orchestrator.get_sign_url(document, SignerType.PSP, None)

        assert "sig-psp-1" in result.sign_url

    def test_document_without_signature_workflow(self, skipped_document, orchestrator):
        with pytest.raises(InvalidPayoutError):
            orchestrator.get_sign_url(skipped_document, SignerType.MERCHANT, None)

    def test_unknown_signer_type(self, pending_document, orchestrator):
        with pytest.raises(PayoutValidationError) as exc_info:
            orchestrator.get_sign_url(pending_document, "auditor", None)

        assert exc_info.value.error_code == "PAYOUT_INVALID_SIGNER_TYPE"

    def test_unavailable_signer(self, pending_document, orchestrator, signer):
        signer.unavailable.add("get_signature_url")

        with pytest.raises(SignUrlRequestFailedError):
            orchestrator.get_sign_url(pending_document, SignerType.MERCHANT, None)

        fresh = PayoutDocument.objects.get(id=pending_document.id)
        assert fresh.signature.merchant_sign_url is None
