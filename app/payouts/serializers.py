"""
DRF serializers for the payouts API.

Request serializers validate query strings and bodies before they reach
PayoutDocumentService; response serializers render service results.

Serializers:
    PayoutDocumentSerializer: Read-only payout document
    PayoutDocumentPageSerializer: Paginated query response
    RoyaltyReportListSerializer: Royalty reports behind a payout document
    CreatePayoutDocumentSerializer: Creation request body
    PayoutDocumentQuerySerializer: List query string
    MerchantScopeSerializer: merchant_id query string for single lookups
    PayoutDocumentCorrectionSerializer: Administrative correction body
    SignUrlQuerySerializer: signer_type query string
    SignUrlSerializer: Sign URL response
    SignerWebhookSerializer: Document signer webhook body
"""

from __future__ import annotations

from rest_framework import serializers

from payouts.models import PayoutDocument
from payouts.state_machines import PayoutDocumentStatus, SignerType
from payouts.types import PayoutDocumentFilter


# =============================================================================
# Responses
# =============================================================================


class PayoutDocumentSerializer(serializers.ModelSerializer):
    """
    Read-only serializer for PayoutDocument.

    Sign URLs are not exposed here; they are requested per signer through
    the sign-url endpoint.
    """

    is_fully_signed = serializers.BooleanField(read_only=True)
    signature_request_id = serializers.SerializerMethodField()
    details_url = serializers.SerializerMethodField()
    files_url = serializers.SerializerMethodField()
    signed_document_file_url = serializers.SerializerMethodField()

    class Meta:
        model = PayoutDocument
        fields = [
            "id",
            "merchant_id",
            "status",
            "amount",
            "currency",
            "source_ids",
            "description",
            "arrival_date",
            "period_from",
            "period_to",
            "destination",
            "company_name",
            "agreement_number",
            "has_merchant_signature",
            "has_psp_signature",
            "is_fully_signed",
            "signature_request_id",
            "details_url",
            "files_url",
            "signed_document_file_url",
            "transaction",
            "failure_code",
            "failure_message",
            "failure_transaction",
            "paid_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def _signature_value(self, obj: PayoutDocument, name: str) -> str | None:
        signature = obj.signature
        return getattr(signature, name) if signature is not None else None

    def get_signature_request_id(self, obj: PayoutDocument) -> str | None:
        return self._signature_value(obj, "signature_request_id")

    def get_details_url(self, obj: PayoutDocument) -> str | None:
        return self._signature_value(obj, "details_url")

    def get_files_url(self, obj: PayoutDocument) -> str | None:
        return self._signature_value(obj, "files_url")

    def get_signed_document_file_url(self, obj: PayoutDocument) -> str | None:
        return self._signature_value(obj, "signed_document_file_url")


class PayoutDocumentPageSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    limit = serializers.IntegerField()
    offset = serializers.IntegerField()
    items = PayoutDocumentSerializer(many=True)


class PayoutDocumentUpdateSerializer(serializers.Serializer):
    """Correction response: the document and whether anything changed."""

    modified = serializers.BooleanField()
    document = PayoutDocumentSerializer()


class RoyaltyReportSerializer(serializers.Serializer):
    id = serializers.CharField()
    merchant_id = serializers.CharField()
    status = serializers.CharField()
    period_from = serializers.DateTimeField()
    period_to = serializers.DateTimeField()
    amount = serializers.DecimalField(max_digits=20, decimal_places=2)
    currency = serializers.CharField()


class RoyaltyReportListSerializer(serializers.Serializer):
    count = serializers.IntegerField()
    items = RoyaltyReportSerializer(many=True)


class SignUrlSerializer(serializers.Serializer):
    sign_url = serializers.URLField()
    expires_at = serializers.DateTimeField()


# =============================================================================
# Requests
# =============================================================================


class CreatePayoutDocumentSerializer(serializers.Serializer):
    """
    Payout creation request.

    Fields:
        merchant_id: Merchant requesting the payout
        source_ids: Accepted royalty report ids
        description: Free-text description
        is_auto_generation: True when sent by the automatic payout run
    """

    merchant_id = serializers.CharField(max_length=64)
    source_ids = serializers.ListField(
        child=serializers.CharField(max_length=64),
        allow_empty=True,
        help_text="Royalty report ids to pay out",
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_auto_generation = serializers.BooleanField(required=False, default=False)


class PayoutDocumentQuerySerializer(serializers.Serializer):
    """List filters. ``status`` may repeat: ?status=pending&status=paid"""

    id = serializers.UUIDField(required=False)
    status = serializers.ListField(
        child=serializers.ChoiceField(choices=PayoutDocumentStatus.choices),
        required=False,
    )
    merchant_id = serializers.CharField(required=False, max_length=64)
    fully_signed = serializers.BooleanField(required=False, allow_null=True, default=None)
    created_from = serializers.DateTimeField(required=False)
    created_to = serializers.DateTimeField(required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=1000)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)

    def to_filter(self) -> PayoutDocumentFilter:
        data = self.validated_data
        return PayoutDocumentFilter(
            id=str(data["id"]) if data.get("id") else None,
            status=list(data.get("status", [])),
            merchant_id=data.get("merchant_id"),
            fully_signed=data.get("fully_signed"),
            created_from=data.get("created_from"),
            created_to=data.get("created_to"),
        )


class MerchantScopeSerializer(serializers.Serializer):
    merchant_id = serializers.CharField(max_length=64)


class PayoutDocumentCorrectionSerializer(serializers.Serializer):
    """
    Administrative correction. Omitted fields are left unchanged.

    Status changes follow the document state machine; paid and failed
    are terminal.
    """

    status = serializers.ChoiceField(choices=PayoutDocumentStatus.choices, required=False)
    transaction = serializers.CharField(required=False, allow_blank=True, max_length=255)
    failure_code = serializers.CharField(required=False, allow_blank=True, max_length=64)
    failure_message = serializers.CharField(required=False, allow_blank=True)
    failure_transaction = serializers.CharField(
        required=False, allow_blank=True, max_length=255
    )


class SignUrlQuerySerializer(serializers.Serializer):
    signer_type = serializers.ChoiceField(choices=SignerType.choices)


class SignerWebhookSerializer(serializers.Serializer):
    """
    Signature progress pushed by the document signer.

    Example body:
        {
            "payout_document_id": "2c4b...",
            "has_merchant_signature": true,
            "has_psp_signature": false,
            "signed_document_file_url": ""
        }
    """

    payout_document_id = serializers.UUIDField()
    has_merchant_signature = serializers.BooleanField(default=False)
    has_psp_signature = serializers.BooleanField(default=False)
    signed_document_file_url = serializers.CharField(
        required=False, allow_blank=True, default=""
    )


__all__ = [
    "CreatePayoutDocumentSerializer",
    "MerchantScopeSerializer",
    "PayoutDocumentCorrectionSerializer",
    "PayoutDocumentPageSerializer",
    "PayoutDocumentQuerySerializer",
    "PayoutDocumentSerializer",
    "PayoutDocumentUpdateSerializer",
    "SignUrlQuerySerializer",
    "SignUrlSerializer",
    "SignerWebhookSerializer",
]
