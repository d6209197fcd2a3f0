"""
DRF views for the payouts API.

Views validate input, call PayoutDocumentService and map the returned
ServiceResult to an HTTP response. Failures are rendered with
``ServiceResult.to_response()`` and the status chosen by error kind.

Endpoints:
    POST  /api/v1/payouts/documents/                  - Create payout document
    GET   /api/v1/payouts/documents/                  - Query payout documents
    GET   /api/v1/payouts/documents/{id}/?merchant_id= - Merchant-scoped get
    PATCH /api/v1/payouts/documents/{id}/             - Admin correction
    GET   /api/v1/payouts/documents/{id}/sign-url/    - Sign URL for a signer
    GET   /api/v1/payouts/documents/{id}/royalty-reports/?merchant_id=
                                                      - Reports behind a document

Security:
    - All endpoints require authentication
    - Corrections and the PSP signer URL require a staff user
"""

from __future__ import annotations

import logging

from rest_framework import status
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
)

from core.helpers import get_client_ip

from payouts.context import build_payout_context
from payouts.exceptions import ErrorKind
from payouts.serializers import (
    CreatePayoutDocumentSerializer,
    MerchantScopeSerializer,
    PayoutDocumentCorrectionSerializer,
    PayoutDocumentPageSerializer,
    PayoutDocumentQuerySerializer,
    PayoutDocumentSerializer,
    PayoutDocumentUpdateSerializer,
    RoyaltyReportListSerializer,
    SignUrlQuerySerializer,
    SignUrlSerializer,
)
from payouts.services import PayoutDocumentService
from payouts.state_machines import SignerType

logger = logging.getLogger(__name__)


# Error kind -> HTTP status
ERROR_KIND_STATUS = {
    ErrorKind.VALIDATION.value: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND.value: status.HTTP_404_NOT_FOUND,
    ErrorKind.STATE.value: status.HTTP_409_CONFLICT,
    ErrorKind.DEPENDENCY.value: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.SYSTEM.value: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

ERROR_RESPONSES = {
    400: OpenApiResponse(description="Validation error"),
    404: OpenApiResponse(description="Not found"),
    409: OpenApiResponse(description="State conflict"),
    502: OpenApiResponse(description="Collaborator unavailable"),
}


def get_payout_service() -> PayoutDocumentService:
    """Build a service over the configured collaborators."""
    return PayoutDocumentService(build_payout_context())


def failure_response(result) -> Response:
    http_status = ERROR_KIND_STATUS.get(
        result.error_kind, status.HTTP_500_INTERNAL_SERVER_ERROR
    )
    return Response(result.to_response(), status=http_status)


class PayoutDocumentListView(APIView):
    """
    Create or query payout documents.

    POST /api/v1/payouts/documents/
    GET  /api/v1/payouts/documents/?merchant_id=&status=&fully_signed=&limit=&offset=
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="create_payout_document",
        summary="Create payout document",
        description=(
            "Aggregate accepted royalty reports into a payout document. "
            "Amounts below the merchant minimum create a skipped document "
            "without a signature workflow."
        ),
        request=CreatePayoutDocumentSerializer,
        responses={201: PayoutDocumentSerializer, **ERROR_RESPONSES},
        tags=["Payouts"],
    )
    def post(self, request):
        serializer = CreatePayoutDocumentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = get_payout_service().create_payout_document(
            merchant_id=data["merchant_id"],
            source_ids=data["source_ids"],
            description=data["description"],
            ip=get_client_ip(request),
            is_auto_generation=data["is_auto_generation"],
        )
        if not result.success:
            return failure_response(result)

        return Response(
            PayoutDocumentSerializer(result.data).data,
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        operation_id="list_payout_documents",
        summary="Query payout documents",
        description="Newest first. No match returns 404.",
        parameters=[PayoutDocumentQuerySerializer],
        responses={200: PayoutDocumentPageSerializer, 404: ERROR_RESPONSES[404]},
        tags=["Payouts"],
    )
    def get(self, request):
        serializer = PayoutDocumentQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        result = get_payout_service().get_payout_documents(
            serializer.to_filter(),
            limit=serializer.validated_data.get("limit"),
            offset=serializer.validated_data["offset"],
        )
        if not result.success:
            return failure_response(result)

        return Response(PayoutDocumentPageSerializer(result.data).data)


class PayoutDocumentDetailView(APIView):
    """
    Merchant-scoped lookup and administrative correction.

    GET   /api/v1/payouts/documents/{id}/?merchant_id=m-1
    PATCH /api/v1/payouts/documents/{id}/
    """

    def get_permissions(self):
        if self.request.method == "PATCH":
            return [IsAdminUser()]
        return [IsAuthenticated()]

    @extend_schema(
        operation_id="get_payout_document",
        summary="Get payout document",
        parameters=[MerchantScopeSerializer],
        responses={200: PayoutDocumentSerializer, 404: ERROR_RESPONSES[404]},
        tags=["Payouts"],
    )
    def get(self, request, payout_document_id):
        serializer = MerchantScopeSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        result = get_payout_service().get_payout_document(
            str(payout_document_id), serializer.validated_data["merchant_id"]
        )
        if not result.success:
            return failure_response(result)

        return Response(PayoutDocumentSerializer(result.data).data)

    @extend_schema(
        operation_id="correct_payout_document",
        summary="Correct payout document",
        description=(
            "Apply the supplied status, transaction and failure fields. "
            "When nothing differs the response has modified=false and no "
            "change record is written."
        ),
        request=PayoutDocumentCorrectionSerializer,
        responses={200: PayoutDocumentUpdateSerializer, **ERROR_RESPONSES},
        tags=["Payouts - Admin"],
    )
    def patch(self, request, payout_document_id):
        serializer = PayoutDocumentCorrectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = get_payout_service().update_payout_document(
            str(payout_document_id),
            ip=get_client_ip(request),
            **serializer.validated_data,
        )
        if not result.success:
            return failure_response(result)

        logger.info(
            "Payout document correction requested",
            extra={
                "payout_document_id": str(payout_document_id),
                "user_id": request.user.pk,
                "modified": result.data.modified,
            },
        )
        return Response(
            PayoutDocumentUpdateSerializer(
                {"modified": result.data.modified, "document": result.data.document}
            ).data
        )


class PayoutDocumentRoyaltyReportsView(APIView):
    """
    Royalty reports a merchant's payout document was built from.

    GET /api/v1/payouts/documents/{id}/royalty-reports/?merchant_id=m-1
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_payout_document_royalty_reports",
        summary="Get payout document royalty reports",
        parameters=[MerchantScopeSerializer],
        responses={200: RoyaltyReportListSerializer, **ERROR_RESPONSES},
        tags=["Payouts"],
    )
    def get(self, request, payout_document_id):
        serializer = MerchantScopeSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        result = get_payout_service().get_payout_document_royalty_reports(
            str(payout_document_id), serializer.validated_data["merchant_id"]
        )
        if not result.success:
            return failure_response(result)

        return Response(
            RoyaltyReportListSerializer({"count": len(result.data), "items": result.data}).data
        )

class PayoutDocumentSignUrlView(APIView):
    """
    Sign URL for the merchant or PSP signer.

    GET /api/v1/payouts/documents/{id}/sign-url/?signer_type=merchant

    The PSP (platform) signer URL is restricted to staff users.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_payout_document_sign_url",
        summary="Get sign URL",
        description=(
            "Returns the stored URL while it has not expired, otherwise "
            "requests a fresh one from the document signer. "
            "signer_type=psp is restricted to staff users."
        ),
        parameters=[
            OpenApiParameter(
                name="signer_type",
                type=str,
                enum=["merchant", "psp"],
                required=True,
            ),
        ],
        responses={200: SignUrlSerializer, **ERROR_RESPONSES},
        tags=["Payouts"],
    )
    def get(self, request, payout_document_id):
        serializer = SignUrlQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)

        signer_type = serializer.validated_data["signer_type"]
        if signer_type == SignerType.PSP and not request.user.is_staff:
            self.permission_denied(
                request, message="Only staff can request the platform signer URL."
            )

        result = get_payout_service().get_payout_document_sign_url(
            str(payout_document_id),
            signer_type,
            ip=get_client_ip(request),
        )
        if not result.success:
            return failure_response(result)

        return Response(
            SignUrlSerializer(
                {"sign_url": result.data.sign_url, "expires_at": result.data.expires_at}
            ).data
        )


__all__ = [
    "ERROR_KIND_STATUS",
    "PayoutDocumentDetailView",
    "PayoutDocumentListView",
    "PayoutDocumentRoyaltyReportsView",
    "PayoutDocumentSignUrlView",
    "failure_response",
    "get_payout_service",
]
