"""
URL configuration for the payouts app.

Routes:
    - documents/                      - Create / query payout documents
    - documents/<id>/                 - Merchant-scoped get / admin correction
    - documents/<id>/sign-url/        - Sign URL for one signer
    - documents/<id>/royalty-reports/ - Royalty reports behind a document
    - webhooks/signer/                - Document signer webhook

All routes are prefixed with /api/v1/payouts/ when included in the main URLconf.
"""

from django.urls import path

from payouts.views import (
    PayoutDocumentDetailView,
    PayoutDocumentListView,
    PayoutDocumentRoyaltyReportsView,
    PayoutDocumentSignUrlView,
)
from payouts.webhooks import signer_webhook

app_name = "payouts"

urlpatterns = [
    path("documents/", PayoutDocumentListView.as_view(), name="document_list"),
    path(
        "documents/<uuid:payout_document_id>/",
        PayoutDocumentDetailView.as_view(),
        name="document_detail",
    ),
    path(
        "documents/<uuid:payout_document_id>/sign-url/",
        PayoutDocumentSignUrlView.as_view(),
        name="document_sign_url",
    ),
    path(
        "documents/<uuid:payout_document_id>/royalty-reports/",
        PayoutDocumentRoyaltyReportsView.as_view(),
        name="document_royalty_reports",
    ),
    # Webhook endpoints
    path("webhooks/signer/", signer_webhook, name="signer_webhook"),
]
