"""
Payouts admin configuration.

Payout documents are read-only here: every mutation must go through
PayoutDocumentService so that it is validated and audited. Change records
are immutable.
"""

from django.contrib import admin

from payouts.models import PayoutDocument, PayoutDocumentChange

__all__ = [
    "PayoutDocumentAdmin",
    "PayoutDocumentChangeAdmin",
]


class PayoutDocumentChangeInline(admin.TabularInline):
    """Inline display of the audit trail for a payout document."""

    model = PayoutDocumentChange
    extra = 0
    fields = ["created_at", "source", "ip", "hash"]
    readonly_fields = fields
    ordering = ["-created_at"]

    def has_add_permission(self, request, obj=None) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(PayoutDocument)
class PayoutDocumentAdmin(admin.ModelAdmin):
    """
    Admin configuration for PayoutDocument.

    State changes should be made through the API or service layer, not admin.
    """

    list_display = [
        "id",
        "merchant_id",
        "amount",
        "currency",
        "status",
        "has_merchant_signature",
        "has_psp_signature",
        "arrival_date",
        "created_at",
    ]
    list_filter = ["status", "currency", "has_merchant_signature", "has_psp_signature"]
    search_fields = ["id", "merchant_id", "transaction", "company_name"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    inlines = [PayoutDocumentChangeInline]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "merchant_id", "status", "description"),
            },
        ),
        (
            "Amount",
            {
                "fields": ("amount", "currency", "source_ids", "period_from", "period_to"),
            },
        ),
        (
            "Merchant Snapshot",
            {
                "fields": ("company_name", "agreement_number", "destination"),
                "classes": ("collapse",),
            },
        ),
        (
            "Signature",
            {
                "fields": ("has_merchant_signature", "has_psp_signature", "signature_data"),
            },
        ),
        (
            "Transfer",
            {
                "fields": (
                    "arrival_date",
                    "transaction",
                    "failure_code",
                    "failure_message",
                    "failure_transaction",
                    "paid_at",
                ),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for payout documents (audit trail)."""
        return False


@admin.register(PayoutDocumentChange)
class PayoutDocumentChangeAdmin(admin.ModelAdmin):
    """
    Admin configuration for PayoutDocumentChange.

    Change records are append-only; view only.
    """

    list_display = ["id", "payout_document", "source", "ip", "created_at"]
    list_filter = ["source", "created_at"]
    search_fields = ["id", "payout_document__id", "hash"]
    readonly_fields = ["id", "payout_document", "source", "ip", "hash", "created_at"]
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
