"""
PayoutDocumentChange model: append-only audit trail for payout documents.

One record is written in the same transaction as every accepted insert or
update of a PayoutDocument. Records are never modified or deleted.
"""

from __future__ import annotations

from django.db import models

from core.model_mixins import AppendOnlyMixin, UUIDPrimaryKeyMixin

from payouts.state_machines import ChangeSource


class PayoutDocumentChange(UUIDPrimaryKeyMixin, AppendOnlyMixin, models.Model):
    """
    Audit record of one payout document mutation.

    Fields:
        payout_document: The mutated document
        source: Who initiated the mutation (merchant, admin, signer webhook)
        ip: Origin IP of the request
        hash: SHA-256 of the canonical document snapshot after the mutation
        created_at: When the mutation was recorded
    """

    payout_document = models.ForeignKey(
        "payouts.PayoutDocument",
        on_delete=models.PROTECT,
        related_name="changes",
    )
    source = models.CharField(
        max_length=32,
        choices=ChangeSource.choices,
    )
    ip = models.GenericIPAddressField(null=True, blank=True)
    hash = models.CharField(
        max_length=64,
        help_text="SHA-256 hex digest of the document snapshot",
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payout Document Change"
        verbose_name_plural = "Payout Document Changes"

    def __str__(self) -> str:
        return f"PayoutDocumentChange({self.payout_document_id}, {self.source})"
