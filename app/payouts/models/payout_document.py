"""
PayoutDocument model: a payable statement built from accepted royalty reports.

A PayoutDocument is created once per accepted payout request and then
mutated in place through its status lifecycle. It is never deleted.
Amount, currency, sources, periods, destination and arrival date are
fixed at creation.

Usage:
    from payouts.models import PayoutDocument

    document = PayoutDocument.objects.get(id=document_id)
    document.start_processing()  # pending -> in_progress
    document.mark_paid()         # in_progress -> paid, sets paid_at
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from payouts.state_machines import PayoutDocumentStatus
from payouts.types import SignatureData


class PayoutDocument(UUIDPrimaryKeyMixin, BaseModel):
    """
    Represents a payout owed to a merchant.

    State Flow:
        PENDING -> IN_PROGRESS -> PAID
        PENDING/IN_PROGRESS -> SKIP
        PENDING/IN_PROGRESS/SKIP -> FAILED
        IN_PROGRESS/SKIP -> PENDING
        SKIP -> IN_PROGRESS / PAID (released by an admin)

    Fields:
        merchant_id: Merchant the payout belongs to
        status: Current FSM state
        amount: Payable amount after the rolling reserve
        currency: ISO 4217 currency code (upper case)
        source_ids: Royalty report ids, ordered by period start
        description: Free-text description from the requester
        arrival_date: Projected settlement date
        period_from / period_to: Span covered by the source reports
        destination: Merchant banking snapshot taken at creation
        company_name / agreement_number: Merchant snapshot taken at creation
        has_merchant_signature / has_psp_signature: Signed flags
        signature_data: Signature workflow state (null for SKIP documents)
        transaction: Bank transaction reference
        failure_code / failure_message / failure_transaction: Failure details
        paid_at: When the document became PAID
    """

    # ==========================================================================
    # Ownership & Amount
    # ==========================================================================

    merchant_id = models.CharField(
        max_length=64,
        db_index=True,
        help_text="Merchant the payout belongs to",
    )

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        help_text="Payable amount after the rolling reserve",
    )

    currency = models.CharField(
        max_length=3,
        help_text="ISO 4217 currency code (upper case)",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=PayoutDocumentStatus.PENDING,
        choices=PayoutDocumentStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the payout document (managed by FSM)",
    )

    # ==========================================================================
    # Sources & Periods
    # ==========================================================================

    source_ids = models.JSONField(
        default=list,
        help_text="Royalty report ids, ordered by period start",
    )

    description = models.TextField(
        blank=True,
        default="",
    )

    arrival_date = models.DateTimeField(
        help_text="Projected settlement date communicated to the merchant",
    )

    period_from = models.DateTimeField(null=True, blank=True)
    period_to = models.DateTimeField(null=True, blank=True)

    # ==========================================================================
    # Merchant Snapshot
    # ==========================================================================

    destination = models.JSONField(
        default=dict,
        help_text="Banking destination copied from the merchant at creation",
    )

    company_name = models.CharField(max_length=255, blank=True, default="")
    agreement_number = models.CharField(max_length=64, blank=True, default="")

    # ==========================================================================
    # Signature Workflow
    # ==========================================================================

    has_merchant_signature = models.BooleanField(default=False)
    has_psp_signature = models.BooleanField(default=False)

    signature_data = models.JSONField(
        null=True,
        blank=True,
        help_text="Signature request ids and sign URLs; null for skipped documents",
    )

    # ==========================================================================
    # Transfer & Failure Details
    # ==========================================================================

    transaction = models.CharField(max_length=255, blank=True, default="")
    failure_code = models.CharField(max_length=64, blank=True, default="")
    failure_message = models.TextField(blank=True, default="")
    failure_transaction = models.CharField(max_length=255, blank=True, default="")

    paid_at = models.DateTimeField(null=True, blank=True)

    # ==========================================================================
    # Meta & Methods
    # ==========================================================================

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payout Document"
        verbose_name_plural = "Payout Documents"
        indexes = [
            models.Index(
                fields=["merchant_id", "status"],
                name="payouts_pay_merchan_5c1d2e_idx",
            ),
            models.Index(
                fields=["has_merchant_signature", "has_psp_signature"],
                name="payouts_pay_has_mer_8a3f41_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name="payout_document_amount_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return f"PayoutDocument({self.id}, {self.status}, {self.amount} {self.currency})"

    @property
    def signature(self) -> SignatureData | None:
        """Typed view of signature_data."""
        return SignatureData.from_dict(self.signature_data)

    @signature.setter
    def signature(self, value: SignatureData | None) -> None:
        self.signature_data = value.to_dict() if value is not None else None

    @property
    def is_fully_signed(self) -> bool:
        return self.has_merchant_signature and self.has_psp_signature

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[PayoutDocumentStatus.PENDING, PayoutDocumentStatus.SKIP],
        target=PayoutDocumentStatus.IN_PROGRESS,
    )
    def start_processing(self):
        """Transition: PENDING/SKIP -> IN_PROGRESS"""

    @transition(
        field=status,
        source=[PayoutDocumentStatus.IN_PROGRESS, PayoutDocumentStatus.SKIP],
        target=PayoutDocumentStatus.PENDING,
    )
    def return_to_pending(self):
        """Transition: IN_PROGRESS/SKIP -> PENDING"""

    @transition(
        field=status,
        source=[
            PayoutDocumentStatus.PENDING,
            PayoutDocumentStatus.IN_PROGRESS,
            PayoutDocumentStatus.SKIP,
        ],
        target=PayoutDocumentStatus.PAID,
    )
    def mark_paid(self):
        """
        Mark the payout as paid.

        Transition: PENDING/IN_PROGRESS/SKIP -> PAID
        """
        self.paid_at = timezone.now()

    @transition(
        field=status,
        source=[PayoutDocumentStatus.PENDING, PayoutDocumentStatus.IN_PROGRESS],
        target=PayoutDocumentStatus.SKIP,
    )
    def mark_skipped(self):
        """Transition: PENDING/IN_PROGRESS -> SKIP"""

    @transition(
        field=status,
        source=[
            PayoutDocumentStatus.PENDING,
            PayoutDocumentStatus.IN_PROGRESS,
            PayoutDocumentStatus.SKIP,
        ],
        target=PayoutDocumentStatus.FAILED,
    )
    def mark_failed(self):
        """
        Mark the payout as failed.

        Transition: PENDING/IN_PROGRESS/SKIP -> FAILED

        Failure code, message and transaction are set separately since they
        may change without a status change.
        """
