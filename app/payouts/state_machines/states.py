"""
State enums for payout models.

These are Django TextChoices for database storage and admin integration.

PayoutDocument States:
    pending → in_progress → paid
    pending/in_progress → skip
    pending/in_progress/skip → failed
    in_progress → pending (returned for rework)
    skip → pending/in_progress/paid (released by an admin)

Paid and failed are terminal.
"""

from django.db import models


class PayoutDocumentStatus(models.TextChoices):
    """
    States for the PayoutDocument lifecycle.

    Terminal states: PAID, FAILED

    State Flow:
        PENDING → IN_PROGRESS → PAID
        PENDING → PAID (settled without an intermediate step)
        PENDING/IN_PROGRESS/SKIP → FAILED
        PENDING/IN_PROGRESS → SKIP
        IN_PROGRESS/SKIP → PENDING
        SKIP → IN_PROGRESS/PAID

    Note:
        Documents whose amount is below the merchant's minimum payout are
        created directly in SKIP and never carry a signature workflow.
    """

    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In Progress"
    PAID = "paid", "Paid"
    SKIP = "skip", "Skip"
    FAILED = "failed", "Failed"


# Landing in one of these through a status change requires a balance recompute
BALANCE_AFFECTING_STATUSES = frozenset(
    {
        PayoutDocumentStatus.PENDING,
        PayoutDocumentStatus.IN_PROGRESS,
        PayoutDocumentStatus.PAID,
    }
)


class ChangeSource(models.TextChoices):
    """Origin of a payout document mutation, recorded on each change record."""

    MERCHANT = "merchant", "Merchant"
    ADMIN = "admin", "Admin"
    SIGNER_WEBHOOK = "signer_webhook", "Signer Webhook"


class SignerType(models.TextChoices):
    """The two parties that sign a payout document."""

    MERCHANT = "merchant", "Merchant"
    PSP = "psp", "Payment Service Provider"
