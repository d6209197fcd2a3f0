import uuid

import django.db.models.deletion
import django_fsm
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PayoutDocument",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier (UUID4)",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "merchant_id",
                    models.CharField(
                        db_index=True,
                        help_text="Merchant the payout belongs to",
                        max_length=64,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Payable amount after the rolling reserve",
                        max_digits=14,
                    ),
                ),
                (
                    "currency",
                    models.CharField(
                        help_text="ISO 4217 currency code (upper case)",
                        max_length=3,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("pending", "Pending"),
                            ("in_progress", "In Progress"),
                            ("paid", "Paid"),
                            ("skip", "Skip"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="pending",
                        help_text="Current state of the payout document (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "source_ids",
                    models.JSONField(
                        default=list,
                        help_text="Royalty report ids, ordered by period start",
                    ),
                ),
                ("description", models.TextField(blank=True, default="")),
                (
                    "arrival_date",
                    models.DateTimeField(
                        help_text="Projected settlement date communicated to the merchant",
                    ),
                ),
                ("period_from", models.DateTimeField(blank=True, null=True)),
                ("period_to", models.DateTimeField(blank=True, null=True)),
                (
                    "destination",
                    models.JSONField(
                        default=dict,
                        help_text="Banking destination copied from the merchant at creation",
                    ),
                ),
                (
                    "company_name",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "agreement_number",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                ("has_merchant_signature", models.BooleanField(default=False)),
                ("has_psp_signature", models.BooleanField(default=False)),
                (
                    "signature_data",
                    models.JSONField(
                        blank=True,
                        help_text="Signature request ids and sign URLs; null for skipped documents",
                        null=True,
                    ),
                ),
                (
                    "transaction",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                (
                    "failure_code",
                    models.CharField(blank=True, default="", max_length=64),
                ),
                ("failure_message", models.TextField(blank=True, default="")),
                (
                    "failure_transaction",
                    models.CharField(blank=True, default="", max_length=255),
                ),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
            ],
            options={
                "verbose_name": "Payout Document",
                "verbose_name_plural": "Payout Documents",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["merchant_id", "status"],
                        name="payouts_pay_merchan_5c1d2e_idx",
                    ),
                    models.Index(
                        fields=["has_merchant_signature", "has_psp_signature"],
                        name="payouts_pay_has_mer_8a3f41_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(amount__gte=0),
                        name="payout_document_amount_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="PayoutDocumentChange",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier (UUID4)",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "source",
                    models.CharField(
                        choices=[
                            ("merchant", "Merchant"),
                            ("admin", "Admin"),
                            ("signer_webhook", "Signer Webhook"),
                        ],
                        max_length=32,
                    ),
                ),
                ("ip", models.GenericIPAddressField(blank=True, null=True)),
                (
                    "hash",
                    models.CharField(
                        help_text="SHA-256 hex digest of the document snapshot",
                        max_length=64,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, db_index=True),
                ),
                (
                    "payout_document",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="changes",
                        to="payouts.payoutdocument",
                    ),
                ),
            ],
            options={
                "verbose_name": "Payout Document Change",
                "verbose_name_plural": "Payout Document Changes",
                "ordering": ["-created_at"],
            },
        ),
    ]
