"""Tests for canonical payout document snapshots and hashes."""

from decimal import Decimal

from payouts.audit import compute_snapshot_hash, document_snapshot
from payouts.models import PayoutDocument
from payouts.tests.factories import PayoutDocumentFactory


class TestDocumentSnapshot:
    def test_snapshot_covers_every_concrete_field(self, pending_document):
        snapshot = document_snapshot(pending_document)

        expected = {field.attname for field in PayoutDocument._meta.concrete_fields}
        assert set(snapshot) == expected

    def test_values_are_json_safe(self, pending_document):
        snapshot = document_snapshot(pending_document)

        assert snapshot["id"] == str(pending_document.id)
        assert snapshot["amount"] == "130.00"
        assert snapshot["period_from"] == "2024-01-01T00:00:00+00:00"

    def test_decimal_rendered_with_field_precision(self, db):
        document = PayoutDocumentFactory.build(amount=Decimal("130"))

        assert document_snapshot(document)["amount"] == "130.00"


class TestComputeSnapshotHash:
    def test_hash_is_stable_across_reads(self, pending_document):
        first = PayoutDocument.objects.get(id=pending_document.id)
        second = PayoutDocument.objects.get(id=pending_document.id)

        assert compute_snapshot_hash(first) == compute_snapshot_hash(second)
        assert len(compute_snapshot_hash(first)) == 64

    def test_hash_changes_with_content(self, pending_document):
        before = compute_snapshot_hash(pending_document)
        pending_document.transaction = "tx-1"

        assert compute_snapshot_hash(pending_document) != before
