"""
Canonical snapshots and content hashes of payout documents.

The hash stored on each PayoutDocumentChange is computed over the
document as persisted (re-read from the database), so recomputing it
from a fresh read of an unchanged document yields the same digest.

Canonical form:
    - every concrete model field, keyed by attribute name
    - decimals rendered with the field's decimal places
    - datetimes as ISO 8601 in UTC
    - UUIDs as strings
    - JSON rendered with sorted keys and no whitespace

The hash is tamper evidence for the audit trail, not a signature.
"""

from __future__ import annotations

import hashlib
import json
import uuid
from datetime import date, datetime
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.db import models

if TYPE_CHECKING:
    from payouts.models import PayoutDocument


def _normalize(field: models.Field, value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, Decimal):
        places = getattr(field, "decimal_places", None)
        if places is not None:
            value = value.quantize(Decimal(1).scaleb(-places))
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(dt_timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def document_snapshot(document: PayoutDocument) -> dict[str, Any]:
    """Return the canonical dict rendering of a payout document."""
    return {
        field.attname: _normalize(field, getattr(document, field.attname))
        for field in document._meta.concrete_fields
    }


def compute_snapshot_hash(document: PayoutDocument) -> str:
    """SHA-256 hex digest of the canonical snapshot."""
    payload = json.dumps(
        document_snapshot(document),
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


__all__ = [
    "compute_snapshot_hash",
    "document_snapshot",
]
