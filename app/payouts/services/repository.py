"""
Payout document repository and audit trail.

The repository is the only writer of PayoutDocument rows and their cache
entries. Every insert or update runs in one database transaction together
with the PayoutDocumentChange record, so a document never changes without
its audit record. After commit, the two single-document cache entries are
refreshed:

    payout_document:id:<id>
    payout_document:id:<id>:merchant:id:<merchant_id>

Lists are never cached.

Usage:
    from payouts.services.repository import PayoutDocumentRepository

    repository = PayoutDocumentRepository()
    document = repository.insert(document, ip="10.0.0.1", source=ChangeSource.MERCHANT)
    page = repository.query(PayoutDocumentFilter(merchant_id="m-1"), limit=10, offset=0)
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.conf import settings
from django.core.cache import cache as default_cache
from django.db import DatabaseError
from django.db.models import Q

from core.services import BaseService

from payouts.audit import compute_snapshot_hash
from payouts.exceptions import CacheError, PayoutNotFoundError, PersistenceError
from payouts.models import PayoutDocument, PayoutDocumentChange
from payouts.types import Page

if TYPE_CHECKING:
    from core.protocols import CacheBackend

    from payouts.types import PayoutDocumentFilter


CACHE_KEY_BY_ID = "payout_document:id:{id}"
CACHE_KEY_BY_ID_AND_MERCHANT = "payout_document:id:{id}:merchant:id:{merchant_id}"

# Fields an update may change; everything else is fixed at insert
MUTABLE_FIELDS = [
    "status",
    "has_merchant_signature",
    "has_psp_signature",
    "signature_data",
    "transaction",
    "failure_code",
    "failure_message",
    "failure_transaction",
    "paid_at",
    "updated_at",
]


class PayoutDocumentRepository(BaseService):
    """
    Persistence, single-entity caching and audit trail for payout documents.

    Args:
        cache: Cache backend (defaults to Django's default cache)
        cache_ttl: Cache entry TTL in seconds (defaults to
            settings.PAYOUT_DOCUMENT_CACHE_TTL)
    """

    def __init__(
        self,
        cache: CacheBackend | None = None,
        cache_ttl: int | None = None,
    ) -> None:
        self.cache = cache if cache is not None else default_cache
        self.cache_ttl = (
            cache_ttl
            if cache_ttl is not None
            else getattr(settings, "PAYOUT_DOCUMENT_CACHE_TTL", 600)
        )

    # =========================================================================
    # Writes
    # =========================================================================

    def insert(self, document: PayoutDocument, ip: str | None, source: str) -> PayoutDocument:
        """
        Persist a new document and append its first change record.

        Returns:
            The document as re-read from the database

        Raises:
            PersistenceError: If the document or change record can't be written
            CacheError: If the cache refresh fails after commit
        """
        try:
            with self.atomic():
                document.save(force_insert=True)
                persisted = PayoutDocument.objects.get(pk=document.pk)
                change = self._append_change(persisted, ip, source)
        except DatabaseError as e:
            self._log_persistence_failure("insert", document, source, e)
            raise PersistenceError(
                "Unable to insert payout document",
                details={"payout_document_id": str(document.pk)},
            ) from e

        self.get_logger().info(
            "Payout document inserted",
            extra={
                "payout_document_id": str(persisted.id),
                "merchant_id": persisted.merchant_id,
                "status": persisted.status,
                "change_id": str(change.id),
                "source": source,
            },
        )
        self._refresh_cache(persisted)
        return persisted

    def update(self, document: PayoutDocument, ip: str | None, source: str) -> PayoutDocument:
        """
        Write the document's mutable fields and append a change record.

        Returns:
            The document as re-read from the database

        Raises:
            PersistenceError: If the write or the change record fails
            CacheError: If the cache refresh fails after commit
        """
        try:
            with self.atomic():
                document.save(update_fields=MUTABLE_FIELDS)
                persisted = PayoutDocument.objects.get(pk=document.pk)
                change = self._append_change(persisted, ip, source)
        except DatabaseError as e:
            self._log_persistence_failure("update", document, source, e)
            raise PersistenceError(
                "Unable to update payout document",
                details={"payout_document_id": str(document.pk)},
            ) from e

        self.get_logger().info(
            "Payout document updated",
            extra={
                "payout_document_id": str(persisted.id),
                "status": persisted.status,
                "change_id": str(change.id),
                "source": source,
            },
        )
        self._refresh_cache(persisted)
        return persisted

    def _append_change(
        self, document: PayoutDocument, ip: str | None, source: str
    ) -> PayoutDocumentChange:
        return PayoutDocumentChange.objects.create(
            payout_document=document,
            source=source,
            ip=ip or None,
            hash=compute_snapshot_hash(document),
        )

    def _log_persistence_failure(
        self, operation: str, document: PayoutDocument, source: str, error: Exception
    ) -> None:
        self.get_logger().error(
            f"Payout document {operation} failed: {type(error).__name__}",
            extra={
                "operation": operation,
                "collection": PayoutDocument._meta.db_table,
                "payout_document_id": str(document.pk),
                "merchant_id": document.merchant_id,
                "source": source,
            },
            exc_info=True,
        )

    # =========================================================================
    # Cache
    # =========================================================================

    def _refresh_cache(self, document: PayoutDocument) -> None:
        keys = [
            CACHE_KEY_BY_ID.format(id=document.id),
            CACHE_KEY_BY_ID_AND_MERCHANT.format(
                id=document.id, merchant_id=document.merchant_id
            ),
        ]
        try:
            for key in keys:
                self.cache.set(key, document, self.cache_ttl)
        except Exception as e:
            self.get_logger().error(
                "Unable to refresh payout document cache",
                extra={"payout_document_id": str(document.id), "keys": keys},
                exc_info=True,
            )
            raise CacheError(
                "Unable to refresh payout document cache",
                details={"payout_document_id": str(document.id)},
            ) from e

    def _cache_get(self, key: str) -> PayoutDocument | None:
        try:
            return self.cache.get(key)
        except Exception:
            # A failed read falls back to the database
            self.get_logger().warning(
                "Payout document cache read failed",
                extra={"key": key},
                exc_info=True,
            )
            return None

    # =========================================================================
    # Reads
    # =========================================================================

    def get_by_id(self, payout_document_id: str | uuid.UUID) -> PayoutDocument:
        """
        Cache-aside lookup by id.

        Raises:
            PayoutNotFoundError: If no such document exists
        """
        document_id = self._parse_id(payout_document_id)
        cached = self._cache_get(CACHE_KEY_BY_ID.format(id=document_id))
        if cached is not None:
            return cached

        document = PayoutDocument.objects.filter(pk=document_id).first()
        if document is None:
            raise PayoutNotFoundError(
                "Payout document not found",
                details={"payout_document_id": str(document_id)},
            )
        self._refresh_cache(document)
        return document

    def get_for_merchant(
        self, payout_document_id: str | uuid.UUID, merchant_id: str
    ) -> PayoutDocument:
        """
        Cache-aside lookup by id scoped to a merchant.

        Raises:
            PayoutNotFoundError: If no such document exists for the merchant
        """
        document_id = self._parse_id(payout_document_id)
        cached = self._cache_get(
            CACHE_KEY_BY_ID_AND_MERCHANT.format(id=document_id, merchant_id=merchant_id)
        )
        if cached is not None:
            return cached

        document = PayoutDocument.objects.filter(
            pk=document_id, merchant_id=merchant_id
        ).first()
        if document is None:
            raise PayoutNotFoundError(
                "Payout document not found",
                details={
                    "payout_document_id": str(document_id),
                    "merchant_id": merchant_id,
                },
            )
        self._refresh_cache(document)
        return document

    def query(self, filters: PayoutDocumentFilter, limit: int, offset: int) -> Page:
        """
        Query documents newest first.

        A filter with ``id`` set selects that document only. Otherwise
        status, merchant, fully signed and created range are combined.

        Raises:
            PayoutNotFoundError: If nothing matches
        """
        if filters.id:
            queryset = PayoutDocument.objects.filter(pk=self._parse_id(filters.id))
        else:
            queryset = PayoutDocument.objects.all()
            if filters.merchant_id:
                queryset = queryset.filter(merchant_id=filters.merchant_id)
            if filters.status:
                queryset = queryset.filter(status__in=filters.status)
            if filters.fully_signed is True:
                queryset = queryset.filter(
                    has_merchant_signature=True, has_psp_signature=True
                )
            elif filters.fully_signed is False:
                queryset = queryset.filter(
                    Q(has_merchant_signature=False) | Q(has_psp_signature=False)
                )
            if filters.created_from:
                queryset = queryset.filter(created_at__gte=filters.created_from)
            if filters.created_to:
                queryset = queryset.filter(created_at__lte=filters.created_to)

        count = queryset.count()
        if count == 0:
            raise PayoutNotFoundError(
                "Payout documents not found",
                details={"filter": str(filters)},
            )

        items = list(queryset.order_by("-created_at", "-id")[offset : offset + limit])
        return Page(count=count, items=items, limit=limit, offset=offset)

    @staticmethod
    def _parse_id(payout_document_id: str | uuid.UUID) -> uuid.UUID:
        try:
            return uuid.UUID(str(payout_document_id))
        except ValueError as e:
            raise PayoutNotFoundError(
                "Payout document not found",
                details={"payout_document_id": str(payout_document_id)},
            ) from e


__all__ = [
    "CACHE_KEY_BY_ID",
    "CACHE_KEY_BY_ID_AND_MERCHANT",
    "MUTABLE_FIELDS",
    "PayoutDocumentRepository",
]
