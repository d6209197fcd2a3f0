"""
Model mixins providing reusable functionality for Django models.

Available Mixins:
    UUIDPrimaryKeyMixin: Use UUID as primary key
    AppendOnlyMixin: Reject updates and deletes of persisted rows

Usage:
    from core.models import BaseModel
    from core.model_mixins import AppendOnlyMixin, UUIDPrimaryKeyMixin

    class PayoutDocument(UUIDPrimaryKeyMixin, BaseModel):
        amount = models.DecimalField(max_digits=14, decimal_places=2)

    class PayoutDocumentChange(UUIDPrimaryKeyMixin, AppendOnlyMixin, models.Model):
        hash = models.CharField(max_length=64)

Note:
    - Always list mixins before BaseModel in inheritance
    - Mixins are abstract and don't create database tables
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from django.db import models

if TYPE_CHECKING:
    from typing import Any


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Fields:
        id: UUIDField as primary key (auto-generated)

    Note:
        The id can be generated before the row is inserted, which lets
        callers reference a document (e.g. in external metadata) ahead
        of persistence.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier (UUID4)",
    )

    class Meta:
        abstract = True


class AppendOnlyMixin(models.Model):
    """
    Make a model insert-only.

    Rows can be created once. Saving an already persisted row or deleting
    one raises ImmutableRecordError. Queryset-level bulk updates are not
    intercepted; callers must not use them on append-only tables.
    """

    class Meta:
        abstract = True

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise ImmutableRecordError(
                f"{self.__class__.__name__} records cannot be modified"
            )
        super().save(*args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any) -> Any:
        raise ImmutableRecordError(
            f"{self.__class__.__name__} records cannot be deleted"
        )


class ImmutableRecordError(Exception):
    """Raised on an attempt to modify or delete an append-only record."""
