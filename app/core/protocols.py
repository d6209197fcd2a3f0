"""
Protocol definitions for generic infrastructure services.

Protocols define contracts that services must fulfill, enabling:
- Duck typing with static type checking
- Dependency inversion (depend on abstractions, not concretions)
- Easy substitution in tests

Available Protocols:
    CacheBackend: Cache operations interface (compatible with django.core.cache)

Note:
    For payout collaborator protocols, see payouts.protocols
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any


@runtime_checkable
class CacheBackend(Protocol):
    """
    Protocol for cache backends.

    Django's cache objects satisfy it without adaptation.
    """

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any, timeout: int | None = None) -> None:
        ...

    def delete(self, key: str) -> Any:
        ...
