"""
Value types for the payout engine.

This module defines the dataclasses exchanged between the payout services,
the collaborator adapters and the repository. Collaborator inputs
(RoyaltyReportSource, MerchantBalance, Merchant) are read-only snapshots;
SignatureData is the typed view of the JSON stored on PayoutDocument.

Usage:
    from payouts.types import PayoutDocumentFilter, SignatureData

    filters = PayoutDocumentFilter(merchant_id="m-1", fully_signed=True)
    page = repository.query(filters, limit=10, offset=0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from datetime import timezone as dt_timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.utils import timezone
from django.utils.dateparse import parse_datetime

if TYPE_CHECKING:
    from payouts.models import PayoutDocument


# Royalty reports must be in this status to be paid out
ROYALTY_REPORT_STATUS_ACCEPTED = "accepted"


def parse_aware_datetime(value: Any) -> datetime | None:
    """
    Parse an ISO 8601 string; timestamps without an offset are read as UTC.

    Returns None when ``value`` is not a parseable string.
    """
    parsed = parse_datetime(value) if isinstance(value, str) else None
    if parsed is not None and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


# =============================================================================
# Collaborator Snapshots
# =============================================================================


@dataclass(frozen=True)
class RoyaltyReportSource:
    """
    An accepted royalty report offered as payout input.

    Attributes:
        id: Report identifier
        merchant_id: Owning merchant
        status: Report status, only "accepted" reports are eligible
        period_from: Start of the reported period
        period_to: End of the reported period
        amount: Payable amount
        currency: ISO 4217 code
    """

    id: str
    merchant_id: str
    status: str
    period_from: datetime
    period_to: datetime
    amount: Decimal
    currency: str


@dataclass(frozen=True)
class MerchantBalance:
    """Ledger snapshot of a merchant. A negative rolling reserve is a release."""

    merchant_id: str
    currency: str
    debit: Decimal
    credit: Decimal
    rolling_reserve: Decimal

    @property
    def available(self) -> Decimal:
        return self.debit - self.credit


@dataclass(frozen=True)
class Merchant:
    """
    Merchant profile fields the payout engine reads.

    Attributes:
        id: Merchant identifier
        company_name: Legal company name, copied onto the document
        agreement_number: Signed agreement number, copied onto the document
        contact_name: Authorized signer name
        contact_email: Authorized signer email
        banking: Destination banking details snapshot
        min_payout_amount: Amounts below this create a Skip document
        manual_payouts_enabled: Whether payouts are requested manually
            (True) or generated automatically (False)
    """

    id: str
    company_name: str
    agreement_number: str
    contact_name: str
    contact_email: str
    banking: dict[str, Any]
    min_payout_amount: Decimal
    manual_payouts_enabled: bool = True


# =============================================================================
# Aggregation & Statistics
# =============================================================================


@dataclass(frozen=True)
class PeriodWindow:
    period_from: datetime
    period_to: datetime


@dataclass(frozen=True)
class AggregatedSources:
    """
    Output of the source aggregator.

    Attributes:
        amount: Sum of the matched sources' amounts
        currency: Shared currency of the matched sources
        source_ids: Matched ids, ordered by period start
        periods: One window per matched source, ordered by period start
    """

    amount: Decimal
    currency: str
    source_ids: list[str]
    periods: list[PeriodWindow]

    @property
    def period_from(self) -> datetime:
        return min(window.period_from for window in self.periods)

    @property
    def period_to(self) -> datetime:
        return max(window.period_to for window in self.periods)


@dataclass(frozen=True)
class RankedValue:
    name: str
    value: Decimal | int


@dataclass(frozen=True)
class PeriodStatistics:
    """
    Supporting statistics for one period window.

    Attributes:
        window: The period the figures cover
        top_countries: Countries ranked by net revenue
        net_revenue_total: Net revenue of all processed orders in the window
        top_items: Item names ranked by order count
        orders_total: Count of all orders in the window
    """

    window: PeriodWindow
    top_countries: list[RankedValue]
    net_revenue_total: Decimal
    top_items: list[RankedValue]
    orders_total: int

    def to_metadata(self) -> dict[str, Any]:
        """Render as JSON-safe metadata for the signature request."""
        return {
            "period_from": self.window.period_from.isoformat(),
            "period_to": self.window.period_to.isoformat(),
            "net_revenue": {
                "top": [
                    {"country": entry.name, "amount": str(entry.value)}
                    for entry in self.top_countries
                ],
                "total": str(self.net_revenue_total),
            },
            "orders": {
                "top": [
                    {"name": entry.name, "count": entry.value}
                    for entry in self.top_items
                ],
                "total": self.orders_total,
            },
        }


# =============================================================================
# Signature Workflow
# =============================================================================


@dataclass(frozen=True)
class Signer:
    """One party of a signature request."""

    email: str
    name: str
    role: str


@dataclass(frozen=True)
class SignatureRequestResult:
    """Identifiers returned by the document signer for a new request."""

    signature_request_id: str
    merchant_signature_id: str
    psp_signature_id: str
    details_url: str = ""
    files_url: str = ""


@dataclass
class SignUrl:
    """A time-boxed sign link issued by the document signer."""

    sign_url: str
    expires_at: datetime

    def is_valid(self, now: datetime) -> bool:
        return bool(self.sign_url) and self.expires_at > now

    def to_dict(self) -> dict[str, str]:
        return {"sign_url": self.sign_url, "expires_at": self.expires_at.isoformat()}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SignUrl | None:
        if not data or not data.get("sign_url"):
            return None
        expires_at = data.get("expires_at")
        if isinstance(expires_at, datetime):
            if timezone.is_naive(expires_at):
                expires_at = timezone.make_aware(expires_at, dt_timezone.utc)
        else:
            expires_at = parse_aware_datetime(expires_at)
        # Without a readable expiry the link is treated as absent
        if expires_at is None:
            return None
        return cls(sign_url=data["sign_url"], expires_at=expires_at)


@dataclass
class SignatureData:
    """
    Signature workflow state of a payout document.

    Stored as JSON on PayoutDocument.signature_data. The signed flags live
    on the document itself so they can be filtered on.
    """

    signature_request_id: str
    merchant_signature_id: str
    psp_signature_id: str
    details_url: str = ""
    files_url: str = ""
    merchant_sign_url: SignUrl | None = None
    psp_sign_url: SignUrl | None = None
    signed_document_file_url: str = ""

    @classmethod
    def from_request(cls, result: SignatureRequestResult) -> SignatureData:
        return cls(
            signature_request_id=result.signature_request_id,
            merchant_signature_id=result.merchant_signature_id,
            psp_signature_id=result.psp_signature_id,
            details_url=result.details_url,
            files_url=result.files_url,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SignatureData | None:
        if not data:
            return None
        return cls(
            signature_request_id=data["signature_request_id"],
            merchant_signature_id=data["merchant_signature_id"],
            psp_signature_id=data["psp_signature_id"],
            details_url=data.get("details_url", ""),
            files_url=data.get("files_url", ""),
            merchant_sign_url=SignUrl.from_dict(data.get("merchant_sign_url")),
            psp_sign_url=SignUrl.from_dict(data.get("psp_sign_url")),
            signed_document_file_url=data.get("signed_document_file_url", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "signature_request_id": self.signature_request_id,
            "merchant_signature_id": self.merchant_signature_id,
            "psp_signature_id": self.psp_signature_id,
            "details_url": self.details_url,
            "files_url": self.files_url,
            "merchant_sign_url": (
                self.merchant_sign_url.to_dict() if self.merchant_sign_url else None
            ),
            "psp_sign_url": self.psp_sign_url.to_dict() if self.psp_sign_url else None,
            "signed_document_file_url": self.signed_document_file_url,
        }


# =============================================================================
# Repository & Service Results
# =============================================================================


@dataclass(frozen=True)
class PayoutDocumentFilter:
    """
    Query filter for payout documents.

    A set ``id`` selects a single document and the other fields are
    ignored. Otherwise all set fields are combined.
    """

    id: str | None = None
    status: list[str] = field(default_factory=list)
    merchant_id: str | None = None
    fully_signed: bool | None = None
    created_from: datetime | None = None
    created_to: datetime | None = None


@dataclass
class Page:
    """One page of query results with the total match count and the window applied."""

    count: int
    items: list[PayoutDocument]
    limit: int
    offset: int


@dataclass
class UpdateResult:
    """Outcome of an update operation; ``modified`` is False for no-ops."""

    document: PayoutDocument
    modified: bool = True


@dataclass(frozen=True)
class SignUrlResult:
    sign_url: str
    expires_at: datetime


__all__ = [
    "ROYALTY_REPORT_STATUS_ACCEPTED",
    "AggregatedSources",
    "Merchant",
    "MerchantBalance",
    "Page",
    "PayoutDocumentFilter",
    "PeriodStatistics",
    "PeriodWindow",
    "RankedValue",
    "RoyaltyReportSource",
    "SignUrl",
    "SignUrlResult",
    "SignatureData",
    "SignatureRequestResult",
    "Signer",
    "UpdateResult",
    "parse_aware_datetime",
]
