"""
Billing service adapter.

Implements the merchant profile, royalty report, balance, recompute and
order statistics collaborators against the billing service JSON API.

Endpoints:
    GET  /merchants/{id}
    GET  /merchants/{id}/royalty-reports?ids=...&status=accepted
    GET  /merchants/{id}/balance
    POST /merchants/{id}/balance/recompute
    GET  /merchants/{id}/statistics/net-revenue?period_from=...&period_to=...
    GET  /merchants/{id}/statistics/orders?period_from=...&period_to=...

Configuration (via settings):
    BILLING_SERVICE_URL: Service root
    BILLING_SERVICE_API_KEY: Bearer token
    BILLING_SERVICE_TIMEOUT_SECONDS: Per-request timeout (default: 10)
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

from django.conf import settings

from payouts.adapters.http import JsonHttpClient
from payouts.exceptions import CollaboratorUnavailableError
from payouts.types import (
    ROYALTY_REPORT_STATUS_ACCEPTED,
    Merchant,
    MerchantBalance,
    RoyaltyReportSource,
    parse_aware_datetime,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime
    from typing import Any

    import requests


SERVICE_NAME = "billing"


def _decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValueError(f"not a decimal: {value!r}")
    return Decimal(str(value))


def _datetime(value: Any) -> datetime:
    parsed = parse_aware_datetime(value)
    if parsed is None:
        raise ValueError(f"not a datetime: {value!r}")
    return parsed


class BillingServiceClient:
    """
    HTTP client for the billing service.

    Args:
        base_url: Defaults to settings.BILLING_SERVICE_URL
        api_key: Defaults to settings.BILLING_SERVICE_API_KEY
        timeout: Defaults to settings.BILLING_SERVICE_TIMEOUT_SECONDS
        session: Optional requests.Session (tests pass a mock)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.http = JsonHttpClient(
            base_url if base_url is not None else settings.BILLING_SERVICE_URL,
            api_key=api_key if api_key is not None else settings.BILLING_SERVICE_API_KEY,
            timeout=(
                timeout
                if timeout is not None
                else getattr(settings, "BILLING_SERVICE_TIMEOUT_SECONDS", 10)
            ),
            service_name=SERVICE_NAME,
            session=session,
        )

    def _malformed(self, operation: str, error: Exception) -> CollaboratorUnavailableError:
        self.http.get_logger().error(
            "Billing service returned an unexpected payload",
            extra={"service": SERVICE_NAME, "operation": operation, "error": str(error)},
        )
        return CollaboratorUnavailableError(
            "billing returned an unexpected payload",
            details={"service": SERVICE_NAME, "operation": operation},
        )

    # =========================================================================
    # Merchant profile
    # =========================================================================

    def get_merchant(self, merchant_id: str) -> Merchant | None:
        body = self.http.get(f"/merchants/{merchant_id}", allow_not_found=True)
        if body is None:
            return None

        try:
            return Merchant(
                id=str(body["id"]),
                company_name=body.get("company_name", ""),
                agreement_number=body.get("agreement_number", ""),
                contact_name=body["contact_name"],
                contact_email=body["contact_email"],
                banking=dict(body.get("banking") or {}),
                min_payout_amount=_decimal(body.get("min_payout_amount", "0")),
                manual_payouts_enabled=bool(body.get("manual_payouts_enabled", True)),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise self._malformed("get_merchant", e) from e

    # =========================================================================
    # Royalty reports
    # =========================================================================

    def find_accepted(
        self, merchant_id: str, source_ids: Sequence[str]
    ) -> list[RoyaltyReportSource]:
        return self._royalty_reports(
            "find_accepted", merchant_id, source_ids, status=ROYALTY_REPORT_STATUS_ACCEPTED
        )

    def find_by_ids(
        self, merchant_id: str, source_ids: Sequence[str]
    ) -> list[RoyaltyReportSource]:
        return self._royalty_reports("find_by_ids", merchant_id, source_ids)

    def _royalty_reports(
        self,
        operation: str,
        merchant_id: str,
        source_ids: Sequence[str],
        status: str | None = None,
    ) -> list[RoyaltyReportSource]:
        params = {"ids": ",".join(source_ids)}
        if status:
            params["status"] = status
        body = self.http.get(f"/merchants/{merchant_id}/royalty-reports", params=params)

        try:
            sources = [
                RoyaltyReportSource(
                    id=str(item["id"]),
                    merchant_id=str(item["merchant_id"]),
                    status=item["status"],
                    period_from=_datetime(item["period_from"]),
                    period_to=_datetime(item["period_to"]),
                    amount=_decimal(item["amount"]),
                    currency=item["currency"],
                )
                for item in (body or {}).get("results", [])
            ]
        except (KeyError, TypeError, ValueError, InvalidOperation, AttributeError) as e:
            raise self._malformed(operation, e) from e

        return sorted(sources, key=lambda source: source.period_from)

    # =========================================================================
    # Balance
    # =========================================================================

    def get_balance(self, merchant_id: str) -> MerchantBalance:
        body = self.http.get(f"/merchants/{merchant_id}/balance")

        try:
            return MerchantBalance(
                merchant_id=merchant_id,
                currency=body.get("currency", ""),
                debit=_decimal(body["debit"]),
                credit=_decimal(body["credit"]),
                rolling_reserve=_decimal(body.get("rolling_reserve", "0")),
            )
        except (KeyError, TypeError, ValueError, InvalidOperation, AttributeError) as e:
            raise self._malformed("get_balance", e) from e

    def recompute(self, merchant_id: str) -> None:
        self.http.post(f"/merchants/{merchant_id}/balance/recompute")

    # =========================================================================
    # Order statistics
    # =========================================================================

    def net_revenue_by_country(
        self, merchant_id: str, period_from: datetime, period_to: datetime
    ) -> dict[str, Decimal]:
        body = self.http.get(
            f"/merchants/{merchant_id}/statistics/net-revenue",
            params=self._period_params(period_from, period_to),
        )
        try:
            return {
                item["country"]: _decimal(item["net_revenue"])
                for item in (body or {}).get("results", [])
            }
        except (KeyError, TypeError, ValueError, InvalidOperation, AttributeError) as e:
            raise self._malformed("net_revenue_by_country", e) from e

    def item_order_counts(
        self, merchant_id: str, period_from: datetime, period_to: datetime
    ) -> dict[str, int]:
        body = self.http.get(
            f"/merchants/{merchant_id}/statistics/orders",
            params=self._period_params(period_from, period_to),
        )
        try:
            return {
                item["item_name"]: int(item["orders"])
                for item in (body or {}).get("results", [])
            }
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise self._malformed("item_order_counts", e) from e

    @staticmethod
    def _period_params(period_from: datetime, period_to: datetime) -> dict[str, str]:
        return {
            "period_from": period_from.isoformat(),
            "period_to": period_to.isoformat(),
        }


__all__ = [
    "BillingServiceClient",
]
