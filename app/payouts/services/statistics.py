"""
Revenue and item statistics attached to payout signature requests.

For each period window the service ranks countries by net revenue and
item names by order count, keeping the top N of each plus period totals.
Ties are broken by name so the output is stable.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings

from core.services import BaseService

from payouts.exceptions import (
    CollaboratorUnavailableError,
    NetRevenueCalculationFailedError,
    OrderStatCalculationFailedError,
)
from payouts.types import PeriodStatistics, RankedValue

if TYPE_CHECKING:
    from collections.abc import Sequence

    from payouts.protocols import OrderStatisticsSource
    from payouts.types import PeriodWindow


def rank_top(values: dict[str, Decimal | int], limit: int) -> list[RankedValue]:
    """Highest values first, ties by name ascending, at most ``limit`` entries."""
    ordered = sorted(values.items(), key=lambda item: (-item[1], item[0]))
    return [RankedValue(name=name, value=value) for name, value in ordered[:limit]]


class PayoutStatisticsService(BaseService):
    """Computes per-period supporting statistics for a payout."""

    def __init__(self, source: OrderStatisticsSource, top_n: int | None = None) -> None:
        self.source = source
        self.top_n = top_n or getattr(settings, "PAYOUT_STATISTICS_TOP_N", 10)

    def compute(
        self, merchant_id: str, periods: Sequence[PeriodWindow]
    ) -> list[PeriodStatistics]:
        """
        Compute statistics for each distinct period window, in order.

        Raises:
            NetRevenueCalculationFailedError: net revenue could not be computed
            OrderStatCalculationFailedError: order counts could not be computed
        """
        windows = list(dict.fromkeys(periods))
        return [self._compute_window(merchant_id, window) for window in windows]

    def _compute_window(self, merchant_id: str, window: PeriodWindow) -> PeriodStatistics:
        log_context = {
            "service": "order_statistics",
            "merchant_id": merchant_id,
            "period_from": window.period_from.isoformat(),
            "period_to": window.period_to.isoformat(),
        }

        try:
            revenue = self.source.net_revenue_by_country(
                merchant_id, window.period_from, window.period_to
            )
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Net revenue calculation failed",
                extra={**log_context, "operation": "net_revenue_by_country"},
                exc_info=True,
            )
            raise NetRevenueCalculationFailedError(
                "Net revenue calculation failed", details=log_context
            ) from e

        try:
            orders = self.source.item_order_counts(
                merchant_id, window.period_from, window.period_to
            )
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Order statistics calculation failed",
                extra={**log_context, "operation": "item_order_counts"},
                exc_info=True,
            )
            raise OrderStatCalculationFailedError(
                "Order statistics calculation failed", details=log_context
            ) from e

        return PeriodStatistics(
            window=window,
            top_countries=rank_top(revenue, self.top_n),
            net_revenue_total=sum(revenue.values(), Decimal("0")),
            top_items=rank_top(orders, self.top_n),
            orders_total=sum(orders.values()),
        )


__all__ = [
    "PayoutStatisticsService",
    "rank_top",
]
