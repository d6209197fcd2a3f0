"""
Source aggregation for payout creation.

Resolves the requested royalty reports, checks they are accepted, belong
to the merchant and share one currency, and sums their payable amounts.
Also reads back the reports behind an existing payout document.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from core.services import BaseService

from payouts.exceptions import (
    CollaboratorUnavailableError,
    NoSourcesError,
    SourcesFetchFailedError,
    SourcesInconsistentCurrencyError,
    SourcesNotFoundError,
)
from payouts.types import ROYALTY_REPORT_STATUS_ACCEPTED, AggregatedSources, PeriodWindow

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from payouts.protocols import RoyaltyReportSourceReader
    from payouts.types import RoyaltyReportSource


class SourceAggregator(BaseService):
    """Validates and sums the royalty reports requested for a payout."""

    def __init__(self, reader: RoyaltyReportSourceReader) -> None:
        self.reader = reader

    def aggregate(self, merchant_id: str, source_ids: Sequence[str]) -> AggregatedSources:
        """
        Aggregate the accepted sources among ``source_ids``.

        Raises:
            NoSourcesError: source_ids is empty
            SourcesFetchFailedError: the report source is unavailable
            SourcesNotFoundError: no accepted source of the merchant matched
            SourcesInconsistentCurrencyError: matched sources differ in currency
        """
        requested = list(dict.fromkeys(source_ids or []))
        if not requested:
            raise NoSourcesError("Payout sources are required")

        found = self._read(self.reader.find_accepted, merchant_id, requested)

        wanted = set(requested)
        sources = sorted(
            (
                source
                for source in found
                if source.id in wanted
                and source.merchant_id == merchant_id
                and source.status == ROYALTY_REPORT_STATUS_ACCEPTED
            ),
            key=lambda source: source.period_from,
        )
        if not sources:
            raise SourcesNotFoundError(
                "Payout sources not found",
                details={"merchant_id": merchant_id, "source_ids": requested},
            )

        currencies = sorted({source.currency.upper() for source in sources})
        if len(currencies) > 1:
            raise SourcesInconsistentCurrencyError(
                "Payout sources have inconsistent currencies",
                details={"currencies": currencies},
            )

        return AggregatedSources(
            amount=sum((Decimal(source.amount) for source in sources), Decimal("0")),
            currency=currencies[0],
            source_ids=[source.id for source in sources],
            periods=[
                PeriodWindow(period_from=source.period_from, period_to=source.period_to)
                for source in sources
            ],
        )

    def reports_for(
        self, merchant_id: str, source_ids: Sequence[str]
    ) -> list[RoyaltyReportSource]:
        """
        Return the merchant's reports among ``source_ids`` whatever their status.

        Raises:
            SourcesFetchFailedError: the report source is unavailable
        """
        requested = list(dict.fromkeys(source_ids or []))
        if not requested:
            return []
        found = self._read(self.reader.find_by_ids, merchant_id, requested)
        return [report for report in found if report.merchant_id == merchant_id]

    def _read(
        self,
        read: Callable[[str, list[str]], list[RoyaltyReportSource]],
        merchant_id: str,
        source_ids: list[str],
    ) -> list[RoyaltyReportSource]:
        try:
            return read(merchant_id, source_ids)
        except CollaboratorUnavailableError as e:
            self.get_logger().error(
                "Unable to load royalty report sources",
                extra={
                    "operation": read.__name__,
                    "service": "royalty_reports",
                    "merchant_id": merchant_id,
                    "source_ids": source_ids,
                },
                exc_info=True,
            )
            raise SourcesFetchFailedError(
                "Unable to load payout sources",
                details={"merchant_id": merchant_id},
            ) from e


__all__ = [
    "SourceAggregator",
]
