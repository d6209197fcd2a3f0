"""Tests for BalanceGovernance."""

from decimal import Decimal

import pytest

from payouts.exceptions import (
    AmountInvalidError,
    BalanceFetchFailedError,
    BalanceUpdateFailedError,
    CollaboratorBusinessError,
    InsufficientBalanceError,
)
from payouts.services import BalanceGovernance, SourceAggregator
from payouts.state_machines import PayoutDocumentStatus
from payouts.tests.fakes import MERCHANT_ID


@pytest.fixture
def governance(billing):
    return BalanceGovernance(billing, billing)


@pytest.fixture
def aggregated(billing):
    return SourceAggregator(billing).aggregate(MERCHANT_ID, ["report-1", "report-2"])


class TestEvaluate:
    def test_amount_is_net_of_rolling_reserve(self, governance, merchant, aggregated):
        decision = governance.evaluate(merchant, aggregated)

        assert decision.amount == Decimal("130.00")
        assert decision.status == PayoutDocumentStatus.PENDING
        assert decision.is_skip is False

    def test_amount_exactly_at_minimum_is_pending(self, governance, billing, merchant, aggregated):
        billing.set_balance(MERCHANT_ID, debit="1000.00", rolling_reserve="100.00")

        decision = governance.evaluate(merchant, aggregated)

        assert decision.amount == merchant.min_payout_amount
        assert decision.status == PayoutDocumentStatus.PENDING

    def test_amount_below_minimum_is_skip(self, governance, billing, merchant, aggregated):
        billing.set_balance(MERCHANT_ID, debit="1000.00", rolling_reserve="120.00")

        decision = governance.evaluate(merchant, aggregated)

        assert decision.amount == Decimal("30.00")
        assert decision.is_skip is True

    def test_negative_reserve_is_a_release(self, governance, billing, merchant, aggregated):
        billing.set_balance(MERCHANT_ID, debit="1000.00", rolling_reserve="-10.00")

        assert governance.evaluate(merchant, aggregated).amount == Decimal("160.00")

    def test_insufficient_balance(self, governance, billing, merchant, aggregated):
        billing.set_balance(MERCHANT_ID, debit="200.00", credit="100.00")

        with pytest.raises(InsufficientBalanceError) as exc_info:
            governance.evaluate(merchant, aggregated)

        assert exc_info.value.required == Decimal("150.00")
        assert exc_info.value.available == Decimal("100.00")
        assert exc_info.value.error_code == "PAYOUT_INSUFFICIENT_BALANCE"

    def test_balance_equal_to_amount_is_enough(self, governance, billing, merchant, aggregated):
        billing.set_balance(MERCHANT_ID, debit="150.00")

        assert governance.evaluate(merchant, aggregated).amount == Decimal("150.00")

    @pytest.mark.parametrize("reserve", ["150.00", "200.00"])
    def test_non_positive_amount_is_invalid(self, governance, billing, merchant, aggregated, reserve):
        billing.set_balance(MERCHANT_ID, debit="1000.00", rolling_reserve=reserve)

        with pytest.raises(AmountInvalidError):
            governance.evaluate(merchant, aggregated)

    def test_unavailable_balance_reader(self, governance, billing, merchant, aggregated):
        billing.unavailable.add("get_balance")

        with pytest.raises(BalanceFetchFailedError):
            governance.evaluate(merchant, aggregated)


class TestRecompute:
    def test_recompute_calls_ledger(self, governance, billing):
        governance.recompute(MERCHANT_ID)

        assert billing.recompute_calls == [MERCHANT_ID]

    def test_unavailable_ledger_is_a_balance_update_failure(self, governance, billing):
        billing.unavailable.add("recompute")

        with pytest.raises(BalanceUpdateFailedError) as exc_info:
            governance.recompute(MERCHANT_ID)

        assert exc_info.value.details["cause"] == "COLLABORATOR_UNAVAILABLE"

    def test_ledger_business_error_is_a_balance_update_failure(self, governance, billing):
        billing.business_errors["recompute"] = CollaboratorBusinessError(
            "ledger locked", error_code="bl000012"
        )

        with pytest.raises(BalanceUpdateFailedError) as exc_info:
            governance.recompute(MERCHANT_ID)

        assert exc_info.value.details["cause"] == "bl000012"
