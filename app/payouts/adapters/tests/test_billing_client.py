"""Tests for BillingServiceClient payload mapping."""

from datetime import datetime
from datetime import timezone as dt_timezone
from decimal import Decimal

import pytest
import requests

from payouts.adapters import BillingServiceClient
from payouts.exceptions import CollaboratorUnavailableError


@pytest.fixture
def session(mocker):
    session = mocker.Mock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return BillingServiceClient(
        base_url="https://billing.example/api/v1", api_key="", timeout=2, session=session
    )


def respond(session, mocker, body, status_code=200):
    response = mocker.Mock(spec=requests.Response)
    response.status_code = status_code
    response.content = b"{...}"
    response.json.return_value = body
    session.request.return_value = response


class TestGetMerchant:
    def test_maps_profile(self, client, session, mocker):
        respond(
            session,
            mocker,
            {
                "id": "m-1",
                "company_name": "Acme Records Ltd",
                "agreement_number": "AG-1",
                "contact_name": "Jane Doe",
                "contact_email": "jane@acme.example",
                "banking": {"iban": "DE89"},
                "min_payout_amount": "50.00",
                "manual_payouts_enabled": False,
            },
        )

        merchant = client.get_merchant("m-1")

        assert merchant.min_payout_amount == Decimal("50.00")
        assert merchant.manual_payouts_enabled is False
        assert merchant.banking == {"iban": "DE89"}

    def test_missing_merchant_is_none(self, client, session, mocker):
        respond(session, mocker, None, status_code=404)

        assert client.get_merchant("m-404") is None

    def test_incomplete_profile_is_unavailable(self, client, session, mocker):
        respond(session, mocker, {"id": "m-1"})

        with pytest.raises(CollaboratorUnavailableError):
            client.get_merchant("m-1")


class TestFindAccepted:
    def test_sends_ids_and_sorts_by_period(self, client, session, mocker):
        respond(
            session,
            mocker,
            {
                "results": [
                    {
                        "id": "r-2",
                        "merchant_id": "m-1",
                        "status": "accepted",
                        "period_from": "2024-02-01T00:00:00Z",
                        "period_to": "2024-02-29T00:00:00Z",
                        "amount": "50.00",
                        "currency": "USD",
                    },
                    {
                        "id": "r-1",
                        "merchant_id": "m-1",
                        "status": "accepted",
                        "period_from": "2024-01-01T00:00:00Z",
                        "period_to": "2024-01-31T00:00:00Z",
                        "amount": 100,
                        "currency": "USD",
                    },
                ]
            },
        )

        sources = client.find_accepted("m-1", ["r-1", "r-2"])

        assert [source.id for source in sources] == ["r-1", "r-2"]
        assert sources[0].amount == Decimal("100")
        assert sources[0].period_from == datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
        params = session.request.call_args.kwargs["params"]
        assert params == {"ids": "r-1,r-2", "status": "accepted"}

    def test_bad_date_is_unavailable(self, client, session, mocker):
        respond(
            session,
            mocker,
            {
                "results": [
                    {
                        "id": "r-1",
                        "merchant_id": "m-1",
                        "status": "accepted",
                        "period_from": "yesterday",
                        "period_to": "2024-01-31T00:00:00Z",
                        "amount": "1",
                        "currency": "USD",
                    }
                ]
            },
        )

        with pytest.raises(CollaboratorUnavailableError):
            client.find_accepted("m-1", ["r-1"])


class TestFindByIds:
    def test_any_status_is_requested(self, client, session, mocker):
        respond(
            session,
            mocker,
            {
                "results": [
                    {
                        "id": "r-1",
                        "merchant_id": "m-1",
                        "status": "paid",
                        "period_from": "2024-01-01T00:00:00Z",
                        "period_to": "2024-01-31T00:00:00Z",
                        "amount": "100.00",
                        "currency": "USD",
                    }
                ]
            },
        )

        reports = client.find_by_ids("m-1", ["r-1"])

        assert [report.status for report in reports] == ["paid"]
        params = session.request.call_args.kwargs["params"]
        assert params == {"ids": "r-1"}

    def test_malformed_payload_is_unavailable(self, client, session, mocker):
        respond(session, mocker, {"results": [{"id": "r-1"}]})

        with pytest.raises(CollaboratorUnavailableError):
            client.find_by_ids("m-1", ["r-1"])


class TestBalanceAndStatistics:
    def test_get_balance(self, client, session, mocker):
        respond(
            session,
            mocker,
            {"currency": "USD", "debit": "500.00", "credit": "120.50", "rolling_reserve": "-5"},
        )

        balance = client.get_balance("m-1")

        assert balance.available == Decimal("379.50")
        assert balance.rolling_reserve == Decimal("-5")

    def test_recompute_posts(self, client, session, mocker):
        respond(session, mocker, None, status_code=202)
        session.request.return_value.content = b""

        client.recompute("m-1")

        args = session.request.call_args
        assert args.args == (
            "POST",
            "https://billing.example/api/v1/merchants/m-1/balance/recompute",
        )

    def test_net_revenue_by_country(self, client, session, mocker):
        respond(
            session,
            mocker,
            {"results": [{"country": "DE", "net_revenue": "10.5"}, {"country": "US", "net_revenue": 3}]},
        )
        period_from = datetime(2024, 1, 1, tzinfo=dt_timezone.utc)
        period_to = datetime(2024, 1, 31, tzinfo=dt_timezone.utc)

        revenue = client.net_revenue_by_country("m-1", period_from, period_to)

        assert revenue == {"DE": Decimal("10.5"), "US": Decimal("3")}
        assert session.request.call_args.kwargs["params"] == {
            "period_from": "2024-01-01T00:00:00+00:00",
            "period_to": "2024-01-31T00:00:00+00:00",
        }

    def test_item_order_counts(self, client, session, mocker):
        respond(session, mocker, {"results": [{"item_name": "Album A", "orders": "7"}]})

        counts = client.item_order_counts(
            "m-1",
            datetime(2024, 1, 1, tzinfo=dt_timezone.utc),
            datetime(2024, 1, 31, tzinfo=dt_timezone.utc),
        )

        assert counts == {"Album A": 7}
