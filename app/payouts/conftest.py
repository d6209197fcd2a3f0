"""
Pytest fixtures shared by every payouts test package.

Collaborators are in-memory fakes (see payouts.tests.fakes). The default
billing fake knows one merchant with two accepted USD reports:

    report-1  100.00 USD  January 2024
    report-2   50.00 USD  February 2024

and a balance of debit 1000, credit 0, rolling reserve 20, so creating a
payout from both reports yields 130.00 USD.

Usage:
    def test_create(payout_service, billing):
        result = payout_service.create_payout_document(
            MERCHANT_ID, ["report-1", "report-2"], "Q1", ip="10.0.0.1"
        )
        assert result.data.amount == Decimal("130.00")
"""

from decimal import Decimal

import pytest
from django.core.cache import cache

from payouts.context import PayoutContext
from payouts.services import PayoutDocumentRepository, PayoutDocumentService
from payouts.tests.factories import PayoutDocumentFactory
from payouts.tests.fakes import (
    MERCHANT_ID,
    FakeBillingService,
    FakeDocumentSigner,
    make_merchant,
    make_report,
)


@pytest.fixture(autouse=True)
def mock_redis_lock(mocker):
    """Mock Redis for distributed locking."""
    mock_redis = mocker.MagicMock()
    mock_redis.set.return_value = True
    mock_redis.get.return_value = None
    mock_redis.delete.return_value = 1
    mock_redis.eval.return_value = 1

    mocker.patch(
        "payouts.locks.get_redis_connection",
        return_value=mock_redis,
    )
    return mock_redis


@pytest.fixture(autouse=True)
def clear_cache():
    """Document cache entries must not outlive the test database."""
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def merchant():
    return make_merchant()


@pytest.fixture
def billing(merchant):
    """Billing fake seeded with the default merchant, reports and balance."""
    fake = FakeBillingService()
    fake.add_merchant(merchant)
    fake.add_report(make_report("report-1", amount="100.00", month=1))
    fake.add_report(make_report("report-2", amount="50.00", month=2))
    fake.set_balance(MERCHANT_ID, debit="1000.00", rolling_reserve="20.00")
    fake.net_revenue[MERCHANT_ID] = {
        "DE": Decimal("60.00"),
        "US": Decimal("90.00"),
        "FR": Decimal("10.00"),
    }
    fake.orders[MERCHANT_ID] = {"Album A": 12, "Single B": 30}
    return fake


@pytest.fixture
def signer():
    return FakeDocumentSigner()


@pytest.fixture
def repository():
    return PayoutDocumentRepository()


@pytest.fixture
def payout_context(billing, signer, repository):
    return PayoutContext(
        sources=billing,
        balances=billing,
        balance_recompute=billing,
        statistics=billing,
        signer=signer,
        merchants=billing,
        repository=repository,
    )


@pytest.fixture
def payout_service(db, payout_context):
    return PayoutDocumentService(payout_context)


# =============================================================================
# Document Fixtures
# =============================================================================


@pytest.fixture
def pending_document(db):
    """Pending document with a signature workflow and no signatures."""
    return PayoutDocumentFactory()


@pytest.fixture
def in_progress_document(db):
    return PayoutDocumentFactory(status="in_progress")


@pytest.fixture
def skipped_document(db):
    return PayoutDocumentFactory(skipped=True)
