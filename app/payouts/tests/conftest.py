"""
Pytest fixtures for payouts API tests.

The views build their service through payouts.views.get_payout_service;
the ``api_service`` fixture patches it (and the webhook's import of it)
to return a service over the in-memory collaborators from
payouts/conftest.py.
"""

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from payouts.tests.factories import UserFactory


@pytest.fixture
def api_client():
    """Unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    return UserFactory()


@pytest.fixture
def staff_user(db):
    return UserFactory(is_staff=True)


def _client_for(user) -> APIClient:
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {refresh.access_token}")
    return client


@pytest.fixture
def authenticated_client(user):
    """API client with a JWT for a regular user."""
    return _client_for(user)


@pytest.fixture
def staff_client(staff_user):
    """API client with a JWT for a staff user."""
    return _client_for(staff_user)


@pytest.fixture
def api_service(mocker, payout_service):
    mocker.patch("payouts.views.get_payout_service", return_value=payout_service)
    mocker.patch("payouts.webhooks.get_payout_service", return_value=payout_service)
    return payout_service
