"""
Payouts app configuration.

This app provides the payout document engine:
- Payout documents built from accepted royalty reports
- Balance governance against the merchant ledger
- Two-signer electronic signature workflow
- Append-only audit trail of document mutations
"""

from django.apps import AppConfig


class PayoutsConfig(AppConfig):
    """Configuration for the payouts application."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payouts"
    verbose_name = "Payouts"
