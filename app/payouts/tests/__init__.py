"""
Tests for payouts app.

This package contains test modules for:
- test_models.py: PayoutDocument transitions and append-only change records
- test_audit.py: Canonical snapshots and hashes
- test_locks.py: DistributedLock
- test_context.py: Collaborator wiring from settings
- test_views.py: API endpoint tests
- test_webhooks.py: Document signer webhook tests
- test_integration.py: Full payout lifecycle over HTTP

Usage:
    pytest payouts/tests/
    pytest payouts/tests/test_views.py
"""
