"""Tests for the payout service layer."""
