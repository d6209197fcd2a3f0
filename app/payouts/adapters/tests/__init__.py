"""Tests for the billing and document signer adapters."""
