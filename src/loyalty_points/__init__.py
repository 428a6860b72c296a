"""Loyalty points service: tiers, point accrual and the member ledger."""
