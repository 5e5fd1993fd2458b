"""Infer recurring payment schedules from a transaction ledger."""
