"""Billing API models."""
