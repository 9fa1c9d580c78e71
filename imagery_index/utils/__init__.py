"""Shared helpers: JSON formatting and small record utilities."""
