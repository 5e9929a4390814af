"""Clari interview coach backend."""
