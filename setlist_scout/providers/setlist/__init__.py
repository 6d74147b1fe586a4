"""Setlist archive adapters."""
