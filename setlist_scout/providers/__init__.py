"""Concrete adapters for the upstream services and the lookup cache."""
