"""Identity-graph adapters."""
