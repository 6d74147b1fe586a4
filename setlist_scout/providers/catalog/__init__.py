"""Music catalog adapters."""
