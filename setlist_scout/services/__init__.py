"""Pipeline stage services: identity, tour selection, aggregation, tally, enrichment."""
