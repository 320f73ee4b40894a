"""Import services: single-document aggregation, batch orchestration, reporting."""
