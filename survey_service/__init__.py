"""Survey service: markdown survey ingestion, storage and responses."""
