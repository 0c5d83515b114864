"""Infrastructure layer: configuration, persistence, object storage and tokens."""
