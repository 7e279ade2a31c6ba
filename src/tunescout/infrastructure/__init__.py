"""Infrastructure layer - HTTP integrations, provider adapters, observability."""
