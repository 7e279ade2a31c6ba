"""Domain layer - entities, exceptions, ports and value objects."""
