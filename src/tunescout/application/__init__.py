"""Application layer - search use cases on top of the provider ports."""
