"""Adapters for external systems: database, model provider, vector index, documents."""
