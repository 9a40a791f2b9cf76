"""Adapters for external providers and the shared store."""
