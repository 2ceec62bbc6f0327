"""Shared helpers: configuration and logging."""
