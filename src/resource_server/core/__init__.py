"""Core infrastructure: configuration."""
