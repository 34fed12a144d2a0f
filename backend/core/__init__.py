"""Shared infrastructure: logging, configuration, errors and request auth."""
