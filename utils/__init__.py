"""Shared helpers: statistics, input validation and logging."""
