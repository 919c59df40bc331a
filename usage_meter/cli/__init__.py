"""CLI module for usage-meter."""
