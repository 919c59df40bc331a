"""usage-meter - desktop widget for Claude plan usage windows."""

__version__ = "0.1.0"
