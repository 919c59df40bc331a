"""Allow ``python -m usage_meter``."""

from usage_meter.cli.commands import app

if __name__ == "__main__":
    app()
