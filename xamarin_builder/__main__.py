"""Entry point for ``python -m xamarin_builder``."""

from xamarin_builder.cli import app

app(prog_name="xamarin-builder")
