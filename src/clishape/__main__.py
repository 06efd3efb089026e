"""``python -m clishape`` entry point; same error boundary as the console script."""

from __future__ import annotations

from clishape.cli.app import cli

if __name__ == "__main__":
    cli()
