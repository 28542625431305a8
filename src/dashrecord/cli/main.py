"""Main CLI entry point for dashrecord."""  # pragma: no cover

from dashrecord.cli.app import app  # pragma: no cover

# Register commands
from dashrecord.cli.commands import schema  # noqa: F401  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
