"""Entry point for `python -m dashrecord`."""

from dashrecord.cli.main import app  # pragma: no cover

if __name__ == "__main__":  # pragma: no cover
    app()
