from typing import Optional

import typer

from dashrecord.utils import setup_logging


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:  # pragma: no cover
        import dashrecord

        typer.echo(f"dashrecord version: {dashrecord.__version__}")
        raise typer.Exit()


app = typer.Typer(name="dashrecord")


@app.callback()
def app_callback(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log schema declarations to stderr.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """dashrecord - inspect and check schema-constrained record types."""
    if verbose:  # pragma: no cover
        setup_logging("DEBUG")
