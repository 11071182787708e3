"""Main CLI application - ties all subcommands together.

This is the entry point for the taskrep CLI.
"""

from typing import Annotated

import typer

from taskrep import __version__
from taskrep.cli.common import console, info
from taskrep.cli.workflow import app as workflow_app
from taskrep.config import settings
from taskrep.logging import configure_logging

app = typer.Typer(
    name="taskrep",
    help="TaskRep - task workflow sequencing and validation",
    add_completion=False,
    no_args_is_help=True,
)

app.add_typer(workflow_app, name="workflow")


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"taskrep {__version__}")
        raise typer.Exit


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Configure logging before any command runs."""
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_output=settings.log_json,
    )


@app.command("serve")
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind host")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Bind port")] = None,
) -> None:
    """Run the REST API."""
    import uvicorn

    from taskrep.api.app import create_api_app

    bind_host = host or settings.server_host
    bind_port = port or settings.server_port
    info(f"Serving TaskRep API on http://{bind_host}:{bind_port}")
    uvicorn.run(create_api_app(), host=bind_host, port=bind_port, log_level="warning")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
