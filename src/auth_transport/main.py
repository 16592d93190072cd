"""auth-transport CLI entry point.

Send API requests through the refreshing bearer-token transport and
inspect its configuration.
"""

from __future__ import annotations

import logging

import typer

from auth_transport.commands.auth_cmd import app as auth_app
from auth_transport.commands.env_cmd import app as env_app
from auth_transport.commands.request_cmd import app as request_app

app = typer.Typer(
    name="auth-transport",
    help="Bearer-token API transport with single-flight refresh.",
    no_args_is_help=True,
)

# Register command groups
app.add_typer(auth_app, name="auth")
app.add_typer(request_app, name="request")
app.add_typer(env_app, name="env")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
) -> None:
    """auth-transport: authenticated requests with automatic token refresh."""
    if verbose:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")


if __name__ == "__main__":
    app()
