"""CLI commands for access token management."""

from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import typer
from rich.console import Console

from auth_transport.client import AuthenticatedClient
from auth_transport.config import get_config
from auth_transport.credentials import CredentialCell
from auth_transport.models.auth import CredentialStatus
from auth_transport.utils.cookies import parse_cookies
from auth_transport.utils.errors import AuthTransportError, handle_error
from auth_transport.utils.output import OutputFormat, print_status

console = Console(stderr=True)
app = typer.Typer(name="auth", help="Manage the in-memory access token.")


async def _refresh(client: AuthenticatedClient) -> CredentialStatus:
    async with client:
        await client.refresh()
        return client.status()


@app.command()
def refresh(
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment from profiles.yaml")] = None,
    cookie: Annotated[Optional[list[str]], typer.Option("--cookie", "-c", help="Session cookie as NAME=VALUE")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Exchange the session cookie for a new access token."""
    config = get_config()

    try:
        client = AuthenticatedClient(
            config, env, credentials=CredentialCell(), cookies=parse_cookies(cookie)
        )
        console.print("Refreshing access token...", style="yellow")
        status = asyncio.run(_refresh(client))
        print_status(status, output, title="Token Refreshed", status="refreshed")
    except (AuthTransportError, ValueError) as e:
        handle_error(e)
        raise typer.Exit(1)


@app.command()
def status(
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment from profiles.yaml")] = None,
    token: Annotated[Optional[str], typer.Option("--token", "-t", help="Access token to inspect")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """Show credential status and the resolved endpoints."""
    config = get_config()

    try:
        client = AuthenticatedClient(config, env, credentials=CredentialCell(token))
        status = client.status()
        asyncio.run(client.aclose())
        print_status(
            status, output,
            api_url=config.api_url(env),
            refresh_path=config.refresh_path(env),
        )
    except ValueError as e:
        handle_error(e)
        raise typer.Exit(1)
