"""CLI command for sending one authenticated API request."""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any, Optional

import httpx
import typer
from rich.console import Console

from auth_transport.client import AuthenticatedClient
from auth_transport.config import get_config
from auth_transport.credentials import CredentialCell
from auth_transport.utils.cookies import parse_cookies
from auth_transport.utils.errors import AuthTransportError, handle_error
from auth_transport.utils.output import OutputFormat, print_response, response_row

console = Console(stderr=True)
app = typer.Typer(name="request", help="Send requests through the authenticated transport.")


async def _send(
    client: AuthenticatedClient,
    method: str,
    path: str,
    body: Any,
    logged_out: list[bool],
) -> dict[str, Any]:
    async with client:
        unsubscribe = client.signal.subscribe(lambda: logged_out.append(True))
        try:
            response = await client.request(method, path, json=body)
        finally:
            unsubscribe()
        return response_row(response, client.status())


@app.command("send")
def send(
    method: Annotated[str, typer.Argument(help="HTTP method")],
    path: Annotated[str, typer.Argument(help="API path, e.g. /menu/items/")],
    env: Annotated[Optional[str], typer.Option("--env", "-e", help="Environment from profiles.yaml")] = None,
    token: Annotated[Optional[str], typer.Option("--token", "-t", help="Initial access token")] = None,
    cookie: Annotated[Optional[list[str]], typer.Option("--cookie", "-c", help="Session cookie as NAME=VALUE")] = None,
    data: Annotated[Optional[str], typer.Option("--data", "-d", help="JSON request body")] = None,
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.JSON,
) -> None:
    """Send one request, refreshing the token once if it is rejected."""
    config = get_config()
    logged_out: list[bool] = []

    try:
        body = json.loads(data) if data else None
        client = AuthenticatedClient(
            config, env, credentials=CredentialCell(token), cookies=parse_cookies(cookie)
        )
        result = asyncio.run(_send(client, method, path, body, logged_out))
    except (AuthTransportError, httpx.HTTPError, ValueError) as e:
        if logged_out:
            console.print("[yellow]Session invalidated, log in again.[/yellow]")
        handle_error(e)
        raise typer.Exit(1)

    print_response(result, output, title=f"{method.upper()} {path}")
    if result["status_code"] >= 400:
        raise typer.Exit(1)
