"""CLI commands for configured API environments."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console

from auth_transport.config import get_config
from auth_transport.utils.output import OutputFormat, print_output

console = Console(stderr=True)
app = typer.Typer(name="env", help="Inspect configured API environments.")


@app.command("list")
def list_environments(
    output: Annotated[OutputFormat, typer.Option("--output", "-o", help="Output format")] = OutputFormat.TABLE,
) -> None:
    """List environments from config/profiles.yaml."""
    config = get_config()

    if not config.all_environments:
        console.print("[dim]No environments configured, using defaults.[/dim]")

    rows = [{"name": "(default)", "api_url": config.api_url(), "refresh_path": config.refresh_path()}]
    for name in config.all_environments:
        rows.append({"name": name, "api_url": config.api_url(name), "refresh_path": config.refresh_path(name)})

    print_output(rows, output, columns=["name", "api_url", "refresh_path"], title="Environments")
