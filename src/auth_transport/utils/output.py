"""CLI output for credential status, request results and environments.

JSON goes to stdout for agents; tables go to stderr through rich.
"""

from __future__ import annotations

import json
import sys
from enum import Enum
from typing import Any

import httpx
from rich.console import Console
from rich.table import Table

from auth_transport.models.auth import CredentialStatus

console = Console(stderr=True)

STATUS_COLUMNS = ["has_token", "token_preview", "state"]
RESPONSE_COLUMNS = ["status_code", "url", "token_preview", "body"]


class OutputFormat(str, Enum):
    TABLE = "table"
    JSON = "json"


def status_row(credential: CredentialStatus, **extra: Any) -> dict[str, Any]:
    """Flatten a CredentialStatus (plus command-specific fields) into one row."""
    row: dict[str, Any] = {
        "has_token": credential.has_token,
        "token_preview": credential.token_preview or "N/A",
        "state": credential.state,
    }
    row.update(extra)
    return row


def response_body(response: httpx.Response) -> Any:
    """Decoded JSON body, or the raw text when the body is not JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text


def response_row(response: httpx.Response, credential: CredentialStatus) -> dict[str, Any]:
    """One row describing a finished request and the token it ended with."""
    return {
        "status_code": response.status_code,
        "url": str(response.request.url),
        "token_preview": credential.token_preview or "N/A",
        "body": response_body(response),
    }


def print_status(
    credential: CredentialStatus,
    fmt: OutputFormat = OutputFormat.TABLE,
    title: str = "Credential Status",
    **extra: Any,
) -> None:
    row = status_row(credential, **extra)
    print_output(row, fmt, columns=[*STATUS_COLUMNS, *extra], title=title)


def print_response(row: dict[str, Any], fmt: OutputFormat = OutputFormat.JSON, title: str | None = None) -> None:
    if fmt == OutputFormat.JSON:
        print_json(row)
        return
    # Bodies are nested JSON; keep them readable inside a table cell
    flat = dict(row, body=json.dumps(row["body"], default=str) if not isinstance(row["body"], str) else row["body"])
    print_table(flat, RESPONSE_COLUMNS, title)


def print_output(
    data: list[dict[str, Any]] | dict[str, Any],
    fmt: OutputFormat = OutputFormat.TABLE,
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    """Print rows as JSON (stdout) or a rich table (stderr)."""
    if fmt == OutputFormat.JSON:
        print_json(data)
    else:
        print_table(data, columns, title)


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout."""
    json.dump(data, sys.stdout, indent=2, default=str)
    sys.stdout.write("\n")


def print_table(
    data: list[dict[str, Any]] | dict[str, Any],
    columns: list[str] | None = None,
    title: str | None = None,
) -> None:
    if isinstance(data, dict):
        data = [data]

    if not data:
        console.print("[dim]No results.[/dim]")
        return

    if columns is None:
        columns = list(data[0].keys())

    table = Table(title=title, show_lines=False)
    for col in columns:
        table.add_column(col, overflow="fold")

    for row in data:
        table.add_row(*[str(row.get(col, "")) for col in columns])

    console.print(table)
