"""One-shot version check command implementation."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console

from worldvious.config import ClientConfig, resolve_config
from worldvious.exceptions import ReporterError
from worldvious.notifications import (
    FeedbackRequestNotification,
    NewVersionNotification,
    NotificationItem,
    parse_notifications,
)
from worldvious.reporter import Reporter

console = Console()


def _print_item(item: NotificationItem) -> None:
    if isinstance(item, NewVersionNotification):
        console.print(f"[green]New version[/green] {item.name} {item.version}: {item.url}")
        for change in item.changes:
            console.print(f"  * {change}")
        for feature in item.features:
            console.print(f"  + {feature}")
    elif isinstance(item, FeedbackRequestNotification):
        console.print(f"[cyan]Feedback requested[/cyan] id={item.id}")
        for question in item.questions:
            console.print(f"  ? [{question.kind}] {question.text}")
    else:
        raise TypeError(f"Unsupported notification type: {type(item).__name__}")


def check_version_command(
    process: str,
    version: str,
    config: ClientConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[NotificationItem, ...]:
    """Run a single version check and print the returned notifications.

    Raises:
        typer.Exit: With code 1 when reporting is disabled or the request fails.
    """
    resolved = config if config is not None else resolve_config()
    if not resolved.enabled or not resolved.base_url:
        console.print("[yellow]Reporting disabled:[/yellow] set WORLDVIOUS_ID and WORLDVIOUS_URL")
        raise typer.Exit(1)

    reporter = Reporter(resolved.base_url, transport=transport)
    body = {"id": resolved.identity, "process": process, "version": version}
    try:
        response = asyncio.run(reporter.post("version", body))
    except ReporterError as exc:
        console.print(f"[red]Version check failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    items = parse_notifications(response)
    if not items:
        console.print("No notifications.")
    for item in items:
        _print_item(item)
    return items
