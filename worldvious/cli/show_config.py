"""Show resolved configuration command implementation."""

from __future__ import annotations

from rich.console import Console

from worldvious.config import ClientConfig, resolve_config

console = Console()


def _mask(identity: str | None) -> str:
    if not identity:
        return "<not set>"
    if len(identity) <= 8:
        return "*" * len(identity)
    return f"{identity[:4]}...{identity[-4:]}"


def show_config_command(config: ClientConfig | None = None) -> ClientConfig:
    """Print identity, collector URL and per-job settings."""
    resolved = config if config is not None else resolve_config()
    console.print("[bold]Worldvious Configuration[/bold]")
    console.print(f"Identity: {_mask(resolved.identity)}")
    console.print(f"Collector: {resolved.base_url or '<not set>'}")
    status = "[green]enabled[/green]" if resolved.enabled else "[yellow]disabled[/yellow]"
    console.print(f"Reporting: {status}")
    for settings in resolved.jobs:
        flag = "on" if settings.enabled else "off"
        console.print(f"  {settings.name.value}: every {settings.interval_seconds:g}s ({flag})")
    return resolved
