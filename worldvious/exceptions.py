"""Exception types raised by the Worldvious client."""

from __future__ import annotations


class WorldviousError(Exception):
    """Base class for Worldvious client errors."""


class ReporterError(WorldviousError):
    """Raised when a report request to the collector fails."""

    def __init__(self, kind: str, url: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"report/{kind} failed url={url}: {message}")
        self.kind = kind
        self.url = url
        self.status_code = status_code
