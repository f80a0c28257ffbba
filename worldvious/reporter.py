"""HTTP reporter: POST JSON payloads to the collector."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from worldvious.exceptions import ReporterError

logger = logging.getLogger(__name__)

REPORT_KINDS = frozenset({"version", "error", "counters", "metrics", "feedback"})


class Reporter:
    """Send report payloads to ``{base_url}/report/{kind}``."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not isinstance(base_url, str) or not base_url.strip():
            raise ValueError("base_url must be a non-empty string")
        self.base_url = base_url.strip().rstrip("/")
        self._timeout_seconds = max(float(timeout_seconds), 0.1)
        self._transport = transport

    def url_for(self, kind: str) -> str:
        return f"{self.base_url}/report/{kind}"

    async def post(self, kind: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST *body* as JSON and return the parsed response object.

        Raises:
            ValueError: If *kind* is not a known report kind.
            ReporterError: On transport failure, non-2xx status, or a body
                that is not a JSON object.
        """
        if kind not in REPORT_KINDS:
            raise ValueError(f"Unknown report kind: {kind!r}")
        url = self.url_for(kind)
        logger.debug("Requesting url=%s body=%s", url, body)
        try:
            async with httpx.AsyncClient(timeout=self._timeout_seconds, transport=self._transport) as client:
                response = await client.post(url, json=body)
        except httpx.HTTPError as exc:
            logger.error("Failed url=%s error=%s", url, exc)
            raise ReporterError(kind, url, str(exc) or type(exc).__name__) from exc

        if response.status_code < 200 or response.status_code >= 300:
            logger.error("Failed url=%s status_code=%s", url, response.status_code)
            raise ReporterError(
                kind,
                url,
                f"unexpected status {response.status_code}",
                status_code=response.status_code,
            )

        payload = self._safe_json(response, kind, url)
        logger.debug("Done url=%s response=%s", url, payload)
        return payload

    @staticmethod
    def _safe_json(response: httpx.Response, kind: str, url: str) -> dict[str, Any]:
        if not response.content.strip():
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise ReporterError(kind, url, "response is not valid JSON", response.status_code) from exc
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise ReporterError(kind, url, "response must be a JSON object", response.status_code)
        return payload
