from __future__ import annotations

import json

import httpx
import pytest

from worldvious.exceptions import ReporterError
from worldvious.reporter import Reporter


def _reporter(handler) -> Reporter:  # type: ignore[no-untyped-def]
    return Reporter("https://collector.local/api/v1/oss/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_reporter_posts_json_to_kind_path() -> None:
    seen: dict[str, object] = {}

    async def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"notifications": []})

    result = await _reporter(handler).post("version", {"id": "x", "process": "parser", "version": "v7.8.9"})
    assert seen["method"] == "POST"
    assert seen["url"] == "https://collector.local/api/v1/oss/report/version"
    assert seen["body"] == {"id": "x", "process": "parser", "version": "v7.8.9"}
    assert result == {"notifications": []}


@pytest.mark.asyncio
async def test_reporter_empty_body_yields_empty_dict() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"")

    assert await _reporter(handler).post("error", {"error": "e", "count": 1}) == {}


@pytest.mark.asyncio
async def test_reporter_non_2xx_raises_with_status() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, json={"error": "unavailable"})

    with pytest.raises(ReporterError) as exc_info:
        await _reporter(handler).post("counters", {"counters": {}})
    assert exc_info.value.status_code == 503
    assert exc_info.value.kind == "counters"


@pytest.mark.asyncio
async def test_reporter_transport_error_raises_reporter_error() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ReporterError, match="connection refused"):
        await _reporter(handler).post("metrics", {"metrics": {}})


@pytest.mark.asyncio
async def test_reporter_rejects_non_object_json() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[1, 2, 3])

    with pytest.raises(ReporterError, match="JSON object"):
        await _reporter(handler).post("version", {})


@pytest.mark.asyncio
async def test_reporter_rejects_invalid_json() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    with pytest.raises(ReporterError, match="not valid JSON"):
        await _reporter(handler).post("version", {})


@pytest.mark.asyncio
async def test_reporter_rejects_unknown_kind() -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("must not be called")

    with pytest.raises(ValueError, match="Unknown report kind"):
        await _reporter(handler).post("telemetry", {})


def test_reporter_requires_base_url() -> None:
    with pytest.raises(ValueError):
        Reporter("  ")
