"""Config gate: turn raw environment settings into an immutable ClientConfig."""

from __future__ import annotations

import logging

from worldvious.config.models import (
    DEFAULT_INTERVALS,
    ClientConfig,
    JobName,
    JobSettings,
    WorldviousSettings,
)

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"true", "1", "yes", "on"})


def parse_interval(raw: str | None, default: int) -> int:
    """Parse an interval override in whole seconds, falling back to *default*."""
    if raw is None:
        return default
    value = raw.strip()
    if not value:
        return default
    try:
        parsed = int(value, 10)
    except ValueError:
        logger.warning("Ignoring interval override value=%r, using default=%s", raw, default)
        return default
    if parsed < 1:
        logger.warning("Ignoring non-positive interval override value=%r, using default=%s", raw, default)
        return default
    return parsed


def is_flag_set(raw: str | None) -> bool:
    """Return True when a disable flag holds a truthy string."""
    if raw is None:
        return False
    return raw.strip().lower() in _TRUTHY


def _normalize_text(raw: str | None) -> str | None:
    if raw is None:
        return None
    value = raw.strip()
    return value or None


def resolve_config(settings: WorldviousSettings | None = None) -> ClientConfig:
    """Resolve identity, collector URL and per-job settings.

    Global enablement requires both the identity token and the collector URL.
    When either is missing every job is disabled for the lifetime of the
    returned config.
    """
    raw = settings if settings is not None else WorldviousSettings()

    identity = _normalize_text(raw.id)
    base_url = _normalize_text(raw.url)
    if base_url is not None:
        base_url = base_url.rstrip("/")

    enabled = True
    if identity is None:
        logger.warning("WORLDVIOUS_ID not set, disabling reporting")
        enabled = False
    if base_url is None:
        logger.warning("WORLDVIOUS_URL not set, disabling reporting")
        enabled = False

    jobs: list[JobSettings] = []
    for job in JobName:
        interval = parse_interval(raw.interval_override(job), DEFAULT_INTERVALS[job])
        job_enabled = enabled and not is_flag_set(raw.disable_flag(job))
        jobs.append(JobSettings(name=job, interval_seconds=interval, enabled=job_enabled))
        logger.info(
            "Resolved job=%s interval_seconds=%s enabled=%s",
            job.value,
            interval,
            job_enabled,
        )

    return ClientConfig(identity=identity, base_url=base_url, enabled=enabled, jobs=tuple(jobs))
