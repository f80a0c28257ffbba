"""Configuration models for the Worldvious client."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class JobName(str, Enum):
    """Recurring reporting jobs."""

    VERSION_CHECK = "version-check"
    REPORT_ERROR = "report-error"
    REPORT_COUNTERS = "report-counters"
    REPORT_METRICS = "report-metrics"


DEFAULT_INTERVALS: dict[JobName, int] = {
    JobName.VERSION_CHECK: 60 * 60,
    JobName.REPORT_ERROR: 60,
    JobName.REPORT_COUNTERS: 60 * 60,
    JobName.REPORT_METRICS: 60 * 60,
}


class WorldviousSettings(BaseSettings):
    """Raw environment values, read once.

    Overrides and flags are kept as strings; interpretation happens in
    :func:`worldvious.config.gate.resolve_config` so a malformed value never
    raises into the host.
    """

    id: str | None = None
    url: str | None = None

    version_check_timeout: str | None = None
    error_report_timeout: str | None = None
    counters_report_timeout: str | None = None
    metrics_report_timeout: str | None = None

    version_check_disable: str | None = None
    error_report_disable: str | None = None
    counters_report_disable: str | None = None
    metrics_report_disable: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="WORLDVIOUS_",
        env_file=".env",
        extra="ignore",
    )

    def interval_override(self, job: JobName) -> str | None:
        return {
            JobName.VERSION_CHECK: self.version_check_timeout,
            JobName.REPORT_ERROR: self.error_report_timeout,
            JobName.REPORT_COUNTERS: self.counters_report_timeout,
            JobName.REPORT_METRICS: self.metrics_report_timeout,
        }[job]

    def disable_flag(self, job: JobName) -> str | None:
        return {
            JobName.VERSION_CHECK: self.version_check_disable,
            JobName.REPORT_ERROR: self.error_report_disable,
            JobName.REPORT_COUNTERS: self.counters_report_disable,
            JobName.REPORT_METRICS: self.metrics_report_disable,
        }[job]
class JobSettings(BaseModel):
    """Resolved settings for one job."""

    model_config = ConfigDict(frozen=True)

    name: JobName
    interval_seconds: float = Field(gt=0)
    enabled: bool = True


class ClientConfig(BaseModel):
    """Immutable configuration handed to the client and its scheduler."""

    model_config = ConfigDict(frozen=True)

    identity: str | None = None
    base_url: str | None = None
    enabled: bool = False
    jobs: tuple[JobSettings, ...] = ()

    @field_validator("jobs")
    @classmethod
    def _unique_job_names(cls, jobs: tuple[JobSettings, ...]) -> tuple[JobSettings, ...]:
        names = [settings.name for settings in jobs]
        if len(names) != len(set(names)):
            raise ValueError("jobs must not repeat a job name")
        return jobs

    def job(self, name: JobName) -> JobSettings:
        """Return settings for *name*; unknown jobs resolve disabled at default interval."""
        for settings in self.jobs:
            if settings.name == name:
                return settings
        return JobSettings(name=name, interval_seconds=DEFAULT_INTERVALS[name], enabled=False)
