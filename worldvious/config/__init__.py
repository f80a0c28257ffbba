"""Environment-driven configuration for the Worldvious client."""

from worldvious.config.gate import is_flag_set, parse_interval, resolve_config
from worldvious.config.models import (
    DEFAULT_INTERVALS,
    ClientConfig,
    JobName,
    JobSettings,
    WorldviousSettings,
)

__all__ = [
    "ClientConfig",
    "DEFAULT_INTERVALS",
    "is_flag_set",
    "JobName",
    "JobSettings",
    "parse_interval",
    "resolve_config",
    "WorldviousSettings",
]
