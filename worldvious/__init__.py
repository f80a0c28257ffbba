"""Worldvious client: version checks, error and usage reporting for host processes."""

from worldvious.aggregator import ErrorAggregator, ErrorRecord, error_signature
from worldvious.client import WorldviousClient
from worldvious.config import ClientConfig, JobName, JobSettings, WorldviousSettings, resolve_config
from worldvious.exceptions import ReporterError, WorldviousError
from worldvious.notifications import (
    FeedbackQuestion,
    FeedbackRequestNotification,
    NewVersionNotification,
    NotificationCenter,
    NotificationItem,
    parse_notifications,
)
from worldvious.reporter import Reporter
from worldvious.scheduler import JobDescriptor, JobScheduler, JobState
from worldvious.snapshots import SnapshotStore

__all__ = [
    "ClientConfig",
    "error_signature",
    "ErrorAggregator",
    "ErrorRecord",
    "FeedbackQuestion",
    "FeedbackRequestNotification",
    "JobDescriptor",
    "JobName",
    "JobScheduler",
    "JobSettings",
    "JobState",
    "NewVersionNotification",
    "NotificationCenter",
    "NotificationItem",
    "parse_notifications",
    "Reporter",
    "ReporterError",
    "resolve_config",
    "SnapshotStore",
    "WorldviousClient",
    "WorldviousError",
    "WorldviousSettings",
]
