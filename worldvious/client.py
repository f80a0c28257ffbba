"""WorldviousClient: self-reporting agent embedded in a host process."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Coroutine
from typing import Any

import httpx

from worldvious.aggregator import ErrorAggregator, ErrorRecord
from worldvious.config import ClientConfig, JobName, resolve_config
from worldvious.notifications import NotificationCenter, NotificationItem, NotificationListener, parse_notifications
from worldvious.reporter import Reporter
from worldvious.scheduler import JobDescriptor, JobScheduler
from worldvious.snapshots import SnapshotStore

logger = logging.getLogger(__name__)


class WorldviousClient:
    """Periodically report version, errors, counters and metrics to a collector.

    Args:
        process_name: Name of the reporting process (``process`` on the wire).
        version: Version of the reporting process.
        config: Resolved configuration. Read from the environment when omitted.
        timeout_seconds: Per-request timeout of the collector calls.
        transport: Optional httpx transport, used by tests to mock the collector.

    Background activity never raises into the host: job, transport and
    listener failures are logged and the schedule continues.
    """

    def __init__(
        self,
        process_name: str,
        version: str,
        *,
        config: ClientConfig | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not isinstance(process_name, str) or not process_name.strip():
            raise ValueError("process_name must be a non-empty string")
        self.process_name = process_name.strip()
        self.version = version
        self._config = config if config is not None else resolve_config()

        self._reporter: Reporter | None = None
        if self._config.enabled and self._config.base_url:
            self._reporter = Reporter(
                self._config.base_url,
                timeout_seconds=timeout_seconds,
                transport=transport,
            )

        self._errors = ErrorAggregator()
        self._snapshots = SnapshotStore()
        self._notifications = NotificationCenter()
        self._scheduler = JobScheduler()
        self._initialized = False
        self._closed = False
        self._loop_thread_id: int | None = None
        self._register_jobs()

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def scheduler(self) -> JobScheduler:
        return self._scheduler

    @property
    def notifications(self) -> tuple[NotificationItem, ...]:
        return self._notifications.items

    async def init(self) -> None:
        """Arm all jobs and run the initial version check.

        Returns once the initial version check has finished (successfully or
        not). Calling ``init`` twice, or after ``close``, is a no-op.
        """
        if self._initialized or self._closed:
            logger.warning("init ignored initialized=%s closed=%s", self._initialized, self._closed)
            return
        self._initialized = True
        self._loop_thread_id = threading.get_ident()
        logger.info(
            "Starting reporting process=%s version=%s enabled=%s",
            self.process_name,
            self.version,
            self._config.enabled,
        )
        tasks = self._scheduler.start()
        if tasks:
            await asyncio.gather(*tasks)

    def close(self) -> None:
        """Stop scheduling. In-flight requests are not interrupted."""
        if self._closed:
            return
        logger.info("Closing...")
        self._closed = True
        self._scheduler.close()

    def accept_error(self, error: Any) -> None:
        """Record an error; the first one since the last flush is reported right away.

        Errors are dropped when the error report job is disabled, since
        nothing would ever drain them.
        """
        job = self._scheduler.get_job(JobName.REPORT_ERROR)
        if job is None or not job.enabled:
            return
        if self._errors.accept(error):
            self._trigger_error_flush()

    def accept_counters(self, value: Any) -> None:
        """Replace the counters snapshot sent by the counters report."""
        self._snapshots.set_counters(value)

    def accept_metrics(self, value: Any) -> None:
        """Replace the metrics snapshot sent by the metrics report."""
        self._snapshots.set_metrics(value)

    def on_notifications_changed(self, listener: NotificationListener) -> None:
        """Subscribe *listener*; it is called immediately with the current notifications."""
        self._notifications.subscribe(listener)

    async def submit_feedback(self, feedback_id: str, answers: Any) -> bool:
        """Send answers to a feedback request.

        Returns False without sending when reporting is disabled or the client
        is closed.

        Raises:
            ReporterError: If the collector request fails.
        """
        if self._reporter is None or self._closed:
            logger.info("Feedback not sent feedback_id=%s enabled=%s closed=%s", feedback_id, self.enabled, self._closed)
            return False
        data = {"id": self._config.identity, "feedbackId": feedback_id, "answers": answers}
        await self._reporter.post("feedback", data)
        return True

    async def wait_for_idle(self, timeout_seconds: float = 10.0) -> None:
        """Wait for in-flight job executions and async listener results."""
        await self._scheduler.wait_for_all_tasks(timeout_seconds)
        await self._notifications.wait_for_deliveries()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _register_jobs(self) -> None:
        bodies = {
            JobName.VERSION_CHECK: self._check_version,
            JobName.REPORT_ERROR: self._report_errors,
            JobName.REPORT_COUNTERS: self._report_counters,
            JobName.REPORT_METRICS: self._report_metrics,
        }
        for name, body in bodies.items():
            settings = self._config.job(name)
            self._scheduler.register(
                JobDescriptor(
                    name=name,
                    interval_seconds=settings.interval_seconds,
                    body=body,
                    enabled=settings.enabled and self._reporter is not None,
                    run_immediately_on_init=name is JobName.VERSION_CHECK,
                    pre_arm_hook=self._errors.reset_latch if name is JobName.REPORT_ERROR else None,
                )
            )

    def _trigger_error_flush(self) -> None:
        loop = self._scheduler.loop
        if loop is None or self._closed:
            return
        if self._loop_thread_id == threading.get_ident():
            self._scheduler.run_now(JobName.REPORT_ERROR)
            return
        try:
            loop.call_soon_threadsafe(self._scheduler.run_now, JobName.REPORT_ERROR)
        except RuntimeError:
            logger.warning("Event loop closed, error flush not triggered")

    # ------------------------------------------------------------------
    # Job bodies
    # ------------------------------------------------------------------

    def _base_payload(self) -> dict[str, Any]:
        return {"id": self._config.identity, "process": self.process_name}

    async def _check_version(self) -> None:
        assert self._reporter is not None
        data = self._base_payload()
        data["version"] = self.version
        response = await self._reporter.post("version", data)
        self._notifications.replace(parse_notifications(response))

    def _report_errors(self) -> Coroutine[Any, Any, None] | None:
        # Drained synchronously so errors accepted after this point form the next batch.
        batch = self._errors.drain()
        if not batch:
            return None
        payloads = [self._error_payload(record) for record in batch]
        return self._send_serially("error", payloads)

    def _error_payload(self, record: ErrorRecord) -> dict[str, Any]:
        data = self._base_payload()
        data["version"] = self.version
        data["error"] = record.signature
        data["count"] = record.count
        return data

    async def _send_serially(self, kind: str, payloads: list[dict[str, Any]]) -> None:
        assert self._reporter is not None
        for data in payloads:
            await self._reporter.post(kind, data)

    async def _report_counters(self) -> None:
        assert self._reporter is not None
        data = self._base_payload()
        data["counters"] = self._snapshots.counters
        await self._reporter.post("counters", data)

    async def _report_metrics(self) -> None:
        assert self._reporter is not None
        data = self._base_payload()
        data["metrics"] = self._snapshots.metrics
        await self._reporter.post("metrics", data)
