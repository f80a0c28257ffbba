"""Fixed-delay job scheduler.

Each registered job owns one descriptor and one runtime state. A job is
either idle, scheduled (one pending timer) or running (one in-flight
execution). Execution is fixed-delay: the next timer is armed only after the
previous run has finished, so runs of the same job never overlap.

Job bodies are plain callables that may return an awaitable. The synchronous
part of a body runs inline when the job starts, which lets a body snapshot
its input before any other code on the loop gets a chance to mutate it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from worldvious.config.models import JobName

logger = logging.getLogger(__name__)

JobBody = Callable[[], Awaitable[Any] | None]


class JobState(str, Enum):
    """Observable lifecycle state of a job."""

    IDLE = "idle"
    SCHEDULED = "scheduled"
    RUNNING = "running"


@dataclass(frozen=True)
class JobDescriptor:
    """Static description of a recurring job."""

    name: JobName
    interval_seconds: float
    body: JobBody
    enabled: bool = True
    run_immediately_on_init: bool = False
    pre_arm_hook: Callable[[], None] | None = None

    def __post_init__(self) -> None:
        if isinstance(self.interval_seconds, bool) or not isinstance(self.interval_seconds, int | float):
            raise ValueError("interval_seconds must be a number")
        if self.interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")


@dataclass
class JobRuntimeState:
    """Mutable per-job state, touched only by the scheduler."""

    running: bool = False
    timer: asyncio.TimerHandle | None = None
    task: asyncio.Task[None] | None = None


class JobScheduler:
    """Arm, run and re-arm named jobs on one event loop."""

    def __init__(self) -> None:
        self._jobs: dict[JobName, JobDescriptor] = {}
        self._runtime: dict[JobName, JobRuntimeState] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False

    @property
    def started(self) -> bool:
        return self._loop is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def loop(self) -> asyncio.AbstractEventLoop | None:
        return self._loop

    def register(self, descriptor: JobDescriptor) -> None:
        """Register a job.

        Raises:
            ValueError: If a job with the same name is already registered.
        """
        if descriptor.name in self._jobs:
            raise ValueError(f"Job '{descriptor.name.value}' is already registered")
        self._jobs[descriptor.name] = descriptor
        self._runtime[descriptor.name] = JobRuntimeState()
        logger.info(
            "Registered job=%s interval_seconds=%s enabled=%s",
            descriptor.name.value,
            descriptor.interval_seconds,
            descriptor.enabled,
        )

    def get_job(self, name: JobName) -> JobDescriptor | None:
        return self._jobs.get(name)

    def list_jobs(self) -> list[JobDescriptor]:
        return list(self._jobs.values())

    def state(self, name: JobName) -> JobState:
        runtime = self._runtime_for(name)
        if runtime.running:
            return JobState.RUNNING
        if runtime.timer is not None:
            return JobState.SCHEDULED
        return JobState.IDLE

    def start(self) -> list[asyncio.Task[None]]:
        """Bind to the running loop, arm every enabled job and start immediate ones.

        Must be called from a coroutine. Returns the tasks of the jobs that
        were started immediately so the caller can await them.
        """
        if self._closed:
            logger.warning("Scheduler is closed, not starting")
            return []
        if self._loop is not None:
            raise RuntimeError("Scheduler already started")
        self._loop = asyncio.get_running_loop()

        for name in self._jobs:
            self._arm(name)

        tasks: list[asyncio.Task[None]] = []
        for job in self._jobs.values():
            if job.run_immediately_on_init:
                task = self.run_now(job.name)
                if task is not None:
                    tasks.append(task)
        return tasks

    def run_now(self, name: JobName) -> asyncio.Task[None] | None:
        """Cancel the pending timer of *name* and execute it immediately.

        Returns the execution task, or None when nothing was started (job
        disabled, scheduler not started or closed, or the job is already
        running and was re-armed instead).

        Raises:
            KeyError: If *name* is not registered.
        """
        job = self._jobs.get(name)
        if job is None:
            raise KeyError(f"Job '{name}' not found")
        if not job.enabled or self._closed or self._loop is None:
            return None
        self._cancel_timer(name)
        return self._execute(name)

    def close(self) -> None:
        """Cancel every pending timer and refuse further arming or runs."""
        self._closed = True
        for name in self._jobs:
            self._cancel_timer(name)
        logger.info("Scheduler closed")

    async def wait_for_all_tasks(self, timeout_seconds: float = 10.0) -> None:
        """Wait for in-flight executions to finish, up to *timeout_seconds*."""
        tasks = [state.task for state in self._runtime.values() if state.task is not None]
        if not tasks:
            return
        await asyncio.wait(tasks, timeout=max(0.1, float(timeout_seconds)))

    def _runtime_for(self, name: JobName) -> JobRuntimeState:
        runtime = self._runtime.get(name)
        if runtime is None:
            raise KeyError(f"Job '{name}' not found")
        return runtime

    def _arm(self, name: JobName) -> None:
        if self._closed or self._loop is None or self._loop.is_closed():
            return
        job = self._jobs[name]
        if not job.enabled:
            return
        runtime = self._runtime[name]
        if runtime.timer is not None:
            return
        if job.pre_arm_hook is not None:
            try:
                job.pre_arm_hook()
            except Exception as exc:
                logger.exception("Pre-arm hook failed job=%s: %s", name.value, exc)
        runtime.timer = self._loop.call_later(job.interval_seconds, self._on_timer, name)
        logger.debug("Armed job=%s delay_seconds=%s", name.value, job.interval_seconds)

    def _cancel_timer(self, name: JobName) -> None:
        runtime = self._runtime[name]
        if runtime.timer is not None:
            runtime.timer.cancel()
            runtime.timer = None

    def _on_timer(self, name: JobName) -> None:
        self._runtime[name].timer = None
        self._execute(name)

    def _execute(self, name: JobName) -> asyncio.Task[None] | None:
        if self._closed or self._loop is None:
            return None
        job = self._jobs[name]
        runtime = self._runtime[name]
        if runtime.running:
            logger.debug("Job still running, re-arming job=%s", name.value)
            self._arm(name)
            return None

        runtime.running = True
        logger.info("Running job=%s", name.value)
        outcome: Awaitable[Any] | None = None
        succeeded = True
        try:
            outcome = job.body()
        except Exception as exc:
            succeeded = False
            logger.exception("Job failed job=%s: %s", name.value, exc)

        task = self._loop.create_task(self._finish(job, outcome, succeeded), name=f"worldvious:{name.value}")
        runtime.task = task
        return task

    async def _finish(self, job: JobDescriptor, outcome: Awaitable[Any] | None, succeeded: bool) -> None:
        runtime = self._runtime[job.name]
        try:
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as exc:
            succeeded = False
            logger.error("Job failed job=%s: %s", job.name.value, exc, exc_info=True)
        finally:
            runtime.running = False
            runtime.task = None
            self._arm(job.name)
        if succeeded:
            logger.info("Completed job=%s", job.name.value)
