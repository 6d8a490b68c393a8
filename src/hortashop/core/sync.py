"""Best-effort background sync with bounded retry.

Side channels that must not block the user (push token registration,
notification deletes) are submitted here instead of being fired and
forgotten.  Jobs run on a worker thread, off the caller's thread; with
``background=False`` nothing runs until the application calls
``process()``.  Each job is retried with exponential backoff on
``NetworkError`` up to ``max_attempts``; any other error fails the job at
once.  Job state is observable through ``jobs`` / ``failed_jobs`` and
failed jobs can be re-queued with ``retry_failed``.
"""

from __future__ import annotations

import threading
import time
import uuid
from collections import deque
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Callable, Deque, List, Optional, Tuple, Type

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from hortashop.config import settings
from hortashop.core.exceptions import NetworkError

logger = structlog.get_logger(__name__)


class SyncState(StrEnum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(eq=False)
class SyncJob:
    name: str
    action: Callable[[], Any]
    on_success: Optional[Callable[[Any], None]] = None
    on_failure: Optional[Callable[[BaseException], None]] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    state: SyncState = SyncState.PENDING
    attempts: int = 0
    last_error: Optional[BaseException] = None
    result: Any = None
    _finished: threading.Event = field(
        default_factory=threading.Event, repr=False
    )

    @property
    def done(self) -> bool:
        return self.state is not SyncState.PENDING

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the job succeeded or failed; ``False`` on timeout."""
        return self._finished.wait(timeout)


class BackgroundSyncQueue:
    """FIFO queue of retryable side-channel jobs."""

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        backoff_base: Optional[float] = None,
        backoff_max: Optional[float] = None,
        retry_on: Tuple[Type[BaseException], ...] = (NetworkError,),
        sleep: Callable[[float], None] = time.sleep,
        background: bool = True,
    ) -> None:
        self.max_attempts = max_attempts or settings.SYNC_MAX_ATTEMPTS
        self.backoff_base = (
            settings.SYNC_BACKOFF_BASE if backoff_base is None else backoff_base
        )
        self.backoff_max = settings.SYNC_BACKOFF_MAX if backoff_max is None else backoff_max
        self.retry_on = retry_on
        self.background = background
        self._sleep = sleep
        self._pending: Deque[SyncJob] = deque()
        self._jobs: List[SyncJob] = []
        self._wakeup = threading.Condition()
        self._worker: Optional[threading.Thread] = None
        self._closed = False

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def jobs(self) -> List[SyncJob]:
        with self._wakeup:
            return list(self._jobs)

    @property
    def pending_jobs(self) -> List[SyncJob]:
        with self._wakeup:
            return list(self._pending)

    @property
    def failed_jobs(self) -> List[SyncJob]:
        return [job for job in self.jobs if job.state is SyncState.FAILED]

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number *attempt* (1-based)."""
        return min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit(
        self,
        name: str,
        action: Callable[[], Any],
        *,
        on_success: Optional[Callable[[Any], None]] = None,
        on_failure: Optional[Callable[[BaseException], None]] = None,
    ) -> SyncJob:
        job = SyncJob(
            name=name, action=action, on_success=on_success, on_failure=on_failure
        )
        with self._wakeup:
            self._jobs.append(job)
        logger.info("sync.job_submitted", job=name, job_id=job.id)
        self._enqueue(job)
        return job

    def process(self) -> List[SyncJob]:
        """Run every pending job to completion on the calling thread."""
        processed = []
        while True:
            with self._wakeup:
                if not self._pending:
                    return processed
                job = self._pending.popleft()
            self._run(job)
            processed.append(job)

    def retry_failed(self) -> List[SyncJob]:
        """Re-queue failed jobs with a fresh attempt budget."""
        failed = self.failed_jobs
        for job in failed:
            job.state = SyncState.PENDING
            job.attempts = 0
            job.last_error = None
            job._finished.clear()
            self._enqueue(job)
        return failed

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until every submitted job is done; ``False`` on timeout."""
        deadline = None if timeout is None else time.monotonic() + timeout
        for job in self.jobs:
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            if not job.wait(remaining):
                return False
        return True

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop the worker once the queued jobs have been drained."""
        with self._wakeup:
            self._closed = True
            self._wakeup.notify_all()
            worker = self._worker
        if worker is not None:
            worker.join(timeout)
        logger.info("sync.queue_closed", pending=len(self.pending_jobs))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _enqueue(self, job: SyncJob) -> None:
        with self._wakeup:
            self._pending.append(job)
            if not self.background or self._closed:
                return
            if self._worker is None or not self._worker.is_alive():
                self._worker = threading.Thread(
                    target=self._drain, name="hortashop-sync", daemon=True
                )
                self._worker.start()
            self._wakeup.notify()

    def _drain(self) -> None:
        while True:
            with self._wakeup:
                while not self._pending and not self._closed:
                    self._wakeup.wait()
                if not self._pending:
                    return
                job = self._pending.popleft()
            self._run(job)

    def _run(self, job: SyncJob) -> None:
        log = logger.bind(job=job.name, job_id=job.id)

        def _log_retry(retry_state) -> None:
            log.warning(
                "sync.job_retrying",
                attempt=retry_state.attempt_number,
                delay=retry_state.next_action.sleep,
                error=str(retry_state.outcome.exception()),
            )

        retrying = Retrying(
            retry=retry_if_exception_type(self.retry_on),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.backoff_base, max=self.backoff_max),
            sleep=self._sleep,
            before_sleep=_log_retry,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    job.attempts = attempt.retry_state.attempt_number
                    job.result = job.action()
        except Exception as exc:
            job.last_error = exc
            self._fail(job, exc, log)
            return

        job.state = SyncState.SUCCEEDED
        log.info("sync.job_succeeded", attempts=job.attempts)
        try:
            if job.on_success is not None:
                job.on_success(job.result)
        finally:
            job._finished.set()

    @staticmethod
    def _fail(job: SyncJob, exc: BaseException, log) -> None:
        job.state = SyncState.FAILED
        log.error("sync.job_failed", attempts=job.attempts, error=str(exc))
        try:
            if job.on_failure is not None:
                job.on_failure(exc)
        finally:
            job._finished.set()
