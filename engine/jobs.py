import asyncio
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

import docker
import structlog

from core.config import settings
from engine.errors import ExecutionTimeout, JobNotFound, SandboxError
from engine.runners.playground import PlaygroundRunner, playground_runner_for
from schemas.code import CodeResult, Job, PollResponse

logger = structlog.get_logger(__name__)


class JobOrchestrator:
    """Registry and executor for playground jobs.

    A job moves pending -> preparing -> running -> completed|error and is
    only written by its own background task; it is frozen once finished.
    Finished jobs are dropped after `ttl_seconds`, and the registry never
    holds more than `max_entries` jobs unless they are all still running.
    """

    def __init__(
        self,
        client: docker.DockerClient,
        ttl_seconds: int | None = None,
        max_entries: int | None = None,
        runner_factory: Callable[[str], type[PlaygroundRunner]] = playground_runner_for,
    ):
        self.client = client
        self.ttl = timedelta(seconds=ttl_seconds if ttl_seconds is not None else settings.JOB_TTL_SECONDS)
        self.max_entries = max_entries or settings.JOB_MAX_ENTRIES
        self.runner_factory = runner_factory
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()
        self._tasks: set[asyncio.Task] = set()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def submit(self, language: str, code: str) -> str:
        """Register a job and start it in the background. Must run inside the event loop."""
        now = datetime.now(timezone.utc)
        job_id = str(uuid4())
        with self._lock:
            self._evict(now)
            self._jobs[job_id] = Job(id=job_id, language=language, status="pending", created_at=now)

        task = asyncio.create_task(self.run_background_task(job_id, language, code))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("job.submitted", job_id=job_id, language=language)
        return job_id

    def get(self, job_id: str) -> Job:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or self._expired(job, datetime.now(timezone.utc)):
                raise JobNotFound(job_id)
            return job.model_copy()

    def poll(self, job_id: str) -> PollResponse:
        job = self.get(job_id)
        if not job.finished:
            return PollResponse(ready=False, status=job.status)
        if job.timeout:
            return PollResponse(ready=True, timeout=True)
        if job.status == "error":
            return PollResponse(ready=True, error=job.error or "Execution failed")
        result = job.result or CodeResult()
        return PollResponse(ready=True, output=result.output, logs=result.logs, exit_code=result.exit_code)

    async def run_background_task(self, job_id: str, language: str, code: str) -> None:
        try:
            runner = self.runner_factory(language)(self.client, code)
            self._update(job_id, status="preparing")
            await runner.compile()
            self._update(job_id, status="running")
            result = await runner.run()
        except ExecutionTimeout:
            self._update(job_id, status="completed", timeout=True)
        except SandboxError as e:
            self._update(job_id, status="error", error=f"Execution failed: details: {e.message}")
        except asyncio.CancelledError:
            self._update(job_id, status="error", error="Execution failed: details: cancelled")
            raise
        except Exception as e:
            logger.exception("job.crashed", job_id=job_id)
            self._update(job_id, status="error", error=f"Execution failed: details: {e}")
        else:
            self._update(job_id, status="completed", result=result)

    def prune(self) -> int:
        with self._lock:
            return self._evict(datetime.now(timezone.utc))

    async def shutdown(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _update(self, job_id: str, **changes) -> None:
        with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.finished:
                return
            for key, value in changes.items():
                setattr(job, key, value)
            if job.finished:
                job.finished_at = datetime.now(timezone.utc)
        logger.info("job.status", job_id=job_id, status=changes.get("status"), timeout=changes.get("timeout", False))

    def _expired(self, job: Job, now: datetime) -> bool:
        return job.finished and job.finished_at is not None and now - job.finished_at > self.ttl

    def _evict(self, now: datetime) -> int:
        # caller holds the lock
        stale = [job_id for job_id, job in self._jobs.items() if self._expired(job, now)]
        overflow = len(self._jobs) - len(stale) - self.max_entries + 1
        if overflow > 0:
            finished = sorted(
                (job for job in self._jobs.values() if job.finished and job.id not in stale),
                key=lambda job: job.created_at,
            )
            stale.extend(job.id for job in finished[:overflow])
        for job_id in stale:
            del self._jobs[job_id]
        return len(stale)
