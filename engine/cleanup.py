import asyncio
import time

import docker
import structlog

from core.config import settings
from engine.errors import DOCKER_ERRORS

logger = structlog.get_logger(__name__)


class CleanupSweeper:
    """Periodically removes labeled sandboxes that outlived the execution budget.

    Anything older than `timeout + margin` seconds is assumed orphaned, e.g.
    left behind by a crashed worker, and is stopped and force-removed.
    """

    def __init__(
        self,
        client: docker.DockerClient,
        interval_seconds: int | None = None,
        timeout_seconds: int | None = None,
        margin_seconds: int | None = None,
        label: str | None = None,
    ):
        self.client = client
        self.interval = interval_seconds or settings.CLEANUP_INTERVAL_SECONDS
        self.max_age = (timeout_seconds or settings.EXECUTION_TIMEOUT_SECONDS) + (
            margin_seconds if margin_seconds is not None else settings.CLEANUP_MARGIN_SECONDS
        )
        self.label = label or settings.SANDBOX_LABEL
        self._task: asyncio.Task | None = None

    def _created_at(self, container) -> float | None:
        created = container.attrs.get("Created")
        # sparse listings report epoch seconds
        if isinstance(created, (int, float)):
            return float(created)
        return None

    def _remove(self, container) -> None:
        if container.attrs.get("State") == "running":
            container.stop(timeout=1)
        container.remove(force=True)

    def _sweep(self, now: float) -> list[str]:
        try:
            containers = self.client.containers.list(
                all=True, sparse=True, filters={"label": f"{self.label}=true"}
            )
        except DOCKER_ERRORS as e:
            logger.error("cleanup.list.failed", error=str(e))
            return []

        removed = []
        for container in containers:
            created = self._created_at(container)
            if created is None or now - created <= self.max_age:
                continue
            try:
                self._remove(container)
            except docker.errors.NotFound:
                continue
            except DOCKER_ERRORS as e:
                logger.warning("cleanup.remove.failed", container=container.id, error=str(e))
                continue
            removed.append(container.id)
        return removed

    async def sweep_once(self) -> list[str]:
        removed = await asyncio.to_thread(self._sweep, time.time())
        if removed:
            logger.info("cleanup.swept", removed=len(removed), containers=removed)
        return removed

    async def _loop(self) -> None:
        while True:
            try:
                await self.sweep_once()
            except Exception:
                logger.exception("cleanup.sweep.crashed")
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._loop())
            logger.info("cleanup.started", interval=self.interval, max_age=self.max_age)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("cleanup.stopped")
