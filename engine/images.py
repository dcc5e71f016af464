import asyncio
import time

import docker
import structlog

from core.config import settings
from engine.errors import DOCKER_ERRORS, ImageUnavailable, UnsupportedLanguage
from schemas.code import Language

logger = structlog.get_logger(__name__)


def connect_docker(base_url: str | None = None, max_retries: int | None = None) -> docker.DockerClient:
    """Build the process-wide client, waiting for a daemon that may still be booting."""
    base_url = base_url or settings.DOCKER_HOST
    max_retries = max_retries or settings.DOCKER_CONNECT_RETRIES

    for i in range(max_retries):
        try:
            logger.info("docker.connect", attempt=i + 1, max_retries=max_retries)
            if base_url:
                client = docker.DockerClient(base_url=base_url, timeout=10)
            else:
                client = docker.from_env(timeout=10)
            client.ping()
            logger.info("docker.connected")
            return client
        except DOCKER_ERRORS:
            if i == max_retries - 1:
                logger.error("docker.unreachable", attempts=max_retries)
                raise
            # wait longer as attempts increase (2s, 4s, 6s...)
            time.sleep(min(i * 2, 10) + 2)

    raise docker.errors.DockerException("could not connect to Docker daemon")


def image_for_language(language: str) -> str:
    try:
        return settings.LANG_IMAGE[Language(language).value]
    except (ValueError, KeyError):
        raise UnsupportedLanguage(language)


class ImageProvisioner:
    def __init__(self, client: docker.DockerClient):
        self.client = client

    def _inspect(self, image: str) -> bool:
        try:
            self.client.images.get(image)
            return True
        except docker.errors.ImageNotFound:
            return False

    def _pull(self, image: str) -> None:
        logger.info("image.pull.start", image=image)
        started = time.perf_counter()
        try:
            self.client.images.pull(image)
        except DOCKER_ERRORS as e:
            logger.error("image.pull.failed", image=image, error=str(e))
            raise ImageUnavailable(image, str(e)) from e
        logger.info("image.pull.done", image=image, seconds=round(time.perf_counter() - started, 2))

    async def is_present(self, image: str) -> bool:
        return await asyncio.to_thread(self._inspect, image)

    async def ensure_available(self, image: str) -> None:
        # pulls can be slow; callers must not wrap this in a tight timeout
        if await self.is_present(image):
            return
        await asyncio.to_thread(self._pull, image)

    async def pull(self, image: str) -> bool:
        """Pull `image` if absent. Returns True when a pull actually happened."""
        if await self.is_present(image):
            return False
        await asyncio.to_thread(self._pull, image)
        return True
