import asyncio
import io
import tarfile
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Mapping, Protocol

import docker
import structlog

from core.config import settings
from engine.errors import DOCKER_ERRORS, SandboxLifecycleFailure

logger = structlog.get_logger(__name__)

# exit status of coreutils `timeout` when the budget expires
TIMEOUT_EXIT_CODE = 124

KEEP_ALIVE_COMMAND = ["sh", "-c", "tail -f /dev/null"]


@dataclass(frozen=True)
class SourceBundle:
    """Files uploaded together into a sandbox's working directory."""

    files: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "files", MappingProxyType(dict(self.files)))

    def to_tar(self) -> bytes:
        buf = io.BytesIO()
        with tarfile.open(fileobj=buf, mode="w") as tar:
            for name, content in self.files.items():
                data = content.encode("utf-8")
                info = tarfile.TarInfo(name=name)
                info.size = len(data)
                info.mode = 0o644
                info.mtime = int(time.time())
                tar.addfile(info, io.BytesIO(data))
        return buf.getvalue()


@dataclass
class ExecutionOutcome:
    exit_code: int
    stdout_bytes: bytes = b""
    stderr_bytes: bytes = b""

    @property
    def stdout(self) -> str:
        return self.stdout_bytes.decode("utf-8", errors="replace")

    @property
    def stderr(self) -> str:
        return self.stderr_bytes.decode("utf-8", errors="replace")

    @property
    def timed_out(self) -> bool:
        return self.exit_code == TIMEOUT_EXIT_CODE

    @property
    def message(self) -> str:
        return self.stderr or self.stdout


class OutputSink(Protocol):
    def write(self, chunk: bytes) -> None: ...


class BufferSink:
    def __init__(self):
        self._buf = bytearray()

    def write(self, chunk: bytes) -> None:
        self._buf.extend(chunk)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def wrap_with_timeout(command: list[str], timeout_seconds: int | None) -> list[str]:
    if timeout_seconds is None:
        return list(command)
    return ["timeout", str(timeout_seconds), *command]


class SandboxHandle:
    """One container, created for exactly one job and always released."""

    def __init__(self, client: docker.DockerClient, label: str | None = None):
        self.client = client
        self.label = label or settings.SANDBOX_LABEL
        self.container = None
        self.working_dir = settings.SANDBOX_WORKDIR
        self._uploaded = False

    @property
    def id(self) -> str | None:
        return self.container.id if self.container is not None else None

    def _create(self, image: str, command: list[str], working_dir: str):
        container = self.client.containers.create(
            image=image,
            command=command,
            working_dir=working_dir,
            labels={self.label: "true"},
            detach=True,
            tty=False,
            mem_limit=settings.SANDBOX_MEMORY_LIMIT,
            pids_limit=settings.SANDBOX_PIDS_LIMIT,
            network_disabled=settings.SANDBOX_NETWORK_DISABLED,
        )
        # keep the reference before start so release() can remove a half-started container
        self.container = container
        container.start()

    async def create(self, image: str, command: list[str] | None = None, working_dir: str | None = None) -> None:
        if self.container is not None:
            raise SandboxLifecycleFailure("sandbox already created")
        self.working_dir = working_dir or settings.SANDBOX_WORKDIR
        try:
            await asyncio.to_thread(self._create, image, command or KEEP_ALIVE_COMMAND, self.working_dir)
        except DOCKER_ERRORS as e:
            raise SandboxLifecycleFailure(f"Failed to start sandbox from {image}: {e}") from e
        logger.info("sandbox.created", container=self.id, image=image)

    async def upload_bundle(self, bundle: SourceBundle) -> None:
        if self.container is None:
            raise SandboxLifecycleFailure("sandbox not created")
        if self._uploaded:
            raise SandboxLifecycleFailure("sandbox already holds a source bundle")
        archive = bundle.to_tar()
        try:
            ok = await asyncio.to_thread(self.container.put_archive, self.working_dir, archive)
        except DOCKER_ERRORS as e:
            raise SandboxLifecycleFailure(f"Failed to upload sources: {e}") from e
        if ok is False:
            raise SandboxLifecycleFailure("Failed to upload sources")
        self._uploaded = True
        logger.debug("sandbox.uploaded", container=self.id, files=sorted(bundle.files))

    def _exec(
        self,
        command: list[str],
        environment: dict | None,
        stdout: OutputSink,
        stderr: OutputSink,
        on_start: Callable[[], None],
    ) -> int:
        on_start()
        api = self.client.api
        exec_id = api.exec_create(
            self.container.id,
            command,
            stdout=True,
            stderr=True,
            workdir=self.working_dir,
            environment=environment,
        )["Id"]
        # the transport multiplexes both streams; demux splits them by frame header
        for out_chunk, err_chunk in api.exec_start(exec_id, stream=True, demux=True):
            if out_chunk:
                stdout.write(out_chunk)
            if err_chunk:
                stderr.write(err_chunk)
        return api.exec_inspect(exec_id)["ExitCode"]

    async def exec(
        self,
        command: list[str],
        timeout_seconds: int | None = None,
        environment: dict | None = None,
    ) -> ExecutionOutcome:
        if self.container is None:
            raise SandboxLifecycleFailure("sandbox not created")

        wrapped = wrap_with_timeout(command, timeout_seconds)
        stdout, stderr = BufferSink(), BufferSink()
        loop = asyncio.get_running_loop()
        started = asyncio.Event()
        task = asyncio.ensure_future(
            asyncio.to_thread(
                self._exec, wrapped, environment, stdout, stderr, lambda: loop.call_soon_threadsafe(started.set)
            )
        )
        try:
            if timeout_seconds is None:
                exit_code = await task
            else:
                # the budget starts once a worker thread picks the exec up, not while it is queued
                await started.wait()
                exit_code = await asyncio.wait_for(task, timeout=timeout_seconds + settings.EXEC_GRACE_SECONDS)
        except asyncio.CancelledError:
            task.cancel()
            raise
        except asyncio.TimeoutError:
            # the in-sandbox timer did not fire; report it the same way
            logger.warning("sandbox.exec.hung", container=self.id, command=command)
            exit_code = TIMEOUT_EXIT_CODE
        except DOCKER_ERRORS as e:
            raise SandboxLifecycleFailure(f"Failed to execute in sandbox: {e}") from e

        if exit_code is None:
            exit_code = -1
        return ExecutionOutcome(exit_code, stdout.getvalue(), stderr.getvalue())

    def _release(self) -> None:
        container = self.container
        try:
            container.reload()
            if container.status == "running":
                container.stop(timeout=1)
        except docker.errors.NotFound:
            return
        except Exception as e:
            logger.warning("sandbox.stop.failed", container=container.id, error=str(e))
        try:
            container.remove(force=True)
        except docker.errors.NotFound:
            pass
        except Exception as e:
            logger.warning("sandbox.remove.failed", container=container.id, error=str(e))

    async def release(self) -> None:
        if self.container is None:
            return
        container_id = self.id
        try:
            await asyncio.to_thread(self._release)
        except Exception as e:
            logger.warning("sandbox.release.failed", container=container_id, error=str(e))
        finally:
            self.container = None
        logger.info("sandbox.released", container=container_id)
