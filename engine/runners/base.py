from enum import Enum
from typing import Any

import docker
import structlog

from core.config import settings
from engine.errors import CompileFailure, ExecutionTimeout, RunnerStateError
from engine.handle import ExecutionOutcome, SandboxHandle, SourceBundle
from engine.images import ImageProvisioner, image_for_language
from schemas.code import Language

logger = structlog.get_logger(__name__)


def shell(command: str) -> list[str]:
    return ["/bin/sh", "-c", command]


class RunnerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    COMPILING = "compiling"
    COMPILED = "compiled"
    RUNNING = "running"
    FINISHED = "finished"
    FAILED = "failed"


class SandboxRunner:
    """Two-phase compile/run lifecycle around a single sandbox.

    `compile()` provisions the image, creates the sandbox, uploads the source
    bundle and runs the build step, if the language has one. `run()` executes
    the program under the execution budget. The sandbox is released when
    either phase fails and always after `run()`, so one runner serves
    exactly one compile+run pair.
    """

    language: Language
    compile_command: list[str] | None = None
    run_command: list[str] = []
    environment: dict[str, str] = {}
    compile_failure_prefix = ""

    def __init__(self, client: docker.DockerClient, timeout_seconds: int | None = None):
        self.client = client
        self.images = ImageProvisioner(client)
        self.timeout_seconds = timeout_seconds or settings.EXECUTION_TIMEOUT_SECONDS
        self.state = RunnerState.UNINITIALIZED
        self.sandbox: SandboxHandle | None = None
        self.compile_outcome: ExecutionOutcome | None = None

    @property
    def name(self) -> str:
        return type(self).__name__

    def build_bundle(self) -> SourceBundle:
        raise NotImplementedError

    def interpret(self, outcome: ExecutionOutcome) -> Any:
        raise NotImplementedError

    async def compile(self) -> None:
        if self.state is not RunnerState.UNINITIALIZED:
            raise RunnerStateError(f"{self.name}: compile() already called (state={self.state.value})")
        self.state = RunnerState.COMPILING
        try:
            bundle = self.build_bundle()
            image = image_for_language(self.language)
            await self.images.ensure_available(image)

            self.sandbox = SandboxHandle(self.client)
            await self.sandbox.create(image)
            await self.sandbox.upload_bundle(bundle)

            if self.compile_command:
                # the build is not bounded by the execution budget
                outcome = await self.sandbox.exec(self.compile_command, environment=self.environment or None)
                self.compile_outcome = outcome
                if outcome.timed_out:
                    raise ExecutionTimeout()
                if outcome.exit_code != 0:
                    raise CompileFailure(self.compile_failure_prefix + outcome.message)
        except BaseException as e:
            self.state = RunnerState.FAILED
            logger.info("runner.compile.failed", runner=self.name, error=type(e).__name__)
            await self.release()
            raise
        self.state = RunnerState.COMPILED
        logger.debug("runner.compiled", runner=self.name, container=self.sandbox.id)

    async def run(self) -> Any:
        if self.state is not RunnerState.COMPILED or self.sandbox is None:
            raise RunnerStateError(f"{self.name}: not compiled. Call compile() first.")
        self.state = RunnerState.RUNNING
        try:
            outcome = await self.sandbox.exec(
                self.run_command,
                timeout_seconds=self.timeout_seconds,
                environment=self.environment or None,
            )
            result = self.interpret(outcome)
        except BaseException as e:
            self.state = RunnerState.FAILED
            logger.info("runner.run.failed", runner=self.name, error=type(e).__name__)
            raise
        finally:
            await self.release()
        self.state = RunnerState.FINISHED
        return result

    async def execute(self) -> Any:
        await self.compile()
        return await self.run()

    async def release(self) -> None:
        sandbox, self.sandbox = self.sandbox, None
        if sandbox is not None:
            await sandbox.release()
