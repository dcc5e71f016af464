import docker
import requests


class SandboxError(Exception):
    """Base class for everything the execution engine raises."""

    kind = "system"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ImageUnavailable(SandboxError):
    kind = "image"

    def __init__(self, image: str, reason: str = ""):
        super().__init__(f"Failed to pull image {image}: {reason}" if reason else f"Failed to pull image {image}")
        self.image = image


class SandboxLifecycleFailure(SandboxError):
    """Container create/start/upload failed."""

    kind = "system"


class CompileFailure(SandboxError):
    kind = "compile"


class RuntimeFailure(SandboxError):
    kind = "runtime"


class ExecutionTimeout(SandboxError):
    kind = "timeout"

    def __init__(self, message: str = "TIMEOUT"):
        super().__init__(message)


class UnexpectedStderr(SandboxError):
    """Exit code was zero but the program wrote to stderr."""

    kind = "stderr"


class RunnerStateError(SandboxError):
    kind = "state"


class UnsupportedLanguage(SandboxError):
    kind = "language"

    def __init__(self, language: str):
        super().__init__(f"{language} is not supported yet")
        self.language = language


class UnsupportedType(SandboxError):
    kind = "type"

    def __init__(self, type_name: str):
        super().__init__(f"Unsupported parameter type: {type_name}")
        self.type_name = type_name


class ProblemNotFound(SandboxError):
    kind = "not_found"


class JobNotFound(SandboxError):
    kind = "not_found"

    def __init__(self, job_id: str):
        super().__init__("Job not found")
        self.job_id = job_id


class InvalidTestCase(SandboxError):
    """A test-case value cannot be read as its declared parameter type."""

    kind = "input"


# docker-py lets transport errors from requests through unwrapped
DOCKER_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)
