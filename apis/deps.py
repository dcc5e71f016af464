import docker
from fastapi import HTTPException, Request, status

from engine.errors import (
    CompileFailure,
    ExecutionTimeout,
    ImageUnavailable,
    InvalidTestCase,
    JobNotFound,
    ProblemNotFound,
    RuntimeFailure,
    SandboxError,
    SandboxLifecycleFailure,
    UnexpectedStderr,
    UnsupportedLanguage,
    UnsupportedType,
)
from engine.jobs import JobOrchestrator
from engine.problems import ProblemStore


def get_docker(request: Request) -> docker.DockerClient:
    return request.app.state.docker


def get_jobs(request: Request) -> JobOrchestrator:
    return request.app.state.jobs


def get_problems(request: Request) -> ProblemStore:
    return request.app.state.problems


def to_http_error(e: SandboxError) -> HTTPException:
    if isinstance(e, (JobNotFound, ProblemNotFound)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    if isinstance(e, (UnsupportedLanguage, UnsupportedType, InvalidTestCase)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    if isinstance(e, (CompileFailure, RuntimeFailure, ExecutionTimeout, UnexpectedStderr)):
        return HTTPException(
            status_code=422,
            detail={"kind": e.kind, "message": e.message},
        )
    if isinstance(e, (ImageUnavailable, SandboxLifecycleFailure)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)
