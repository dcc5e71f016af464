import docker
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from apis.deps import get_docker, get_problems, to_http_error
from engine.errors import SandboxError
from engine.judge import judge_submission
from engine.problems import ProblemStore
from schemas.code import JudgeRequest, JudgeResponse
from schemas.problem import TestCase

router = APIRouter()


@router.post("/{problem_id}", response_model=JudgeResponse, response_model_by_alias=True)
async def judge(
    problem_id: str,
    request: JudgeRequest,
    client: docker.DockerClient = Depends(get_docker),
    problems: ProblemStore = Depends(get_problems),
) -> JudgeResponse:
    try:
        test_cases = None
        if request.test_cases is not None:
            test_cases = [TestCase.model_validate(case) for case in request.test_cases]
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        problem = problems.load(problem_id)
        results = await judge_submission(client, problem, request.language, request.code, test_cases)
    except SandboxError as e:
        raise to_http_error(e)
    return JudgeResponse(results=results)
