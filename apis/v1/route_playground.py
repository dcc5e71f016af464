from fastapi import APIRouter, Depends, HTTPException, Query, status

from apis.deps import get_jobs, to_http_error
from engine.errors import SandboxError
from engine.jobs import JobOrchestrator
from schemas.code import CodeRequest, PollResponse, SubmitResponse

router = APIRouter()


@router.post("/run", response_model=SubmitResponse, response_model_by_alias=True)
async def submit_code(code_request: CodeRequest, jobs: JobOrchestrator = Depends(get_jobs)) -> SubmitResponse:
    job_id = jobs.submit(code_request.language, code_request.code)
    return SubmitResponse(job_id=job_id)


@router.get("/run", response_model=PollResponse, response_model_exclude_none=True)
async def get_status(job_id: str = Query(alias="jobId"), jobs: JobOrchestrator = Depends(get_jobs)) -> PollResponse:
    try:
        result = jobs.poll(job_id)
    except SandboxError as e:
        raise to_http_error(e)

    if result.error is not None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
    return result
