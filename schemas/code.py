from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Language(str, Enum):
    CPP = "cpp"
    JAVA = "java"
    CSHARP = "csharp"
    PYTHON = "python"


JobStatus = Literal["pending", "preparing", "running", "completed", "error"]


class CodeRequest(BaseModel):
    language: str
    code: str


class CodeResult(BaseModel):
    output: str | None = None
    logs: str = ""
    exit_code: int | None = None


class SubmitResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(alias="jobId")


class PollResponse(BaseModel):
    ready: bool
    status: JobStatus | None = None
    timeout: bool | None = None
    error: str | None = None
    output: str | None = None
    logs: str | None = None
    exit_code: int | None = None


class ImageRequest(BaseModel):
    language: str


class ImageStatus(BaseModel):
    present: bool
    image: str
    language: str | None = None
    pulled: bool | None = None


class JudgeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    language: str
    code: str
    test_cases: list[dict[str, Any]] | None = Field(default=None, alias="testCases")


class MarkerResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    actual_answer: str = Field(alias="actualAnswer")
    correct_answer: str = Field(alias="correctAnswer")
    is_correct: bool = Field(alias="isCorrect")


class JudgeResponse(BaseModel):
    results: list[MarkerResult]


class Job(BaseModel):
    id: str
    language: str
    status: JobStatus = "pending"
    created_at: datetime
    finished_at: datetime | None = None
    result: CodeResult | None = None
    timeout: bool = False
    error: str | None = None

    @property
    def finished(self) -> bool:
        return self.status in ("completed", "error")
