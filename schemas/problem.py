from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Param(BaseModel):
    name: str
    type: str


class TestCase(BaseModel):
    """One input row. `input` is keyed by parameter name or positional."""

    __test__ = False
    model_config = ConfigDict(populate_by_name=True)

    input: dict[str, Any] | list[Any] = Field(default_factory=dict)

    def values_for(self, params: list[Param]) -> list[Any]:
        # missing parameters come back as None so every call keeps its arity
        if isinstance(self.input, dict):
            return [self.input.get(p.name) for p in params]
        values = list(self.input[: len(params)])
        return values + [None] * (len(params) - len(values))


class ProblemSpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    function_name: str = Field(alias="functionName")
    params: list[Param] = Field(default_factory=list)
    output_type: str = Field(alias="outputType")
    test_cases: list[TestCase] = Field(default_factory=list, alias="testCases")
    custom_checker: bool = Field(default=False, alias="customChecker")
    marker_source: str | None = Field(default=None, alias="markerSource")

    @field_validator("function_name")
    @classmethod
    def check_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"functionName must be an identifier, got {v!r}")
        return v
