from enum import Enum

from engine.drivers import cpp, csharp, java, python
from engine.drivers.types import normalize_type
from engine.errors import InvalidTestCase, UnsupportedLanguage
from schemas.code import Language
from schemas.problem import ProblemSpec, TestCase

MODULES = {
    Language.CPP: cpp,
    Language.JAVA: java,
    Language.CSHARP: csharp,
    Language.PYTHON: python,
}


class DriverMode(str, Enum):
    SOLUTION = "solution"
    JUDGED = "judged"


def helper_sources(language: Language) -> dict[str, str]:
    return dict(MODULES[language].HELPER_FILES)


def validate_problem(problem: ProblemSpec) -> None:
    """Fail early, before any container exists, on types no driver can express."""
    normalize_type(problem.output_type)
    for param in problem.params:
        normalize_type(param.type)


def generate_driver(
    language: Language,
    problem: ProblemSpec,
    test_cases: list[TestCase],
    mode: DriverMode = DriverMode.SOLUTION,
    expected: list[str] | None = None,
) -> str:
    validate_problem(problem)
    module = MODULES[language]
    if mode is DriverMode.SOLUTION:
        return module.solution_driver(problem, test_cases)

    if not hasattr(module, "judged_driver"):
        raise UnsupportedLanguage(f"{language.value} (judged driver)")
    expected = expected or []
    if len(expected) != len(test_cases):
        raise InvalidTestCase(f"expected {len(test_cases)} outputs to judge, got {len(expected)}")
    return module.judged_driver(problem, test_cases, expected)
