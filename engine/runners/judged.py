import docker

from engine.drivers import cpp, csharp, python
from engine.drivers.generator import generate_driver, helper_sources, validate_problem
from engine.errors import UnsupportedLanguage
from engine.framing import frame_outcome
from engine.handle import ExecutionOutcome, SourceBundle
from engine.runners.base import SandboxRunner, shell
from schemas.code import Language
from schemas.problem import ProblemSpec, TestCase

CPP_BUILD = "g++ -std=c++17 -O2 -pipe -s -o main {source}"
JAVA_BUILD = "javac -encoding UTF-8 {sources}"
JAVA_RUN = "java -Dfile.encoding=UTF-8 -Dstdout.encoding=UTF-8 -Dstderr.encoding=UTF-8 {main}"
DOTNET_BUILD = "dotnet build App.csproj -c Release -o out -nologo -v q"
DOTNET_RUN = "dotnet out/App.dll"
DOTNET_ENV = {
    "DOTNET_CLI_TELEMETRY_OPTOUT": "1",
    "DOTNET_NOLOGO": "1",
    "DOTNET_SKIP_FIRST_TIME_EXPERIENCE": "1",
}
PYTHON_ENV = {"PYTHONDONTWRITEBYTECODE": "1", "PYTHONIOENCODING": "utf-8"}


class LanguageRunner(SandboxRunner):
    """Runs a user's solution against a problem's test cases.

    `run()` returns one raw output block per test case, in order.
    """

    solution_file: str
    driver_file: str
    solution_header = ""
    extra_files: dict[str, str] = {}

    def __init__(
        self,
        client: docker.DockerClient,
        problem: ProblemSpec,
        code: str,
        test_cases: list[TestCase] | None = None,
        timeout_seconds: int | None = None,
    ):
        super().__init__(client, timeout_seconds)
        self.problem = problem
        self.code = code
        self.test_cases = list(problem.test_cases if test_cases is None else test_cases)
        validate_problem(problem)

    def build_bundle(self) -> SourceBundle:
        files = helper_sources(self.language)
        files[self.solution_file] = self.solution_header + self.code
        files[self.driver_file] = generate_driver(self.language, self.problem, self.test_cases)
        files.update(self.extra_files)
        return SourceBundle(files)

    def interpret(self, outcome: ExecutionOutcome) -> list[str]:
        return frame_outcome(outcome, expected_blocks=len(self.test_cases))


class CppRunner(LanguageRunner):
    language = Language.CPP
    solution_file = "Solution.cpp"
    driver_file = "Main.cpp"
    solution_header = cpp.SOLUTION_HEADER
    compile_command = shell(CPP_BUILD.format(source="Main.cpp"))
    run_command = shell("./main")


class JavaRunner(LanguageRunner):
    language = Language.JAVA
    solution_file = "Solution.java"
    driver_file = "Main.java"
    compile_command = shell(JAVA_BUILD.format(sources="*.java"))
    run_command = shell(JAVA_RUN.format(main="Main"))


class CSharpRunner(LanguageRunner):
    language = Language.CSHARP
    solution_file = "Solution.cs"
    driver_file = "Program.cs"
    extra_files = {"App.csproj": csharp.PROJECT_FILE}
    compile_command = shell(DOTNET_BUILD)
    run_command = shell(DOTNET_RUN)
    environment = DOTNET_ENV


class PythonRunner(LanguageRunner):
    language = Language.PYTHON
    solution_file = "Solution.py"
    driver_file = "main.py"
    solution_header = python.SOLUTION_HEADER
    run_command = ["python", "-B", "main.py"]
    environment = PYTHON_ENV


RUNNERS: dict[Language, type[LanguageRunner]] = {
    Language.CPP: CppRunner,
    Language.JAVA: JavaRunner,
    Language.CSHARP: CSharpRunner,
    Language.PYTHON: PythonRunner,
}


def runner_for(language: str | Language) -> type[LanguageRunner]:
    try:
        return RUNNERS[Language(language)]
    except ValueError:
        raise UnsupportedLanguage(str(language))
