import docker

from engine.drivers import csharp
from engine.errors import ExecutionTimeout, UnsupportedLanguage
from engine.handle import ExecutionOutcome, SourceBundle
from engine.runners.base import SandboxRunner, shell
from engine.runners.judged import (
    CPP_BUILD,
    DOTNET_BUILD,
    DOTNET_ENV,
    DOTNET_RUN,
    JAVA_BUILD,
    JAVA_RUN,
    PYTHON_ENV,
)
from schemas.code import CodeResult, Language


class PlaygroundRunner(SandboxRunner):
    """Free-form execution: the submitted code is the whole program.

    There is no driver and no framing; stdout and stderr come back as
    `output` and `logs`. A non-zero exit is not an error here, the caller
    sees it in `exit_code` and `logs`.
    """

    entry_file: str
    extra_files: dict[str, str] = {}
    compile_failure_prefix = "Compilation failed:\n"

    def __init__(self, client: docker.DockerClient, code: str, timeout_seconds: int | None = None):
        super().__init__(client, timeout_seconds)
        self.code = code

    def build_bundle(self) -> SourceBundle:
        return SourceBundle({self.entry_file: self.code, **self.extra_files})

    def interpret(self, outcome: ExecutionOutcome) -> CodeResult:
        if outcome.timed_out:
            raise ExecutionTimeout()
        return CodeResult(output=outcome.stdout, logs=outcome.stderr, exit_code=outcome.exit_code)


class PlaygroundCppRunner(PlaygroundRunner):
    language = Language.CPP
    entry_file = "main.cpp"
    compile_command = shell(CPP_BUILD.format(source="main.cpp"))
    run_command = shell("./main")


class PlaygroundJavaRunner(PlaygroundRunner):
    language = Language.JAVA
    entry_file = "Main.java"
    compile_command = shell(JAVA_BUILD.format(sources="Main.java"))
    run_command = shell(JAVA_RUN.format(main="Main"))


class PlaygroundCSharpRunner(PlaygroundRunner):
    language = Language.CSHARP
    entry_file = "Program.cs"
    extra_files = {"App.csproj": csharp.PROJECT_FILE}
    compile_command = shell(DOTNET_BUILD)
    run_command = shell(DOTNET_RUN)
    environment = DOTNET_ENV


class PlaygroundPythonRunner(PlaygroundRunner):
    language = Language.PYTHON
    entry_file = "main.py"
    run_command = ["python3", "main.py"]
    environment = PYTHON_ENV


PLAYGROUND_RUNNERS: dict[Language, type[PlaygroundRunner]] = {
    Language.CPP: PlaygroundCppRunner,
    Language.JAVA: PlaygroundJavaRunner,
    Language.CSHARP: PlaygroundCSharpRunner,
    Language.PYTHON: PlaygroundPythonRunner,
}


def playground_runner_for(language: str | Language) -> type[PlaygroundRunner]:
    try:
        return PLAYGROUND_RUNNERS[Language(language)]
    except ValueError:
        raise UnsupportedLanguage(str(language))
