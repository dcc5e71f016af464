import pytest

from core.config import settings
from engine.errors import CompileFailure, ExecutionTimeout, RunnerStateError, RuntimeFailure, UnsupportedLanguage
from engine.runners.base import RunnerState
from engine.runners.judged import CppRunner, CSharpRunner, JavaRunner, PythonRunner, runner_for
from engine.runners.playground import PlaygroundCppRunner, PlaygroundPythonRunner, playground_runner_for
from fakes import FakeDockerClient, command_text


def scripted(compile_result=(0, b"", b""), run_result=(0, b"", b"")):
    """Exec handler telling the build step apart from the timed run."""

    def handler(container, command):
        if command[0] == "timeout":
            return run_result
        return compile_result

    return handler


def test_runner_for():
    assert runner_for("cpp") is CppRunner
    assert runner_for("java") is JavaRunner
    assert runner_for("csharp") is CSharpRunner
    assert runner_for("python") is PythonRunner
    with pytest.raises(UnsupportedLanguage):
        runner_for("javascript")


@pytest.mark.asyncio
async def test_python_runner_returns_one_output_per_case(two_sum, framed):
    client = FakeDockerClient(exec_handler=scripted(run_result=(0, framed("[0,1]", "[1,2]", "[0,1]"), b"")))
    runner = PythonRunner(client, two_sum, "class Solution:\n    pass\n")

    assert await runner.execute() == ["[0,1]", "[1,2]", "[0,1]"]
    assert runner.state is RunnerState.FINISHED

    container = client.containers_created[0]
    assert container.image == settings.LANG_IMAGE["python"]
    assert set(container.files) == {"ListNode.py", "TreeNode.py", "Solution.py", "main.py"}
    assert container.files["Solution.py"].startswith("from ListNode import ListNode\n")
    assert container.files["Solution.py"].endswith("class Solution:\n    pass\n")
    assert container.removed

    # interpreted: no build step, only the timed run
    assert len(client.exec_calls) == 1
    assert client.exec_calls[0]["cmd"][:2] == ["timeout", str(settings.EXECUTION_TIMEOUT_SECONDS)]


@pytest.mark.asyncio
async def test_cpp_runner_builds_without_timeout_then_runs(two_sum, framed):
    client = FakeDockerClient(exec_handler=scripted(run_result=(0, framed("[0,1]", "[1,2]", "[0,1]"), b"")))
    await CppRunner(client, two_sum, "class Solution {};").execute()

    build, run = client.exec_calls
    assert build["cmd"][0] != "timeout"
    assert "g++" in command_text(build["cmd"])
    assert run["cmd"][0] == "timeout"
    assert "./main" in command_text(run["cmd"])
    assert set(client.containers_created[0].files) == {"ListNode.cpp", "TreeNode.cpp", "Solution.cpp", "Main.cpp"}


@pytest.mark.asyncio
async def test_csharp_runner_ships_project_file(two_sum, framed):
    client = FakeDockerClient(exec_handler=scripted(run_result=(0, framed("1", "2", "3"), b"")))
    await CSharpRunner(client, two_sum, "public class Solution {}").execute()

    files = client.containers_created[0].files
    assert "App.csproj" in files
    assert "Program.cs" in files
    assert client.exec_calls[0]["environment"]["DOTNET_CLI_TELEMETRY_OPTOUT"] == "1"


@pytest.mark.asyncio
async def test_compile_failure_releases_sandbox(two_sum):
    client = FakeDockerClient(exec_handler=scripted(compile_result=(1, b"", b"Main.java:3: error: ';' expected")))
    runner = JavaRunner(client, two_sum, "class Solution {")

    with pytest.raises(CompileFailure) as exc:
        await runner.compile()
    assert "';' expected" in exc.value.message
    assert runner.state is RunnerState.FAILED
    assert client.containers_created[0].removed


@pytest.mark.asyncio
async def test_compile_timeout(two_sum):
    client = FakeDockerClient(exec_handler=scripted(compile_result=(124, b"", b"")))
    with pytest.raises(ExecutionTimeout):
        await CppRunner(client, two_sum, "").compile()
    assert client.containers_created[0].removed


@pytest.mark.asyncio
@pytest.mark.parametrize("runner_class", [CppRunner, JavaRunner, CSharpRunner, PythonRunner])
async def test_run_timeout_releases_sandbox(two_sum, runner_class):
    client = FakeDockerClient(exec_handler=scripted(run_result=(124, b"[0,1]\n---\n", b"")))
    runner = runner_class(client, two_sum, "")
    await runner.compile()
    assert runner.state is RunnerState.COMPILED
    with pytest.raises(ExecutionTimeout):
        await runner.run()
    assert runner.state is RunnerState.FAILED
    assert client.containers_created[0].removed


@pytest.mark.asyncio
async def test_runtime_failure_carries_stderr(two_sum):
    client = FakeDockerClient(exec_handler=scripted(run_result=(1, b"", b"ZeroDivisionError: division by zero")))
    with pytest.raises(RuntimeFailure, match="ZeroDivisionError"):
        await PythonRunner(client, two_sum, "").execute()


@pytest.mark.asyncio
async def test_missing_outputs_are_a_runtime_failure(two_sum, framed):
    client = FakeDockerClient(exec_handler=scripted(run_result=(0, framed("[0,1]"), b"")))
    with pytest.raises(RuntimeFailure, match="Expected 3"):
        await PythonRunner(client, two_sum, "").execute()


@pytest.mark.asyncio
async def test_run_before_compile_touches_no_sandbox(two_sum, docker_client):
    runner = PythonRunner(docker_client, two_sum, "")
    with pytest.raises(RunnerStateError, match="Call compile"):
        await runner.run()
    assert docker_client.containers_created == []
    assert docker_client.exec_calls == []


@pytest.mark.asyncio
async def test_compile_twice_is_rejected(two_sum, docker_client):
    runner = PythonRunner(docker_client, two_sum, "")
    await runner.compile()
    with pytest.raises(RunnerStateError):
        await runner.compile()
    await runner.release()


@pytest.mark.asyncio
async def test_each_runner_gets_its_own_sandbox(two_sum, framed):
    client = FakeDockerClient(exec_handler=scripted(run_result=(0, framed("a", "b", "c"), b"")))
    await PythonRunner(client, two_sum, "").execute()
    await PythonRunner(client, two_sum, "").execute()

    ids = [c.id for c in client.containers_created]
    assert len(set(ids)) == 2
    assert all(c.removed for c in client.containers_created)


@pytest.mark.asyncio
async def test_missing_image_is_pulled_first(two_sum, framed):
    client = FakeDockerClient(exec_handler=scripted(run_result=(0, framed("a", "b", "c"), b"")))
    await JavaRunner(client, two_sum, "").execute()
    assert client.pulled == [settings.LANG_IMAGE["java"]]


@pytest.mark.asyncio
async def test_playground_returns_output_and_logs():
    client = FakeDockerClient(exec_handler=scripted(run_result=(2, b"hello\n", b"oops\n")))
    result = await PlaygroundPythonRunner(client, "print('hello')").execute()

    assert result.output == "hello\n"
    assert result.logs == "oops\n"
    assert result.exit_code == 2
    assert client.containers_created[0].files == {"main.py": "print('hello')"}
    assert client.containers_created[0].removed


@pytest.mark.asyncio
async def test_playground_compile_failure_is_prefixed():
    client = FakeDockerClient(exec_handler=scripted(compile_result=(1, b"", b"main.cpp:1: error")))
    with pytest.raises(CompileFailure) as exc:
        await PlaygroundCppRunner(client, "int main( {").execute()
    assert exc.value.message == "Compilation failed:\nmain.cpp:1: error"


@pytest.mark.asyncio
async def test_playground_timeout():
    client = FakeDockerClient(exec_handler=scripted(run_result=(124, b"", b"")))
    with pytest.raises(ExecutionTimeout):
        await PlaygroundPythonRunner(client, "while True: pass").execute()


def test_playground_runner_for():
    assert playground_runner_for("python") is PlaygroundPythonRunner
    with pytest.raises(UnsupportedLanguage):
        playground_runner_for("ruby")
