import time

import docker
import structlog

from engine.drivers.generator import DriverMode, generate_driver, helper_sources
from engine.errors import SandboxError, UnexpectedStderr
from engine.framing import check_outcome, frame_outcome, parse_judged_block
from engine.handle import ExecutionOutcome, SourceBundle
from engine.runners.judged import JavaRunner, runner_for
from schemas.code import Language, MarkerResult
from schemas.problem import ProblemSpec, TestCase

logger = structlog.get_logger(__name__)


class MarkerRunner(JavaRunner):
    """Runs a problem's reference `Marker` against the outputs being judged.

    Stricter than a solution run: anything on stderr, from the build or the
    run, fails the whole judgment even when the exit code is zero.
    """

    def __init__(
        self,
        client: docker.DockerClient,
        problem: ProblemSpec,
        expected: list[str],
        test_cases: list[TestCase] | None = None,
        timeout_seconds: int | None = None,
    ):
        if not problem.marker_source:
            raise SandboxError("Problem has no marker program")
        super().__init__(client, problem, problem.marker_source, test_cases, timeout_seconds)
        self.expected = list(expected)

    def build_bundle(self) -> SourceBundle:
        files = helper_sources(Language.JAVA)
        files["Marker.java"] = self.code
        files["Main.java"] = generate_driver(
            Language.JAVA, self.problem, self.test_cases, DriverMode.JUDGED, self.expected
        )
        return SourceBundle(files)

    def interpret(self, outcome: ExecutionOutcome) -> list[MarkerResult]:
        check_outcome(outcome)
        stderr = (self.compile_outcome.stderr if self.compile_outcome else "") + outcome.stderr
        if stderr:
            raise UnexpectedStderr(stderr)

        blocks = frame_outcome(outcome, expected_blocks=len(self.test_cases))
        results = []
        for submitted, block in zip(self.expected, blocks):
            is_correct, correct_answer = parse_judged_block(block)
            results.append(
                MarkerResult(actual_answer=submitted, correct_answer=correct_answer, is_correct=is_correct)
            )
        return results


async def get_marker_responses(
    client: docker.DockerClient,
    problem: ProblemSpec,
    outputs: list[str],
    test_cases: list[TestCase] | None = None,
) -> list[MarkerResult]:
    return await MarkerRunner(client, problem, outputs, test_cases).execute()


async def judge_submission(
    client: docker.DockerClient,
    problem: ProblemSpec,
    language: str | Language,
    code: str,
    test_cases: list[TestCase] | None = None,
) -> list[MarkerResult]:
    """Run a submission, then let the marker judge each of its outputs."""
    cases = list(problem.test_cases if test_cases is None else test_cases)
    started = time.perf_counter()

    runner = runner_for(language)(client, problem, code, cases)
    outputs = await runner.execute()
    results = await get_marker_responses(client, problem, outputs, cases) if cases else []

    logger.info(
        "judge.done",
        language=str(runner.language.value),
        cases=len(cases),
        passed=sum(r.is_correct for r in results),
        seconds=round(time.perf_counter() - started, 3),
    )
    return results
