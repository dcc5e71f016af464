import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from engine.errors import JobNotFound
from engine.jobs import JobOrchestrator
from fakes import FakeDockerClient
from schemas.code import CodeResult


async def wait_finished(jobs: JobOrchestrator, job_id: str):
    for _ in range(500):
        if jobs.get(job_id).finished:
            return jobs.get(job_id)
        await asyncio.sleep(0.01)
    raise AssertionError(f"job {job_id} never finished")


class BlockingRunner:
    """Playground runner stand-in that waits until the test releases it."""

    gate: asyncio.Event

    def __init__(self, client, code):
        self.code = code

    async def compile(self):
        await self.gate.wait()

    async def run(self):
        return CodeResult(output=self.code, logs="", exit_code=0)


def blocking_factory(gate):
    BlockingRunner.gate = gate
    return lambda language: BlockingRunner


@pytest.mark.asyncio
async def test_submit_then_poll_until_completed():
    client = FakeDockerClient(exec_handler=lambda c, cmd: (0, b"hi\n", b""))
    jobs = JobOrchestrator(client)

    job_id = jobs.submit("python", "print('hi')")
    first = jobs.poll(job_id)
    assert first.ready is False
    assert first.status == "pending"

    job = await wait_finished(jobs, job_id)
    assert job.status == "completed"
    assert job.finished_at is not None

    result = jobs.poll(job_id)
    assert result.ready is True
    assert result.output == "hi\n"
    assert result.logs == ""
    assert result.exit_code == 0


@pytest.mark.asyncio
async def test_status_moves_through_preparing_and_running():
    gate = asyncio.Event()
    jobs = JobOrchestrator(FakeDockerClient(), runner_factory=blocking_factory(gate))
    job_id = jobs.submit("python", "x")
    await asyncio.sleep(0.01)
    assert jobs.poll(job_id).status == "preparing"

    gate.set()
    await wait_finished(jobs, job_id)
    assert jobs.poll(job_id).output == "x"


@pytest.mark.asyncio
async def test_timeout_is_reported_as_ready_with_flag():
    jobs = JobOrchestrator(FakeDockerClient(exec_handler=lambda c, cmd: (124, b"", b"")))
    job_id = jobs.submit("python", "while True: pass")
    job = await wait_finished(jobs, job_id)

    assert job.status == "completed"
    assert job.timeout is True
    result = jobs.poll(job_id)
    assert result.ready is True
    assert result.timeout is True
    assert result.output is None


@pytest.mark.asyncio
async def test_compile_failure_becomes_error():
    jobs = JobOrchestrator(FakeDockerClient(exec_handler=lambda c, cmd: (1, b"", b"main.cpp:1: error")))
    job_id = jobs.submit("cpp", "int main( {")
    await wait_finished(jobs, job_id)

    result = jobs.poll(job_id)
    assert result.ready is True
    assert result.error == "Execution failed: details: Compilation failed:\nmain.cpp:1: error"


@pytest.mark.asyncio
async def test_unsupported_language_becomes_error(docker_client):
    jobs = JobOrchestrator(docker_client)
    job_id = jobs.submit("cobol", "")
    await wait_finished(jobs, job_id)

    assert jobs.poll(job_id).error == "Execution failed: details: cobol is not supported yet"
    assert docker_client.containers_created == []


@pytest.mark.asyncio
async def test_poll_unknown_job(docker_client):
    with pytest.raises(JobNotFound):
        JobOrchestrator(docker_client).poll("nope")


@pytest.mark.asyncio
async def test_poll_does_not_change_state():
    gate = asyncio.Event()
    jobs = JobOrchestrator(FakeDockerClient(), runner_factory=blocking_factory(gate))
    job_id = jobs.submit("python", "x")
    before = jobs.get(job_id)
    jobs.poll(job_id)
    jobs.poll(job_id)
    assert jobs.get(job_id) == before
    gate.set()
    await wait_finished(jobs, job_id)


@pytest.mark.asyncio
async def test_finished_jobs_expire_after_ttl(docker_client):
    jobs = JobOrchestrator(docker_client, ttl_seconds=60)
    job_id = jobs.submit("python", "")
    await wait_finished(jobs, job_id)

    jobs._jobs[job_id].finished_at = datetime.now(timezone.utc) - timedelta(seconds=61)
    with pytest.raises(JobNotFound):
        jobs.poll(job_id)
    assert jobs.prune() == 1
    assert len(jobs) == 0


@pytest.mark.asyncio
async def test_registry_bound_evicts_oldest_finished_only():
    gate = asyncio.Event()
    jobs = JobOrchestrator(FakeDockerClient(), max_entries=2, runner_factory=blocking_factory(gate))

    running = jobs.submit("python", "running")
    await asyncio.sleep(0.01)

    gate.set()
    done = jobs.submit("python", "done")
    await wait_finished(jobs, done)
    await wait_finished(jobs, running)

    gate.clear()
    blocked = jobs.submit("python", "blocked")
    assert len(jobs) == 2
    with pytest.raises(JobNotFound):
        jobs.get(running)
    assert jobs.get(done).finished

    # unfinished jobs survive even past the bound
    jobs.submit("python", "blocked too")
    jobs.submit("python", "blocked three")
    assert len(jobs) == 3
    assert not jobs.get(blocked).finished

    await jobs.shutdown()


@pytest.mark.asyncio
async def test_shutdown_cancels_in_flight_jobs():
    gate = asyncio.Event()
    jobs = JobOrchestrator(FakeDockerClient(), runner_factory=blocking_factory(gate))
    job_id = jobs.submit("python", "x")
    await asyncio.sleep(0.01)

    await jobs.shutdown()
    job = jobs.get(job_id)
    assert job.status == "error"
    assert "cancelled" in job.error
