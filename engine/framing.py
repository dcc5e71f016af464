"""Framing of driver output.

Every test case's output ends with a line holding exactly ``---``. Judged
drivers print two lines before it: the lowercase correctness boolean and the
canonical form of the answer.
"""

from engine.errors import ExecutionTimeout, RuntimeFailure, UnexpectedStderr
from engine.handle import ExecutionOutcome

DELIMITER = "---"


def split_blocks(stdout: str) -> list[str]:
    blocks: list[str] = []
    current: list[str] = []
    for line in stdout.splitlines():
        if line.rstrip("\r") == DELIMITER:
            blocks.append("\n".join(current))
            current = []
        else:
            current.append(line)
    if current:
        blocks.append("\n".join(current))
    return [b for b in blocks if b.strip() != ""]


def parse_judged_block(block: str) -> tuple[bool, str]:
    lines = block.strip("\n").split("\n")
    verdict = lines[0].strip()
    value = lines[1] if len(lines) > 1 else ""
    return verdict == "true", value


def check_outcome(outcome: ExecutionOutcome, strict_stderr: bool = False) -> None:
    """Raise the error matching a finished exec, or return for a clean one."""
    if outcome.timed_out:
        raise ExecutionTimeout()
    if outcome.exit_code != 0:
        raise RuntimeFailure(outcome.message)
    if strict_stderr and outcome.stderr:
        raise UnexpectedStderr(outcome.stderr)


def frame_outcome(outcome: ExecutionOutcome, expected_blocks: int | None = None) -> list[str]:
    check_outcome(outcome)
    blocks = split_blocks(outcome.stdout)
    if expected_blocks is not None and len(blocks) != expected_blocks:
        raise RuntimeFailure(
            f"Expected {expected_blocks} test case outputs, got {len(blocks)}\n{outcome.message}".rstrip()
        )
    return blocks
