import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
TESTS_DIR = os.path.dirname(__file__)
for path in (REPO_ROOT, TESTS_DIR):
    if path not in sys.path:
        sys.path.insert(0, path)

import pytest

from fakes import FakeDockerClient
from schemas.problem import ProblemSpec


@pytest.fixture
def docker_client():
    return FakeDockerClient()


@pytest.fixture
def two_sum():
    return ProblemSpec.model_validate(
        {
            "functionName": "twoSum",
            "params": [{"name": "nums", "type": "int[]"}, {"name": "target", "type": "int"}],
            "outputType": "int[]",
            "testCases": [
                {"input": {"nums": [2, 7, 11, 15], "target": 9}},
                {"input": {"nums": [3, 2, 4], "target": 6}},
                {"input": {"nums": [3, 3], "target": 6}},
            ],
            "markerSource": "public class Marker { public int[] twoSum(int[] nums, int target) { return null; } }",
        }
    )


def blocks(*values: str) -> bytes:
    return "".join(f"{v}\n---\n" for v in values).encode()


@pytest.fixture
def framed():
    return blocks
