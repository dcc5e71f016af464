import json
import re
from pathlib import Path

from pydantic import ValidationError

from core.config import settings
from engine.errors import ProblemNotFound, SandboxError
from schemas.problem import ProblemSpec

PROBLEM_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")

METADATA_FILE = "metadata.json"
MARKER_FILE = "Marker.java"


class ProblemStore:
    """Read-only access to `<root>/<problem id>/{metadata.json,Marker.java}`."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.PROBLEMS_DIR)

    def path_for(self, problem_id: str) -> Path:
        if not PROBLEM_ID.match(problem_id):
            raise ProblemNotFound(f"Problem not found: {problem_id}")
        return self.root / problem_id

    def load(self, problem_id: str) -> ProblemSpec:
        base = self.path_for(problem_id)
        try:
            metadata = json.loads((base / METADATA_FILE).read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise ProblemNotFound(f"Problem not found: {problem_id}")
        except json.JSONDecodeError as e:
            raise SandboxError(f"Invalid metadata for {problem_id}: {e}") from e

        marker = base / MARKER_FILE
        if marker.exists():
            metadata["markerSource"] = marker.read_text(encoding="utf-8")

        try:
            return ProblemSpec.model_validate(metadata)
        except ValidationError as e:
            raise SandboxError(f"Invalid metadata for {problem_id}: {e}") from e
