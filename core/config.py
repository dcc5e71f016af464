import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    PROJECT_NAME: str = "judgebox"
    PROJECT_VERSION: str = "1.0.0"

    # Docker daemon; None falls back to the environment (DOCKER_HOST, socket)
    DOCKER_HOST: str | None = os.getenv("DOCKER_HOST")
    DOCKER_CONNECT_RETRIES: int = int(os.getenv("DOCKER_CONNECT_RETRIES", "15"))

    # execution budget, enforced by coreutils `timeout` inside the sandbox
    EXECUTION_TIMEOUT_SECONDS: int = int(os.getenv("EXECUTION_TIMEOUT_SECONDS", "30"))
    EXEC_GRACE_SECONDS: int = int(os.getenv("EXEC_GRACE_SECONDS", "5"))

    # sandbox containers
    SANDBOX_LABEL: str = os.getenv("SANDBOX_LABEL", "judgebox.created")
    SANDBOX_WORKDIR: str = os.getenv("SANDBOX_WORKDIR", "/app")
    SANDBOX_MEMORY_LIMIT: str = os.getenv("SANDBOX_MEMORY_LIMIT", "1g")
    SANDBOX_PIDS_LIMIT: int = int(os.getenv("SANDBOX_PIDS_LIMIT", "256"))
    SANDBOX_NETWORK_DISABLED: bool = _flag("SANDBOX_NETWORK_DISABLED", "true")

    # orphan sweeper
    CLEANUP_INTERVAL_SECONDS: int = int(os.getenv("CLEANUP_INTERVAL_SECONDS", "60"))
    CLEANUP_MARGIN_SECONDS: int = int(os.getenv("CLEANUP_MARGIN_SECONDS", "10"))

    # playground job retention
    JOB_TTL_SECONDS: int = int(os.getenv("JOB_TTL_SECONDS", "3600"))
    JOB_MAX_ENTRIES: int = int(os.getenv("JOB_MAX_ENTRIES", "1000"))

    PROBLEMS_DIR: str = os.getenv("PROBLEMS_DIR", "problems")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # language to Docker image mapping; debian based so `timeout` exits with 124
    LANG_IMAGE = {
        "python": os.getenv("PYTHON_IMAGE", "python:3.12-slim"),
        "java": os.getenv("JAVA_IMAGE", "eclipse-temurin:21-jdk"),
        "cpp": os.getenv("CPP_IMAGE", "gcc:13.4.0-bookworm"),
        "csharp": os.getenv("CSHARP_IMAGE", "mcr.microsoft.com/dotnet/sdk:8.0"),
    }


settings = Settings()
