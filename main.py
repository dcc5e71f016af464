import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI

from apis.base import api_router
from core.config import settings
from core.logging import setup_logging
from engine.cleanup import CleanupSweeper
from engine.images import connect_docker
from engine.jobs import JobOrchestrator
from engine.problems import ProblemStore


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = setup_logging()
    client = await asyncio.to_thread(connect_docker)

    app.state.docker = client
    app.state.jobs = JobOrchestrator(client)
    app.state.problems = ProblemStore()
    app.state.sweeper = CleanupSweeper(client)
    app.state.sweeper.start()
    logger.info("app.started", project=settings.PROJECT_NAME, version=settings.PROJECT_VERSION)
    try:
        yield
    finally:
        await app.state.sweeper.stop()
        await app.state.jobs.shutdown()
        client.close()
        logger.info("app.stopped")


app = FastAPI(title=settings.PROJECT_NAME, version=settings.PROJECT_VERSION, lifespan=lifespan)
app.include_router(api_router)


@app.get("/")
async def read_root():
    return {"name": settings.PROJECT_NAME, "version": settings.PROJECT_VERSION}
