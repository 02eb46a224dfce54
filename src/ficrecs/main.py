import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import config
from .lib.fetcher import ArchiveFetcher
from .routers import health, recommendations

logging.basicConfig(level=config.get_log_level())


@asynccontextmanager
async def lifespan(app: FastAPI):
    fetcher = ArchiveFetcher()
    app.state.fetcher = fetcher
    try:
        yield
    finally:
        await fetcher.aclose()


app = FastAPI(
    title="ficrecs",
    description="An API server for bookmark-driven fan-fiction recommendations",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router)
app.include_router(recommendations.router)


@app.get("/")
async def root():
    return {"message": "ficrecs"}
