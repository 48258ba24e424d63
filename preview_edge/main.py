from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from preview_edge.api.router import router
from preview_edge.core.database import db
from preview_edge.core.log_setup import configure_logging
from preview_edge.repositories.logs.repository import LogRepository
from preview_edge.workers.fetcher import close_http_client

logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await db.connect()
    await LogRepository.from_db(db).ensure_indexes()
    logger.info("Preview edge started.")
    try:
        yield
    finally:
        # the outbound page client is created lazily on the first preview
        await close_http_client()
        await db.disconnect()


app = FastAPI(
    title="Preview Edge",
    description=(
        "Short-link redirector that serves Open Graph preview pages "
        "to link-unfurl crawlers."
    ),
    version="1.0.0",
    lifespan=lifespan,
)


# Must precede the router, whose redirect route matches every path.
@app.get("/health", tags=["health"])
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(router)
