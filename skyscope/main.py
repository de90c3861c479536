from __future__ import annotations

import asyncio
import contextlib
import logging
import time

import httpx
from fastapi import FastAPI, Request

from skyscope.api import api_router
from skyscope.config import settings
from skyscope.domain.regions import default_registry
from skyscope.ingestors import ResilientFetcher, TokenCache, linear_backoff
from skyscope.services import SnapshotPoller, SnapshotService

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("skyscope")


def build_snapshot_service(client: httpx.AsyncClient) -> SnapshotService:
    """Wire fetcher, token cache and registry from settings around ``client``."""

    fetcher = ResilientFetcher(
        client,
        timeout=settings.opensky_timeout,
        max_retries=settings.opensky_max_retries,
        backoff=linear_backoff(settings.opensky_retry_base_delay),
    )
    token_cache = TokenCache(
        fetcher,
        token_url=settings.opensky_token_url,
        safety_margin=settings.token_safety_margin,
        default_ttl=settings.token_default_ttl,
    )
    return SnapshotService(
        fetcher=fetcher,
        token_cache=token_cache,
        states_url=settings.opensky_states_url,
        registry=default_registry,
    )


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    # ----- Startup -----
    app.state.http_client = httpx.AsyncClient(timeout=settings.opensky_timeout)
    app.state.snapshot_service = build_snapshot_service(app.state.http_client)
    logger.info(
        "Snapshot service ready (default region %s, retries %s)",
        default_registry.default_key,
        settings.opensky_max_retries,
    )

    if settings.poll_enabled:
        poller = SnapshotPoller(
            app.state.snapshot_service.get_snapshot,
            region_key=default_registry.default_key,
            interval=settings.poll_interval,
        )
        app.state.poller = poller
        app.state.poller_task = asyncio.create_task(poller.run())
        logger.info(
            "Snapshot poller started for %s every %ss",
            poller.region_key,
            settings.poll_interval,
        )

    try:
        yield
    finally:
        # ----- Shutdown -----
        task = getattr(app.state, "poller_task", None)
        if task:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        client: httpx.AsyncClient | None = getattr(app.state, "http_client", None)
        if client:
            await client.aclose()


app = FastAPI(title="SkyScope Backend", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "SkyScope backend is running"}
