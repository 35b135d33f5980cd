"""FastAPI application entrypoint."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress

import uvicorn
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from timeclonk.api.router import api_router
from timeclonk.auth.service import OrgAuthService
from timeclonk.core.config import Settings, get_settings
from timeclonk.core.exceptions import AuthenticationError, TimeclonkError
from timeclonk.core.logging import get_logger, setup_logging
from timeclonk.db.session import get_session_factory
from timeclonk.migrations import initialize

logger = get_logger(__name__)


def purge_tokens(settings: Settings) -> int:
    session = get_session_factory(str(settings.db_path))()
    try:
        return OrgAuthService(session).purge_expired_tokens(
            settings.login_token_expiration_ms,
            email_expiration_ms=settings.email_token_expiration_ms,
            reset_expiration_ms=settings.reset_token_expiration_ms,
        )
    finally:
        session.close()


async def purge_tokens_periodically(settings: Settings) -> None:
    while True:
        await asyncio.sleep(settings.token_purge_interval_seconds)
        try:
            await run_in_threadpool(purge_tokens, settings)
        except TimeclonkError:
            logger.exception("token purge failed")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    setup_logging(settings.debug)

    # MigrationError propagates: the app must not serve an unmigrated database.
    level = await run_in_threadpool(
        initialize,
        settings.db_path,
        settings.login_token_expiration_ms,
        email_token_expiration_ms=settings.email_token_expiration_ms,
        reset_token_expiration_ms=settings.reset_token_expiration_ms,
    )
    logger.info("database ready", path=str(settings.db_path), level=level)

    purge_task = asyncio.create_task(purge_tokens_periodically(settings))
    try:
        yield
    finally:
        purge_task.cancel()
        with suppress(asyncio.CancelledError):
            await purge_task


async def not_logged_in(request: Request, exc: AuthenticationError) -> JSONResponse:
    logger.info("not logged in", path=request.url.path, reason=str(exc))
    return JSONResponse({"what": "not logged in", "content": None})


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    settings = get_settings()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthenticationError, not_logged_in)
    app.include_router(api_router)

    @app.get("/", tags=["system"])
    def root() -> dict[str, str]:
        return {"service": settings.app_name, "status": "running"}

    return app


app = create_app()


def serve() -> None:
    settings = get_settings()
    uvicorn.run("timeclonk.main:app", host=settings.ip, port=settings.port)
