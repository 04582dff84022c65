"""
FastAPI application factory.

Builds the HTTP service: CRUD API under /api, edge functions under
/functions/v1, stored bottle photos under /photos and health checks.
HTTP errors are answered as {"error": "..."} JSON, the shape the edge
function clients already understand.
"""

import logging
import os
from contextlib import asynccontextmanager

import asyncpg
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from cellar import __version__
from cellar.app import config
from cellar.app.db import close_pool
from cellar.errors import AIConfigError, AIResponseError
from cellar.routers import (
    account,
    ai,
    cellars,
    functions,
    health,
    stock_movements,
    tasting_notes,
    wineries,
    wines,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    The database pool is opened lazily on first use and closed here on
    shutdown.
    """
    logger.info(f"cellar-api {__version__} starting")
    yield
    await close_pool()


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=exc.headers)


async def _ai_config_error(request: Request, exc: AIConfigError) -> JSONResponse:
    logger.error(f"AI request refused: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=500)


async def _ai_response_error(request: Request, exc: AIResponseError) -> JSONResponse:
    logger.error(f"AI answer unusable: {exc}")
    return JSONResponse({"error": str(exc)}, status_code=502)


async def _bad_reference(request: Request, exc: asyncpg.PostgresError) -> JSONResponse:
    # Malformed ids and ids pointing at rows that do not exist
    logger.warning(f"Rejected reference on {request.url.path}: {exc}")
    return JSONResponse({"error": "invalid or unknown id"}, status_code=400)


def create_app(serve_photos: bool = True) -> FastAPI:
    app = FastAPI(title="cellar-api", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(AIConfigError, _ai_config_error)
    app.add_exception_handler(AIResponseError, _ai_response_error)
    app.add_exception_handler(asyncpg.DataError, _bad_reference)
    app.add_exception_handler(asyncpg.ForeignKeyViolationError, _bad_reference)

    for module in (health, wines, wineries, tasting_notes, stock_movements, cellars, account, ai, functions):
        app.include_router(module.router)

    if serve_photos:
        os.makedirs(config.PHOTO_DIR, exist_ok=True)
        app.mount("/photos", StaticFiles(directory=config.PHOTO_DIR), name="photos")

    return app
