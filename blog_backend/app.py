"""
FastAPI application entry point for the blog API.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from blog_backend import auth
from blog_backend.config import get_settings
from blog_backend.db import DuplicateError, InvalidReferenceError, StorageError
from blog_backend.routes import router

logger = logging.getLogger("blog_backend.requests")


def _storage_error_handler(status_code: int):
    def handler(request: Request, exc: StorageError) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )

    app = FastAPI(title="Blog API", version="0.1.0")
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        session_cookie=settings.session_cookie,
        max_age=settings.session_max_age_seconds,
        same_site="lax",
        https_only=settings.https_only_cookies,
    )
    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith(settings.api_prefix):
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %s in %.0fms",
                request.method,
                request.url.path,
                response.status_code,
                elapsed_ms,
            )
        return response

    # Handlers are matched along the exception MRO.
    app.add_exception_handler(DuplicateError, _storage_error_handler(409))
    app.add_exception_handler(InvalidReferenceError, _storage_error_handler(400))
    app.add_exception_handler(StorageError, _storage_error_handler(409))

    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(auth.router, prefix=settings.api_prefix)
    return app


app = create_app()
