"""
FastAPI application entry

    uvicorn src.main:app --reload
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.public import social_router
from src.config.settings import config
from src.core.exceptions import AppException
from src.core.logger import logger


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Malformed JSON body"
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg") or "invalid value"
    return f"{loc}: {msg}" if loc else str(msg)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    if not config.reddit_credentials_configured:
        logger.warning("REDDIT_CLIENT_ID / REDDIT_CLIENT_SECRET not set; verification will fail")
    logger.info("Service started (environment={})", config.environment)
    yield
    logger.info("Service stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="FairData Qualification API", version="0.1.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials="*" not in config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Any) -> Any:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "[SERVER] {} {} -> {} ({}ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response

    @app.exception_handler(AppException)
    async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
        if exc.status_code >= 500 or exc.status_code == 429:
            logger.warning(
                "{} {} failed: {} ({})",
                request.method,
                request.url.path,
                exc.error_type,
                exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": _describe_validation_error(exc)},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on {} {}", request.method, request.url.path)
        content: dict[str, Any] = {"success": False, "message": "Internal server error"}
        if config.is_development:
            content["error"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    app.include_router(social_router)
    return app


app = create_app()
