"""ASGI application wiring for the tax engine."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import get_settings
from .errors import ValidationError
from .middlewares.request_id import RequestIdMiddleware
from .obs.logging import configure_logging
from .routes_metrics import router as metrics_router
from .routes_tax import router as tax_router
from .utils.responses import err, validation_err

logger = logging.getLogger("taxengine")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level.upper())

    app = FastAPI(title="Retail GST engine", version=__version__)
    app.add_middleware(RequestIdMiddleware)
    app.include_router(tax_router)
    app.include_router(metrics_router)

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError):
        logger.info(
            exc.message,
            extra={"status": 400, "route": request.url.path, "code": exc.code},
        )
        return JSONResponse(validation_err(exc), status_code=400)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            exc.detail, extra={"status": exc.status_code, "route": request.url.path}
        )
        return JSONResponse(err(exc.status_code, exc.detail), status_code=exc.status_code)

    @app.exception_handler(Exception)
    async def general_error_handler(request: Request, exc: Exception):
        logger.exception(
            "unhandled_error", extra={"status": 500, "route": request.url.path}
        )
        return JSONResponse(err(500, "Internal Server Error"), status_code=500)

    return app


app = create_app()
