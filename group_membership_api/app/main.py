"""
Main entrypoint for the Group Membership API.

This module assembles the FastAPI application, sets up logging,
registers the ``ApiError`` handler and includes versioned routers.
The ``create_app`` function builds and configures the app, which is
then instantiated at module import time as ``app``::

    uvicorn group_membership_api.app.main:app --reload
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api.v1.router import router as v1_router
from .core.config import settings
from .core.db import init_db
from .core.errors import ApiError
from .core.logging_config import setup_logging


logger = logging.getLogger(__name__)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Translate an ``ApiError`` into its HTTP status and error envelope."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict(), headers=headers)


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI application instance.
    """
    # Before anything else so that startup can log
    setup_logging(settings.log_level, settings.log_file or None)

    app = FastAPI(title=settings.project_name, version=settings.api_version, debug=settings.debug)
    app.add_exception_handler(ApiError, api_error_handler)
    app.include_router(v1_router, prefix="/api/v1")

    @app.on_event("startup")
    async def startup_event() -> None:
        # Creates the database file if needed and applies migrations
        init_db()
        logger.info("Database ready at %s", settings.database_url)

    return app


app = create_app()
