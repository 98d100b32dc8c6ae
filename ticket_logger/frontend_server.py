"""
Standalone static server for the built frontend bundle.

Serves `static_dir` with gzip compression; unknown paths return `index.html`.
"""

import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.gzip import GZipMiddleware

from ticket_logger.app.core.config import settings
from ticket_logger.app.core.exceptions import register_exception_handlers
from ticket_logger.app.core.observability import configure_logging
from ticket_logger.app.core.static_files import SPAStaticFiles

logger = logging.getLogger("ticket_logger.frontend")


def create_frontend_app(directory: str) -> FastAPI:
    app = FastAPI(title="Ticket Logger Frontend", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.add_middleware(GZipMiddleware, minimum_size=500)
    register_exception_handlers(app)
    app.mount("/", SPAStaticFiles(directory=directory), name="frontend")
    return app


def run() -> None:
    """Console entry point: serve the frontend bundle with uvicorn."""
    configure_logging(settings.log_level)
    logger.info("Frontend server running on port %s", settings.static_port)
    uvicorn.run(
        create_frontend_app(settings.static_dir),
        host=settings.host,
        port=settings.static_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
