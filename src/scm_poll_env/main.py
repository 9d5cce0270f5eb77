"""
Main application entry point for the SCM poll environment service.

This module sets up the FastAPI application, configures logging, and exposes
poll environment resolution over HTTP.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI, HTTPException

from . import __version__
from .config import get_settings, settings
from .exceptions import InvalidStateError, SnapshotError
from .model.memory import StringLogSink
from .resolver import PollEnvironmentResolver
from .snapshot import PollRequest

logger = structlog.get_logger(__name__)


def setup_logging() -> None:
    """Configure structured logging."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level), format="%(message)s"
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            (
                structlog.processors.JSONRenderer()
                if settings.log_format == "json"
                else structlog.dev.ConsoleRenderer()
            ),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()

    logger.info("Starting SCM poll environment service")
    logger.info(
        "Configuration loaded",
        reuse_last_build_environment=settings.reuse_last_build_environment,
        debug=settings.debug,
    )

    yield

    logger.info("Shutting down SCM poll environment service")


# Create FastAPI application
app = FastAPI(
    title="SCM Poll Environment",
    description="Reconstructs the previous build's environment for SCM polling",
    version=__version__,
    lifespan=lifespan,
)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "message": "SCM Poll Environment",
        "version": __version__,
        "status": "active",
    }


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/poll-environment")
def poll_environment(request: PollRequest) -> dict[str, Any]:
    """
    Compute the poll environment for the job described in the request.

    Args:
        request: Snapshot of the server, job and workspace

    Returns:
        Job name, last build number and the resolved environment
    """
    current_settings = get_settings()
    reuse = request.reuse_last_build_environment
    if reuse is None:
        reuse = current_settings.reuse_last_build_environment

    try:
        model = request.build()
    except SnapshotError as e:
        logger.error("Invalid snapshot", error=str(e), **e.context)
        raise HTTPException(status_code=422, detail=str(e)) from e

    resolver = PollEnvironmentResolver(model.server)
    try:
        env = resolver.resolve(
            model.job,
            model.workspace,
            StringLogSink(),
            reuse_last_build_environment=reuse,
        )
    except InvalidStateError as e:
        logger.warning("Cannot compute poll environment", error=str(e), **e.context)
        raise HTTPException(status_code=409, detail=str(e)) from e

    last_build = model.job.get_last_build()
    logger.info(
        "Computed poll environment",
        job=model.job.name,
        build_number=last_build.number if last_build else None,
        reuse_last_build_environment=reuse,
        variables=len(env),
    )
    return {
        "job": model.job.name,
        "build_number": last_build.number if last_build else None,
        "environment": env.to_dict(),
    }


def main() -> None:
    """Main entry point."""
    import uvicorn

    setup_logging()

    logger.info(
        "Starting server", host=settings.host, port=settings.port, debug=settings.debug
    )

    uvicorn.run(
        "scm_poll_env.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,  # We handle logging ourselves
    )


if __name__ == "__main__":
    main()
