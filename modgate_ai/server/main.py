"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request timing), registers the exception handlers and includes the API
routers. ``run`` starts the server with uvicorn.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from modgate_ai.core.logging_config import get_logger, setup_logging
from modgate_ai.core.monitoring import initialize_logfire

from .api import gateway, health
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services.orchestrator import get_orchestrator

# Initialize logging
setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    On startup the modules are loaded eagerly (failures are logged, not fatal)
    and the sweeper evicting expired approval requests is started.
    """
    logger.info(f"Starting up {constant.PROJECT_NAME} Server...")
    orchestrator = get_orchestrator()
    orchestrator.load_modules()
    if not orchestrator.settings.provider_configured():
        logger.warning(
            f"No credentials configured for model provider '{orchestrator.settings.model_provider}'; "
            "model calls will fail until they are set"
        )
    orchestrator.start_sweeper()

    yield

    logger.info(f"Shutting down {constant.PROJECT_NAME} Server...")
    await orchestrator.stop_sweeper()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    ModGate-AI Server API

    A conversational gateway that lets a language model run local modules.
    Modules other than the trusted ones run only after an explicit approval.
    """,
    version=constant.VERSION,
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(gateway.router, tags=["gateway"])


def run() -> None:
    """Console entry point: serve the app on the configured host and port."""
    uvicorn.run(
        "modgate_ai.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
