"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for tracing of the
gateway's operations, including:
- LLM model calls made through pydantic-ai
- Outgoing HTTPX requests (e.g. the websearch module)
- API endpoint tracing
- Module invocations and approval decisions

Tracing is opt-in: nothing is sent unless ``LOGFIRE_ENABLED`` is true and a
``LOGFIRE_TOKEN`` is configured.
"""

import logging
import os
from typing import Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "modgate-ai-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")

LOGFIRE_TRACE_PYDANTIC_AI = os.getenv("LOGFIRE_TRACE_PYDANTIC_AI", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")

_configured = False


def is_enabled() -> bool:
    """Return True once Logfire has been configured successfully."""
    return _configured


def initialize_logfire(app: FastAPI | None = None) -> None:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Sets up automatic instrumentation for:
    - Pydantic AI model calls
    - HTTPX HTTP requests
    - FastAPI endpoints (when ``app`` is given)

    Args:
        app: FastAPI application instance for endpoint instrumentation (optional).
    """
    global _configured

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return

    if LOGFIRE_TRACE_PYDANTIC_AI:
        try:
            logfire.instrument_pydantic_ai()
            logger.info("Logfire: Pydantic AI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument Pydantic AI: {e}")

    if LOGFIRE_TRACE_HTTPX:
        try:
            logfire.instrument_httpx()
            logger.info("Logfire: HTTPX instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument HTTPX: {e}")

    if LOGFIRE_TRACE_FASTAPI and app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    _configured = True
    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not _configured:
        return
    logfire.info(
        "API request completed",
        method=method,
        path=path,
        status_code=status_code,
        duration_ms=duration_ms,
    )


def log_module_invocation(module: str, command: str, ok: bool, duration_ms: float, error_kind: Optional[str] = None) -> None:
    """
    Log a single module command invocation.

    Args:
        module: Module identifier
        command: Command name within the module
        ok: Whether the invocation succeeded
        duration_ms: Handler run time in milliseconds
        error_kind: Failure kind when ``ok`` is False
    """
    if not _configured:
        return
    logfire.info(
        "Module invoked",
        module=module,
        command=command,
        ok=ok,
        duration_ms=duration_ms,
        error_kind=error_kind,
    )


def log_approval_decision(request_id: str, module: str, command: str, approved: bool) -> None:
    """
    Log a human approval decision for a pending invocation.

    Args:
        request_id: Pending invocation identifier
        module: Module identifier
        command: Command name
        approved: The decision
    """
    if not _configured:
        return
    logfire.info(
        "Approval decided",
        request_id=request_id,
        module=module,
        command=command,
        approved=approved,
    )
