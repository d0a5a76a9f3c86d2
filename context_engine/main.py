"""FastAPI application for the Clinical ConText Engine."""

import logging
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI

from context_engine import __version__
from context_engine.api import context_router
from context_engine.core.config import settings
from context_engine.core.exceptions import ContextEngineError
from context_engine.services.context_rules import get_context_rule_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Compile the configured rule set before accepting requests."""
    start_time = time.perf_counter()
    try:
        stats = get_context_rule_service().get_stats()
        logger.info(
            f"Context rules compiled: {stats['rule_count']} rules, "
            f"{stats['node_count']} nodes in {stats['compile_time_ms']}ms"
        )
    except ContextEngineError as e:
        logger.warning(f"Failed to prewarm context rules: {e}")

    app.state.startup_time_ms = (time.perf_counter() - start_time) * 1000
    yield


app = FastAPI(
    title=settings.app_name,
    description="API for detecting ConText modifiers (negation, hypothetical, historical, family history) in tokenized clinical text.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(context_router, prefix=settings.api_v1_prefix)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, Any]:
    """Health check endpoint (liveness probe)."""
    return {
        "status": "healthy",
        "service": "clinical-context-engine",
        "version": __version__,
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/", tags=["Health"])
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "service": "Clinical ConText Engine API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
