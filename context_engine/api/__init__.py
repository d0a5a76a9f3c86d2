"""API routers for the ConText engine."""

from context_engine.api.context import router as context_router

__all__ = [
    "context_router",
]
