"""Core configuration and error types."""

from context_engine.core.config import Settings, settings
from context_engine.core.exceptions import (
    ContextEngineError,
    RuleCompilationError,
    RuleLoadError,
)

__all__ = [
    # Config
    "Settings",
    "settings",
    # Errors
    "ContextEngineError",
    "RuleCompilationError",
    "RuleLoadError",
]
