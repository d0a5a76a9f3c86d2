"""Pydantic schemas and enums for the ConText engine."""

from context_engine.schemas.base import (
    BACKWARD_PREFIX,
    DIRECTION_PREFIXES,
    FORWARD_PREFIX,
    Direction,
    DuplicatePolicy,
    TriggerType,
)
from context_engine.schemas.rule import ContextRule
from context_engine.schemas.span import ContextMatch

__all__ = [
    # Enums
    "Direction",
    "DuplicatePolicy",
    "TriggerType",
    "DIRECTION_PREFIXES",
    "FORWARD_PREFIX",
    "BACKWARD_PREFIX",
    # Rules
    "ContextRule",
    # Matches
    "ContextMatch",
]
