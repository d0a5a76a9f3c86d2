"""Context scanning API endpoints."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from context_engine.core.exceptions import ContextEngineError
from context_engine.schemas.span import ContextMatch
from context_engine.services.context_rules import ContextRuleService, get_context_rule_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/context", tags=["Context"])

# Longest token sequence accepted per scan request
MAX_SCAN_TOKENS = 5000


class ScanRequest(BaseModel):
    """Request body for a context scan."""

    tokens: list[str] = Field(
        ..., max_length=MAX_SCAN_TOKENS, description="Pre-tokenized text"
    )
    start_position: int = Field(0, ge=0, description="Index of the first token to scan from")


class ScanResponse(BaseModel):
    """Retained spans of a context scan."""

    matches: list[ContextMatch]
    total: int


def get_engine() -> ContextRuleService:
    """Dependency returning the configured rule engine."""
    try:
        return get_context_rule_service()
    except ContextEngineError as e:
        logger.error(f"Context rules unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Context rules unavailable: {e}",
        ) from e


EngineDep = Annotated[ContextRuleService, Depends(get_engine)]


@router.post(
    "/scan",
    response_model=ScanResponse,
    summary="Scan tokens for context triggers",
    description="Find the best trigger span and scope window for every determinant.",
)
def scan_tokens(request: ScanRequest, engine: EngineDep) -> ScanResponse:
    """Scan a token sequence with the configured rules.

    Args:
        request: Tokens and start position.
        engine: Compiled rule engine.

    Returns:
        ScanResponse with one match per determinant, sorted by determinant.
    """
    try:
        matches = engine.find_context(request.tokens, request.start_position)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return ScanResponse(matches=matches, total=len(matches))


@router.get("/stats", summary="Compiled rule set statistics")
def rule_stats(engine: EngineDep) -> dict[str, Any]:
    """Return rule and trie node counts of the configured engine."""
    return engine.get_stats()
