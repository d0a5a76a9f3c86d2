"""Schemas for matched context spans."""

from pydantic import BaseModel, Field

from context_engine.schemas.base import TriggerType


class ContextMatch(BaseModel):
    """Schema for the retained span of one determinant."""

    determinant: str = Field(..., description="Direction-prefixed category key")
    rule_id: int = Field(..., description="ID of the rule that matched")
    begin: int = Field(..., ge=0, description="First token index of the trigger")
    end: int = Field(..., ge=0, description="Last token index of the trigger (inclusive)")
    win_begin: int = Field(..., description="First token index of the scope window")
    win_end: int = Field(..., description="Last token index of the scope window")
    trigger_type: TriggerType = Field(default=TriggerType.TRIGGER, description="Trigger kind")
    text: str | None = Field(None, description="Matched token text")

    model_config = {"from_attributes": True}
