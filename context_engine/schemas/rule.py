"""ContextRule schema."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from context_engine.schemas.base import DIRECTION_PREFIXES, Direction, TriggerType


class ContextRule(BaseModel):
    """A single ConText pattern rule.

    The determinant names the semantic category a match asserts and, by
    convention, starts with ``f`` for forward rules and ``b`` for backward
    rules. Either ``determinant`` or ``modifier`` (the category without its
    direction prefix) may be given; the other is derived.

    Example:
        ContextRule(id=1, pattern="denies", determinant="fNEG", direction="forward")
        ContextRule(id=2, pattern="ruled out", modifier="NEG", direction="both")
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=0, description="Unique rule identifier")
    pattern: str = Field(..., description="Whitespace-separated pattern terms")
    direction: Direction = Field(..., description="Scope direction")
    trigger_type: TriggerType = Field(default=TriggerType.TRIGGER, description="Trigger kind")
    determinant: str = Field(default="", description="Direction-prefixed category key")
    modifier: str = Field(default="", description="Category key without direction prefix")

    @field_validator("pattern")
    @classmethod
    def pattern_not_blank(cls, v: str) -> str:
        """Validate that the pattern has at least one term."""
        if not v.split():
            raise ValueError("pattern must contain at least one term")
        return v.strip()

    @model_validator(mode="before")
    @classmethod
    def derive_determinant(cls, data: Any) -> Any:
        """Fill in whichever of determinant/modifier is missing."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        direction = Direction(data.get("direction"))
        determinant = (data.get("determinant") or "").strip()
        modifier = (data.get("modifier") or "").strip()

        if not determinant and not modifier:
            raise ValueError("rule needs a determinant or a modifier")

        if determinant:
            prefix = determinant[0]
            if direction == Direction.BOTH:
                if prefix not in DIRECTION_PREFIXES.values():
                    raise ValueError(
                        f"determinant {determinant!r} must start with 'f' or 'b'"
                    )
            elif prefix != DIRECTION_PREFIXES[direction]:
                raise ValueError(
                    f"{direction.value} determinant {determinant!r} must start with "
                    f"{DIRECTION_PREFIXES[direction]!r}"
                )
            if not modifier:
                modifier = determinant[1:]
            elif determinant[1:] != modifier:
                raise ValueError(
                    f"determinant {determinant!r} does not match modifier {modifier!r}"
                )
        else:
            target = Direction.FORWARD if direction == Direction.BOTH else direction
            determinant = DIRECTION_PREFIXES[target] + modifier

        if not modifier:
            raise ValueError(f"determinant {determinant!r} has no category after its prefix")

        data["determinant"] = determinant
        data["modifier"] = modifier
        return data

    @property
    def terms(self) -> list[str]:
        """Pattern split into terms."""
        return self.pattern.split()

    def with_direction(self, direction: Direction) -> "ContextRule":
        """Copy of this rule forced to a single direction."""
        return self.model_copy(
            update={
                "direction": direction,
                "determinant": DIRECTION_PREFIXES[direction] + self.modifier,
            }
        )

    def expand(self) -> list["ContextRule"]:
        """Split a bidirectional rule into its forward and backward halves."""
        if self.direction == Direction.BOTH:
            return [
                self.with_direction(Direction.FORWARD),
                self.with_direction(Direction.BACKWARD),
            ]
        return [self]
