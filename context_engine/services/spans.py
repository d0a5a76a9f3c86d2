"""Token and span records used during matching."""

from collections.abc import Sequence
from dataclasses import dataclass


@dataclass
class Token:
    """A token of the scanned sequence.

    Its position is its index in the sequence. ``text`` is lower-cased in
    place when scanning in case-insensitive mode.
    """

    text: str
    start_offset: int | None = None
    end_offset: int | None = None


@dataclass
class ContextSpan:
    """A retained trigger span and the scope window it governs."""

    begin: int
    end: int  # Inclusive
    rule_id: int
    win_begin: int | None = None
    win_end: int | None = None

    def __post_init__(self) -> None:
        if self.win_begin is None:
            self.win_begin = self.begin
        if self.win_end is None:
            self.win_end = self.end

    @property
    def width(self) -> int:
        return self.end - self.begin


def as_tokens(tokens: Sequence[Token | str]) -> list[Token]:
    """Wrap plain strings as tokens, keeping existing Token objects as-is."""
    return [token if isinstance(token, Token) else Token(token) for token in tokens]
