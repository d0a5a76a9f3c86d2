"""Base enums for ConText rules."""

from enum import Enum


class Direction(str, Enum):
    """Which side of a trigger its scope extends to."""

    FORWARD = "forward"
    BACKWARD = "backward"
    BOTH = "both"  # Expanded into forward + backward at compile time


class TriggerType(str, Enum):
    """How a matched rule affects the scope window."""

    TRIGGER = "trigger"
    PSEUDO = "pseudo"  # Looks like a trigger, interpreted by the caller
    TERMINATION = "termination"  # Truncates the window instead of extending it


class DuplicatePolicy(str, Enum):
    """What to do when two rules land on the same terminal determinant."""

    LAST_WINS = "last_wins"
    FIRST_WINS = "first_wins"
    ERROR = "error"


# First character of a determinant encodes its scan direction
DIRECTION_PREFIXES: dict[Direction, str] = {
    Direction.FORWARD: "f",
    Direction.BACKWARD: "b",
}
FORWARD_PREFIX = DIRECTION_PREFIXES[Direction.FORWARD]
BACKWARD_PREFIX = DIRECTION_PREFIXES[Direction.BACKWARD]
