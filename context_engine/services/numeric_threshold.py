"""Numeric threshold branches of the pattern trie.

Rules written as ``> 13 days`` compile into a threshold child keyed by 13.
A token such as ``45`` or ``30-days`` is compared against every threshold
under the current node; the hyphenated suffix, when present, must match the
literal term that follows the threshold.
"""

import re
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from context_engine.services.rule_trie import TrieNode

# Leading digit run plus an optional "-suffix"
DIGIT_PATTERN = re.compile(r"(\d+)(-\w+)?")

# Values with 4 or more digits compare as this ceiling
MAX_DIGIT_VALUE = 1000


def parse_numeric_token(text: str) -> tuple[int, str | None] | None:
    """Parse ``"45"`` or ``"30-days"`` into ``(value, suffix)``.

    Returns:
        The clamped value and the suffix without its hyphen (None when the
        token has no suffix), or None when the token holds no digits.
    """
    match = DIGIT_PATTERN.search(text)
    if match is None:
        return None
    digits, suffix = match.group(1), match.group(2)
    value = int(digits) if len(digits) < 4 else MAX_DIGIT_VALUE
    return value, suffix[1:] if suffix else None


def match_digits(
    text: str,
    thresholds: Mapping[int, int],
    nodes: Sequence["TrieNode"],
) -> list[int]:
    """Return the trie nodes reachable from a numeric token.

    Every threshold strictly below the token value is followed, so a single
    token may continue down several branches.

    Args:
        text: The token text.
        thresholds: Threshold value -> node index of the current node.
        nodes: The trie arena.

    Returns:
        Node indices to continue matching from at the next token.
    """
    parsed = parse_numeric_token(text)
    if parsed is None:
        return []
    value, suffix = parsed

    continuations: list[int] = []
    for threshold, child in thresholds.items():
        if value <= threshold:
            continue
        if suffix is None:
            continuations.append(child)
            continue
        # "30-days": the suffix must be the next pattern term
        suffix_child = nodes[child].children.get(suffix)
        if suffix_child is not None:
            continuations.append(suffix_child)
    return continuations
