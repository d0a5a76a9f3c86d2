"""Keeps the best trigger span per determinant.

Candidates arrive in discovery order. For each determinant the result table
holds one span; a new candidate replaces it unless the existing span is
positioned ahead of it in the trigger's scan direction, or is wider and
overlaps or abuts it. Net effect: the longest phrase wins first, then the
position preferred by the trigger's direction.
"""

import logging
from collections.abc import Mapping

from context_engine.schemas.base import BACKWARD_PREFIX, FORWARD_PREFIX, TriggerType
from context_engine.schemas.rule import ContextRule
from context_engine.services.spans import ContextSpan

logger = logging.getLogger(__name__)


class OverlapResolver:
    """Owns the result table of one scan.

    Usage:
        resolver = OverlapResolver(trie.rules)
        resolver.consider("fNEG", 3, match_begin=1, position=2)
        resolver.matches["fNEG"]  # ContextSpan(begin=1, end=1, ...)
    """

    def __init__(
        self,
        rules: Mapping[int, ContextRule],
        matches: dict[str, ContextSpan] | None = None,
    ) -> None:
        self.rules = rules
        self.matches = matches if matches is not None else {}

    def _is_termination(self, rule_id: int) -> bool:
        rule = self.rules.get(rule_id)
        return rule is not None and rule.trigger_type == TriggerType.TERMINATION

    def consider(self, determinant: str, rule_id: int, match_begin: int, position: int) -> None:
        """Offer the match ``[match_begin, position - 1]`` for ``determinant``."""
        candidate = ContextSpan(begin=match_begin, end=position - 1, rule_id=rule_id)
        existing = self.matches.get(determinant)
        if existing is None:
            self.matches[determinant] = candidate
            return

        direction = determinant[:1]
        if direction == FORWARD_PREFIX:
            if existing.begin >= candidate.end:
                return
            if existing.width > candidate.width and existing.end >= candidate.begin:
                return
            if self._is_termination(rule_id):
                candidate.win_begin = max(existing.win_begin, candidate.end)
            else:
                candidate.win_begin = existing.win_begin
        elif direction == BACKWARD_PREFIX:
            if existing.end <= candidate.begin:
                return
            if existing.width > candidate.width and existing.begin >= candidate.end:
                return
            if self._is_termination(rule_id):
                candidate.win_end = min(existing.win_end, candidate.begin)
            else:
                candidate.win_end = existing.win_end

        logger.debug(
            f"{determinant}: span [{candidate.begin}, {candidate.end}] from rule {rule_id} "
            f"replaces [{existing.begin}, {existing.end}] from rule {existing.rule_id}"
        )
        self.matches[determinant] = candidate
