"""Multi-path walk of the pattern trie over a token sequence."""

import logging
from collections.abc import Sequence

from context_engine.services.numeric_threshold import match_digits
from context_engine.services.overlap_resolver import OverlapResolver
from context_engine.services.rule_trie import RuleTrie
from context_engine.services.spans import ContextSpan, Token

logger = logging.getLogger(__name__)

# Work-list actions
_VISIT = 0
_EMIT = 1


def is_uppercase(text: str) -> bool:
    """True when every character of a non-empty token is an uppercase letter."""
    return bool(text) and all(char.isupper() for char in text)


class MatchWalker:
    """Walks every branch of a RuleTrie from each scan origin.

    At each (node, position) pair the word wildcard, uppercase wildcard,
    terminal, literal and numeric threshold branches are all explored, in
    that order. The walk is depth-first over an explicit stack, so matches
    are reported in the same order a recursive walk would find them.

    The walker keeps no per-scan state on the instance; one walker may be
    shared between threads.
    """

    def __init__(
        self,
        trie: RuleTrie,
        case_insensitive: bool = False,
        max_steps: int | None = None,
    ) -> None:
        self.trie = trie
        self.case_insensitive = case_insensitive
        self.max_steps = max_steps

    def scan(
        self,
        tokens: Sequence[Token],
        start_position: int,
        matches: dict[str, ContextSpan],
    ) -> dict[str, ContextSpan]:
        """Match all rules against ``tokens[start_position:]``.

        In case-insensitive mode the unscanned tokens are lower-cased in
        place first. Uppercase wildcards are tested against the original
        text.

        Args:
            tokens: The token sequence.
            start_position: First scan origin.
            matches: Result table, updated in place.

        Returns:
            The same ``matches`` mapping.
        """
        uppercase = [is_uppercase(token.text) for token in tokens]
        if self.case_insensitive:
            for token in tokens[start_position:]:
                token.text = token.text.lower()
        texts = [token.text for token in tokens]

        resolver = OverlapResolver(self.trie.rules, matches)
        for origin in range(start_position, len(texts)):
            self._walk(texts, uppercase, origin, resolver)
        return matches

    def _walk(
        self,
        texts: list[str],
        uppercase: list[bool],
        origin: int,
        resolver: OverlapResolver,
    ) -> None:
        nodes = self.trie.nodes
        size = len(texts)
        stack: list[tuple[int, int, int]] = [(_VISIT, RuleTrie.ROOT, origin)]
        steps = 0

        while stack:
            action, index, position = stack.pop()
            node = nodes[index]

            if action == _EMIT:
                for determinant, rule_id in node.terminals.items():
                    resolver.consider(determinant, rule_id, origin, position)
                continue

            steps += 1
            if self.max_steps is not None and steps > self.max_steps:
                logger.warning(
                    f"Walk from token {origin} stopped after {self.max_steps} steps"
                )
                return

            if position >= size:
                if node.terminals:
                    stack.append((_EMIT, index, position))
                continue

            text = texts[position]
            pending: list[tuple[int, int, int]] = []
            if node.word_wildcard is not None:
                pending.append((_VISIT, node.word_wildcard, position + 1))
            if node.uppercase_wildcard is not None and uppercase[position]:
                pending.append((_VISIT, node.uppercase_wildcard, position + 1))
            if node.terminals:
                pending.append((_EMIT, index, position))
            child = node.children.get(text)
            if child is not None:
                pending.append((_VISIT, child, position + 1))
            if node.thresholds and text[:1].isdecimal():
                for next_index in match_digits(text, node.thresholds, nodes):
                    pending.append((_VISIT, next_index, position + 1))

            stack.extend(reversed(pending))
