"""Pattern trie compiled from ConText rules.

All rule patterns are merged into one prefix structure so that a single
left-to-right pass over the tokens can test every rule at once. Nodes live in
an arena (a list) and refer to each other by index; once compiled the trie is
frozen and safe to share between threads.

Pattern terms are literal words or one of the reserved markers:

    \\w+      matches any single token
    \\W+      matches a token made only of uppercase letters
    > N      matches a numeric token whose value is greater than N; the
             literal term after it may match a hyphenated suffix ("30-days")
"""

import logging
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from context_engine.core.exceptions import RuleCompilationError
from context_engine.schemas.base import DuplicatePolicy
from context_engine.schemas.rule import ContextRule

logger = logging.getLogger(__name__)

WORD_WILDCARD = r"\w+"
UPPERCASE_WILDCARD = r"\W+"
THRESHOLD_MARKER = ">"
END_MARKER = "<END>"

RESERVED_MARKERS = frozenset({WORD_WILDCARD, UPPERCASE_WILDCARD, THRESHOLD_MARKER, END_MARKER})


@dataclass
class TrieNode:
    """One node of the pattern trie.

    The mappings are plain dicts while rules are inserted; RuleTrie.freeze()
    swaps them for read-only views.
    """

    children: dict[str, int] = field(default_factory=dict)
    word_wildcard: int | None = None
    uppercase_wildcard: int | None = None
    thresholds: dict[int, int] = field(default_factory=dict)
    # determinant -> rule id for every rule whose pattern ends here
    terminals: dict[str, int] = field(default_factory=dict)


class RuleTrie:
    """Arena-backed prefix structure over rule pattern terms.

    Usage:
        trie = compile_rules(rules, case_insensitive=True)
        root = trie.nodes[RuleTrie.ROOT]
    """

    ROOT = 0

    def __init__(self, duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS) -> None:
        self.duplicate_policy = duplicate_policy
        self.nodes: list[TrieNode] = [TrieNode()]
        self.rules: Mapping[int, ContextRule] = {}
        self._frozen = False

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _new_node(self) -> int:
        self.nodes.append(TrieNode())
        return len(self.nodes) - 1

    def _step(self, index: int, term: str, threshold: int | None) -> int:
        """Return the child of ``index`` for ``term``, creating it if missing."""
        node = self.nodes[index]
        if threshold is not None:
            child = node.thresholds.get(threshold)
            if child is None:
                child = node.thresholds[threshold] = self._new_node()
            return child
        if term == WORD_WILDCARD:
            if node.word_wildcard is None:
                node.word_wildcard = self._new_node()
            return node.word_wildcard
        if term == UPPERCASE_WILDCARD:
            if node.uppercase_wildcard is None:
                node.uppercase_wildcard = self._new_node()
            return node.uppercase_wildcard
        child = node.children.get(term)
        if child is None:
            child = node.children[term] = self._new_node()
        return child

    def insert(self, terms: list[str], determinant: str, rule_id: int) -> bool:
        """Add one pattern to the trie.

        Returns:
            True if the (determinant, rule id) pair is now stored at the
            pattern's terminal, False if an existing entry was kept.

        Raises:
            RuleCompilationError: If a reserved marker is misused.
        """
        if self._frozen:
            raise RuntimeError("cannot insert into a frozen RuleTrie")
        _validate_terms(terms, rule_id)

        index = self.ROOT
        i = 0
        while i < len(terms):
            term = terms[i]
            if term == THRESHOLD_MARKER:
                index = self._step(index, term, int(terms[i + 1]))
                i += 2
            else:
                index = self._step(index, term, None)
                i += 1

        terminals = self.nodes[index].terminals
        existing = terminals.get(determinant)
        if existing is not None and existing != rule_id:
            if self.duplicate_policy == DuplicatePolicy.ERROR:
                raise RuleCompilationError(
                    f"pattern {' '.join(terms)!r} already defines {determinant!r} "
                    f"(rule {existing})",
                    rule_id=rule_id,
                )
            if self.duplicate_policy == DuplicatePolicy.FIRST_WINS:
                logger.warning(
                    f"Rule {rule_id} ignored: {determinant!r} for {' '.join(terms)!r} "
                    f"is already defined by rule {existing}"
                )
                return False
            logger.warning(
                f"Rule {rule_id} overrides rule {existing} for {determinant!r} "
                f"on pattern {' '.join(terms)!r}"
            )
        terminals[determinant] = rule_id
        return True

    def freeze(self) -> None:
        """Make the trie read-only."""
        if self._frozen:
            return
        for node in self.nodes:
            node.children = MappingProxyType(dict(node.children))
            node.thresholds = MappingProxyType(dict(sorted(node.thresholds.items())))
            node.terminals = MappingProxyType(dict(node.terminals))
        self.rules = MappingProxyType(dict(self.rules))
        self._frozen = True

    def structure(self, index: int = ROOT) -> dict[str, Any]:
        """Nested, index-free description of the subtree at ``index``.

        Two tries compiled from the same rules produce equal structures.
        """
        node = self.nodes[index]
        result: dict[str, Any] = {}
        for term, child in sorted(node.children.items()):
            result[term] = self.structure(child)
        if node.word_wildcard is not None:
            result[WORD_WILDCARD] = self.structure(node.word_wildcard)
        if node.uppercase_wildcard is not None:
            result[UPPERCASE_WILDCARD] = self.structure(node.uppercase_wildcard)
        if node.thresholds:
            result[THRESHOLD_MARKER] = {
                str(value): self.structure(child)
                for value, child in sorted(node.thresholds.items())
            }
        if node.terminals:
            result[END_MARKER] = dict(sorted(node.terminals.items()))
        return result


def _validate_terms(terms: list[str], rule_id: int) -> None:
    """Check reserved-marker usage in pattern terms."""
    if not terms:
        raise RuleCompilationError("empty pattern", rule_id=rule_id)

    i = 0
    while i < len(terms):
        term = terms[i]
        if term == END_MARKER:
            raise RuleCompilationError(f"{END_MARKER!r} is reserved", rule_id=rule_id)
        if term == THRESHOLD_MARKER:
            if i + 1 >= len(terms) or not terms[i + 1].isdecimal():
                raise RuleCompilationError(
                    f"{THRESHOLD_MARKER!r} must be followed by an integer threshold",
                    rule_id=rule_id,
                )
            i += 2
            continue
        i += 1


def _prepare_terms(rule: ContextRule, case_insensitive: bool) -> list[str]:
    """Split and validate a rule pattern."""
    terms = rule.terms
    _validate_terms(terms, rule.id)

    prepared: list[str] = []
    i = 0
    while i < len(terms):
        term = terms[i]
        if term == THRESHOLD_MARKER:
            prepared.extend([term, str(int(terms[i + 1]))])
            i += 2
            continue
        if case_insensitive and term not in RESERVED_MARKERS:
            term = term.lower()
        prepared.append(term)
        i += 1
    return prepared


def compile_rules(
    rules: Iterable[ContextRule] | Mapping[int, ContextRule],
    case_insensitive: bool = False,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.LAST_WINS,
) -> RuleTrie:
    """Compile rules into a frozen RuleTrie.

    Bidirectional rules are expanded into a forward and a backward rule
    sharing the same id and pattern.

    Args:
        rules: Rules in definition order, or a mapping of id to rule.
        case_insensitive: Lower-case literal pattern terms before insertion.
        duplicate_policy: How to handle two rules defining the same
            determinant on the same pattern.

    Returns:
        The compiled, frozen trie.

    Raises:
        RuleCompilationError: On duplicate ids or reserved-marker misuse.
    """
    start_time = time.perf_counter()
    if isinstance(rules, Mapping):
        rules = rules.values()

    trie = RuleTrie(duplicate_policy=duplicate_policy)
    by_id: dict[int, ContextRule] = {}
    inserted = 0
    for rule in rules:
        if rule.id in by_id:
            raise RuleCompilationError("duplicate rule id", rule_id=rule.id)
        by_id[rule.id] = rule
        terms = _prepare_terms(rule, case_insensitive)
        for directed in rule.expand():
            if trie.insert(terms, directed.determinant, directed.id):
                inserted += 1

    trie.rules = by_id
    trie.freeze()

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"Compiled {len(by_id)} context rules ({inserted} patterns) into "
        f"{len(trie)} trie nodes in {elapsed_ms:.1f}ms"
    )
    return trie
