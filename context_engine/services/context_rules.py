"""ConText rule engine service.

Compiles a rule set once and scans token sequences for context triggers
(negation, hypothetical, historical, family history, ...), returning the
best trigger span and scope window per determinant.

This module uses a singleton pattern so the configured rule set is compiled
only once and shared across callers.
"""

import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from threading import Lock
from typing import Any, ClassVar

from context_engine.core.config import settings
from context_engine.schemas.base import DuplicatePolicy, TriggerType
from context_engine.schemas.rule import ContextRule
from context_engine.schemas.span import ContextMatch
from context_engine.services.match_walker import MatchWalker
from context_engine.services.rule_loader import load_rule_file, parse_rule_lines
from context_engine.services.rule_trie import compile_rules
from context_engine.services.spans import ContextSpan, Token, as_tokens

logger = logging.getLogger(__name__)

# Singleton instance and lock for thread-safe initialization
_context_rule_service: "ContextRuleService | None" = None
_context_rule_lock = Lock()


class ContextRuleService:
    """Matches ConText rules against token sequences.

    Usage:
        service = ContextRuleService.from_lines([
            "denies|forward|trigger|NEG",
            "but|forward|termination|NEG",
        ])
        matches = service.process_rules(["patient", "denies", "chest", "pain"])
        matches["fNEG"]  # ContextSpan(begin=1, end=1, ...)
    """

    DEFAULT_RULES_FILE: ClassVar[str] = "context_rules.txt"

    def __init__(
        self,
        rules: Iterable[ContextRule] | Mapping[int, ContextRule],
        case_insensitive: bool | None = None,
        duplicate_policy: DuplicatePolicy | None = None,
        max_walk_steps: int | None = None,
    ) -> None:
        """Compile the rule set.

        Args:
            rules: Rules, or a mapping of rule id to rule.
            case_insensitive: Match ignoring case. Defaults to
                settings.case_insensitive.
            duplicate_policy: Handling of duplicate terminal determinants.
                Defaults to settings.duplicate_policy.
            max_walk_steps: Optional per-origin step budget. Defaults to
                settings.max_walk_steps.
        """
        self.case_insensitive = (
            settings.case_insensitive if case_insensitive is None else case_insensitive
        )
        self.duplicate_policy = duplicate_policy or settings.duplicate_policy
        self.max_walk_steps = (
            settings.max_walk_steps if max_walk_steps is None else max_walk_steps
        )

        start_time = time.perf_counter()
        self._trie = compile_rules(
            rules,
            case_insensitive=self.case_insensitive,
            duplicate_policy=self.duplicate_policy,
        )
        self._compile_time_ms = (time.perf_counter() - start_time) * 1000
        self._walker = MatchWalker(
            self._trie,
            case_insensitive=self.case_insensitive,
            max_steps=self.max_walk_steps,
        )

    @classmethod
    def from_lines(
        cls, lines: Iterable[str], delimiter: str = "|", **kwargs: Any
    ) -> "ContextRuleService":
        """Build a service from rule definition lines."""
        return cls(parse_rule_lines(lines, delimiter), **kwargs)

    @classmethod
    def from_file(
        cls, path: str | Path, delimiter: str | None = None, **kwargs: Any
    ) -> "ContextRuleService":
        """Build a service from a rule file."""
        return cls(load_rule_file(path, delimiter), **kwargs)

    @property
    def rules(self) -> Mapping[int, ContextRule]:
        return self._trie.rules

    def process_rules(
        self,
        tokens: Sequence[Token | str],
        start_position: int = 0,
        matches: dict[str, ContextSpan] | None = None,
    ) -> dict[str, ContextSpan]:
        """Scan tokens for context triggers.

        Args:
            tokens: Token objects or plain strings. Token objects are
                lower-cased in place in case-insensitive mode.
            start_position: Index of the first token to scan from.
            matches: Result table to update. A new one is created if omitted.

        Returns:
            Determinant -> retained span.

        Raises:
            ValueError: If start_position is outside the sequence.
        """
        if start_position < 0 or start_position > len(tokens):
            raise ValueError(
                f"start_position {start_position} outside token sequence of length {len(tokens)}"
            )
        if matches is None:
            matches = {}

        self._walker.scan(as_tokens(tokens), start_position, matches)
        logger.debug(f"Scanned {len(tokens) - start_position} tokens: {len(matches)} determinants")
        return matches

    def find_context(
        self,
        tokens: Sequence[Token | str],
        start_position: int = 0,
    ) -> list[ContextMatch]:
        """Scan tokens and return the retained spans as schema records."""
        tokens = as_tokens(tokens)
        matches = self.process_rules(tokens, start_position)
        return [
            self.to_match(determinant, span, tokens)
            for determinant, span in sorted(matches.items())
        ]

    def to_match(
        self,
        determinant: str,
        span: ContextSpan,
        tokens: Sequence[Token] | None = None,
    ) -> ContextMatch:
        """Convert a retained span into a ContextMatch."""
        rule = self.rules.get(span.rule_id)
        text = None
        if tokens is not None:
            text = " ".join(token.text for token in tokens[span.begin : span.end + 1])
        return ContextMatch(
            determinant=determinant,
            rule_id=span.rule_id,
            begin=span.begin,
            end=span.end,
            win_begin=span.win_begin,
            win_end=span.win_end,
            trigger_type=rule.trigger_type if rule else TriggerType.TRIGGER,
            text=text,
        )

    def get_stats(self) -> dict[str, Any]:
        """Get compiled rule set statistics."""
        return {
            "rule_count": len(self._trie.rules),
            "node_count": len(self._trie),
            "case_insensitive": self.case_insensitive,
            "duplicate_policy": self.duplicate_policy.value,
            "compile_time_ms": round(self._compile_time_ms, 2),
        }


def _find_fixtures_dir() -> Path:
    """Find the fixtures directory."""
    current = Path(__file__).parent
    while current.parent != current:
        potential_path = current / "fixtures"
        if potential_path.exists():
            return potential_path
        current = current.parent
    # Fallback to relative path from cwd
    return Path("fixtures")


def default_rules_path() -> Path:
    """Rule file used when settings.rules_path is not set."""
    if settings.rules_path:
        return Path(settings.rules_path)
    return _find_fixtures_dir() / ContextRuleService.DEFAULT_RULES_FILE


def get_context_rule_service() -> ContextRuleService:
    """Get the singleton ContextRuleService built from the configured rule file.

    Thread-safe: uses double-checked locking.

    Raises:
        RuleLoadError: If the rule file cannot be read or parsed.
    """
    global _context_rule_service
    if _context_rule_service is None:
        with _context_rule_lock:
            if _context_rule_service is None:
                _context_rule_service = ContextRuleService.from_file(
                    default_rules_path(),
                    delimiter=settings.rules_delimiter,
                )
    return _context_rule_service


def reset_context_rule_service() -> None:
    """Reset the singleton service (mainly for testing)."""
    global _context_rule_service
    with _context_rule_lock:
        _context_rule_service = None
