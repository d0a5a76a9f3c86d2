"""Services for the ConText engine.

- rule_trie: compiles rules into a frozen pattern trie
- match_walker: multi-branch walk of the trie over a token sequence
- numeric_threshold: "> N" threshold branches
- overlap_resolver: best span per determinant
- rule_loader: delimited rule text -> ContextRule records
- context_rules: ContextRuleService facade and singleton
"""

from context_engine.services.context_rules import (
    ContextRuleService,
    get_context_rule_service,
    reset_context_rule_service,
)
from context_engine.services.match_walker import MatchWalker, is_uppercase
from context_engine.services.numeric_threshold import match_digits, parse_numeric_token
from context_engine.services.overlap_resolver import OverlapResolver
from context_engine.services.rule_loader import load_rule_file, parse_rule_line, parse_rule_lines
from context_engine.services.rule_trie import (
    END_MARKER,
    THRESHOLD_MARKER,
    UPPERCASE_WILDCARD,
    WORD_WILDCARD,
    RuleTrie,
    TrieNode,
    compile_rules,
)
from context_engine.services.spans import ContextSpan, Token, as_tokens

__all__ = [
    # Engine
    "ContextRuleService",
    "get_context_rule_service",
    "reset_context_rule_service",
    # Compilation
    "RuleTrie",
    "TrieNode",
    "compile_rules",
    "WORD_WILDCARD",
    "UPPERCASE_WILDCARD",
    "THRESHOLD_MARKER",
    "END_MARKER",
    # Matching
    "MatchWalker",
    "OverlapResolver",
    "is_uppercase",
    "match_digits",
    "parse_numeric_token",
    # Loading
    "load_rule_file",
    "parse_rule_line",
    "parse_rule_lines",
    # Records
    "ContextSpan",
    "Token",
    "as_tokens",
]
