#!/usr/bin/env python3
"""
Clinical ConText Engine - Demo CLI

Scan a sentence with a ConText rule file and show the trigger span and
scope window found for every determinant.

Usage:
    python demo_cli.py --sample                          # Use sample sentence
    python demo_cli.py --text "Patient denies chest pain"
    python demo_cli.py --text "..." --rules my_rules.txt --json
"""

import argparse
import json
import logging
import re
import sys

from context_engine.core.config import settings
from context_engine.core.exceptions import ContextEngineError
from context_engine.schemas.span import ContextMatch
from context_engine.services.context_rules import ContextRuleService, default_rules_path
from context_engine.services.spans import Token

# ============================================================================
# Sample Sentence
# ============================================================================

SAMPLE_SENTENCE = (
    "Patient denies chest pain but reports dyspnea for 30-days ; "
    "family history of CAD , PE was ruled out"
)

# Demo tokenizer: words (keeping "30-days" and "s/p" whole) and punctuation
TOKEN_PATTERN = re.compile(r"\w+(?:[-/]\w+)*|[^\w\s]")

# ============================================================================
# Display Functions
# ============================================================================


class Colors:
    """ANSI color codes for terminal output."""
    BOLD = '\033[1m'
    CYAN = '\033[96m'
    YELLOW = '\033[93m'
    GREEN = '\033[92m'
    GRAY = '\033[90m'
    END = '\033[0m'


def print_header(text: str, char: str = "="):
    """Print a formatted header."""
    width = 80
    print()
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{text.center(width)}{Colors.END}")
    print(f"{Colors.BOLD}{Colors.CYAN}{char * width}{Colors.END}")


def print_item(label: str, value: str, indent: int = 2):
    """Print a labeled item."""
    spaces = " " * indent
    print(f"{spaces}{Colors.GRAY}{label}:{Colors.END} {value}")


def tokenize(text: str) -> list[Token]:
    """Split demo text into tokens with character offsets."""
    return [
        Token(match.group(), start_offset=match.start(), end_offset=match.end())
        for match in TOKEN_PATTERN.finditer(text)
    ]


def display_results(tokens: list[Token], matches: list[ContextMatch]):
    """Print tokens and the retained span of each determinant."""
    print_item("Tokens", " ".join(f"{i}:{token.text}" for i, token in enumerate(tokens)))
    if not matches:
        print(f"  {Colors.YELLOW}!{Colors.END} No context triggers found")
        return
    print()
    for match in matches:
        print(
            f"  {Colors.GREEN}✓{Colors.END} {Colors.BOLD}{match.determinant:<16}{Colors.END} "
            f"'{match.text}' [{match.begin}, {match.end}] "
            f"window [{match.win_begin}, {match.win_end}] "
            f"{Colors.GRAY}rule {match.rule_id} ({match.trigger_type.value}){Colors.END}"
        )


# ============================================================================
# Main Entry Point
# ============================================================================


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Clinical ConText Engine - Demo CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python demo_cli.py --sample
  python demo_cli.py --text "No evidence of pneumonia"
  python demo_cli.py --text "..." --rules rules.csv --case-insensitive --json
"""
    )
    parser.add_argument('--text', '-t', help='Sentence to scan')
    parser.add_argument('--sample', '-s', action='store_true', help='Use sample sentence')
    parser.add_argument('--rules', '-r', help='Rule file (defaults to the configured rule set)')
    parser.add_argument('--case-insensitive', '-i', action='store_true', help='Ignore case when matching')
    parser.add_argument('--start', type=int, default=0, help='Token index to start scanning from')
    parser.add_argument('--json', action='store_true', help='Print matches as JSON')

    args = parser.parse_args(argv)
    logging.basicConfig(level=settings.log_level)

    if args.sample:
        text = SAMPLE_SENTENCE
    elif args.text:
        text = args.text
    else:
        parser.print_usage()
        print("Error: provide --text or --sample")
        return 1

    rules_path = args.rules or default_rules_path()
    try:
        engine = ContextRuleService.from_file(
            rules_path,
            case_insensitive=True if args.case_insensitive else None,
        )
    except ContextEngineError as e:
        print(f"Error: {e}")
        return 1

    tokens = tokenize(text)
    try:
        matches = engine.find_context(tokens, args.start)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    if args.json:
        print(json.dumps([match.model_dump(mode="json") for match in matches], indent=2))
    else:
        print_header("CONTEXT SCAN")
        print_item("Rules", f"{rules_path} ({engine.get_stats()['rule_count']} rules)")
        display_results(tokens, matches)
    return 0


if __name__ == "__main__":
    sys.exit(main())
