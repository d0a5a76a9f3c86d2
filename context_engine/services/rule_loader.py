"""Load ConText rules from delimited text.

Each non-blank line that does not start with ``#`` defines one rule:

    pattern|direction|trigger_type|modifier

for example ``no evidence of|forward|trigger|NEG``. The rule id is the
1-based line number, so ids point back at the rule source. Fields follow
CSV quoting rules, so a pattern containing the delimiter is written quoted:
``"no , but",forward,termination,NEG``.
"""

import csv
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from context_engine.core.exceptions import RuleLoadError
from context_engine.schemas.rule import ContextRule

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "#"
RULE_FIELDS = ("pattern", "direction", "trigger_type", "modifier")

# File extensions with an implied delimiter
DELIMITER_BY_SUFFIX = {
    ".csv": ",",
    ".tsv": "\t",
}


def parse_rule_line(line: str, line_number: int, delimiter: str = "|") -> ContextRule:
    """Parse one rule definition line.

    Raises:
        RuleLoadError: If the line has the wrong number of fields or an
            invalid value.
    """
    try:
        row = next(csv.reader([line], delimiter=delimiter, skipinitialspace=True), [])
    except csv.Error as e:
        raise RuleLoadError(str(e), line_number=line_number) from e
    values = [value.strip() for value in row]
    if len(values) != len(RULE_FIELDS):
        raise RuleLoadError(
            f"expected {len(RULE_FIELDS)} fields ({delimiter.join(RULE_FIELDS)}), "
            f"got {len(values)}",
            line_number=line_number,
        )
    data = dict(zip(RULE_FIELDS, values))
    data["direction"] = data["direction"].lower()
    data["trigger_type"] = data["trigger_type"].lower() or "trigger"
    try:
        return ContextRule(id=line_number, **data)
    except (ValidationError, ValueError) as e:
        raise RuleLoadError(str(e), line_number=line_number) from e


def parse_rule_lines(lines: Iterable[str], delimiter: str = "|") -> dict[int, ContextRule]:
    """Parse rule definition lines into rules keyed by line number."""
    rules: dict[int, ContextRule] = {}
    for line_number, line in enumerate(lines, start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(COMMENT_PREFIX):
            continue
        rules[line_number] = parse_rule_line(stripped, line_number, delimiter)
    return rules


def load_rule_file(path: str | Path, delimiter: str | None = None) -> dict[int, ContextRule]:
    """Read a rule file.

    Args:
        path: Rule file path.
        delimiter: Field delimiter. Defaults to ``,`` for .csv files,
            tab for .tsv files and ``|`` otherwise.

    Returns:
        Rules keyed by line number.

    Raises:
        RuleLoadError: If the file is missing or a line is malformed.
    """
    path = Path(path)
    if delimiter is None:
        delimiter = DELIMITER_BY_SUFFIX.get(path.suffix.lower(), "|")
    try:
        with open(path, encoding="utf-8") as f:
            lines = f.read().splitlines()
    except OSError as e:
        raise RuleLoadError(f"cannot read rule file {path}: {e}") from e

    rules = parse_rule_lines(lines, delimiter)
    logger.info(f"Loaded {len(rules)} context rules from {path}")
    return rules
