"""Exceptions raised at the rule loading and compilation boundary."""


class ContextEngineError(Exception):
    """Base class for ConText engine errors."""


class RuleLoadError(ContextEngineError):
    """A rule definition could not be read or parsed."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class RuleCompilationError(ContextEngineError):
    """A rule could not be compiled into the pattern trie."""

    def __init__(self, message: str, rule_id: int | None = None) -> None:
        self.rule_id = rule_id
        if rule_id is not None:
            message = f"rule {rule_id}: {message}"
        super().__init__(message)
