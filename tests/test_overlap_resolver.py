"""Tests for keeping the best span per determinant."""

import pytest

from context_engine.schemas import ContextRule
from context_engine.services.overlap_resolver import OverlapResolver
from context_engine.services.spans import ContextSpan


class TestInstall:
    """Tests for the first span of a determinant."""

    def test_first_candidate_installed(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that a new determinant stores the candidate with its own window."""
        resolver = OverlapResolver(resolver_rules)
        resolver.consider("fNEG", 1, 2, 3)

        span = resolver.matches["fNEG"]
        assert (span.begin, span.end, span.width) == (2, 2, 0)
        assert (span.win_begin, span.win_end) == (2, 2)
        assert span.rule_id == 1

    def test_writes_into_given_table(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that the resolver updates the caller's mapping."""
        matches: dict[str, ContextSpan] = {}
        OverlapResolver(resolver_rules, matches).consider("bNEG", 3, 4, 6)
        assert matches["bNEG"].end == 5


class TestForwardPriority:
    """Tests for forward determinants."""

    def test_existing_at_or_after_candidate_end_kept(
        self, resolver_rules: dict[int, ContextRule]
    ) -> None:
        """Test that a candidate ending before the existing span is skipped."""
        existing = ContextSpan(begin=5, end=6, rule_id=1)
        resolver = OverlapResolver(resolver_rules, {"fNEG": existing})
        resolver.consider("fNEG", 1, 2, 4)
        assert resolver.matches["fNEG"] is existing

    def test_wider_overlapping_existing_kept(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that 'no evidence of' is not replaced by the later 'of'."""
        existing = ContextSpan(begin=0, end=2, rule_id=1)
        resolver = OverlapResolver(resolver_rules, {"fNEG": existing})
        resolver.consider("fNEG", 1, 2, 3)
        assert resolver.matches["fNEG"] is existing

    def test_later_candidate_replaces_and_inherits_window(
        self, resolver_rules: dict[int, ContextRule]
    ) -> None:
        """Test that a later trigger replaces the span and keeps the window start."""
        resolver = OverlapResolver(resolver_rules, {"fNEG": ContextSpan(begin=0, end=0, rule_id=1)})
        resolver.consider("fNEG", 1, 3, 4)

        span = resolver.matches["fNEG"]
        assert (span.begin, span.end) == (3, 3)
        assert (span.win_begin, span.win_end) == (0, 3)

    def test_wider_candidate_replaces(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that a wider candidate from the same origin replaces a narrower one."""
        resolver = OverlapResolver(resolver_rules, {"fNEG": ContextSpan(begin=0, end=0, rule_id=1)})
        resolver.consider("fNEG", 1, 0, 3)
        assert (resolver.matches["fNEG"].begin, resolver.matches["fNEG"].end) == (0, 2)

    def test_termination_clamps_window_start(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that a termination trigger moves the window start to its end."""
        existing = ContextSpan(begin=0, end=1, rule_id=1, win_begin=0, win_end=10)
        resolver = OverlapResolver(resolver_rules, {"fNEG": existing})
        resolver.consider("fNEG", 2, 5, 6)

        span = resolver.matches["fNEG"]
        assert span.rule_id == 2
        assert (span.begin, span.end) == (5, 5)
        assert span.win_begin == 5

    def test_termination_keeps_later_window_start(
        self, resolver_rules: dict[int, ContextRule]
    ) -> None:
        """Test that a termination never moves the window start backwards."""
        existing = ContextSpan(begin=0, end=1, rule_id=1, win_begin=8, win_end=10)
        resolver = OverlapResolver(resolver_rules, {"fNEG": existing})
        resolver.consider("fNEG", 2, 5, 6)
        assert resolver.matches["fNEG"].win_begin == 8


class TestBackwardPriority:
    """Tests for backward determinants."""

    def test_earlier_existing_kept(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that a candidate starting after the existing span is skipped."""
        existing = ContextSpan(begin=1, end=2, rule_id=3)
        resolver = OverlapResolver(resolver_rules, {"bNEG": existing})
        resolver.consider("bNEG", 3, 4, 6)
        assert resolver.matches["bNEG"] is existing

    def test_wider_existing_kept(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that a wider existing span after the candidate wins."""
        existing = ContextSpan(begin=4, end=6, rule_id=3)
        resolver = OverlapResolver(resolver_rules, {"bNEG": existing})
        resolver.consider("bNEG", 3, 3, 4)
        assert resolver.matches["bNEG"] is existing

    def test_candidate_replaces_and_inherits_window_end(
        self, resolver_rules: dict[int, ContextRule]
    ) -> None:
        """Test that a replacing trigger keeps the existing window end."""
        existing = ContextSpan(begin=5, end=5, rule_id=3, win_begin=5, win_end=9)
        resolver = OverlapResolver(resolver_rules, {"bNEG": existing})
        resolver.consider("bNEG", 3, 2, 3)

        span = resolver.matches["bNEG"]
        assert (span.begin, span.end) == (2, 2)
        assert (span.win_begin, span.win_end) == (2, 9)

    def test_termination_clamps_window_end(self, resolver_rules: dict[int, ContextRule]) -> None:
        """Test that a backward termination moves the window end to its begin."""
        existing = ContextSpan(begin=5, end=5, rule_id=3, win_begin=5, win_end=9)
        resolver = OverlapResolver(resolver_rules, {"bNEG": existing})
        resolver.consider("bNEG", 4, 2, 3)

        span = resolver.matches["bNEG"]
        assert span.rule_id == 4
        assert span.win_end == 2


class TestOtherDeterminants:
    """Tests for determinants without a direction prefix."""

    @pytest.mark.parametrize("begin", [0, 7])
    def test_later_candidate_always_replaces(self, begin: int) -> None:
        """Test that unprefixed keys keep the latest candidate."""
        resolver = OverlapResolver({}, {"xKEY": ContextSpan(begin=3, end=5, rule_id=1)})
        resolver.consider("xKEY", 9, begin, begin + 1)
        assert resolver.matches["xKEY"].rule_id == 9
