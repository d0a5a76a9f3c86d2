"""Pytest configuration and fixtures for ConText engine tests."""

from collections.abc import AsyncGenerator, Iterator

import pytest
from httpx import ASGITransport, AsyncClient

from context_engine.api.context import get_engine
from context_engine.main import app
from context_engine.schemas.rule import ContextRule
from context_engine.services.context_rules import ContextRuleService, reset_context_rule_service

RULE_LINES = [
    "no|forward|trigger|NEG",
    "denies|forward|trigger|NEG",
    "no evidence of|forward|trigger|NEG",
    "ruled out|backward|trigger|NEG",
    "but|forward|termination|NEG",
    "unlikely|both|trigger|UNCERTAIN",
    "history of|forward|trigger|HISTORICAL",
    "for > 14 days|forward|trigger|HISTORICAL",
]


@pytest.fixture
def rule_lines() -> list[str]:
    """Small rule set in pipe-delimited form."""
    return list(RULE_LINES)


@pytest.fixture
def engine(rule_lines: list[str]) -> ContextRuleService:
    """Case-sensitive engine compiled from the small rule set."""
    return ContextRuleService.from_lines(rule_lines, case_insensitive=False)


@pytest.fixture
def resolver_rules() -> dict[int, ContextRule]:
    """Rules referenced by id in resolver tests."""
    return {
        1: ContextRule(id=1, pattern="no", determinant="fNEG", direction="forward"),
        2: ContextRule(
            id=2, pattern="but", determinant="fNEG", direction="forward", trigger_type="termination"
        ),
        3: ContextRule(id=3, pattern="ruled out", determinant="bNEG", direction="backward"),
        4: ContextRule(
            id=4, pattern="but", determinant="bNEG", direction="backward", trigger_type="termination"
        ),
    }


@pytest.fixture(autouse=True)
def clean_singleton() -> Iterator[None]:
    """Drop the cached engine around every test."""
    reset_context_rule_service()
    yield
    reset_context_rule_service()


@pytest.fixture
async def client(engine: ContextRuleService) -> AsyncGenerator[AsyncClient, None]:
    """Create async test client backed by the small rule set.

    Overrides the engine dependency so tests do not depend on the
    configured rule file.
    """
    app.dependency_overrides[get_engine] = lambda: engine

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    # Clean up overrides
    app.dependency_overrides.clear()


@pytest.fixture
async def raw_client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client without dependency overrides."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
