# ============================================================================
# FILE: tests/unit/test_agents.py
# ============================================================================
"""
Unit tests for the matching agents and the Agent base class
"""

import pytest

from rx_matching.core.agent_base import Agent
from rx_matching.core.context.enums import MatchType
from rx_matching.core.context.line_context import LineContext
from rx_matching.core.context.medicine_line import MedicineLineRaw
from rx_matching.processors.prescription.agents import CatalogMatchAgent, SuggestionAgent
from rx_matching.processors.prescription.catalog_matcher import CatalogMatcher
from rx_matching.processors.prescription.similarity_ranker import SimilarityRanker


def make_context(candidate, alternatives=None, **kwargs):
    return LineContext(
        line=MedicineLineRaw(original_text=candidate, line_index=0),
        candidate=candidate,
        alternatives=alternatives or [],
        **kwargs
    )


class BrokenAgent(Agent):
    def get_name(self) -> str:
        return "BrokenAgent"

    async def execute(self, context):
        raise ValueError("unexpected input")


# ============================================================================
# Agent base
# ============================================================================

@pytest.mark.asyncio
async def test_run_turns_failure_into_warning():
    agent = BrokenAgent()
    context = make_context("Paracetamol 500mg")

    result = await agent.run(context)

    assert result["decision"] == "error"
    assert result["confidence"] == 0.0
    assert "unexpected input" in result["error"]
    assert not context.catalog_unavailable
    assert context.warnings == ["BrokenAgent failed: unexpected input"]
    assert context.errors == ["BrokenAgent failed: unexpected input"]
    assert agent.get_metrics()["failure_count"] == 1


@pytest.mark.asyncio
async def test_run_flags_catalog_failure(failing_catalog):
    agent = CatalogMatchAgent(CatalogMatcher(failing_catalog))
    context = make_context("Paracetamol 500mg")

    result = await agent.run(context)

    assert result["decision"] == "error"
    assert context.catalog_unavailable
    assert context.match is None
    assert context.errors == []
    assert context.agent_executions[0]["agent"] == "CatalogMatchAgent"


def test_config_override():
    agent = BrokenAgent(config={"suggestion_limit": 2})
    assert agent.config["suggestion_limit"] == 2
    assert "log_level" in agent.config


# ============================================================================
# CatalogMatchAgent
# ============================================================================

@pytest.mark.asyncio
async def test_match_agent_exact(memory_catalog):
    agent = CatalogMatchAgent(CatalogMatcher(memory_catalog))
    context = make_context("Paracetamol 500mg")

    result = await agent.run(context)

    assert result["decision"] == "exact"
    assert result["product_id"] == "P001"
    assert context.is_resolved
    assert agent.get_metrics()["execution_count"] == 1


@pytest.mark.asyncio
async def test_match_agent_tries_brand_alternative(memory_catalog):
    """Unknown brand, known generic written in parentheses"""
    agent = CatalogMatchAgent(CatalogMatcher(memory_catalog))
    context = make_context("Panadol 500mg", alternatives=["Hapacol 650mg"])

    await agent.run(context)

    assert context.match.product.id == "P002"
    assert context.match.match_type == MatchType.EXACT


@pytest.mark.asyncio
async def test_match_agent_first_matching_spelling_wins(memory_catalog):
    """The brand is only tried when the cleaned entry finds nothing"""
    agent = CatalogMatchAgent(CatalogMatcher(memory_catalog))
    context = make_context("Paracetamol", alternatives=["Hapacol 650mg"])

    await agent.run(context)

    assert context.match.product.id == "P001"
    assert context.match.match_type == MatchType.NAME_ONLY


@pytest.mark.asyncio
async def test_match_agent_no_match(memory_catalog):
    agent = CatalogMatchAgent(CatalogMatcher(memory_catalog))
    context = make_context("Xyzabc 100mg")

    result = await agent.run(context)

    assert result["decision"] == "no_match"
    assert context.match is None
    assert not context.catalog_unavailable


# ============================================================================
# SuggestionAgent
# ============================================================================

@pytest.mark.asyncio
async def test_suggestion_agent_skips_resolved_line(memory_catalog):
    context = make_context("Paracetamol 500mg")
    await CatalogMatchAgent(CatalogMatcher(memory_catalog)).run(context)

    result = await SuggestionAgent(SimilarityRanker(memory_catalog)).run(context)

    assert result["decision"] == "skipped"
    assert context.suggestions == []


@pytest.mark.asyncio
async def test_suggestion_agent_limits(memory_catalog):
    ranker = SimilarityRanker(memory_catalog)

    context = make_context("Celecoxib 200mg")
    await SuggestionAgent(ranker, limit=1).run(context)
    assert [s.product.id for s in context.suggestions] == ["P006"]

    # Per-request limit wins over the agent default
    context = make_context("Celecoxib 200mg", suggestion_limit=2)
    await SuggestionAgent(ranker, limit=1).run(context)
    assert len(context.suggestions) == 2

    context = make_context("Celecoxib 200mg", suggestion_limit=0)
    result = await SuggestionAgent(ranker).run(context)
    assert result["decision"] == "no_suggestions"
    assert context.suggestions == []


@pytest.mark.asyncio
async def test_suggestion_agent_merges_alternatives(memory_catalog):
    agent = SuggestionAgent(SimilarityRanker(memory_catalog))
    context = make_context("Paracetamol 650mg", alternatives=["Paracetamol 650 mg"])

    result = await agent.run(context)

    ids = [s.product.id for s in context.suggestions]
    assert result["decision"] == "suggested"
    assert ids.count("P001") == 1
    assert ids[0] == "P001"


@pytest.mark.asyncio
async def test_suggestion_agent_catalog_failure(failing_catalog):
    context = make_context("Paracetamol 650mg")

    await SuggestionAgent(SimilarityRanker(failing_catalog)).run(context)

    assert context.catalog_unavailable
    assert context.suggestions == []
