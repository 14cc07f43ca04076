"""End-to-end tests through the Guardian facade and server statistics."""

import logging
import random

from config import Config
from models import GuardedResponse, ServerStats
from guardian_modules.guardian import Guardian
from server_stats import StatsCollector

from conftest import GPTBOT_UA


PAGE = "<!DOCTYPE html><html><head></head><body><article><p>Members-only guide.</p></article></body></html>"


async def page_handler(ctx):
    return GuardedResponse(body=PAGE)


async def test_ai_crawler_is_blocked(store, make_context, caplog):
    guardian = Guardian(Config(), store, rng=random.Random(1))
    ctx = make_context(user_agent=GPTBOT_UA)

    with caplog.at_level(logging.INFO, logger="guardian"):
        result = await guardian.analyze(ctx)
        decision = await guardian.prevent(ctx, page_handler, result)

    assert result.score == 100
    assert decision.strategy == "block"
    assert decision.response.status == 403
    assert any(r.name == "guardian" and r.score == 100 for r in caplog.records)


async def test_missing_user_agent_gets_honeypot(store, make_context):
    guardian = Guardian(Config(), store, rng=random.Random(1))
    ctx = make_context(user_agent="", path="/blog/launch")

    result = await guardian.analyze(ctx)
    decision = await guardian.prevent(ctx, page_handler, result)

    assert decision.strategy == "honeypot"
    assert "X-Guardian-Token" in decision.response.headers
    assert "Members-only guide" not in decision.response.body


async def test_browser_is_not_detected(store, make_context):
    guardian = Guardian(Config(), store)

    result = await guardian.analyze(make_context())

    assert not result.is_detected()


def test_protect_content_respects_config(store):
    protected = Guardian(Config(), store).protect_content(PAGE)
    assert "guardian-protected" in protected


def test_stats_collector():
    stats = StatsCollector(ServerStats())
    stats.increment_total()
    stats.increment_total()
    stats.record_decision(True, "block")
    stats.record_decision(False, "none")
    stats.record_report(True)
    stats.record_report(False)

    data = stats.get_stats()

    assert data["total_requests"] == 2
    assert data["detected_count"] == 1
    assert data["passed_count"] == 1
    assert data["strategies"] == {"block": 1, "none": 1}
    assert data["client_reports"] == 1
    assert data["rejected_reports"] == 1
    assert data["detection_rate"] == 50.0
