"""
Rate Limit Analyzer

Counters advance on every call, so results from this analyzer must never be
served from the fingerprint cache on their own.
"""

import time
from datetime import timedelta

from models import RequestContext
from .detection_result import DetectionResult
from .fingerprint_generator import FingerprintGenerator
from .session_store import Clock, SessionStore


SHORT_TERM_RATE_THRESHOLD = 30     # Requests per minute
MEDIUM_TERM_RATE_THRESHOLD = 100   # Requests per 5 minutes
BURST_COUNT_THRESHOLD = 5          # Requests in the burst window
USER_AGENT_COUNT_THRESHOLD = 3     # Unique user agents per IP

SHORT_TERM_WINDOW = timedelta(minutes=1)
MEDIUM_TERM_WINDOW = timedelta(minutes=5)
BURST_WINDOW_SECONDS = 2.0
BURST_RECORD_TTL = timedelta(seconds=10)
USER_AGENT_TTL = timedelta(minutes=30)


class RateLimitAnalyzer:
    """Score request volume per (IP, user agent) identity"""

    def __init__(self, store: SessionStore, clock: Clock = time.time):
        self.store = store
        self.clock = clock
        self.fingerprints = FingerprintGenerator()

    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        identifier = self.fingerprints.visitor_id(ctx)
        result = DetectionResult()

        short_term = await self.store.incr(f"guardian_rate_short_{identifier}", SHORT_TERM_WINDOW)
        if short_term > SHORT_TERM_RATE_THRESHOLD:
            result.add_signal(
                "high_request_rate_short_term", short_term,
                min(50, (short_term - SHORT_TERM_RATE_THRESHOLD) * 2),
            )

        medium_term = await self.store.incr(f"guardian_rate_medium_{identifier}", MEDIUM_TERM_WINDOW)
        if medium_term > MEDIUM_TERM_RATE_THRESHOLD:
            result.add_signal(
                "high_request_rate_medium_term", medium_term,
                min(40, (medium_term - MEDIUM_TERM_RATE_THRESHOLD) / 5),
            )

        burst = await self._check_burst(identifier)
        if burst > BURST_COUNT_THRESHOLD:
            result.add_signal("request_bursting", burst, min(60, burst * 10))

        user_agents = await self._count_user_agents(ctx)
        if user_agents > USER_AGENT_COUNT_THRESHOLD:
            result.add_signal("multiple_user_agents", user_agents, min(40, user_agents * 10))

        return result

    async def _check_burst(self, identifier: str) -> int:
        key = f"guardian_burst_{identifier}"
        now = self.clock()
        burst = await self.store.get_json(key, None)

        if not burst or now - burst["start_time"] > BURST_WINDOW_SECONDS:
            burst = {"count": 1, "start_time": now}
        else:
            burst["count"] += 1

        await self.store.set_json(key, burst, BURST_RECORD_TTL)
        return burst["count"]

    async def _count_user_agents(self, ctx: RequestContext) -> int:
        key = f"guardian_user_agents_{ctx.client_ip}"
        user_agents = await self.store.get_json(key, [])
        current = ctx.user_agent

        if not current or current in user_agents:
            return len(user_agents)

        user_agents.append(current)
        await self.store.set_json(key, user_agents, USER_AGENT_TTL)
        return len(user_agents)
