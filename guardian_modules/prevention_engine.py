"""
Prevention Engine

Chooses a response strategy for a detected crawler and applies it:
block, honeypot, alternate content, delay or monitor.
"""

import asyncio
import logging
import random
import time
from typing import Awaitable, Callable, Optional

from config import PreventionConfig
from models import GuardedResponse, PreventionDecision, RequestContext
from . import html_document
from .content_protector import ContentProtector
from .detection_result import DetectionResult
from .honeypot_generator import HoneypotGenerator, make_token


logger = logging.getLogger(__name__)

Handler = Callable[[RequestContext], Awaitable[GuardedResponse]]
Sleep = Callable[[float], Awaitable[None]]

PROTECTION_HEADERS = {
    "X-Robots-Tag": "noindex, nofollow",
    "X-Guardian-Protected": "true",
}

PLACEHOLDERS = (
    "This content is not available for automated access.",
    "This information requires authentication to access.",
    "Content only available to registered users.",
    "Please log in to view this content.",
    "This section is protected against automated access.",
)

MIN_DELAY_SECONDS = 0.5

STATIC_STRATEGIES = ("block", "honeypot", "alternate_content", "delay")


class PreventionEngine:
    """Apply the configured or adaptive prevention strategy"""

    def __init__(self, config: PreventionConfig,
                 content_protector: Optional[ContentProtector] = None,
                 honeypot_generator: Optional[HoneypotGenerator] = None,
                 rng: Optional[random.Random] = None,
                 sleep: Sleep = asyncio.sleep,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.content_protector = content_protector or ContentProtector(config.content_protection)
        self.honeypot_generator = honeypot_generator
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.clock = clock

    def choose_strategy(self, result: Optional[DetectionResult] = None) -> str:
        if self.config.adaptive and result is not None:
            return self._adaptive_strategy(result.score)

        strategy = self.config.strategy
        if strategy not in STATIC_STRATEGIES:
            logger.warning(f"Unknown prevention strategy '{strategy}', falling back to delay")
            return "delay"
        return strategy

    def _adaptive_strategy(self, score: int) -> str:
        thresholds = self.config.thresholds
        if score >= thresholds.block:
            return "block"
        if score >= thresholds.honeypot:
            return "honeypot"
        if score >= thresholds.alternate:
            return "alternate_content"
        if score >= thresholds.delay:
            return "delay"
        return "monitor"

    async def prevent(self, ctx: RequestContext, next_handler: Handler,
                      result: Optional[DetectionResult] = None) -> PreventionDecision:
        strategy = self.choose_strategy(result)
        if strategy == "honeypot" and self.honeypot_generator is None:
            strategy = "alternate_content"

        if strategy == "block":
            response = self.block_response()
        elif strategy == "honeypot":
            response = self.honeypot_response(ctx)
        elif strategy == "alternate_content":
            response = await self.alternate_content_response(ctx, next_handler)
        elif strategy == "delay":
            response = await self.delay_response(ctx, next_handler)
        else:
            response = await self.monitor_response(ctx, next_handler)

        return PreventionDecision(strategy=strategy, response=response)

    def block_response(self) -> GuardedResponse:
        return GuardedResponse(
            body="Blocked",
            status=403,
            headers=dict(PROTECTION_HEADERS),
            content_type="text/plain; charset=utf-8",
        )

    def new_token(self) -> str:
        return make_token(self.rng)

    def honeypot_response(self, ctx: RequestContext) -> GuardedResponse:
        token = self.new_token()
        headers = dict(PROTECTION_HEADERS)
        headers["X-Guardian-Token"] = token
        return GuardedResponse(
            body=self.honeypot_generator.generate(ctx, token),
            status=200,
            headers=headers,
        )

    async def alternate_content_response(self, ctx: RequestContext, next_handler: Handler) -> GuardedResponse:
        response = await next_handler(ctx)
        if not response.is_html():
            return response

        soup = html_document.parse(response.body)
        html_document.add_meta(soup, "guardian-protected", "true")
        html_document.add_meta(soup, "robots", "noindex, nofollow")

        body = html_document.ensure_body(soup)
        body.clear()
        body["class"] = [html_document.PROTECTED_CLASS]
        placeholder = soup.new_tag("div", attrs={"class": "guardian-placeholder"})
        placeholder.string = self.rng.choice(PLACEHOLDERS)
        body.append(placeholder)

        response.body = str(soup)
        response.headers.update(PROTECTION_HEADERS)
        return response

    async def delay_response(self, ctx: RequestContext, next_handler: Handler) -> GuardedResponse:
        started = self.clock()
        min_delay = max(MIN_DELAY_SECONDS, self.config.delay_seconds)
        await self.sleep(min_delay)

        response = await next_handler(ctx)
        if response.is_html():
            soup = html_document.parse(response.body)
            html_document.add_class(html_document.ensure_body(soup))
            html_document.add_meta(soup, "guardian-protected", "true")
            html_document.mark_content_nodes(soup)
            response.body = self._protect(str(soup))
            response.headers["X-Robots-Tag"] = PROTECTION_HEADERS["X-Robots-Tag"]

        elapsed = self.clock() - started
        if elapsed < min_delay:
            await self.sleep(min_delay - elapsed)
            elapsed = self.clock() - started

        response.headers["X-Guardian-Protected"] = "true"
        response.headers["X-Guardian-Delay"] = f"{elapsed:.3f}"
        return response

    async def monitor_response(self, ctx: RequestContext, next_handler: Handler) -> GuardedResponse:
        response = await next_handler(ctx)
        if not response.is_html():
            return response

        soup = html_document.parse(response.body)
        html_document.add_class(html_document.ensure_body(soup))
        response.body = self._protect(str(soup))
        response.headers.update(PROTECTION_HEADERS)
        return response

    def _protect(self, content: str) -> str:
        if not self.config.protect_content:
            return content
        return self.content_protector.protect(content)
