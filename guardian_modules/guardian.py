"""
Guardian - entry point tying detection, prevention and client reports together
"""

import logging
import random
from typing import Any, Dict, Optional

from config import Config
from models import PreventionDecision, RequestContext
from .client_report import parse_report, score_report, signal_names
from .content_protector import ContentProtector
from .crawler_detector import CrawlerDetector
from .detection_result import DetectionResult
from .fingerprint_generator import FingerprintGenerator
from .honeypot_generator import HoneypotGenerator
from .prevention_engine import Handler, PreventionEngine
from .request_filter import RequestFilter
from .session_store import SessionStore


logger = logging.getLogger(__name__)


class Guardian:
    """AI crawler detection and prevention"""

    def __init__(self, config: Config, store: SessionStore,
                 detector: Optional[CrawlerDetector] = None,
                 engine: Optional[PreventionEngine] = None,
                 rng: Optional[random.Random] = None):
        self.config = config
        self.store = store
        self.rng = rng or random.Random()
        self.detector = detector or CrawlerDetector(config, store)
        self.content_protector = ContentProtector(config.prevention.content_protection)
        self.engine = engine or PreventionEngine(
            config.prevention,
            content_protector=self.content_protector,
            honeypot_generator=HoneypotGenerator(self.rng),
            rng=self.rng,
        )
        self.request_filter = RequestFilter(config.whitelist, config.api)
        self.fingerprints = FingerprintGenerator()
        self.channel = logging.getLogger(config.logging.channel)

    def skip_reason(self, ctx: RequestContext) -> Optional[str]:
        """Why detection is skipped for this request, None when it runs"""
        return self.request_filter.skip_reason(ctx)

    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        result = await self.detector.analyze(ctx)
        if self.config.logging.enabled and result.is_detected():
            self._log_detection(ctx, result)
        return result

    async def prevent(self, ctx: RequestContext, next_handler: Handler,
                      result: Optional[DetectionResult] = None) -> PreventionDecision:
        return await self.engine.prevent(ctx, next_handler, result)

    def protect_content(self, content: str) -> str:
        if not self.config.prevention.protect_content:
            return content
        return self.content_protector.protect(content)

    async def process_client_report(self, ctx: RequestContext, payload: Any) -> Dict[str, Any]:
        """Score a browser-side report; invalid payloads are rejected untouched"""
        if not self.config.detection.client_enabled:
            return {"success": False, "error": "client detection disabled"}

        report = parse_report(payload)
        if report is None:
            return {"success": False, "error": "invalid report"}

        score = score_report(report)
        detected = score >= self.config.detection.threshold
        names = signal_names(report)

        key = f"guardian_client_report_{self.fingerprints.visitor_id(ctx)}"
        try:
            await self.store.set_json(key, {
                "score": score,
                "signals": names,
                "path": report.path or ctx.path,
                "time": ctx.timestamp,
            }, self.config.detection.cache_duration)
        except Exception as e:
            logger.warning(f"Failed to store client report: {e}")

        if detected and self.config.logging.enabled:
            self.channel.info(
                "Guardian client-side detection",
                extra={
                    "ip": ctx.client_ip,
                    "user_agent": ctx.user_agent,
                    "path": report.path or ctx.path,
                    "url": report.url,
                    "score": score,
                    "signals": names,
                },
            )

        return {"success": True, "score": score, "detected": detected}

    def _log_detection(self, ctx: RequestContext, result: DetectionResult):
        self.channel.info(
            "Guardian detected potential AI crawler",
            extra={
                "ip": ctx.client_ip,
                "user_agent": ctx.user_agent,
                "path": ctx.path,
                "score": result.score,
                "confidence": result.confidence_level(),
                "signals": result.signals,
            },
        )
