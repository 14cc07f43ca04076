"""
Crawler Detector - runs the detection pipeline
"""

import logging
from typing import Dict, Optional, Protocol

from config import Config
from models import RequestContext
from .behavioral_analyzer import BehavioralAnalyzer
from .bot_detection import BotDetector
from .detection_result import Continue, DetectionResult, PipelineStep, Terminal
from .fingerprint_generator import FingerprintGenerator
from .header_analyzer import HeaderAnalyzer
from .rate_limiter import RateLimitAnalyzer
from .request_pattern_analyzer import RequestPatternAnalyzer
from .session_store import SessionStore


logger = logging.getLogger(__name__)

ANALYZER_ORDER = ("header", "pattern", "rate_limit", "behavioral")


class Analyzer(Protocol):
    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        ...


class CrawlerDetector:
    """Fingerprint, cache, fast path, then the analyzer pipeline"""

    def __init__(self, config: Config, store: SessionStore,
                 analyzers: Optional[Dict[str, Analyzer]] = None,
                 bot_detector: Optional[BotDetector] = None):
        self.config = config
        self.detection = config.detection
        self.store = store
        self.bot_detector = bot_detector or BotDetector()
        self.fingerprints = FingerprintGenerator(detailed=self.detection.detailed_fingerprinting)
        self.channel = logging.getLogger(config.logging.channel)

        if analyzers is None:
            analyzers = {
                "header": HeaderAnalyzer(self.bot_detector),
                "pattern": RequestPatternAnalyzer(store),
                "rate_limit": RateLimitAnalyzer(store),
                "behavioral": BehavioralAnalyzer(store),
            }
        self.analyzers = {name: analyzers[name] for name in ANALYZER_ORDER if name in analyzers}

    def new_result(self, score: int = 0, signals=None) -> DetectionResult:
        return DetectionResult(score, signals, threshold=self.detection.threshold)

    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        """Analyze a request for crawler signals"""
        if not self.detection.server_enabled:
            return self.new_result()

        cache_key = f"guardian_detection_{self.fingerprints.generate(ctx)}"

        cached = await self._cached_result(cache_key)
        if cached is not None:
            return cached

        step = self._known_crawler_step(ctx)
        if isinstance(step, Terminal):
            await self._cache_result(cache_key, step.result)
            return step.result

        result = self.new_result()
        for name, analyzer in self.analyzers.items():
            if not self.detection.analyzers.is_enabled(name):
                continue

            step = await self._run_analyzer(name, analyzer, ctx, result)
            result = step.result
            if isinstance(step, Terminal):
                await self._cache_result(cache_key, result)
                self._log_high_confidence(ctx, result)
                return result

        await self._cache_result(cache_key, result)
        return result

    async def _run_analyzer(self, name: str, analyzer: Analyzer, ctx: RequestContext,
                            result: DetectionResult) -> PipelineStep:
        try:
            partial = await analyzer.analyze(ctx)
        except Exception as e:
            logger.warning(
                f"Guardian analyzer '{name}' failed: {e}",
                extra={"ip": ctx.client_ip, "user_agent": ctx.user_agent},
            )
            return Continue(result)

        result.merge(partial)
        if result.score >= self.detection.high_confidence_score:
            return Terminal(result)
        return Continue(result)

    def _known_crawler_step(self, ctx: RequestContext) -> PipelineStep:
        if self.is_known_crawler(ctx.user_agent):
            return Terminal(self.new_result(100, {"known_crawler": True}))
        return Continue(self.new_result())

    def is_known_crawler(self, user_agent: str) -> bool:
        """Match against AI crawler signatures, then the bot classifier"""
        if not user_agent:
            return False

        lowered = user_agent.lower()
        if any(signature.lower() in lowered for signature in self.detection.ai_crawler_signatures):
            return True

        bot_name = self.bot_detector.classify(user_agent)
        if not bot_name:
            return False

        bot_name = bot_name.lower()
        return any(name.lower() in bot_name for name in self.detection.ai_crawlers)

    async def _cached_result(self, key: str) -> Optional[DetectionResult]:
        if not self.detection.use_cache:
            return None
        try:
            data = await self.store.get_json(key)
        except Exception as e:
            logger.warning(f"Detection cache lookup failed, continuing without cache: {e}")
            return None
        if not data:
            return None
        return DetectionResult.from_dict(data, self.detection.threshold)

    async def _cache_result(self, key: str, result: DetectionResult):
        if not self.detection.use_cache:
            return
        try:
            await self.store.set_json(key, result.to_dict(), self.detection.cache_duration)
        except Exception as e:
            logger.warning(f"Detection cache write failed: {e}")

    def _log_high_confidence(self, ctx: RequestContext, result: DetectionResult):
        if not (self.config.logging.high_confidence and result.score >= self.detection.high_confidence_score):
            return
        self.channel.info(
            "Guardian detected high confidence AI crawler",
            extra={
                "ip": ctx.client_ip,
                "user_agent": ctx.user_agent,
                "path": ctx.path,
                "score": result.score,
                "signals": result.signals,
            },
        )
