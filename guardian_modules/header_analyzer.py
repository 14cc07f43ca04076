"""
Header Analyzer - stateless rules over request headers
"""

from typing import Optional

from user_agents import parse as parse_ua

from models import RequestContext
from .bot_detection import BotDetector
from .detection_result import DetectionResult


AI_CRAWLER_NAMES = (
    "gptbot", "chatgpt", "ccbot", "claude", "anthropic",
    "cohere", "perplexity", "bard", "google ai", "diffbot",
)

DESKTOP_BROWSERS = ("Chrome", "Firefox", "Safari", "Edge")

GUARDIAN_COOKIE = "_guardian_check"


class HeaderAnalyzer:
    """Score header inconsistencies typical of automated clients"""

    def __init__(self, bot_detector: Optional[BotDetector] = None):
        self.bot_detector = bot_detector or BotDetector()

    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        result = DetectionResult()

        user_agent = ctx.user_agent
        if not user_agent:
            result.add_signal("missing_user_agent", True, 80)
            return result

        device = parse_ua(user_agent)

        if self._check_known_bots(user_agent, device, result):
            return result

        self._check_desktop_headers(ctx, device, result)
        self._check_mobile_headers(ctx, device, result)
        self._check_proxy_headers(ctx, result)
        self._check_simplified_accept_header(ctx, result)
        self._check_cookie_support(ctx, result)

        return result

    def _bot_name(self, user_agent: str, device) -> Optional[str]:
        name = self.bot_detector.classify(user_agent)
        if name:
            return name
        if device.is_bot and device.browser.family and device.browser.family != "Other":
            return device.browser.family
        return None

    def _check_known_bots(self, user_agent: str, device, result: DetectionResult) -> bool:
        """Returns True when the rest of the header rules should be skipped"""
        bot_name = self._bot_name(user_agent, device)
        if not bot_name:
            return False

        lowered = bot_name.lower()
        if any(ai_name in lowered for ai_name in AI_CRAWLER_NAMES):
            result.add_signal("known_ai_crawler", bot_name, 100)
            return True

        result.add_signal("known_bot", bot_name, 30)
        return False

    def _check_desktop_headers(self, ctx: RequestContext, device, result: DetectionResult):
        if not device.is_pc:
            return

        browser_family = device.browser.family
        if not browser_family or browser_family == "Other":
            return

        accept = ctx.header("Accept")
        if not accept or not ctx.header("Accept-Language") or not ctx.header("Accept-Encoding"):
            result.add_signal("missing_browser_headers", True, 40)

        if browser_family not in DESKTOP_BROWSERS:
            return

        if accept in ("*/*", "text/html"):
            result.add_signal("suspicious_accept_header", accept, 30)

    def _check_mobile_headers(self, ctx: RequestContext, device, result: DetectionResult):
        if not device.is_mobile or device.is_tablet:
            return

        if not ctx.header("X-Requested-With"):
            result.add_signal("missing_mobile_headers", True, 20)

    def _check_proxy_headers(self, ctx: RequestContext, result: DetectionResult):
        if ctx.header("X-Forwarded-For") and not ctx.header("Via"):
            result.add_signal("inconsistent_proxy_headers", True, 15)

    def _check_simplified_accept_header(self, ctx: RequestContext, result: DetectionResult):
        accept = ctx.header("Accept")
        if accept and (len(accept) < 10 or "," not in accept):
            result.add_signal("simplified_accept_header", True, 25)

    def _check_cookie_support(self, ctx: RequestContext, result: DetectionResult):
        if not ctx.has_guardian_cookie and ctx.method != "GET":
            result.add_signal("no_cookies", True, 10)
