"""
Bot Detection Module
"""

import re
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass
class BotSignature:
    """Bot signature definition"""
    name: str
    pattern: str
    bot_type: str  # "ai", "search", "tool"
    compiled: Optional[re.Pattern] = None


class BotDetector:
    """Classify user agents by known bot signatures"""

    def __init__(self):
        self.signatures: Dict[str, BotSignature] = {}
        self.lock = threading.RLock()
        self._load_default_signatures()

    def _load_default_signatures(self):
        """Load default bot signatures"""
        signatures = [
            BotSignature("GPTBot", r"(?i:gptbot)", "ai"),
            BotSignature("ChatGPT-User", r"(?i:chatgpt-user)", "ai"),
            BotSignature("CCBot", r"(?i:ccbot)", "ai"),
            BotSignature("ClaudeBot", r"(?i:claudebot|claude-web)", "ai"),
            BotSignature("Anthropic", r"(?i:anthropic-ai)", "ai"),
            BotSignature("Cohere", r"(?i:cohere-ai)", "ai"),
            BotSignature("PerplexityBot", r"(?i:perplexitybot)", "ai"),
            BotSignature("Diffbot", r"(?i:diffbot)", "ai"),
            BotSignature("Bytespider", r"(?i:bytespider)", "ai"),
            BotSignature("Googlebot", r"(?i:googlebot)", "search"),
            BotSignature("Bingbot", r"(?i:bingbot)", "search"),
            BotSignature("DuckDuckBot", r"(?i:duckduckbot)", "search"),
            BotSignature("YandexBot", r"(?i:yandexbot)", "search"),
            BotSignature("Baiduspider", r"(?i:baiduspider)", "search"),
            BotSignature("FacebookBot", r"(?i:facebookexternalhit)", "search"),
            BotSignature("TwitterBot", r"(?i:twitterbot)", "search"),
            BotSignature("AhrefsBot", r"(?i:ahrefsbot)", "search"),
            BotSignature("SemrushBot", r"(?i:semrushbot)", "search"),
            BotSignature("Python", r"(?i:python-requests|python-urllib|aiohttp)", "tool"),
            BotSignature("Curl", r"(?i:curl/)", "tool"),
            BotSignature("Wget", r"(?i:wget/)", "tool"),
            BotSignature("Scrapy", r"(?i:scrapy)", "tool"),
            BotSignature("HeadlessChrome", r"(?i:headlesschrome)", "tool"),
        ]

        for sig in signatures:
            try:
                sig.compiled = re.compile(sig.pattern)
                self.signatures[sig.name] = sig
            except re.error:
                continue

    def analyze(self, user_agent: str) -> Tuple[str, str]:
        """Analyze user agent and return (type, name)"""
        with self.lock:
            if not user_agent:
                return "suspicious", "Empty User-Agent"

            for sig in self.signatures.values():
                if sig.compiled and sig.compiled.search(user_agent):
                    return sig.bot_type, sig.name

            if self._is_suspicious_ua(user_agent):
                return "suspicious", "Generic crawler"

            return "unknown", ""

    def classify(self, user_agent: str) -> Optional[str]:
        """Bot name for a user agent, None when it does not look like a bot"""
        bot_type, name = self.analyze(user_agent)
        if bot_type == "unknown" or not user_agent:
            return None
        return name

    def _is_suspicious_ua(self, ua: str) -> bool:
        """Check for generic crawler User-Agent patterns"""
        suspicious = ["bot", "crawler", "spider", "scraper"]

        ua_lower = ua.lower()
        return any(pattern in ua_lower for pattern in suspicious)
