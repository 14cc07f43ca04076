"""
Configuration module for the Guardian server
"""

import os
from dataclasses import dataclass, field, replace
from datetime import timedelta
from typing import Tuple


AI_CRAWLER_SIGNATURES: Tuple[str, ...] = (
    "AdsBot-Google", "Amazonbot", "Anthropic-AI", "Anthropic", "Applebot",
    "Bytespider", "CCBot", "ChatGPT-User", "ChatGPT", "Claude-Web", "ClaudeBot",
    "Claude", "cohere-ai", "cohere-training-data-crawler", "Cohere", "Crawlspace",
    "Diffbot", "DuckAssistBot", "FacebookBot", "FriendlyCrawler", "Google-Extended",
    "GoogleOther", "GPTBot", "iaskspider/2.0", "ICC-Crawler", "ImagesiftBot",
    "img2dataset", "ISSCyberRiskCrawler", "Kangaroo Bot", "Meta-ExternalAgent",
    "Meta-ExternalFetcher", "OAI-SearchBot", "omgili", "PanguBot", "Perplexity-User",
    "PerplexityBot", "Perplexity", "PetalBot", "Scrapy", "SemrushBot-OCOB",
    "SemrushBot-SWA", "Sidetrade indexer bot",
)

AI_CRAWLERS: Tuple[str, ...] = (
    "GPTBot", "CCBot", "anthropic", "Claude", "Claude-Web", "Cohere",
    "Perplexity", "Diffbot", "DuckAssistBot",
)


@dataclass(frozen=True)
class AnalyzerToggles:
    """Which analyzers the detection pipeline runs"""
    header: bool = True
    pattern: bool = True
    rate_limit: bool = True
    behavioral: bool = True

    def is_enabled(self, name: str) -> bool:
        return getattr(self, name, True)


@dataclass(frozen=True)
class DetectionConfig:
    """Detection pipeline configuration"""
    server_enabled: bool = True
    client_enabled: bool = True
    threshold: int = 60
    use_cache: bool = True
    cache_duration: timedelta = timedelta(hours=1)
    detailed_fingerprinting: bool = True
    high_confidence_score: int = 80
    analyzers: AnalyzerToggles = field(default_factory=AnalyzerToggles)
    ai_crawler_signatures: Tuple[str, ...] = AI_CRAWLER_SIGNATURES
    ai_crawlers: Tuple[str, ...] = AI_CRAWLERS


@dataclass(frozen=True)
class PreventionThresholds:
    """Score thresholds for the adaptive strategy"""
    block: int = 90
    honeypot: int = 75
    alternate: int = 60
    delay: int = 40


@dataclass(frozen=True)
class ContentProtectionConfig:
    """Content protector stages"""
    add_meta_tags: bool = True
    mark_protected: bool = True


@dataclass(frozen=True)
class PreventionConfig:
    """Prevention engine configuration"""
    strategy: str = "alternate_content"
    adaptive: bool = True
    thresholds: PreventionThresholds = field(default_factory=PreventionThresholds)
    delay_seconds: float = 2.0
    protect_content: bool = True
    content_protection: ContentProtectionConfig = field(default_factory=ContentProtectionConfig)


@dataclass(frozen=True)
class LoggingConfig:
    """Detection logging"""
    enabled: bool = True
    high_confidence: bool = True
    channel: str = "guardian"


@dataclass(frozen=True)
class StoreConfig:
    """Key-value store backend"""
    backend: str = "memory"  # "memory" or "sqlite"
    sqlite_path: str = "guardian.db"


@dataclass(frozen=True)
class WhitelistConfig:
    """Requests that bypass detection"""
    paths: Tuple[str, ...] = ()       # regular expressions searched in the path
    ips: Tuple[str, ...] = ()
    ip_ranges: Tuple[str, ...] = ()   # CIDR notation


@dataclass(frozen=True)
class ApiConfig:
    """API route handling"""
    protect_api: bool = True


@dataclass(frozen=True)
class Config:
    """Server configuration"""
    port: str = "8080"
    debug: bool = False
    enabled: bool = True
    report_endpoint: str = "/__guardian__/report"
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    prevention: PreventionConfig = field(default_factory=PreventionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    whitelist: WhitelistConfig = field(default_factory=WhitelistConfig)
    api: ApiConfig = field(default_factory=ApiConfig)

    @classmethod
    def from_env(cls, environ=None) -> "Config":
        """Build a configuration from GUARDIAN_* environment variables"""
        env = os.environ if environ is None else environ
        base = cls()

        detection = replace(
            base.detection,
            server_enabled=_env_bool(env, "GUARDIAN_SERVER_DETECTION", base.detection.server_enabled),
            client_enabled=_env_bool(env, "GUARDIAN_CLIENT_DETECTION", base.detection.client_enabled),
            threshold=int(env.get("GUARDIAN_THRESHOLD", base.detection.threshold)),
            use_cache=_env_bool(env, "GUARDIAN_USE_CACHE", base.detection.use_cache),
            detailed_fingerprinting=_env_bool(
                env, "GUARDIAN_DETAILED_FINGERPRINTING", base.detection.detailed_fingerprinting
            ),
            analyzers=AnalyzerToggles(
                header=_env_bool(env, "GUARDIAN_ANALYZER_HEADER", True),
                pattern=_env_bool(env, "GUARDIAN_ANALYZER_PATTERN", True),
                rate_limit=_env_bool(env, "GUARDIAN_ANALYZER_RATE_LIMIT", True),
                behavioral=_env_bool(env, "GUARDIAN_ANALYZER_BEHAVIORAL", True),
            ),
        )
        if "GUARDIAN_CACHE_SECONDS" in env:
            detection = replace(detection, cache_duration=timedelta(seconds=int(env["GUARDIAN_CACHE_SECONDS"])))

        prevention = replace(
            base.prevention,
            strategy=env.get("GUARDIAN_STRATEGY", base.prevention.strategy),
            adaptive=_env_bool(env, "GUARDIAN_ADAPTIVE", base.prevention.adaptive),
            delay_seconds=float(env.get("GUARDIAN_DELAY_SECONDS", base.prevention.delay_seconds)),
        )

        return cls(
            port=env.get("GUARDIAN_PORT", base.port),
            debug=_env_bool(env, "GUARDIAN_DEBUG", base.debug),
            enabled=_env_bool(env, "GUARDIAN_ENABLED", base.enabled),
            detection=detection,
            prevention=prevention,
            logging=LoggingConfig(
                enabled=_env_bool(env, "GUARDIAN_LOGGING", base.logging.enabled),
                channel=env.get("GUARDIAN_LOG_CHANNEL", base.logging.channel),
            ),
            store=StoreConfig(
                backend=env.get("GUARDIAN_STORE", base.store.backend),
                sqlite_path=env.get("GUARDIAN_SQLITE_PATH", base.store.sqlite_path),
            ),
            whitelist=WhitelistConfig(
                paths=_env_list(env, "GUARDIAN_WHITELIST_PATHS"),
                ips=_env_list(env, "GUARDIAN_WHITELIST_IPS"),
                ip_ranges=_env_list(env, "GUARDIAN_WHITELIST_RANGES"),
            ),
            api=ApiConfig(protect_api=_env_bool(env, "GUARDIAN_PROTECT_API", base.api.protect_api)),
        )


def _env_bool(env, key: str, default: bool) -> bool:
    value = env.get(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(env, key: str) -> Tuple[str, ...]:
    """Comma separated values, blanks dropped"""
    return tuple(item.strip() for item in env.get(key, "").split(",") if item.strip())
