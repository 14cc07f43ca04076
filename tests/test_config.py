"""Tests for configuration loading."""

from dataclasses import FrozenInstanceError
from datetime import timedelta

import pytest

from config import Config


def test_defaults():
    config = Config()

    assert config.detection.threshold == 60
    assert config.detection.cache_duration == timedelta(hours=1)
    assert config.detection.detailed_fingerprinting is True
    assert config.prevention.strategy == "alternate_content"
    assert config.prevention.thresholds.block == 90
    assert config.prevention.thresholds.delay == 40
    assert config.store.backend == "memory"
    assert "GPTBot" in config.detection.ai_crawler_signatures


def test_config_is_frozen():
    with pytest.raises(FrozenInstanceError):
        Config().debug = True


def test_from_env_reads_guardian_variables():
    config = Config.from_env({
        "GUARDIAN_PORT": "9000",
        "GUARDIAN_DEBUG": "true",
        "GUARDIAN_THRESHOLD": "70",
        "GUARDIAN_CACHE_SECONDS": "120",
        "GUARDIAN_ANALYZER_BEHAVIORAL": "off",
        "GUARDIAN_STRATEGY": "block",
        "GUARDIAN_ADAPTIVE": "no",
        "GUARDIAN_DELAY_SECONDS": "1.5",
        "GUARDIAN_STORE": "sqlite",
        "GUARDIAN_SQLITE_PATH": "/tmp/g.db",
        "GUARDIAN_LOG_CHANNEL": "crawlers",
    })

    assert config.port == "9000"
    assert config.debug is True
    assert config.detection.threshold == 70
    assert config.detection.cache_duration == timedelta(seconds=120)
    assert config.detection.analyzers.is_enabled("behavioral") is False
    assert config.detection.analyzers.is_enabled("header") is True
    assert config.prevention.strategy == "block"
    assert config.prevention.adaptive is False
    assert config.prevention.delay_seconds == 1.5
    assert config.store.backend == "sqlite"
    assert config.store.sqlite_path == "/tmp/g.db"
    assert config.logging.channel == "crawlers"


def test_from_env_empty_environment_matches_defaults():
    assert Config.from_env({}) == Config()


def test_from_env_reads_whitelist_and_api_settings():
    config = Config.from_env({
        "GUARDIAN_WHITELIST_PATHS": "^/health, ^/admin/login",
        "GUARDIAN_WHITELIST_IPS": "127.0.0.1",
        "GUARDIAN_WHITELIST_RANGES": "10.0.0.0/8,,192.168.0.0/16",
        "GUARDIAN_PROTECT_API": "false",
    })

    assert config.whitelist.paths == ("^/health", "^/admin/login")
    assert config.whitelist.ips == ("127.0.0.1",)
    assert config.whitelist.ip_ranges == ("10.0.0.0/8", "192.168.0.0/16")
    assert config.api.protect_api is False


def test_whitelist_is_empty_by_default():
    config = Config()

    assert config.whitelist.paths == ()
    assert config.whitelist.ip_ranges == ()
    assert config.api.protect_api is True
