"""Shared pytest fixtures for Guardian tests."""

import pytest

from models import RequestContext
from guardian_modules.session_store import MemoryStore


CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

GPTBOT_UA = "Mozilla/5.0 AppleWebKit/537.36 (KHTML, like Gecko; compatible; GPTBot/1.0; +https://openai.com/gptbot)"

BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
}


class FakeClock:
    """Manually advanced clock"""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    """Memory store without the background cleanup task."""
    return MemoryStore(clock=clock)


@pytest.fixture
def make_context(clock):
    """Factory for RequestContext with browser-like defaults.

    Header values of None remove that default header.
    """

    def _make(path="/", method="GET", ip="203.0.113.7", user_agent=CHROME_UA,
              headers=None, body=None, query=None, cookie=True):
        merged = dict(BROWSER_HEADERS)
        if user_agent:
            merged["User-Agent"] = user_agent
        merged.update(headers or {})
        return RequestContext(
            client_ip=ip,
            method=method,
            path=path,
            headers={k: v for k, v in merged.items() if v is not None},
            has_guardian_cookie=cookie,
            timestamp=clock(),
            query=query or {},
            body=body or {},
        )

    return _make
