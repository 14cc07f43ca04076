"""
Client-side detection report scoring
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models import ClientReport


logger = logging.getLogger(__name__)

SIGNAL_WEIGHTS: Dict[str, int] = {
    "webdriver": 80,
    "phantom": 80,
    "nightmare": 80,
    "chrome_automation": 75,
    "no_languages": 40,
    "no_mouse_movement": 30,
    "no_clicks": 25,
    "no_keyboard": 25,
    "no_scroll": 20,
    "canvas_blocked": 40,
    "consistent_click_timing": 50,
    "mechanical_scrolling": 40,
    "perfectly_aligned_clicks": 60,
    "fake_chrome": 50,
    "fake_firefox": 50,
    "canvas_error": 30,
    "canvas_context_unavailable": 30,
    "no_localstorage": 30,
    "no_sessionstorage": 30,
    "cookies_disabled": 30,
    "zero_dimensions": 50,
    "linear_click_pattern": 45,
    "identical_scroll_jumps": 40,
    "non_integer_pixel_ratio": 10,
}

DEFAULT_WEIGHT = 20


def parse_report(payload: Any) -> Optional[ClientReport]:
    """Validate a raw payload; None when it is malformed"""
    if not isinstance(payload, dict):
        return None
    try:
        return ClientReport.model_validate(payload)
    except ValidationError as e:
        logger.info(f"Rejected client report: {e.error_count()} validation error(s)")
        return None


def score_report(report: ClientReport) -> int:
    """Sum table weights for the reported signal names, capped at 100.

    Weights sent by the client are ignored.
    """
    score = sum(SIGNAL_WEIGHTS.get(name, DEFAULT_WEIGHT) for name in signal_names(report))
    return min(100, score)


def signal_names(report: ClientReport) -> List[str]:
    return [s if isinstance(s, str) else s.name for s in report.signals]
