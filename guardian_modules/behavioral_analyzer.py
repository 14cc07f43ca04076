"""
Behavioral Analyzer

Tracks per-visitor dwell times, navigation, clicks, scrolling and form
submissions. Click and scroll events arrive from the browser probe inside
the request body (``click_data``, ``scroll_data``, ``form_data``).
"""

import math
import time
from datetime import timedelta
from typing import Any, Dict, List, Sequence
from urllib.parse import urlparse

from models import RequestContext
from .detection_result import DetectionResult
from .fingerprint_generator import FingerprintGenerator
from .request_pattern_analyzer import path_extension
from .session_store import Clock, SessionStore
from .stats import coefficient_of_variation, entropy, intervals, mean


CACHE_DURATION = timedelta(minutes=30)

PAGE_ENTRY_LIMIT = 50
PAGE_TIME_LIMIT = 10
NAVIGATION_LIMIT = 20
EVENT_LIMIT = 20

STATIC_EXTENSIONS = (
    "css", "js", "jpg", "jpeg", "png", "gif", "svg", "ico", "woff", "woff2", "ttf", "eot",
)


def is_static_resource(path: str) -> bool:
    return path_extension(path) in STATIC_EXTENSIONS


def as_number(value: Any) -> Any:
    """Finite int or float, None for anything else (bools included)"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value if math.isfinite(value) else None


def clean_events(events: Any, fields: Sequence[str]) -> List[Dict[str, float]]:
    """Keep only dict events whose fields are all numeric, reduced to those fields"""
    if not isinstance(events, list):
        return []
    cleaned = []
    for event in events:
        if not isinstance(event, dict):
            continue
        values = {name: as_number(event.get(name)) for name in fields}
        if None not in values.values():
            cleaned.append(values)
    return cleaned


def triangle_area(a: Dict[str, float], b: Dict[str, float], c: Dict[str, float]) -> float:
    """Area of the triangle spanned by three click points"""
    return abs(
        a["x"] * (b["y"] - c["y"])
        + b["x"] * (c["y"] - a["y"])
        + c["x"] * (a["y"] - b["y"])
    ) / 2


class BehavioralAnalyzer:
    """Detect mechanical interaction patterns per visitor"""

    def __init__(self, store: SessionStore, clock: Clock = time.time):
        self.store = store
        self.clock = clock
        self.fingerprints = FingerprintGenerator()

    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        result = DetectionResult()
        visitor_id = self.fingerprints.visitor_id(ctx)
        report = self._extract_client_report(ctx)

        await self._analyze_time_on_page(visitor_id, ctx, result)
        await self._analyze_navigation_patterns(visitor_id, ctx, result)
        await self._analyze_scroll_behavior(visitor_id, ctx, report, result)
        await self._analyze_click_patterns(visitor_id, report, result)
        await self._analyze_form_interactions(visitor_id, ctx, report, result)

        return result

    def _extract_client_report(self, ctx: RequestContext) -> Dict[str, Any]:
        report: Dict[str, Any] = {}

        if ctx.has("scroll_data"):
            report["scrolls"] = clean_events(ctx.input("scroll_data.events"), ("position", "time"))
            report["page_height"] = as_number(ctx.input("scroll_data.page_height")) or 0

        if ctx.has("click_data"):
            report["clicks"] = clean_events(ctx.input("click_data.events"), ("x", "y", "time"))

        form_data = ctx.input("form_data")
        if isinstance(form_data, dict):
            report["form_interactions"] = form_data

        return report

    async def _analyze_time_on_page(self, visitor_id: str, ctx: RequestContext, result: DetectionResult):
        key = f"guardian_session_{visitor_id}"
        session = await self.store.get_json(key, None) or {
            "page_entries": {}, "page_exits": {}, "page_times": [],
        }

        current_page = ctx.path
        now = self.clock()
        if current_page not in session["page_entries"]:
            session["page_entries"][current_page] = now
            # dicts keep insertion order, so the oldest entries go first
            while len(session["page_entries"]) > PAGE_ENTRY_LIMIT:
                session["page_entries"].pop(next(iter(session["page_entries"])))

        referer = ctx.header("Referer")
        referer_path = urlparse(referer).path if referer else ""

        if referer_path and referer_path != current_page:
            session["page_exits"][referer_path] = now
            while len(session["page_exits"]) > PAGE_ENTRY_LIMIT:
                session["page_exits"].pop(next(iter(session["page_exits"])))

            entry_time = session["page_entries"].get(referer_path)
            if entry_time is not None:
                time_on_page = now - entry_time
                session["page_times"] = (session["page_times"] + [time_on_page])[-PAGE_TIME_LIMIT:]

                if time_on_page < 1.0 and not is_static_resource(referer_path):
                    result.add_signal("short_page_view", time_on_page, 20)

                page_times = session["page_times"]
                if len(page_times) >= 3:
                    variation = coefficient_of_variation(page_times)
                    if mean(page_times) > 1.0 and variation < 0.1:
                        result.add_signal("consistent_page_times", variation, 25)

        await self.store.set_json(key, session, CACHE_DURATION)

    async def _analyze_navigation_patterns(self, visitor_id: str, ctx: RequestContext, result: DetectionResult):
        key = f"guardian_navigation_{visitor_id}"
        navigation = await self.store.get_json(key, None) or {
            "paths": [], "max_depth": 0, "depths": {},
        }

        current_path = ctx.trimmed_path
        navigation["paths"] = (navigation["paths"] + [{"path": current_path, "time": self.clock()}])[-NAVIGATION_LIMIT:]

        depth = current_path.count("/") + 1
        navigation["max_depth"] = max(navigation["max_depth"], depth)
        navigation["depths"][str(depth)] = navigation["depths"].get(str(depth), 0) + 1

        await self.store.set_json(key, navigation, CACHE_DURATION)

        depths: Dict[str, int] = navigation["depths"]
        total = sum(depths.values())
        if total < 5:
            return

        deep_pages = sum(count for d, count in depths.items() if int(d) >= 4)
        deep_ratio = deep_pages / total
        if deep_ratio > 0.7:
            result.add_signal("unusual_depth_ratio", deep_ratio, min(35, deep_ratio * 50))

        depth_entropy = entropy(depths.values())
        if max(depths.values()) > 5 and depth_entropy < 1.0:
            result.add_signal("breadth_first_pattern", depth_entropy, 25)

    async def _analyze_scroll_behavior(self, visitor_id: str, ctx: RequestContext,
                                       report: Dict[str, Any], result: DetectionResult):
        key = f"guardian_scroll_{visitor_id}"
        scroll = await self.store.get_json(key, None) or {"events": [], "page_height": 0}

        if report.get("scrolls"):
            scroll["events"] = scroll["events"] + list(report["scrolls"])
        if report.get("page_height"):
            scroll["page_height"] = report["page_height"]
        scroll["events"] = scroll["events"][-EVENT_LIMIT:]

        await self.store.set_json(key, scroll, CACHE_DURATION)

        events: List[Dict[str, float]] = scroll["events"]
        if len(events) >= 3:
            positions = [event.get("position", 0) for event in events]
            times = [event.get("time", 0) for event in events]

            time_diffs = intervals(times)
            if len(time_diffs) >= 5:
                variation = coefficient_of_variation(time_diffs)
                if mean(time_diffs) > 0 and variation < 0.3:
                    result.add_signal("mechanical_scrolling", variation, 30)

            position_diffs = [abs(d) for d in intervals(positions)]
            if len(position_diffs) >= 3 and len(set(position_diffs)) == 1 and position_diffs[0] != 0:
                result.add_signal("identical_scroll_jumps", 1 / len(position_diffs), 30)

        page_height = scroll["page_height"] or 0
        is_long_page = page_height > 2000 or ctx.has("long_page")
        if is_long_page and len(events) < 3:
            result.add_signal("no_scrolling_long_page", page_height, 35)

    async def _analyze_click_patterns(self, visitor_id: str, report: Dict[str, Any], result: DetectionResult):
        key = f"guardian_clicks_{visitor_id}"
        clicks: List[Dict[str, float]] = await self.store.get_json(key, [])

        if report.get("clicks"):
            clicks = clicks + list(report["clicks"])
        clicks = clicks[-EVENT_LIMIT:]

        await self.store.set_json(key, clicks, CACHE_DURATION)

        if len(clicks) < 5:
            return

        linear_count = sum(
            1 for i in range(2, len(clicks))
            if triangle_area(clicks[i - 2], clicks[i - 1], clicks[i]) < 1.0
        )
        if linear_count >= 3:
            result.add_signal("linear_click_pattern", linear_count, min(40, linear_count * 8))

        click_intervals = intervals([click["time"] for click in clicks])
        if len(click_intervals) >= 3:
            variation = coefficient_of_variation(click_intervals)
            if mean(click_intervals) > 0 and variation < 0.3:
                result.add_signal("mechanical_click_timing", variation, 30)

    async def _analyze_form_interactions(self, visitor_id: str, ctx: RequestContext,
                                         report: Dict[str, Any], result: DetectionResult):
        if ctx.method != "POST":
            return

        key = f"guardian_forms_{visitor_id}"
        forms = await self.store.get_json(key, None) or {
            "submissions": 0, "first_submission": 0, "typing_events": 0, "last_check": 0,
        }

        now = self.clock()
        forms["submissions"] += 1
        forms["first_submission"] = forms["first_submission"] or now
        typing = report.get("form_interactions", {}).get("typing_events", 0)
        if isinstance(typing, (int, float)) and typing > 0:
            forms["typing_events"] += int(typing)

        if forms["submissions"] < 2 or now - forms["last_check"] <= 60:
            await self.store.set_json(key, forms, CACHE_DURATION)
            return

        forms["last_check"] = now
        elapsed = now - forms["first_submission"]
        per_minute = forms["submissions"] / (max(elapsed, 1) / 60)

        if per_minute > 3:
            result.add_signal("rapid_form_submissions", per_minute, min(40, int(per_minute * 10)))

        if forms["typing_events"] < forms["submissions"] and forms["submissions"] > 2:
            result.add_signal("submissions_without_typing", {
                "submissions": forms["submissions"],
                "typing_events": forms["typing_events"],
            }, 30)

        await self.store.set_json(key, forms, CACHE_DURATION)
