"""
Request Pattern Analyzer - per-IP access history
"""

import os
import time
from datetime import timedelta
from typing import Dict, List
from urllib.parse import urlparse

from models import RequestContext
from .detection_result import DetectionResult
from .session_store import Clock, SessionStore
from .stats import coefficient_of_variation, intervals, mean


PATH_HISTORY_TTL = timedelta(minutes=15)
RESOURCE_TTL = timedelta(minutes=30)
SPEED_TTL = timedelta(minutes=5)
DEPTH_TTL = timedelta(minutes=30)

PATH_HISTORY_LIMIT = 50
SPEED_SAMPLE_LIMIT = 20
REFERER_LIMIT = 10

IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "svg", "webp")


def path_extension(path: str) -> str:
    return os.path.splitext(path)[1].lstrip(".").lower()


class RequestPatternAnalyzer:
    """Detect crawler-like access patterns from one IP"""

    def __init__(self, store: SessionStore, clock: Clock = time.time):
        self.store = store
        self.clock = clock

    async def analyze(self, ctx: RequestContext) -> DetectionResult:
        result = DetectionResult()
        ip = ctx.client_ip

        await self._analyze_sequential_access(ip, ctx, result)
        await self._analyze_resource_consumption(ip, ctx, result)
        await self._analyze_request_speed(ip, result)
        await self._analyze_navigation_depth(ip, ctx, result)

        return result

    async def _analyze_sequential_access(self, ip: str, ctx: RequestContext, result: DetectionResult):
        key = f"guardian_paths_{ip}"
        now = self.clock()
        paths: List[Dict] = await self.store.get_json(key, [])

        paths.append({"path": ctx.trimmed_path, "time": now})
        paths = [entry for entry in paths if now - entry["time"] < PATH_HISTORY_TTL.total_seconds()]
        paths = paths[-PATH_HISTORY_LIMIT:]
        await self.store.set_json(key, paths, PATH_HISTORY_TTL)

        if len(paths) < 5:
            return

        numeric_count = 0
        alpha_count = 0
        for current, following in zip(paths, paths[1:]):
            current_parts = current["path"].split("/")
            next_parts = following["path"].split("/")
            if len(current_parts) < 2 or len(next_parts) < 2:
                continue

            a, b = current_parts[1], next_parts[1]
            if a.isdecimal() and b.isdecimal() and int(b) - int(a) == 1:
                numeric_count += 1

            if (current_parts[0] == next_parts[0] and a and b
                    and a[0].isalpha() and b[0].isalpha()
                    and ord(b[0]) - ord(a[0]) == 1):
                alpha_count += 1

        if numeric_count >= 3:
            result.add_signal("sequential_numeric_access", numeric_count, min(40, numeric_count * 10))
        if alpha_count >= 3:
            result.add_signal("sequential_alpha_access", alpha_count, min(40, alpha_count * 10))

    async def _analyze_resource_consumption(self, ip: str, ctx: RequestContext, result: DetectionResult):
        key = f"guardian_resources_{ip}"
        resources = await self.store.get_json(key, None) or {
            "pages": 0, "css": 0, "js": 0, "images": 0, "last_check": 0,
        }

        path = ctx.trimmed_path
        extension = path_extension(path)
        if extension == "css":
            resources["css"] += 1
        elif extension == "js":
            resources["js"] += 1
        elif extension in IMAGE_EXTENSIONS:
            resources["images"] += 1
        elif "text/html" in ctx.header("Accept"):
            resources["pages"] += 1

        now = self.clock()
        if resources["pages"] < 5 or now - resources["last_check"] <= 60:
            await self.store.set_json(key, resources, RESOURCE_TTL)
            return

        resources["last_check"] = now

        if "api" not in path:
            if resources["css"] == 0:
                result.add_signal("no_css_requests", True, 25)
            if resources["js"] == 0:
                result.add_signal("no_js_requests", True, 25)
            if resources["images"] == 0:
                result.add_signal("no_image_requests", True, 20)

        total_resources = resources["css"] + resources["js"] + resources["images"]
        ratio = total_resources / resources["pages"]
        if ratio < 0.5:
            result.add_signal("low_resource_ratio", ratio, 30)

        await self.store.set_json(key, resources, RESOURCE_TTL)

    async def _analyze_request_speed(self, ip: str, result: DetectionResult):
        key = f"guardian_requests_{ip}"
        requests: List[float] = await self.store.get_json(key, [])

        requests.append(self.clock())
        requests = requests[-SPEED_SAMPLE_LIMIT:]
        await self.store.set_json(key, requests, SPEED_TTL)

        if len(requests) < 5:
            return

        gaps = intervals(requests)
        average = mean(gaps)

        if average < 0.5:
            result.add_signal("too_fast_requests", average, min(50, 50 * (0.5 - average)))

        if len(gaps) >= 5:
            variation = coefficient_of_variation(gaps)
            if variation < 0.1:
                result.add_signal("consistent_timing", variation, 35)

    async def _analyze_navigation_depth(self, ip: str, ctx: RequestContext, result: DetectionResult):
        key = f"guardian_depth_{ip}"
        navigation = await self.store.get_json(key, None) or {
            "max_depth": 0, "depths": {}, "referers": [],
        }

        depth = ctx.trimmed_path.count("/") + 1
        navigation["max_depth"] = max(navigation["max_depth"], depth)
        navigation["depths"][str(depth)] = navigation["depths"].get(str(depth), 0) + 1

        referer = ctx.header("Referer")
        if referer:
            navigation["referers"] = (navigation["referers"] + [referer])[-REFERER_LIMIT:]

        await self.store.set_json(key, navigation, DEPTH_TTL)

        total = sum(navigation["depths"].values())
        if total < 5:
            return

        if navigation["max_depth"] >= 4 and total >= 10:
            deep_pages = sum(count for d, count in navigation["depths"].items() if int(d) >= 4)
            deep_ratio = deep_pages / total
            if deep_ratio > 0.7:
                result.add_signal("deep_page_ratio", deep_ratio, min(35, deep_ratio * 50))

        if not navigation["referers"]:
            if total > 5:
                result.add_signal("no_referers", True, 15)
        else:
            domains = {urlparse(ref).hostname for ref in navigation["referers"]}
            domains.discard(None)
            if len(domains) > 3 and total < 10:
                result.add_signal("multiple_referer_domains", len(domains), 20)
