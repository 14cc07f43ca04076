"""
Request Parser module - Build RequestContext from Sanic requests
"""

import time
from typing import Any, Dict
from urllib.parse import parse_qs, urlsplit

from sanic import Request
from sanic.exceptions import BadRequest

from models import RequestContext
from guardian_modules.header_analyzer import GUARDIAN_COOKIE


ORIGINAL_PREFIX = "x-original-"

# X-Original-* headers that describe the request line rather than a header
REQUEST_LINE_HEADERS = ("x-original-method", "x-original-uri", "x-original-remote-addr")


class RequestParser:
    """Parse incoming requests into RequestContext"""

    def parse_nginx_request(self, request: Request) -> RequestContext:
        """Parse an nginx auth_request subrequest (X-Original-* headers)"""
        headers: Dict[str, str] = {}
        for key, value in request.headers.items():
            key = key.lower()
            if key.startswith(ORIGINAL_PREFIX) and key not in REQUEST_LINE_HEADERS:
                headers[key[len(ORIGINAL_PREFIX):]] = value

        uri = request.headers.get("X-Original-URI", request.path)
        parts = urlsplit(uri)

        return RequestContext(
            client_ip=self._extract_client_ip(request),
            method=request.headers.get("X-Original-Method", request.method),
            path=parts.path or "/",
            headers=headers,
            has_guardian_cookie=self._has_guardian_cookie(headers.get("cookie", "")),
            timestamp=time.time(),
            query=self._flatten_query(parse_qs(parts.query)),
        )

    def parse_request(self, request: Request) -> RequestContext:
        """Parse a request served directly by this application"""
        headers = {key.lower(): value for key, value in request.headers.items()}
        return RequestContext(
            client_ip=self._extract_client_ip(request),
            method=request.method,
            path=request.path,
            headers=headers,
            has_guardian_cookie=GUARDIAN_COOKIE in request.cookies,
            timestamp=time.time(),
            query=self._flatten_query(request.args),
            body=self._get_json_body(request),
        )

    def _get_json_body(self, request: Request) -> Dict[str, Any]:
        """JSON body as a dict, empty when absent or malformed"""
        if not request.body:
            return {}
        try:
            body = request.json
        except BadRequest:
            return {}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _flatten_query(args) -> Dict[str, Any]:
        return {key: values[0] if len(values) == 1 else list(values) for key, values in args.items()}

    @staticmethod
    def _has_guardian_cookie(cookie_header: str) -> bool:
        for cookie in cookie_header.split(";"):
            if cookie.strip().startswith(f"{GUARDIAN_COOKIE}="):
                return True
        return False

    def _extract_client_ip(self, request: Request) -> str:
        """Extract client IP from various headers"""
        # Try X-Original-Remote-Addr first (nginx forward)
        if ip := request.headers.get("X-Original-Remote-Addr"):
            return ip.split(":")[0]

        if ip := request.headers.get("X-Real-IP"):
            return ip

        if forwarded := request.headers.get("X-Forwarded-For"):
            return forwarded.split(",")[0].strip()

        return request.ip.split(":")[0] if request.ip else "127.0.0.1"
