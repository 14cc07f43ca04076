"""Tests for building RequestContext from nginx subrequests and direct requests."""

import json
from types import SimpleNamespace

from sanic.compat import Header

from guardian_modules.header_analyzer import GUARDIAN_COOKIE
from request_parser import RequestParser

from conftest import CHROME_UA


def nginx_request(headers, ip="127.0.0.1"):
    return SimpleNamespace(headers=Header(headers), path="/auth", method="GET", ip=ip)


def direct_request(headers, body=None, cookies=None, args=None, ip="10.0.0.1"):
    raw = json.dumps(body).encode() if body is not None else b""
    return SimpleNamespace(
        headers=Header(headers),
        method="post",
        path="/guardian/demo",
        cookies=cookies or {},
        args=args or {},
        body=raw,
        json=body,
        ip=ip,
    )


def test_nginx_request_maps_original_headers():
    ctx = RequestParser().parse_nginx_request(nginx_request({
        "Host": "guardian.local",
        "X-Original-URI": "/blog/post?page=2&tag=a&tag=b",
        "X-Original-Method": "post",
        "X-Original-Remote-Addr": "198.51.100.4",
        "X-Original-User-Agent": CHROME_UA,
        "X-Original-Accept-Language": "en-US,en;q=0.9",
    }))

    assert ctx.client_ip == "198.51.100.4"
    assert ctx.method == "POST"
    assert ctx.path == "/blog/post"
    assert ctx.query == {"page": "2", "tag": ["a", "b"]}
    assert ctx.user_agent == CHROME_UA
    assert ctx.header("Accept-Language") == "en-US,en;q=0.9"
    for name in ("host", "uri", "method", "remote-addr"):
        assert name not in ctx.headers


def test_nginx_request_without_original_uri_uses_request_path():
    ctx = RequestParser().parse_nginx_request(nginx_request({}, ip="192.0.2.10"))

    assert ctx.path == "/auth"
    assert ctx.client_ip == "192.0.2.10"
    assert ctx.headers == {}


def test_nginx_request_detects_guardian_cookie():
    parser = RequestParser()

    with_cookie = parser.parse_nginx_request(nginx_request({
        "X-Original-Cookie": f"theme=dark; {GUARDIAN_COOKIE}=1",
    }))
    lookalike = parser.parse_nginx_request(nginx_request({
        "X-Original-Cookie": f"{GUARDIAN_COOKIE}_old=1",
    }))
    without = parser.parse_nginx_request(nginx_request({}))

    assert with_cookie.has_guardian_cookie is True
    assert lookalike.has_guardian_cookie is False
    assert without.has_guardian_cookie is False


def test_direct_request():
    body = {"scroll_data": {"events": [], "page_height": 3000}}
    ctx = RequestParser().parse_request(direct_request(
        {"User-Agent": CHROME_UA, "X-Forwarded-For": "203.0.113.9, 10.0.0.1"},
        body=body,
        cookies={GUARDIAN_COOKIE: "1"},
        args={"q": ["crawlers"]},
    ))

    assert ctx.client_ip == "203.0.113.9"
    assert ctx.method == "POST"
    assert ctx.body == body
    assert ctx.query == {"q": "crawlers"}
    assert ctx.has_guardian_cookie is True
    assert ctx.input("scroll_data.page_height") == 3000


def test_direct_request_ignores_non_object_json():
    ctx = RequestParser().parse_request(direct_request({}, body=["not", "an", "object"]))

    assert ctx.body == {}
    assert ctx.client_ip == "10.0.0.1"
