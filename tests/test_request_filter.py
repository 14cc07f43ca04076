"""Tests for whitelist and API request filtering."""

import logging

from config import ApiConfig, WhitelistConfig
from guardian_modules.request_filter import RequestFilter, is_api_request


def test_nothing_is_skipped_by_default(make_context):
    request_filter = RequestFilter()

    assert request_filter.skip_reason(make_context(path="/api/items", ip="127.0.0.1")) is None


def test_whitelisted_paths_are_regular_expressions(make_context):
    request_filter = RequestFilter(WhitelistConfig(paths=("^/admin/login", r"\.well-known/")))

    assert request_filter.skip_reason(make_context(path="/admin/login")) == "whitelisted_path"
    assert request_filter.skip_reason(make_context(path="/site/.well-known/security.txt")) == "whitelisted_path"
    assert request_filter.skip_reason(make_context(path="/blog/admin/login")) is None


def test_whitelisted_ips_and_ranges(make_context):
    request_filter = RequestFilter(WhitelistConfig(
        ips=("192.0.2.1",), ip_ranges=("10.0.0.0/8", "2001:db8::/32"),
    ))

    assert request_filter.skip_reason(make_context(ip="192.0.2.1")) == "whitelisted_ip"
    assert request_filter.skip_reason(make_context(ip="10.42.7.1")) == "whitelisted_ip"
    assert request_filter.skip_reason(make_context(ip="2001:db8::5")) == "whitelisted_ip"
    assert request_filter.skip_reason(make_context(ip="192.0.2.2")) is None
    assert request_filter.skip_reason(make_context(ip="unknown")) is None


def test_invalid_entries_are_ignored(make_context, caplog):
    with caplog.at_level(logging.WARNING):
        request_filter = RequestFilter(WhitelistConfig(paths=("([",), ip_ranges=("10.0.0.0/99",)))

    assert request_filter.skip_reason(make_context(ip="10.0.0.1")) is None
    assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 2


def test_api_requests(make_context):
    assert is_api_request(make_context(path="/api/items"))
    assert is_api_request(make_context(headers={"Accept": "application/json"}))
    assert is_api_request(make_context(headers={"X-Requested-With": "XMLHttpRequest"}))
    assert not is_api_request(make_context(path="/articles"))
    assert not is_api_request(make_context(headers={"Accept": "text/html,application/json"}))


def test_api_requests_skip_only_when_unprotected(make_context):
    ctx = make_context(path="/api/items")

    assert RequestFilter(api=ApiConfig(protect_api=True)).skip_reason(ctx) is None
    assert RequestFilter(api=ApiConfig(protect_api=False)).skip_reason(ctx) == "api_request"
