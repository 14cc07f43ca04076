"""Tests for client fingerprinting."""

import hashlib

from guardian_modules.fingerprint_generator import FingerprintGenerator


def test_basic_fingerprint_ignores_path_and_headers(make_context):
    generator = FingerprintGenerator(detailed=False)

    a = generator.generate(make_context(path="/one"))
    b = generator.generate(make_context(path="/two", headers={"Accept": "*/*"}))

    assert a == b


def test_detailed_fingerprint_varies_with_path(make_context):
    generator = FingerprintGenerator(detailed=True)

    assert generator.generate(make_context(path="/one")) != generator.generate(make_context(path="/two"))
    assert generator.generate(make_context(path="/one")) == generator.generate(make_context(path="/one"))


def test_fingerprint_differs_by_ip(make_context):
    generator = FingerprintGenerator()
    assert generator.generate(make_context(ip="10.0.0.1")) != generator.generate(make_context(ip="10.0.0.2"))


def test_empty_parts_are_skipped(make_context):
    ctx = make_context(ip="10.0.0.1", user_agent="")
    expected = hashlib.md5("10.0.0.1".encode()).hexdigest()
    assert FingerprintGenerator().generate(ctx) == expected


def test_visitor_id_is_always_basic(make_context):
    generator = FingerprintGenerator(detailed=True)
    assert generator.visitor_id(make_context(path="/a")) == generator.visitor_id(make_context(path="/b"))
