"""Tests for decoy page generation."""

import random
import re

import pytest

from guardian_modules.honeypot_generator import BAIT_PREFIXES, HoneypotGenerator, link_label


@pytest.mark.parametrize("path, template", [
    ("products/widget", "product"),
    ("blog/hello", "article"),
    ("posts/1", "article"),
    ("category/shoes", "category"),
    ("tags/python", "category"),
    ("", "generic"),
    ("about", "generic"),
])
def test_select_template(path, template):
    assert HoneypotGenerator.select_template(path) == template


def test_link_label():
    assert link_label("/member/access/AbC123xy") == "Member Access AbC123xy"


def test_bait_links_use_random_suffixes(make_context):
    page = HoneypotGenerator(random.Random(1)).generate(make_context(path="/about"), "guardian_abc")

    for prefix in BAIT_PREFIXES:
        suffixes = re.findall(re.escape(prefix) + r"([A-Za-z0-9]+)\"", page)
        # one link in the nav and one in the sidebar
        assert len(suffixes) == 2
        assert len(set(suffixes)) == 1
        assert len(suffixes[0]) == 8


def test_tracking_block(make_context):
    page = HoneypotGenerator(random.Random(1)).generate(make_context(), "guardian_0123")

    assert '<img src="/guardian-track/guardian_0123.png" alt="">' in page
    assert '<input type="hidden" name="guardian_token" value="guardian_0123">' in page
    assert '<meta name="guardian-honeypot" content="guardian_0123">' in page


def test_generates_own_token_when_none_given(make_context):
    page = HoneypotGenerator(random.Random(1)).generate(make_context())

    token = re.search(r'name="guardian-honeypot" content="(guardian_[0-9a-f]{16})"', page).group(1)
    assert f"/guardian-track/{token}.png" in page


def test_footer_links(make_context):
    page = HoneypotGenerator(random.Random(1)).generate(make_context(), "t")

    for path in ("/about", "/privacy", "/terms", "/contact"):
        assert f'href="{path}"' in page


@pytest.mark.parametrize("path, marker", [
    ("/products/1", "Product XYZ-"),
    ("/blog/launch", "[CONFIDENTIAL DRAFT]"),
    ("/category/news", "Category Overview [INTERNAL USE ONLY]"),
    ("/members", "Restricted Content"),
])
def test_template_content(make_context, path, marker):
    page = HoneypotGenerator(random.Random(3)).generate(make_context(path=path), "t")
    assert marker in page


def test_same_seed_same_page(make_context):
    ctx = make_context(path="/category/news")
    first = HoneypotGenerator(random.Random(42)).generate(ctx, "t")
    second = HoneypotGenerator(random.Random(42)).generate(ctx, "t")
    assert first == second
