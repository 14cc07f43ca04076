"""Tests for the behavioral analyzer."""

from guardian_modules.behavioral_analyzer import BehavioralAnalyzer, clean_events, is_static_resource, triangle_area


def test_triangle_area():
    assert triangle_area({"x": 0, "y": 0}, {"x": 10, "y": 10}, {"x": 20, "y": 20}) == 0
    assert triangle_area({"x": 0, "y": 0}, {"x": 4, "y": 0}, {"x": 0, "y": 3}) == 6


def test_is_static_resource():
    assert is_static_resource("/assets/app.js")
    assert not is_static_resource("/articles/welcome")


def test_clean_events_keeps_numeric_dicts_only():
    events = [
        {"x": 1, "y": 2.5, "time": 30, "target": "a.nav"},
        {"x": True, "y": 1, "time": 1},
        {"x": float("nan"), "y": 1, "time": 1},
        {"x": 1, "y": 1},
        "click",
        None,
    ]

    assert clean_events(events, ("x", "y", "time")) == [{"x": 1, "y": 2.5, "time": 30}]
    assert clean_events("not a list", ("x", "y", "time")) == []
    assert clean_events(None, ("position", "time")) == []


async def test_short_page_view(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    await analyzer.analyze(make_context(path="/article"))
    clock.advance(0.4)
    result = await analyzer.analyze(make_context(
        path="/next", headers={"Referer": "https://example.com/article"},
    ))

    assert result.signals["short_page_view"] < 1.0
    assert result.score >= 20


async def test_reading_time_is_not_flagged(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    await analyzer.analyze(make_context(path="/article"))
    clock.advance(45)
    result = await analyzer.analyze(make_context(
        path="/next", headers={"Referer": "https://example.com/article"},
    ))

    assert "short_page_view" not in result.signals


async def test_consistent_page_times(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    result = None
    previous = None
    for i in range(5):
        headers = {"Referer": f"https://example.com{previous}"} if previous else {}
        path = f"/story-{i}"
        result = await analyzer.analyze(make_context(path=path, headers=headers))
        previous = path
        clock.advance(5)

    assert "consistent_page_times" in result.signals


async def test_mechanical_scrolling_and_identical_jumps(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)
    events = [{"position": i * 100, "time": i * 250} for i in range(6)]

    result = await analyzer.analyze(make_context(
        path="/long-read", body={"scroll_data": {"events": events, "page_height": 4000}},
    ))

    assert "mechanical_scrolling" in result.signals
    assert "identical_scroll_jumps" in result.signals
    assert "no_scrolling_long_page" not in result.signals


async def test_no_scrolling_on_long_page(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    result = await analyzer.analyze(make_context(
        path="/long-read", body={"scroll_data": {"events": [], "page_height": 3000}},
    ))

    assert result.signals["no_scrolling_long_page"] == 3000
    assert result.score >= 35


async def test_linear_mechanical_clicks(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)
    clicks = [{"x": i * 10, "y": i * 10, "time": i * 100} for i in range(5)]

    result = await analyzer.analyze(make_context(body={"click_data": {"events": clicks}}))

    assert result.signals["linear_click_pattern"] == 3
    assert "mechanical_click_timing" in result.signals


async def test_human_clicks(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)
    clicks = [
        {"x": 10, "y": 400, "time": 0},
        {"x": 300, "y": 40, "time": 900},
        {"x": 120, "y": 620, "time": 1300},
        {"x": 700, "y": 90, "time": 3900},
        {"x": 50, "y": 300, "time": 4400},
    ]

    result = await analyzer.analyze(make_context(body={"click_data": {"events": clicks}}))

    assert "linear_click_pattern" not in result.signals
    assert "mechanical_click_timing" not in result.signals


async def test_rapid_form_submissions_without_typing(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    await analyzer.analyze(make_context(path="/contact", method="POST"))
    clock.advance(10)
    second = await analyzer.analyze(make_context(path="/contact", method="POST"))
    clock.advance(70)
    third = await analyzer.analyze(make_context(path="/contact", method="POST"))

    assert "rapid_form_submissions" in second.signals
    assert third.signals["submissions_without_typing"] == {"submissions": 3, "typing_events": 0}


async def test_typing_events_clear_form_signal(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)
    body = {"form_data": {"typing_events": 12}}

    await analyzer.analyze(make_context(path="/contact", method="POST", body=body))
    clock.advance(90)
    await analyzer.analyze(make_context(path="/contact", method="POST", body=body))
    clock.advance(90)
    result = await analyzer.analyze(make_context(path="/contact", method="POST", body=body))

    assert "submissions_without_typing" not in result.signals
    assert "rapid_form_submissions" not in result.signals


async def test_malformed_events_do_not_break_later_requests(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    await analyzer.analyze(make_context(path="/a", body={
        "click_data": {"events": [{"x": i, "y": i} for i in range(5)] + ["click"]},
        "scroll_data": {"events": ["down", {"position": "top", "time": 1}], "page_height": "9999"},
        "form_data": ["typing"],
    }))
    clock.advance(600)
    result = await analyzer.analyze(make_context(path="/b"))

    assert "linear_click_pattern" not in result.signals
    assert "no_scrolling_long_page" not in result.signals
    visitor = analyzer.fingerprints.visitor_id(make_context())
    assert await store.get_json(f"guardian_clicks_{visitor}") == []
    assert await store.get_json(f"guardian_scroll_{visitor}") == {"events": [], "page_height": 0}


async def test_unusual_depth_ratio(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    result = None
    for i in range(5):
        result = await analyzer.analyze(make_context(path=f"/docs/v2/guide/part-{i}"))
        clock.advance(3)

    assert result.signals["unusual_depth_ratio"] == 1.0
    assert "breadth_first_pattern" not in result.signals


async def test_breadth_first_pattern(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    result = None
    for i in range(6):
        result = await analyzer.analyze(make_context(path=f"/category-{i}"))
        clock.advance(3)

    assert result.signals["breadth_first_pattern"] == 0.0
    assert "unusual_depth_ratio" not in result.signals


async def test_mixed_depths_are_not_flagged(store, clock, make_context):
    analyzer = BehavioralAnalyzer(store, clock)

    result = None
    for path in ("/", "/blog", "/blog/2024/launch", "/about", "/blog/2024", "/docs/v2/guide/intro"):
        result = await analyzer.analyze(make_context(path=path))
        clock.advance(3)

    assert "breadth_first_pattern" not in result.signals
    assert "unusual_depth_ratio" not in result.signals
