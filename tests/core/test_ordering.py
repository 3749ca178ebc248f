# tests/core/test_ordering.py
from head_auditor.ordering import check_order


def test_optimal_order_has_no_violations(make_node):
    """Test dat een head in optimale volgorde geen overtredingen oplevert."""
    children = [
        make_node("meta", attrs={"charset": "utf-8"}),
        make_node("title", text="Hi"),
        make_node("link", attrs={"rel": "preconnect", "href": "https://cdn.example"}),
        make_node("script", attrs={"src": "/a.js", "async": ""}),
        make_node("link", attrs={"rel": "stylesheet", "href": "/a.css"}),
        make_node("script", attrs={"src": "/b.js", "defer": ""}),
        make_node("link", attrs={"rel": "icon", "href": "/favicon.ico"}),
    ]
    assert check_order(children) == []


def test_title_before_charset_is_reported(make_node):
    """Test dat <title> vóór <meta charset> één overtreding geeft."""
    children = [
        make_node("title", text="Hi"),
        make_node("meta", attrs={"charset": "utf-8"}),
    ]
    violations = check_order(children)

    assert len(violations) == 1
    violation = violations[0]
    assert violation.current_index == 0
    assert violation.next_index == 1
    assert violation.current == "TITLE"
    assert violation.current_weight == 10
    assert violation.next == "META"
    assert violation.next_weight == 11


def test_only_adjacent_pairs_are_compared(make_node):
    """Test dat alleen directe buren worden vergeleken, niet alle paren."""
    children = [
        make_node("link", attrs={"rel": "icon", "href": "/i.ico"}),  # OTHER 1
        make_node("script", attrs={"src": "/d.js", "defer": ""}),    # DEFER 3
        make_node("title", text="x"),                                # TITLE 10
    ]
    violations = check_order(children)
    assert [(v.current_index, v.next_index) for v in violations] == [(0, 1), (1, 2)]


def test_equal_weights_are_not_violations(make_node):
    children = [
        make_node("link", attrs={"rel": "stylesheet", "href": "/a.css"}),
        make_node("style", text="body{}"),
    ]
    assert check_order(children) == []


def test_empty_and_single_children(make_node):
    assert check_order([]) == []
    assert check_order([make_node("title", text="x")]) == []
