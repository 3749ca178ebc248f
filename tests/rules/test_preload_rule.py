# tests/rules/test_preload_rule.py
import pytest

RULE = "no-unnecessary-preload"


@pytest.mark.parametrize("html", [
    '<head><link rel="preload" href="/app.js" as="script"><script src="/app.js"></script></head>',
    '<head><script src="/app.js"></script><link rel="preload" href="/app.js" as="script"></head>',
    '<head><link rel="preload" href="./app.js" as="script"><script src="app.js" defer></script></head>',
])
def test_preload_of_discoverable_script(audit, html):
    """Test dat de preload gemeld wordt ongeacht de volgorde van de elementen."""
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["unnecessaryPreload"]
    assert findings[0].tag == "link"
    assert findings[0].data["tagName"] == "script"


def test_preload_of_stylesheet(audit):
    html = '<head><link rel="stylesheet" href="/a.css"><link rel="preload" href="/a.css" as="style"></head>'
    findings = audit(html, RULE)

    assert findings[0].message == 'This preload has little to no effect. "/a.css" is already discoverable by a <link> element.'
    assert findings[0].patches[0].apply(html) == '<head><link rel="stylesheet" href="/a.css"></head>'


def test_unrelated_preloads_are_fine(audit):
    html = (
        '<head><link rel="preload" href="/font.woff2" as="font" crossorigin>'
        '<script src="/app.js"></script></head>'
    )
    assert audit(html, RULE) == []


def test_preloads_in_other_heads_do_not_match(audit):
    html = '<head><link rel="preload" href="/app.js" as="script"></head><body><head><script src="/app.js"></script></head></body>'
    assert audit(html, RULE) == []
