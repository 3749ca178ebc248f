# tests/rules/test_order_rule.py

RULE = "head-element-order"


def test_wrong_order_is_reported_on_the_earlier_element(audit):
    """Test dat de bevinding op het element staat dat later hoort te komen."""
    html = '<head><title>t</title><meta charset="utf-8"></head>'
    findings = audit(html, RULE)

    assert [(f.code, f.tag) for f in findings] == [("wrongOrder", "title")]
    assert findings[0].data == {"current": "TITLE", "currentWeight": 10, "next": "META", "nextWeight": 11}
    assert findings[0].message == "Element order suboptimal: TITLE (weight 10) should come after META (weight 11)."
    assert findings[0].patches == []
    assert findings[0].severity == "warn"


def test_sync_script_before_async(audit):
    html = '<head><script src="/sync.js"></script><script src="/async.js" async></script></head>'
    findings = audit(html, RULE)
    assert [f.data["next"] for f in findings] == ["ASYNC_SCRIPT"]


def test_optimal_order(audit):
    html = (
        '<head><meta charset="utf-8"><title>t</title>'
        '<link rel="preconnect" href="https://cdn.example">'
        '<script src="/a.js" async></script>'
        '<link rel="stylesheet" href="/a.css">'
        '<link rel="preload" href="/f.woff2" as="font">'
        '<script src="/d.js" defer></script>'
        '<link rel="prefetch" href="/next">'
        '<link rel="icon" href="/favicon.ico"></head>'
    )
    assert audit(html, RULE) == []
