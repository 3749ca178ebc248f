# tests/rules/test_viewport_rules.py

RULE = "valid-meta-viewport"


def test_typical_viewport_is_clean(audit):
    html = '<head><meta name="viewport" content="width=device-width, initial-scale=1"></head>'
    assert audit(html, RULE) == []
    assert audit(html, "require-meta-viewport") == []


def test_maximum_scale_one_yields_single_finding_with_patch(audit):
    """Test dat maximum-scale=1 precies één bevinding geeft met een patch die de directief verwijdert."""
    html = '<head><meta name="viewport" content="maximum-scale=1"></head>'
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["maximumScaleAccessibility"]
    patch = findings[0].patches[0]
    assert patch.message_id == "removeMaximumScale"
    assert patch.apply(html) == '<head><meta name="viewport" content=""></head>'


def test_user_scalable_patch_keeps_other_directives(audit):
    html = '<head><meta name="viewport" content="width=device-width, user-scalable=no"></head>'
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["userScalableAccessibility"]
    assert findings[0].patches[0].apply(html) == (
        '<head><meta name="viewport" content="width=device-width"></head>'
    )


def test_removal_patch_only_on_its_own_finding(audit):
    html = '<head><meta name="viewport" content="width=0, maximum-scale=1"></head>'
    findings = {f.code: f for f in audit(html, RULE)}

    assert set(findings) == {"invalidWidth", "maximumScaleAccessibility"}
    assert findings["invalidWidth"].patches == []
    assert findings["maximumScaleAccessibility"].fix is None


def test_second_viewport_is_redundant(audit):
    """Test dat alleen de eerste viewport gevalideerd wordt en de tweede redundant is."""
    html = (
        '<head><meta name="viewport" content="width=device-width">'
        '<meta name="viewport" content="user-scalable=no"></head>'
    )
    findings = audit(html, RULE)

    assert sorted(f.code for f in findings) == ["redundantViewport", "viewportCount"]
    count = next(f for f in findings if f.code == "viewportCount")
    assert count.tag == "head"
    assert count.data == {"count": 2}
    assert count.message == "Expected exactly 1 <meta name=viewport> element, found 2"


def test_missing_content(audit):
    findings = audit('<head><meta name="viewport"></head>', RULE)
    assert [f.code for f in findings] == ["missingContent"]


def test_viewport_name_is_case_insensitive(audit):
    findings = audit('<head><meta NAME="Viewport" content="shrink-to-fit=no"></head>', RULE)
    assert [f.code for f in findings] == ["obsoleteShrinkToFit"]


def test_missing_viewport(audit):
    """Test dat een head zonder viewport gemeld wordt door require-meta-viewport."""
    findings = audit("<head><title>t</title></head>", "require-meta-viewport")
    assert [(f.code, f.tag) for f in findings] == [("missingViewport", "head")]
    assert audit("<head><title>t</title></head>", RULE) == []
