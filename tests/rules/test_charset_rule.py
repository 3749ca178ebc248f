# tests/rules/test_charset_rule.py

RULE = "valid-charset"


def test_utf8_declaration_is_clean(audit):
    assert audit('<head><meta charset="UTF-8"><title>t</title></head>', RULE) == []


def test_invalid_charset_gets_utf8_patch(audit):
    """Test dat een niet-UTF-8 charset een patch naar utf-8 krijgt."""
    html = '<head><meta charset="ISO-8859-1"><title>t</title></head>'
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["invalidCharset"]
    finding = findings[0]
    assert finding.tag == "meta"
    assert finding.data == {"charset": "ISO-8859-1"}
    assert len(finding.patches) == 1
    assert finding.patches[0].message == 'Change charset to "utf-8"'
    assert finding.patches[0].apply(html) == '<head><meta charset="utf-8"><title>t</title></head>'


def test_http_equiv_form_only_rewrites_the_charset(audit):
    """Test dat bij de content-type vorm alleen het charset-deel wordt vervangen."""
    html = '<head><meta http-equiv="Content-Type" content="text/html; charset=iso-8859-1"></head>'
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["invalidCharset"]
    assert findings[0].patches[0].apply(html) == (
        '<head><meta http-equiv="Content-Type" content="text/html; charset=utf-8"></head>'
    )


def test_second_declaration_is_only_a_duplicate(audit):
    """Test dat een tweede declaratie als duplicaat wordt gemeld en niet gevalideerd."""
    html = '<head><meta charset="utf-8"><meta http-equiv="content-type" content="text/html; charset=ISO-8859-1"></head>'
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["duplicateCharset"]
    assert findings[0].patches == []


def test_invalid_first_and_duplicate(audit):
    html = '<head><meta charset="ISO-8859-1"><meta charset="utf-8"></head>'
    assert [f.code for f in audit(html, RULE)] == ["invalidCharset", "duplicateCharset"]


def test_content_type_without_charset_is_ignored(audit):
    assert audit('<head><meta http-equiv="content-type" content="text/html"></head>', RULE) == []


def test_repeated_charset_attribute_uses_first_value(audit):
    """Test dat bij een dubbel charset-attribuut de eerste waarde gemeld en gepatcht wordt."""
    html = '<head><meta charset="latin1" charset="utf-8"></head>'
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["invalidCharset"]
    assert findings[0].data == {"charset": "latin1"}
    assert findings[0].patches[0].apply(html) == '<head><meta charset="utf-8" charset="utf-8"></head>'
