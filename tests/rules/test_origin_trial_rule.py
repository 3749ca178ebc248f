# tests/rules/test_origin_trial_rule.py
from datetime import datetime

from head_auditor.dom.qngine import QNGINE
from head_auditor.model import AuditOptions

RULE = "no-invalid-origin-trial"

EXPIRY_2030 = 1893456000
EXPIRY_2020 = 1577836800


def meta(token):
    return f'<head>\n<meta http-equiv="origin-trial" content="{token}">\n</head>'


def test_valid_token(audit, make_token):
    token = make_token({"origin": "https://example.com", "feature": "F", "expiry": EXPIRY_2030})
    assert audit(meta(token), RULE) == []
    assert audit(meta(token), RULE, expected_origin="https://example.com") == []


def test_expired_token_has_automatic_fix(audit, make_token):
    """Test dat een verlopen token automatisch verwijderd mag worden."""
    token = make_token({"origin": "https://example.com", "expiry": EXPIRY_2020})
    html = meta(token)
    findings = audit(html, RULE)

    assert [f.code for f in findings] == ["expiredToken"]
    assert findings[0].message == "Origin trial token expired on 2020-01-01"
    assert findings[0].fix is not None
    assert findings[0].fix.apply(html) == "<head>\n\n</head>"


def test_invalid_token(audit):
    findings = audit(meta("definitely-not-a-token"), RULE)
    assert [f.code for f in findings] == ["invalidToken"]
    assert findings[0].fix is not None


def test_empty_token(audit):
    findings = audit('<head><meta http-equiv="origin-trial" content></head>', RULE)
    assert [f.code for f in findings] == ["emptyToken"]


def test_missing_content(audit):
    findings = audit('<head><meta http-equiv="Origin-Trial"></head>', RULE)
    assert [f.code for f in findings] == ["missingContent"]
    assert findings[0].fix.automatic is True


def test_origin_mismatch_is_not_auto_fixed(audit, make_token):
    """Test dat een verkeerde origin gemeld wordt zonder automatische fix."""
    token = make_token({"origin": "https://other.example", "expiry": EXPIRY_2030})
    findings = audit(meta(token), RULE, expected_origin="https://example.com")

    assert [f.code for f in findings] == ["invalidOrigin"]
    assert findings[0].message == "Origin trial token is for https://other.example but expected https://example.com"
    assert findings[0].patches == []


def test_subdomain_without_flag(audit, make_token):
    token = make_token({"origin": "https://example.com", "expiry": EXPIRY_2030})
    findings = audit(meta(token), RULE, expected_origin="https://www.example.com")
    assert [f.code for f in findings] == ["invalidSubdomain"]


def test_every_token_is_checked(audit, make_token):
    good = make_token({"origin": "https://example.com", "expiry": EXPIRY_2030})
    expired = make_token({"origin": "https://example.com", "expiry": EXPIRY_2020})
    html = (
        f'<head><meta http-equiv="origin-trial" content="{good}">'
        f'<meta http-equiv="origin-trial" content="{expired}">'
        f'<meta http-equiv="origin-trial" content=""></head>'
    )
    assert [f.code for f in audit(html, RULE)] == ["expiredToken", "emptyToken"]


def test_naive_now_does_not_break_the_audit(make_token):
    """Test dat een tijd zonder tijdzone via AuditOptions geen TypeError oplevert."""
    good = make_token({"origin": "https://example.com", "expiry": EXPIRY_2030})
    expired = make_token({"origin": "https://example.com", "expiry": EXPIRY_2020})
    html = (
        f'<head><meta http-equiv="origin-trial" content="{good}">'
        f'<meta http-equiv="origin-trial" content="{expired}"></head>'
    )
    options = AuditOptions(now=datetime(2026, 1, 1))
    findings = [f for f in QNGINE(preset="all").audit_html(html, options) if f.rule == RULE]

    assert [f.code for f in findings] == ["expiredToken"]
