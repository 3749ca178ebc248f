# tests/conftest.py
import base64
import json
import struct
from datetime import datetime, timezone

import pytest

from head_auditor.dom.core import ElementNode
from head_auditor.dom.qngine import QNGINE
from head_auditor.model import AuditOptions

# Vaste referentietijd zodat verloopdatums deterministisch zijn
NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_node():
    """Fabriek voor ElementNodes: make_node('script', src='/a.js', async_='') of attrs={...}."""
    def factory(tag, text="", children=None, attrs=None, **kwargs):
        all_attrs = dict(attrs or {})
        for key, value in kwargs.items():
            all_attrs[key.rstrip('_').replace('_', '-')] = value
        return ElementNode(tag=tag, attrs=all_attrs, text=text, children=children or [])
    return factory


@pytest.fixture
def make_token():
    """Bouwt een origin trial token: 1 byte versie, 64 bytes handtekening, 4 bytes lengte, JSON payload."""
    def factory(payload, version=3, declared_length=None, raw_payload=None):
        body = raw_payload if raw_payload is not None else json.dumps(payload).encode("utf-8")
        length = len(body) if declared_length is None else declared_length
        raw = bytes([version]) + bytes(64) + struct.pack(">I", length) + body
        return base64.b64encode(raw).decode("ascii")
    return factory


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def audit():
    """Draait één regel over een HTML-string en geeft alleen de findings van die regel terug."""
    def run(html, rule, expected_origin=None):
        engine = QNGINE(preset="all")
        options = AuditOptions(expected_origin=expected_origin, now=NOW)
        return [f for f in engine.audit_html(html, options) if f.rule == rule]
    return run
