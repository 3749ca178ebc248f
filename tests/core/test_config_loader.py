# tests/core/test_config_loader.py
import json
import logging

import pytest

from head_auditor.utils import config_loader
from head_auditor.utils.config_loader import get_nested_config, get_preset, load_config
from head_auditor.utils.configure_logging import LogWithTqdm, configure_logger


def test_load_config_reads_packaged_settings():
    """Test dat settings.json met het pakket wordt meegeleverd en geladen."""
    config = load_config()
    assert config["audit"]["preset"] == "recommended"
    assert "recommended" in config["presets"]


def test_load_config_missing_file_returns_empty(tmp_path):
    assert load_config(tmp_path / "missing.json") == {}


def test_load_config_invalid_json_returns_empty(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{ not json", encoding="utf-8")
    assert load_config(path) == {}


def test_get_nested_config(monkeypatch):
    """Test het ophalen van geneste waarden met een punt als scheidingsteken."""
    monkeypatch.setattr(config_loader, "CONFIG", {"audit": {"preset": "strict", "origin": None}, "flat": 1})

    assert get_nested_config("audit.preset") == "strict"
    assert get_nested_config("audit.origin", "https://example.com") == "https://example.com"
    assert get_nested_config("audit.missing", "x") == "x"
    assert get_nested_config("flat.deeper", "default") == "default"


def test_get_preset_returns_a_copy():
    preset = get_preset("recommended")
    preset["require-title"] = "off"
    assert get_preset("recommended")["require-title"] == "error"


def test_get_preset_rejects_unknown_name():
    with pytest.raises(ValueError, match="Unknown preset"):
        get_preset("nope")


def test_get_preset_rejects_bad_severity(monkeypatch):
    monkeypatch.setattr(config_loader, "CONFIG", {"presets": {"broken": {"require-title": "loud"}}})
    with pytest.raises(ValueError, match="unsupported severity"):
        get_preset("broken")


def test_every_packaged_preset_is_valid():
    with open(config_loader.get_package_root() / "settings.json", encoding="utf-8") as f:
        presets = json.load(f)["presets"]
    for name in presets:
        assert get_preset(name)


def test_configure_logger_installs_tqdm_handler():
    """Test dat de root logger een tqdm-vriendelijke handler krijgt."""
    root = logging.getLogger()
    previous_handlers, previous_level = list(root.handlers), root.level
    try:
        configure_logger(
            general_level="DEBUG",
            module_specific_levels={"head_auditor.dom": "INFO"},
            silenced_loggers={"bs4": "ERROR"},
        )
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], LogWithTqdm)
        assert root.level == logging.DEBUG
        assert logging.getLogger("head_auditor.dom").level == logging.INFO
        assert logging.getLogger("bs4").level == logging.ERROR
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
