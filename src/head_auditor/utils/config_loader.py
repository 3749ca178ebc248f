import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

SEVERITIES = ("error", "warn", "off")


def get_package_root() -> Path:
    """Returns the directory of the head_auditor package (where settings.json lives)."""
    return Path(__file__).resolve().parent.parent


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Loads the application configuration from settings.json."""
    try:
        config_path = config_path or get_package_root() / "settings.json"

        if not config_path.exists():
            logger.warning("Configuration file 'settings.json' not found at %s. Using empty config.", config_path)
            return {}

        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)

    except Exception as e:
        logger.error("Failed to load settings.json: %s", e, exc_info=True)
        return {}


CONFIG = load_config()


def get_nested_config(key_path: str, default: Optional[Any] = None) -> Any:
    """
    Safely retrieves a nested value from the global CONFIG dictionary.

    Uses a dot as a separator, e.g., 'audit.preset'.

    Args:
        key_path (str): The dotted path to the configuration value.
        default (Any, optional): The default value to return if the key is not found.

    Returns:
        Any: The configuration value or the provided default.
    """
    keys = key_path.split('.')
    value = CONFIG

    for key in keys:
        if isinstance(value, dict):
            value = value.get(key)
        else:
            # If the current level is not a dictionary, the path is invalid
            return default

    return value if value is not None else default


def get_preset(name: str) -> Dict[str, str]:
    """
    Returns the rule -> severity mapping of a named preset.

    The special preset 'all' is resolved by the engine and is not stored here.

    Raises:
        ValueError: If the preset is unknown or holds an unsupported severity.
    """
    presets = get_nested_config("presets", {})
    if name not in presets:
        raise ValueError(f"Unknown preset '{name}'. Available: {', '.join(sorted(presets)) or 'none'}")

    preset = dict(presets[name])
    for rule, severity in preset.items():
        if severity not in SEVERITIES:
            raise ValueError(f"Preset '{name}' sets unsupported severity '{severity}' for rule '{rule}'")
    return preset
