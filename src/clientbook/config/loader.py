from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

DEFAULT_CONFIG_PATH = Path("clientbook.config.yaml")

DEFAULT_SQLITE_PATH = "clientbook.db"
DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_TIMEOUT_SECONDS = 20
DEFAULT_USER_AGENT = "clientbook/0.1"

DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {"sqlite_path": DEFAULT_SQLITE_PATH},
    "remote": {
        "base_url": DEFAULT_BASE_URL,
        "timeout_seconds": DEFAULT_TIMEOUT_SECONDS,
        "user_agent": DEFAULT_USER_AGENT,
    },
    "registry": {"max_workers": 1},
    "logging": {"level": "INFO"},
}


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load the application configuration from YAML.

    Args:
        path: Optional path to the config file. Defaults to clientbook.config.yaml

    Returns:
        Configuration dictionary (sections may be missing; use the get_*_settings helpers)

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the file does not contain a mapping
    """
    cfg_path = path or DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")
    with cfg_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if not isinstance(config, dict):
        raise ValueError("Config must be a dictionary")
    for section in ("storage", "remote", "registry", "logging"):
        value = config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Config section '{section}' must be a dictionary if provided")

    return config


def default_config() -> Dict[str, Any]:
    return deepcopy(DEFAULT_CONFIG)


def get_storage_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    settings = dict(config.get("storage") or {})
    settings.setdefault("sqlite_path", DEFAULT_SQLITE_PATH)
    return settings


def get_remote_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remote API settings with defaults applied.

    Defaults:
    - base_url: https://jsonplaceholder.typicode.com
    - timeout_seconds: 20
    - user_agent: clientbook/0.1
    """
    settings = dict(config.get("remote") or {})
    settings.setdefault("base_url", DEFAULT_BASE_URL)
    settings.setdefault("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    settings.setdefault("user_agent", DEFAULT_USER_AGENT)

    timeout = settings["timeout_seconds"]
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError("remote.timeout_seconds must be a positive number")
    settings["base_url"] = str(settings["base_url"]).rstrip("/")
    return settings


def get_registry_settings(config: Dict[str, Any]) -> Dict[str, Any]:
    settings = dict(config.get("registry") or {})
    settings.setdefault("max_workers", 1)
    workers = settings["max_workers"]
    if not isinstance(workers, int) or workers < 1:
        raise ValueError("registry.max_workers must be a positive integer")
    return settings


def get_log_level(config: Dict[str, Any]) -> str:
    return str((config.get("logging") or {}).get("level", "INFO")).upper()
