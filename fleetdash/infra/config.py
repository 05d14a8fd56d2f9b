"""
Infrastructure layer - configuration

Resolution order (later wins):
1. dataclass defaults
2. config/dashboard.yaml (optional)
3. environment variables (config/.env.local is loaded first via python-dotenv)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
DATA_DIR = PROJECT_ROOT / "data"

DEFAULT_YAML_FILE = CONFIG_DIR / "dashboard.yaml"
DEFAULT_DOTENV_FILE = CONFIG_DIR / ".env.local"


@dataclass(frozen=True)
class Settings:
    app_name: str = "FleetDash"
    api_url: str = "http://localhost:8000/api"
    public_base_url: str = "http://localhost:8501"
    request_timeout: float = 30.0
    log_level: str = "INFO"
    log_file: Optional[str] = str(DATA_DIR / "logs" / "fleetdash.log")
    # memory-only: each browser session signs in on its own
    session_file: Optional[str] = None
    expiring_soon_days: int = 30
    page_size: int = 20


# env var -> settings field
ENV_KEYS: Dict[str, str] = {
    "FLEETDASH_APP_NAME": "app_name",
    "FLEETDASH_API_URL": "api_url",
    "FLEETDASH_PUBLIC_URL": "public_base_url",
    "FLEETDASH_REQUEST_TIMEOUT": "request_timeout",
    "FLEETDASH_LOG_LEVEL": "log_level",
    "FLEETDASH_LOG_FILE": "log_file",
    "FLEETDASH_SESSION_FILE": "session_file",
    "FLEETDASH_EXPIRING_SOON_DAYS": "expiring_soon_days",
    "FLEETDASH_PAGE_SIZE": "page_size",
}

_NUMERIC_FIELDS = {"request_timeout": float, "expiring_soon_days": int, "page_size": int}


def _coerce(key: str, value: Any) -> Any:
    if key in _NUMERIC_FIELDS:
        try:
            return _NUMERIC_FIELDS[key](value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid value for {key}: {value!r}", config_key=key)
    if key in ("log_file", "session_file"):
        if value in ("", None):
            return None
        path = Path(str(value)).expanduser()
        # relative paths are taken from the project root, not the cwd
        return str(path if path.is_absolute() else PROJECT_ROOT / path)
    return str(value)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse {path.name}: {e}", config_key=str(path))
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a mapping", config_key=str(path))
    return data


def load_settings(
    yaml_file: Optional[Path] = None,
    dotenv_file: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    Build a ``Settings`` instance

    Args:
        yaml_file: YAML overrides, defaults to config/dashboard.yaml
        dotenv_file: dotenv file loaded into ``os.environ`` when ``environ`` is not given
        environ: explicit environment mapping (tests)

    Returns:
        resolved settings
    """
    if environ is None:
        load_dotenv(dotenv_file or DEFAULT_DOTENV_FILE)
        environ = dict(os.environ)

    known = {f.name for f in fields(Settings)}
    overrides: Dict[str, Any] = {}

    for key, value in _load_yaml(yaml_file or DEFAULT_YAML_FILE).items():
        if key in known:
            overrides[key] = _coerce(key, value)

    for env_key, key in ENV_KEYS.items():
        if env_key in environ:
            overrides[key] = _coerce(key, environ[env_key])

    settings = replace(Settings(), **overrides)
    if settings.page_size <= 0:
        raise ConfigError("page_size must be positive", config_key="page_size")
    if settings.expiring_soon_days <= 0:
        raise ConfigError("expiring_soon_days must be positive", config_key="expiring_soon_days")
    return settings


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings (loaded once)."""
    global _settings
    if _settings is None:
        _settings = load_settings()
    return _settings


def reset_settings() -> None:
    """Forget cached settings (tests)."""
    global _settings
    _settings = None
