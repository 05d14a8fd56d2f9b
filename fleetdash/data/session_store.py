"""Persisted session keys (``auth_token``, ``user``, ``tenant``, ``tenant_id``).

Values are strings, like browser local storage; ``user`` and ``tenant`` hold
JSON-encoded objects. When a file path is given every change is written
through to it. Every store opened on that path shares one sign-in, so a path
only suits single-operator installs. Without one the store is memory-only
and belongs to a single browser session.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from fleetdash.infra.logging import get_logger

logger = get_logger(__name__)

AUTH_TOKEN = "auth_token"
USER = "user"
TENANT = "tenant"
TENANT_ID = "tenant_id"

AUTH_KEYS = (AUTH_TOKEN, USER, TENANT, TENANT_ID)


class SessionStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else None
        self._items: Dict[str, str] = {}
        self._load()

    # ------------------------------------------------------------------
    # storage-like API
    # ------------------------------------------------------------------

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)
        self._save()

    def remove_item(self, key: str) -> None:
        if key in self._items:
            del self._items[key]
            self._save()

    def clear_auth(self) -> None:
        """Drop every auth-related key (401 handling, logout)."""
        changed = False
        for key in AUTH_KEYS:
            if key in self._items:
                del self._items[key]
                changed = True
        if changed:
            self._save()

    # ------------------------------------------------------------------
    # typed helpers
    # ------------------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self.get_item(AUTH_TOKEN) or None

    @property
    def tenant_id(self) -> Optional[str]:
        return self.get_item(TENANT_ID) or None

    def is_authenticated(self) -> bool:
        return bool(self.token)

    def get_user(self) -> Optional[Dict[str, Any]]:
        return self._get_json(USER)

    def get_tenant(self) -> Optional[Dict[str, Any]]:
        return self._get_json(TENANT)

    def set_user(self, user: Dict[str, Any]) -> None:
        self.set_item(USER, json.dumps(user, ensure_ascii=False))

    def set_tenant(self, tenant: Dict[str, Any]) -> None:
        self.set_item(TENANT, json.dumps(tenant, ensure_ascii=False))
        if isinstance(tenant, dict) and tenant.get("id") is not None:
            self.set_item(TENANT_ID, str(tenant["id"]))

    def _get_json(self, key: str) -> Optional[Dict[str, Any]]:
        raw = self.get_item(key)
        if not raw:
            return None
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Ignoring malformed session value for '{key}'")
            return None
        return value if isinstance(value, dict) else None

    # ------------------------------------------------------------------
    # persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if not self.path or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read session file {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._items = {str(k): str(v) for k, v in data.items() if v is not None}

    def _save(self) -> None:
        if not self.path:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._items, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            # session stays usable in memory for this run
            logger.warning(f"Could not write session file {self.path}: {e}")
