"""Data access: REST client and persisted session keys."""

from .api_client import BinaryResponse, FileUpload, FleetApiClient, build_form, unwrap
from .session_store import AUTH_KEYS, SessionStore

__all__ = [
    "BinaryResponse",
    "FileUpload",
    "FleetApiClient",
    "build_form",
    "unwrap",
    "AUTH_KEYS",
    "SessionStore",
]
