"""
Unit tests: persisted session store
"""
import json

import pytest

from fleetdash.data.session_store import AUTH_TOKEN, SessionStore
from fleetdash.infra.config import Settings


class TestSessionStore:
    """Storage-like API with optional write-through file"""

    @pytest.fixture
    def session_file(self, tmp_path):
        return tmp_path / "nested" / "session.json"

    def test_memory_only(self):
        store = SessionStore()
        assert store.path is None
        store.set_item(AUTH_TOKEN, "abc")
        assert store.token == "abc"
        assert store.is_authenticated()

    def test_default_settings_keep_browsers_apart(self):
        first = SessionStore(Settings().session_file)
        second = SessionStore(Settings().session_file)
        first.set_item(AUTH_TOKEN, "secret-token")
        first.set_tenant({"id": "t1", "name": "Acme"})

        assert not second.is_authenticated()
        assert second.get_tenant() is None
        assert SessionStore(Settings().session_file).token is None

    def test_write_through_and_reload(self, session_file):
        store = SessionStore(session_file)
        store.set_item(AUTH_TOKEN, "abc")
        store.set_tenant({"id": "t1", "name": "Acme"})

        assert json.loads(session_file.read_text(encoding="utf-8"))[AUTH_TOKEN] == "abc"
        reloaded = SessionStore(session_file)
        assert reloaded.token == "abc"
        assert reloaded.tenant_id == "t1"
        assert reloaded.get_tenant()["name"] == "Acme"

    def test_clear_auth(self, session_file):
        store = SessionStore(session_file)
        store.set_item(AUTH_TOKEN, "abc")
        store.set_user({"id": 1, "name": "Sam"})
        store.set_item("theme", "dark")

        store.clear_auth()

        assert not store.is_authenticated()
        assert store.get_user() is None
        assert SessionStore(session_file).get_item("theme") == "dark"

    def test_malformed_values_are_ignored(self, session_file):
        session_file.parent.mkdir(parents=True)
        session_file.write_text(json.dumps({"user": "{not json", "tenant": "[1, 2]"}), encoding="utf-8")
        store = SessionStore(session_file)
        assert store.get_user() is None
        assert store.get_tenant() is None

    def test_corrupt_file_starts_empty(self, session_file):
        session_file.parent.mkdir(parents=True)
        session_file.write_text("{{{", encoding="utf-8")
        assert not SessionStore(session_file).is_authenticated()


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
