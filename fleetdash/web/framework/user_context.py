from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import streamlit as st

from fleetdash.data.session_store import SessionStore
from fleetdash.domain.models import Tenant, User
from fleetdash.infra.config import Settings, get_settings
from fleetdash.infra.logging import LoggerManager

SESSION_STORE_KEY = "_session_store"


@dataclass(frozen=True)
class UserContext:
    user: Optional[User]
    tenant: Optional[Tenant]
    authenticated: bool

    @property
    def display_name(self) -> str:
        return self.user.name if self.user and self.user.name else "User"


@st.cache_resource
def app_settings() -> Settings:
    """Settings resolved once per server process; logging follows them."""
    settings = get_settings()
    LoggerManager.configure_from_settings(settings)
    return settings


def get_session_store() -> SessionStore:
    """One store per browser session; ``session_file`` makes every session share it."""
    store = st.session_state.get(SESSION_STORE_KEY)
    if store is None:
        settings = app_settings()
        store = SessionStore(settings.session_file or None)
        st.session_state[SESSION_STORE_KEY] = store
    return store


def get_user_context() -> UserContext:
    store = get_session_store()
    user = store.get_user()
    tenant = store.get_tenant()
    return UserContext(
        user=User.from_dict(user) if user else None,
        tenant=Tenant.from_dict(tenant) if tenant else None,
        authenticated=store.is_authenticated(),
    )


def is_authenticated() -> bool:
    return get_session_store().is_authenticated()
