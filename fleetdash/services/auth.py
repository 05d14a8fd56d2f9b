"""Sign-in, sign-up and OAuth hand-off."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from fleetdash.data.api_client import FleetApiClient
from fleetdash.data.session_store import AUTH_TOKEN, SessionStore
from fleetdash.domain.models import AuthResult
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService

logger = get_logger(__name__)


@dataclass(frozen=True)
class OAuthCallback:
    """Outcome of the OAuth redirect: a token, an error code, or neither."""
    token: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return bool(self.token)


class AuthService(BaseService):
    def __init__(self, client: FleetApiClient, session_store: SessionStore):
        super().__init__(client)
        self.session_store = session_store

    def _remember(self, result: AuthResult) -> None:
        if not result.token:
            return
        self.session_store.set_item(AUTH_TOKEN, result.token)
        if result.user is not None:
            self.session_store.set_user(result.user.to_dict())
        if result.tenant is not None:
            self.session_store.set_tenant(result.tenant.to_dict())

    async def login(self, email: str, password: str) -> AuthResult:
        payload = await self.client.post("/auth/login", {"email": email, "password": password})
        result = AuthResult.from_dict(payload)
        self._remember(result)
        logger.info(f"Signed in as {email}")
        return result

    async def register(self, name: str, email: str, password: str, password_confirmation: str) -> AuthResult:
        payload = await self.client.post(
            "/auth/register",
            {
                "name": name,
                "email": email,
                "password": password,
                "password_confirmation": password_confirmation,
            },
        )
        result = AuthResult.from_dict(payload)
        self._remember(result)
        return result

    async def logout(self) -> None:
        """Revoke the token server-side; local keys are cleared even when that fails."""
        try:
            await self.client.post("/auth/logout")
        finally:
            self.session_store.clear_auth()
            logger.info("Signed out")

    def google_login_url(self) -> str:
        return self.client.url_for("/auth/google/redirect")

    def is_authenticated(self) -> bool:
        return self.session_store.is_authenticated()

    def complete_oauth_callback(self, query: Mapping[str, str]) -> OAuthCallback:
        """Store the token handed back by the OAuth redirect (``?token=`` or ``?error=``)."""
        token = query.get("token")
        if token:
            self.session_store.set_item(AUTH_TOKEN, token)
            logger.info("OAuth sign-in completed")
            return OAuthCallback(token=token)
        error = query.get("error")
        if error:
            logger.warning(f"OAuth sign-in failed: {error}")
        return OAuthCallback(error=error or None)
