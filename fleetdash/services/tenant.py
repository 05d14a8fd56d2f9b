from __future__ import annotations

from typing import Any, Dict

from fleetdash.data.api_client import FleetApiClient
from fleetdash.data.session_store import AUTH_TOKEN, SessionStore
from fleetdash.domain.models import AuthResult, BusinessRegistration, Tenant
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService, parse_one

logger = get_logger(__name__)

TENANT_FIELDS = ("name", "email", "phone", "address")


class TenantService(BaseService):
    def __init__(self, client: FleetApiClient, session_store: SessionStore):
        super().__init__(client)
        self.session_store = session_store

    async def register_business(self, registration: BusinessRegistration) -> AuthResult:
        """Create a tenant with its admin user and sign that admin in."""
        payload = await self.client.post("/tenants/register", registration.to_payload())
        result = AuthResult.from_dict(payload)
        if result.token:
            self.session_store.set_item(AUTH_TOKEN, result.token)
            if result.user is not None:
                self.session_store.set_user(result.user.to_dict())
            if result.tenant is not None:
                self.session_store.set_tenant(result.tenant.to_dict())
            logger.info(f"Registered business '{registration.business_name}'")
        return result

    async def get_current_tenant(self) -> Tenant:
        return parse_one(await self.client.get("/tenant"), Tenant.from_dict)

    async def update_tenant(self, changes: Dict[str, Any]) -> Tenant:
        body = {k: v for k, v in changes.items() if k in TENANT_FIELDS}
        tenant = parse_one(await self.client.put("/tenant", body), Tenant.from_dict)
        if tenant.id:
            self.session_store.set_tenant(tenant.to_dict())
        return tenant
