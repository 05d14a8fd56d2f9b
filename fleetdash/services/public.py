"""Unauthenticated lookups behind the vehicle QR codes."""
from __future__ import annotations

from typing import List

from fleetdash.data.api_client import unwrap
from fleetdash.domain.models import PublicDocument, PublicVehicle
from fleetdash.domain.rules import documents_in_category
from fleetdash.infra.exceptions import APIError, NotFoundError
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService

logger = get_logger(__name__)


class PublicService(BaseService):
    """Use with a client built without a session store so no credentials leak into public calls."""

    async def get_vehicle(self, token: str) -> PublicVehicle:
        try:
            payload = await self.client.get(f"/public/vehicles/{token}")
        except APIError as e:
            logger.warning(f"Public vehicle lookup failed for token {token[:8]}...: {e.message}")
            raise NotFoundError("Vehicle not found", url=e.url) from e
        data = unwrap(payload)
        if not isinstance(data, dict):
            raise NotFoundError("Vehicle not found")
        return PublicVehicle.from_dict(data)

    async def get_tenant_vehicles(self, tenant_token: str) -> List[PublicVehicle]:
        try:
            payload = await self.client.get(f"/public/tenant/{tenant_token}/vehicles")
        except APIError as e:
            logger.warning(f"Public fleet lookup failed: {e.message}")
            raise NotFoundError("Vehicles not found", url=e.url) from e
        data = unwrap(payload, default=[])
        return [PublicVehicle.from_dict(v) for v in data if isinstance(v, dict)]

    async def get_category_documents(self, token: str, category: str) -> List[PublicDocument]:
        vehicle = await self.get_vehicle(token)
        return documents_in_category(vehicle.documents, category)
