"""Vehicle, vehicle type and custom field endpoints."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from fleetdash.data.api_client import BinaryResponse, FileUpload, unwrap
from fleetdash.domain.models import ImportPreview, Vehicle, VehicleType, VehicleTypeField
from fleetdash.infra.exceptions import ValidationError, handle_async_errors
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService, parse_list, parse_one

logger = get_logger(__name__)

VEHICLE_FIELDS = (
    "vehicle_type_id", "name", "make", "model", "year", "registration_number", "vin",
    "serial_number", "capacity", "capacity_unit", "specifications", "status",
    "purchase_date", "purchase_price", "last_service_date", "next_service_date", "notes",
    "field_values",
)


def _vehicle_body(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if k in VEHICLE_FIELDS}


class VehicleTypeService(BaseService):
    async def get_all(self) -> List[VehicleType]:
        return parse_list(await self.client.get("/vehicle-types"), VehicleType.from_dict)

    async def get_one(self, type_id: int) -> VehicleType:
        return parse_one(await self.client.get(f"/vehicle-types/{type_id}"), VehicleType.from_dict)

    async def create(self, name: str, description: Optional[str] = None, is_active: bool = True) -> VehicleType:
        if not name.strip():
            raise ValidationError("Vehicle type name is required", field="name")
        payload = await self.client.post(
            "/vehicle-types", {"name": name.strip(), "description": description, "is_active": is_active}
        )
        return parse_one(payload, VehicleType.from_dict)

    async def update(self, type_id: int, changes: Dict[str, Any]) -> VehicleType:
        body = {k: v for k, v in changes.items() if k in ("name", "description", "is_active")}
        return parse_one(await self.client.put(f"/vehicle-types/{type_id}", body), VehicleType.from_dict)

    async def delete(self, type_id: int) -> None:
        await self.client.delete(f"/vehicle-types/{type_id}")
        logger.info(f"Deleted vehicle type {type_id}")

    async def download_import_template(self, type_id: int) -> BinaryResponse:
        return await self.client.download(f"/vehicle-types/{type_id}/import-template")


class VehicleTypeFieldService(BaseService):
    """Custom fields of a vehicle type; fields without a tenant are shared defaults."""

    async def get_for_type(self, type_id: int, include_defaults: bool = True) -> List[VehicleTypeField]:
        payload = await self.client.get(
            f"/vehicle-types/{type_id}/fields", params={"include_defaults": include_defaults}
        )
        fields = parse_list(payload, VehicleTypeField.from_dict)
        return sorted(fields, key=lambda f: (f.sort_order, f.id))

    async def create(self, type_id: int, data: Dict[str, Any]) -> VehicleTypeField:
        if not (data.get("name") or "").strip() or not (data.get("key") or "").strip():
            raise ValidationError("Field name and key are required", field="key")
        body = {**data, "vehicle_type_id": type_id}
        return parse_one(await self.client.post("/vehicle-type-fields", body), VehicleTypeField.from_dict)

    async def update(self, field: VehicleTypeField, changes: Dict[str, Any]) -> VehicleTypeField:
        if field.is_default:
            raise ValidationError("Default fields cannot be edited", field=field.key)
        payload = await self.client.put(f"/vehicle-type-fields/{field.id}", changes)
        return parse_one(payload, VehicleTypeField.from_dict)

    async def delete(self, field: VehicleTypeField) -> None:
        if field.is_default:
            raise ValidationError("Default fields cannot be deleted", field=field.key)
        await self.client.delete(f"/vehicle-type-fields/{field.id}")


class VehicleService(BaseService):
    async def get_all(self) -> List[Vehicle]:
        return parse_list(await self.client.get("/vehicles"), Vehicle.from_dict)

    async def get_by_type(self, vehicle_type_id: int) -> List[Vehicle]:
        return [v for v in await self.get_all() if v.vehicle_type_id == vehicle_type_id]

    async def get_one(self, vehicle_id: int) -> Vehicle:
        return parse_one(await self.client.get(f"/vehicles/{vehicle_id}"), Vehicle.from_dict)

    async def create(self, data: Mapping[str, Any]) -> Vehicle:
        if not data.get("vehicle_type_id"):
            raise ValidationError("Vehicle type is required", field="vehicle_type_id")
        return parse_one(await self.client.post("/vehicles", _vehicle_body(data)), Vehicle.from_dict)

    async def update(self, vehicle_id: int, data: Mapping[str, Any]) -> Vehicle:
        payload = await self.client.put(f"/vehicles/{vehicle_id}", _vehicle_body(data))
        return parse_one(payload, Vehicle.from_dict)

    async def delete(self, vehicle_id: int) -> None:
        await self.client.delete(f"/vehicles/{vehicle_id}")
        logger.info(f"Deleted vehicle {vehicle_id}")

    @handle_async_errors(logger)
    async def import_preview(
        self, file: FileUpload, vehicle_type_id: int, page: int = 1, per_page: int = 20
    ) -> ImportPreview:
        payload = await self.client.post(
            "/vehicles/import/preview",
            form={"file": file, "vehicle_type_id": vehicle_type_id, "page": page, "per_page": per_page},
        )
        return ImportPreview.from_dict(unwrap(payload, default={}))

    @handle_async_errors(logger)
    async def import_vehicles(
        self, file: FileUpload, vehicle_type_id: int, edited_rows: Optional[Dict[int, Dict[str, Any]]] = None
    ) -> int:
        """Import every row of the file; returns the number of vehicles created."""
        form: Dict[str, Any] = {"file": file, "vehicle_type_id": vehicle_type_id}
        if edited_rows:
            form["edited_rows"] = [{"rowNumber": n, "data": d} for n, d in sorted(edited_rows.items())]
        data = unwrap(await self.client.post("/vehicles/import", form=form), default={})
        imported = int(data.get("imported") or 0) if isinstance(data, dict) else 0
        logger.info(f"Imported {imported} vehicles (type {vehicle_type_id})")
        return imported
