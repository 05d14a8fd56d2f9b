"""Compliance records, requirement status and the fleet compliance dashboard."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from fleetdash.data.api_client import BinaryResponse, FileUpload, unwrap
from fleetdash.domain.models import (
    CategorySummary,
    ComplianceAlert,
    ComplianceHistory,
    ComplianceRecord,
    ComplianceStatus,
    ComplianceType,
    ExpiringItem,
    FleetStatistics,
    OverdueItem,
    PaginatedResult,
    VehicleAtRisk,
)
from fleetdash.infra.clock import format_date
from fleetdash.infra.exceptions import AuthenticationError, FleetDashException, ValidationError, handle_async_errors
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService, parse_list, parse_one, parse_paginated

logger = get_logger(__name__)


@dataclass
class ComplianceRecordForm:
    compliance_type_id: int
    issue_date: Any
    expiry_date: Any
    file: Optional[FileUpload] = None
    document_type_id: Optional[int] = None
    inspection_provider: Optional[str] = None
    inspection_number: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def for_type(cls, compliance_type: ComplianceType, issue_date: Any, expiry_date: Any,
                 file: Optional[FileUpload] = None, **extra) -> "ComplianceRecordForm":
        """An attached file is filed under the type's first accepted document type."""
        doc_type = None
        if file is not None and compliance_type.accepted_document_types:
            doc_type = compliance_type.accepted_document_types[0]
        return cls(
            compliance_type_id=compliance_type.id,
            issue_date=issue_date,
            expiry_date=expiry_date,
            file=file,
            document_type_id=doc_type,
            **extra,
        )

    def to_form(self) -> Dict[str, Any]:
        fields = {
            "compliance_type_id": self.compliance_type_id,
            "issue_date": format_date(self.issue_date),
            "expiry_date": format_date(self.expiry_date),
            "file": self.file,
            "document_type_id": self.document_type_id if self.file is not None else None,
            "inspection_provider": self.inspection_provider,
            "inspection_number": self.inspection_number,
            "notes": self.notes,
        }
        return {k: v for k, v in fields.items() if v not in (None, "")}


class ComplianceService(BaseService):
    async def get_compliance_types(
        self,
        vehicle_id: Optional[int] = None,
        category: Optional[str] = None,
        state_code: Optional[str] = None,
        vehicle_type_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> List[ComplianceType]:
        params = {
            "vehicle_id": vehicle_id,
            "category": category,
            "state_code": state_code,
            "vehicle_type_id": vehicle_type_id,
            "is_active": is_active,
        }
        return parse_list(await self.client.get("/compliance-types", params=params), ComplianceType.from_dict)

    async def get_vehicle_compliance_types(self, vehicle_id: int) -> List[ComplianceType]:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/compliance-types")
        return parse_list(payload, ComplianceType.from_dict)

    async def get_categories(self) -> Dict[str, str]:
        """Category key → label; a plain list of keys is accepted too."""
        data = unwrap(await self.client.get("/compliance-types/categories"), default={})
        if isinstance(data, list):
            return {str(c): str(c).replace("_", " ").title() for c in data}
        return {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}

    async def get_vehicle_compliance_records(
        self,
        vehicle_id: int,
        compliance_type_id: Optional[int] = None,
        status: Optional[str] = None,
        current_only: Optional[bool] = None,
    ) -> List[ComplianceRecord]:
        params = {"compliance_type_id": compliance_type_id, "status": status, "current_only": current_only}
        payload = await self.client.get(f"/vehicles/{vehicle_id}/compliance-records", params=params)
        return parse_list(payload, ComplianceRecord.from_dict)

    async def get_compliance_record(self, vehicle_id: int, record_id: int) -> ComplianceRecord:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/compliance-records/{record_id}")
        return parse_one(payload, ComplianceRecord.from_dict)

    async def create_compliance_record(self, vehicle_id: int, form: ComplianceRecordForm) -> ComplianceRecord:
        if not form.issue_date or not form.expiry_date:
            raise ValidationError("Issue and expiry dates are required")
        payload = await self.client.post(f"/vehicles/{vehicle_id}/compliance-records", form=form.to_form())
        record = parse_one(payload, ComplianceRecord.from_dict)
        logger.info(f"Created compliance record for vehicle {vehicle_id} (type {form.compliance_type_id})")
        return record

    async def update_compliance_record(
        self,
        vehicle_id: int,
        record_id: int,
        data: Union[ComplianceRecordForm, Mapping[str, Any]],
    ) -> ComplianceRecord:
        """Multipart forms go as POST + ``_method=PUT``; plain mappings as a JSON PUT."""
        path = f"/vehicles/{vehicle_id}/compliance-records/{record_id}"
        if isinstance(data, ComplianceRecordForm):
            payload = await self.client.post(path, form={**data.to_form(), "_method": "PUT"})
        else:
            payload = await self.client.put(path, dict(data))
        return parse_one(payload, ComplianceRecord.from_dict)

    async def delete_compliance_record(self, vehicle_id: int, record_id: int) -> None:
        await self.client.delete(f"/vehicles/{vehicle_id}/compliance-records/{record_id}")
        logger.info(f"Deleted compliance record {record_id} of vehicle {vehicle_id}")

    @handle_async_errors(logger)
    async def delete_compliance_records(self, vehicle_id: int, record_ids: Sequence[int]) -> Tuple[int, int]:
        """
        Delete several records in parallel

        Per-record API failures are logged and counted. An expired session
        aborts the batch with ``AuthenticationError``.

        Returns:
            (deleted, failed)
        """
        results = await asyncio.gather(
            *(self.delete_compliance_record(vehicle_id, rid) for rid in record_ids),
            return_exceptions=True,
        )
        failed = 0
        for rid, result in zip(record_ids, results):
            if isinstance(result, AuthenticationError) or (
                isinstance(result, BaseException) and not isinstance(result, FleetDashException)
            ):
                raise result
            if isinstance(result, FleetDashException):
                logger.error(f"Deleting record {rid} of vehicle {vehicle_id} failed: {result.message}")
                failed += 1
        return len(results) - failed, failed

    @handle_async_errors(logger)
    async def create_compliance_records(
        self,
        vehicle_id: int,
        forms: Sequence[ComplianceRecordForm],
        progress: Optional[Callable[[int], None]] = None,
    ) -> Tuple[int, int]:
        """Upload queued records one at a time; returns (created, failed)."""
        created = failed = 0
        for i, form in enumerate(forms):
            if progress is not None:
                progress(i)
            try:
                await self.create_compliance_record(vehicle_id, form)
                created += 1
            except AuthenticationError:
                raise
            except FleetDashException as e:
                logger.error(f"Queued record (type {form.compliance_type_id}) failed: {e.message}")
                failed += 1
        return created, failed

    async def download_compliance_document(self, vehicle_id: int, record_id: int) -> BinaryResponse:
        return await self.client.download(f"/vehicles/{vehicle_id}/compliance-records/{record_id}/download")

    async def get_vehicle_compliance_status(self, vehicle_id: int) -> ComplianceStatus:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/compliance/status")
        return parse_one(payload, ComplianceStatus.from_dict)

    async def get_compliance_history(self, vehicle_id: int, requirement_id: int) -> ComplianceHistory:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/compliance/requirements/{requirement_id}/history")
        return parse_one(payload, ComplianceHistory.from_dict)

    async def approve_compliance_record(self, vehicle_id: int, record_id: int) -> ComplianceRecord:
        payload = await self.client.post(f"/vehicles/{vehicle_id}/compliance-records/{record_id}/approve")
        logger.info(f"Approved compliance record {record_id} of vehicle {vehicle_id}")
        return parse_one(payload, ComplianceRecord.from_dict)


class ComplianceDashboardService(BaseService):
    """Fleet-wide compliance views; list endpoints take ``page`` and ``limit``."""

    async def get_fleet_stats(self) -> FleetStatistics:
        return parse_one(await self.client.get("/compliance/dashboard/stats"), FleetStatistics.from_dict)

    async def get_fleet_at_risk(self, page: int = 1, limit: int = 20) -> PaginatedResult[VehicleAtRisk]:
        payload = await self.client.get(
            "/compliance/dashboard/fleet-at-risk", params={"page": page or 1, "limit": limit or 20}
        )
        return parse_paginated(payload, VehicleAtRisk.from_dict, list_key="vehicles", total_key="total_at_risk")

    async def get_overdue_items(self, page: int = 1, limit: int = 20) -> PaginatedResult[OverdueItem]:
        payload = await self.client.get(
            "/compliance/dashboard/overdue-items", params={"page": page or 1, "limit": limit or 20}
        )
        return parse_paginated(payload, OverdueItem.from_dict)

    async def get_expiring_soon(self, days: int = 30, page: int = 1, limit: int = 20) -> PaginatedResult[ExpiringItem]:
        payload = await self.client.get(
            "/compliance/dashboard/expiring-soon",
            params={"days": days, "page": page or 1, "limit": limit or 20},
        )
        return parse_paginated(payload, ExpiringItem.from_dict)

    async def get_alerts(self, status: Optional[str] = None, alert_type: Optional[str] = None) -> List[ComplianceAlert]:
        payload = await self.client.get(
            "/compliance/dashboard/alerts", params={"status": status, "alert_type": alert_type}
        )
        data = unwrap(payload, default=[])
        if isinstance(data, dict):
            # the same route serves the notification feed shape
            data = data.get("alerts") or []
        return [ComplianceAlert.from_dict(a) for a in data if isinstance(a, dict)]

    async def acknowledge_alert(self, alert_id: int) -> None:
        await self.client.post(f"/compliance/dashboard/alerts/{alert_id}/acknowledge")
        logger.info(f"Acknowledged compliance alert {alert_id}")

    async def get_summary_by_category(self) -> List[CategorySummary]:
        payload = await self.client.get("/compliance/dashboard/summary-by-category")
        return parse_list(payload, CategorySummary.from_dict)
