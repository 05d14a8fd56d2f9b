"""Vehicle documents and document types."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from fleetdash.data.api_client import FileUpload
from fleetdash.domain.models import DocumentType, VehicleDocument
from fleetdash.domain.rules import document_file_url
from fleetdash.infra.clock import format_date
from fleetdash.infra.exceptions import ValidationError
from fleetdash.infra.logging import get_logger
from fleetdash.services.base import BaseService, parse_list, parse_one

logger = get_logger(__name__)


@dataclass
class DocumentForm:
    """Fields of the upload/edit form; empty values are not sent."""
    document_type_id: Optional[int] = None
    document_name: Optional[str] = None
    document_number: Optional[str] = None
    file: Optional[FileUpload] = None
    issue_date: Any = None
    expiry_date: Any = None
    notes: Optional[str] = None

    def to_form(self) -> Dict[str, Any]:
        fields = {
            "document_type_id": self.document_type_id,
            "document_name": self.document_name,
            "document_number": self.document_number,
            "file": self.file,
            "issue_date": format_date(self.issue_date),
            "expiry_date": format_date(self.expiry_date),
            "notes": self.notes,
        }
        return {k: v for k, v in fields.items() if v not in (None, "")}


class DocumentService(BaseService):
    async def get_document_types(self, vehicle_type_id: Optional[int] = None) -> List[DocumentType]:
        params = {"vehicle_type_id": vehicle_type_id} if vehicle_type_id else None
        return parse_list(await self.client.get("/document-types", params=params), DocumentType.from_dict)

    async def get_document_types_for_vehicle(self, vehicle_id: int) -> List[DocumentType]:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/document-types")
        return parse_list(payload, DocumentType.from_dict)

    async def create_document_type(
        self, name: str, description: str = "", vehicle_type_id: Optional[int] = None
    ) -> DocumentType:
        if not name.strip():
            raise ValidationError("Please enter a document type name", field="name")
        payload = await self.client.post(
            "/document-types",
            {
                "name": name.strip(),
                "description": description,
                "vehicle_type_id": vehicle_type_id,
                "is_required": False,
                "sort_order": 100,
            },
        )
        return parse_one(payload, DocumentType.from_dict)

    async def get_vehicle_documents(self, vehicle_id: int) -> List[VehicleDocument]:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/documents")
        return parse_list(payload, VehicleDocument.from_dict)

    async def get_all_documents(self) -> List[VehicleDocument]:
        return parse_list(await self.client.get("/documents"), VehicleDocument.from_dict)

    async def get_document(self, vehicle_id: int, document_id: int) -> VehicleDocument:
        payload = await self.client.get(f"/vehicles/{vehicle_id}/documents/{document_id}")
        return parse_one(payload, VehicleDocument.from_dict)

    async def create_document(self, vehicle_id: int, form: DocumentForm) -> VehicleDocument:
        if not form.document_type_id or not form.document_name or form.file is None:
            raise ValidationError("Document type, name and file are required")
        payload = await self.client.post(f"/vehicles/{vehicle_id}/documents", form=form.to_form())
        doc = parse_one(payload, VehicleDocument.from_dict)
        logger.info(f"Uploaded document '{form.document_name}' for vehicle {vehicle_id}")
        return doc

    async def update_document(self, vehicle_id: int, document_id: int, form: DocumentForm) -> VehicleDocument:
        # multipart bodies cannot be PUT to the API, so the verb travels as a field
        body = {**form.to_form(), "_method": "PUT"}
        payload = await self.client.post(f"/vehicles/{vehicle_id}/documents/{document_id}", form=body)
        return parse_one(payload, VehicleDocument.from_dict)

    async def delete_document(self, vehicle_id: int, document_id: int) -> None:
        await self.client.delete(f"/vehicles/{vehicle_id}/documents/{document_id}")
        logger.info(f"Deleted document {document_id} of vehicle {vehicle_id}")

    def file_url(self, file_path: str) -> str:
        return document_file_url(self.client.base_url, file_path)
