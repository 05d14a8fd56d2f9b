"""
Domain models: plain records mirroring fleet API responses, no IO.

The API owns the lifecycle of these records. Parsing is lenient: absent keys
become ``None`` (or an empty collection) and never raise.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

T = TypeVar("T")


def _opt_int(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _opt_float(v: Any) -> Optional[float]:
    if v is None or v == "":
        return None
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _opt_str(v: Any) -> Optional[str]:
    if v is None:
        return None
    return str(v)


def _bool(v: Any, default: bool = False) -> bool:
    if v is None:
        return default
    if isinstance(v, str):
        return v.strip().lower() in ("1", "true", "yes", "on")
    return bool(v)


def _dict(v: Any) -> Dict[str, Any]:
    return v if isinstance(v, dict) else {}


def _list(v: Any) -> List[Any]:
    return v if isinstance(v, list) else []


# =============================================================================
# Accounts
# =============================================================================


@dataclass(frozen=True)
class User:
    id: Optional[int] = None
    name: str = ""
    email: str = ""
    role: Optional[str] = None

    @property
    def initial(self) -> str:
        return self.name[:1].upper() if self.name else "U"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "User":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")),
            name=str(d.get("name") or ""),
            email=str(d.get("email") or ""),
            role=_opt_str(d.get("role")),
        )


@dataclass(frozen=True)
class Tenant:
    id: str = ""
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    subscription_plan: Optional[str] = None
    subscription_ends_at: Optional[str] = None
    created_at: Optional[str] = None
    public_token: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "subscription_plan": self.subscription_plan,
            "subscription_ends_at": self.subscription_ends_at,
            "created_at": self.created_at,
            "public_token": self.public_token,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Tenant":
        d = _dict(d)
        return cls(
            id=str(d.get("id") or ""),
            name=str(d.get("name") or ""),
            email=str(d.get("email") or ""),
            phone=_opt_str(d.get("phone")),
            address=_opt_str(d.get("address")),
            subscription_plan=_opt_str(d.get("subscription_plan")),
            subscription_ends_at=_opt_str(d.get("subscription_ends_at")),
            created_at=_opt_str(d.get("created_at")),
            public_token=_opt_str(d.get("public_token") or d.get("qr_code_token")),
        )


@dataclass
class BusinessRegistration:
    business_name: str
    business_email: str
    admin_name: str
    admin_email: str
    admin_password: str
    admin_password_confirmation: str
    business_phone: Optional[str] = None
    business_address: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "business_name": self.business_name,
            "business_email": self.business_email,
            "admin_name": self.admin_name,
            "admin_email": self.admin_email,
            "admin_password": self.admin_password,
            "admin_password_confirmation": self.admin_password_confirmation,
        }
        if self.business_phone:
            payload["business_phone"] = self.business_phone
        if self.business_address:
            payload["business_address"] = self.business_address
        return payload


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str
    token: Optional[str]
    user: Optional[User]
    tenant: Optional[Tenant] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AuthResult":
        d = _dict(d)
        data = _dict(d.get("data"))
        return cls(
            success=_bool(d.get("success"), default=bool(data.get("token"))),
            message=str(d.get("message") or ""),
            token=_opt_str(data.get("token")),
            user=User.from_dict(data["user"]) if isinstance(data.get("user"), dict) else None,
            tenant=Tenant.from_dict(data["tenant"]) if isinstance(data.get("tenant"), dict) else None,
        )


# =============================================================================
# Vehicles
# =============================================================================


@dataclass(frozen=True)
class VehicleType:
    id: int
    name: str
    tenant_id: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VehicleType":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")) or 0,
            name=str(d.get("name") or ""),
            tenant_id=_opt_str(d.get("tenant_id")),
            description=_opt_str(d.get("description")),
            is_active=_bool(d.get("is_active"), default=True),
            created_at=_opt_str(d.get("created_at")),
        )


FIELD_TYPES = ("text", "number", "date", "select", "textarea", "boolean")


@dataclass(frozen=True)
class VehicleTypeField:
    id: int
    name: str
    key: str
    field_type: str = "text"
    vehicle_type_id: Optional[int] = None
    tenant_id: Optional[str] = None
    unit: Optional[str] = None
    description: Optional[str] = None
    is_required: bool = False
    sort_order: int = 100
    options: Optional[Dict[str, str]] = None

    @property
    def is_default(self) -> bool:
        """Default fields are shared by all tenants and cannot be edited."""
        return self.tenant_id is None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VehicleTypeField":
        d = _dict(d)
        options = d.get("options")
        return cls(
            id=_opt_int(d.get("id")) or 0,
            name=str(d.get("name") or ""),
            key=str(d.get("key") or ""),
            field_type=str(d.get("field_type") or "text"),
            vehicle_type_id=_opt_int(d.get("vehicle_type_id")),
            tenant_id=_opt_str(d.get("tenant_id")),
            unit=_opt_str(d.get("unit")),
            description=_opt_str(d.get("description")),
            is_required=_bool(d.get("is_required")),
            sort_order=_opt_int(d.get("sort_order")) or 100,
            options={str(k): str(v) for k, v in options.items()} if isinstance(options, dict) else None,
        )


@dataclass(frozen=True)
class FieldValue:
    """One dynamic field value; accepts flat and nested (``field``) API shapes."""
    name: str
    value: Optional[str]
    key: Optional[str] = None
    unit: Optional[str] = None

    @property
    def display(self) -> str:
        if self.value in (None, ""):
            return "N/A"
        return f"{self.value} {self.unit}" if self.unit else str(self.value)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FieldValue":
        d = _dict(d)
        field_def = _dict(d.get("field")) or d
        value = d.get("value")
        return cls(
            name=str(field_def.get("name") or ""),
            key=_opt_str(field_def.get("key")),
            unit=_opt_str(field_def.get("unit") or d.get("unit")),
            value=None if value is None else str(value),
        )


VEHICLE_STATUSES = ("active", "maintenance", "inactive", "sold")


@dataclass
class Vehicle:
    id: int
    tenant_id: Optional[str] = None
    vehicle_type_id: Optional[int] = None
    name: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    registration_number: Optional[str] = None
    vin: Optional[str] = None
    serial_number: Optional[str] = None
    capacity: Optional[float] = None
    capacity_unit: Optional[str] = None
    specifications: Optional[str] = None
    status: str = "active"
    purchase_date: Optional[str] = None
    purchase_price: Optional[float] = None
    last_service_date: Optional[str] = None
    next_service_date: Optional[str] = None
    notes: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    field_values: List[FieldValue] = field(default_factory=list)
    qr_code_token: Optional[str] = None
    compliance_status: Optional[str] = None
    compliance_score: Optional[float] = None
    operational_status: Optional[str] = None
    created_at: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Vehicle":
        d = _dict(d)
        vt = d.get("vehicle_type") or d.get("vehicleType")
        fvs = d.get("field_values") if d.get("field_values") is not None else d.get("fieldValues")
        return cls(
            id=_opt_int(d.get("id")) or 0,
            tenant_id=_opt_str(d.get("tenant_id")),
            vehicle_type_id=_opt_int(d.get("vehicle_type_id")),
            name=_opt_str(d.get("name")),
            make=_opt_str(d.get("make")),
            model=_opt_str(d.get("model")),
            year=_opt_int(d.get("year")),
            registration_number=_opt_str(d.get("registration_number")),
            vin=_opt_str(d.get("vin")),
            serial_number=_opt_str(d.get("serial_number")),
            capacity=_opt_float(d.get("capacity")),
            capacity_unit=_opt_str(d.get("capacity_unit")),
            specifications=_opt_str(d.get("specifications")),
            status=str(d.get("status") or "active"),
            purchase_date=_opt_str(d.get("purchase_date")),
            purchase_price=_opt_float(d.get("purchase_price")),
            last_service_date=_opt_str(d.get("last_service_date")),
            next_service_date=_opt_str(d.get("next_service_date")),
            notes=_opt_str(d.get("notes")),
            vehicle_type=VehicleType.from_dict(vt) if isinstance(vt, dict) else None,
            field_values=[FieldValue.from_dict(fv) for fv in _list(fvs)],
            qr_code_token=_opt_str(d.get("qr_code_token")),
            compliance_status=_opt_str(d.get("compliance_status")),
            compliance_score=_opt_float(d.get("compliance_score")),
            operational_status=_opt_str(d.get("operational_status")),
            created_at=_opt_str(d.get("created_at")),
        )


# =============================================================================
# Documents
# =============================================================================


@dataclass(frozen=True)
class DocumentType:
    id: int
    name: str
    description: Optional[str] = None
    vehicle_type_id: Optional[int] = None
    tenant_id: Optional[str] = None
    is_required: bool = False
    is_active: bool = True
    sort_order: int = 0
    scope_type: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DocumentType":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")) or 0,
            name=str(d.get("name") or ""),
            description=_opt_str(d.get("description")),
            vehicle_type_id=_opt_int(d.get("vehicle_type_id")),
            tenant_id=_opt_str(d.get("tenant_id")),
            is_required=_bool(d.get("is_required")),
            is_active=_bool(d.get("is_active"), default=True),
            sort_order=_opt_int(d.get("sort_order")) or 0,
            scope_type=_opt_str(d.get("scope_type")),
        )


@dataclass
class VehicleDocument:
    id: int
    vehicle_id: Optional[int] = None
    document_name: str = ""
    document_type: Union[str, DocumentType, None] = None
    document_type_id: Optional[int] = None
    tenant_id: Optional[str] = None
    document_number: Optional[str] = None
    file_path: str = ""
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    issue_date: Optional[str] = None
    expiry_date: Optional[str] = None
    is_expired: bool = False
    notes: Optional[str] = None
    uploaded_by: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    document_type_info: Optional[DocumentType] = None
    vehicle_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VehicleDocument":
        d = _dict(d)
        raw_type = d.get("document_type")
        if isinstance(raw_type, dict):
            doc_type: Union[str, DocumentType, None] = DocumentType.from_dict(raw_type)
        else:
            doc_type = _opt_str(raw_type)
        info = d.get("document_type_info") or d.get("documentType")
        vehicle = _dict(d.get("vehicle"))
        return cls(
            id=_opt_int(d.get("id")) or 0,
            vehicle_id=_opt_int(d.get("vehicle_id") or vehicle.get("id")),
            document_name=str(d.get("document_name") or ""),
            document_type=doc_type,
            document_type_id=_opt_int(d.get("document_type_id")),
            tenant_id=_opt_str(d.get("tenant_id")),
            document_number=_opt_str(d.get("document_number")),
            file_path=str(d.get("file_path") or ""),
            file_type=_opt_str(d.get("file_type")),
            file_size=_opt_int(d.get("file_size")),
            issue_date=_opt_str(d.get("issue_date")),
            expiry_date=_opt_str(d.get("expiry_date")),
            is_expired=_bool(d.get("is_expired")),
            notes=_opt_str(d.get("notes")),
            uploaded_by=_opt_int(d.get("uploaded_by")),
            created_at=_opt_str(d.get("created_at")),
            updated_at=_opt_str(d.get("updated_at")),
            document_type_info=DocumentType.from_dict(info) if isinstance(info, dict) else None,
            vehicle_name=_opt_str(vehicle.get("name")),
        )


# =============================================================================
# Compliance
# =============================================================================


COMPLIANCE_STATUSES = ("compliant", "at_risk", "expired", "pending")
COMPLIANCE_CATEGORIES = ("roadworthiness", "registration", "insurance", "inspection", "other")


@dataclass(frozen=True)
class ComplianceType:
    id: int
    name: str
    category: str = "other"
    description: Optional[str] = None
    scope_type: Optional[str] = None
    state_code: Optional[str] = None
    vehicle_type_id: Optional[int] = None
    tenant_id: Optional[str] = None
    renewal_frequency_days: Optional[int] = None
    requires_document: bool = False
    is_required: bool = False
    is_active: bool = True
    alert_thresholds: tuple = ()
    accepted_document_types: tuple = ()
    sort_order: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceType":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")) or 0,
            name=str(d.get("name") or ""),
            category=str(d.get("category") or "other"),
            description=_opt_str(d.get("description")),
            scope_type=_opt_str(d.get("scope_type")),
            state_code=_opt_str(d.get("state_code")),
            vehicle_type_id=_opt_int(d.get("vehicle_type_id")),
            tenant_id=_opt_str(d.get("tenant_id")),
            renewal_frequency_days=_opt_int(d.get("renewal_frequency_days")),
            requires_document=_bool(d.get("requires_document")),
            is_required=_bool(d.get("is_required")),
            is_active=_bool(d.get("is_active"), default=True),
            alert_thresholds=tuple(_opt_int(x) for x in _list(d.get("alert_thresholds"))),
            accepted_document_types=tuple(_opt_int(x) for x in _list(d.get("accepted_document_types"))),
            sort_order=_opt_int(d.get("sort_order")) or 0,
        )


@dataclass(frozen=True)
class ComplianceDocument:
    id: int
    document_name: str
    file_path: str = ""
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    url: Optional[str] = None
    is_primary: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceDocument":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")) or 0,
            document_name=str(d.get("document_name") or ""),
            file_path=str(d.get("file_path") or ""),
            file_type=_opt_str(d.get("file_type")),
            file_size=_opt_int(d.get("file_size")),
            url=_opt_str(d.get("url")),
            is_primary=_bool(_dict(d.get("pivot")).get("is_primary")),
        )


@dataclass
class ComplianceRecord:
    id: int
    vehicle_id: Optional[int] = None
    tenant_id: Optional[str] = None
    vehicle_compliance_requirement_id: Optional[int] = None
    compliance_type_id: Optional[int] = None
    issue_date: Optional[str] = None
    expiry_date: Optional[str] = None
    inspection_provider: Optional[str] = None
    inspection_number: Optional[str] = None
    notes: Optional[str] = None
    submitted_by: Optional[User] = None
    approved_by: Optional[User] = None
    approved_at: Optional[str] = None
    is_current: bool = False
    status: str = "pending"
    days_until_expiry: Optional[int] = None
    compliance_type: Optional[ComplianceType] = None
    documents: List[ComplianceDocument] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_approved(self) -> bool:
        return self.approved_by is not None or bool(self.approved_at)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceRecord":
        d = _dict(d)
        ct = d.get("compliance_type")
        return cls(
            id=_opt_int(d.get("id")) or 0,
            vehicle_id=_opt_int(d.get("vehicle_id")),
            tenant_id=_opt_str(d.get("tenant_id")),
            vehicle_compliance_requirement_id=_opt_int(d.get("vehicle_compliance_requirement_id")),
            compliance_type_id=_opt_int(d.get("compliance_type_id")),
            issue_date=_opt_str(d.get("issue_date")),
            expiry_date=_opt_str(d.get("expiry_date")),
            inspection_provider=_opt_str(d.get("inspection_provider")),
            inspection_number=_opt_str(d.get("inspection_number")),
            notes=_opt_str(d.get("notes")),
            submitted_by=User.from_dict(d["submitted_by"]) if isinstance(d.get("submitted_by"), dict) else None,
            approved_by=User.from_dict(d["approved_by"]) if isinstance(d.get("approved_by"), dict) else None,
            approved_at=_opt_str(d.get("approved_at")),
            is_current=_bool(d.get("is_current")),
            status=str(d.get("status") or "pending"),
            days_until_expiry=_opt_int(d.get("days_until_expiry")),
            compliance_type=ComplianceType.from_dict(ct) if isinstance(ct, dict) else None,
            documents=[ComplianceDocument.from_dict(x) for x in _list(d.get("documents"))],
            created_at=_opt_str(d.get("created_at")),
            updated_at=_opt_str(d.get("updated_at")),
        )


@dataclass
class ComplianceRequirement:
    requirement_id: int
    compliance_type: str
    category: str = "other"
    status: str = "pending"
    compliance_type_name: Optional[str] = None
    current_record: Optional[ComplianceRecord] = None
    days_until_expiry: Optional[int] = None
    is_overdue: bool = False

    @property
    def label(self) -> str:
        return self.compliance_type_name or self.compliance_type

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceRequirement":
        d = _dict(d)
        rec = d.get("current_record")
        return cls(
            requirement_id=_opt_int(d.get("requirement_id")) or 0,
            compliance_type=str(d.get("compliance_type") or ""),
            compliance_type_name=_opt_str(d.get("compliance_type_name")),
            category=str(d.get("category") or "other"),
            status=str(d.get("status") or "pending"),
            current_record=ComplianceRecord.from_dict(rec) if isinstance(rec, dict) else None,
            days_until_expiry=_opt_int(d.get("days_until_expiry")),
            is_overdue=_bool(d.get("is_overdue")),
        )


@dataclass(frozen=True)
class ComplianceSummary:
    total_requirements: int = 0
    compliant: int = 0
    at_risk: int = 0
    expired: int = 0
    pending: int = 0
    compliance_score: float = 0.0
    overall_status: str = "pending"
    can_operate: Optional[bool] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceSummary":
        d = _dict(d)
        can_operate = d.get("can_operate")
        return cls(
            total_requirements=_opt_int(d.get("total_requirements")) or 0,
            compliant=_opt_int(d.get("compliant")) or 0,
            at_risk=_opt_int(d.get("at_risk")) or 0,
            expired=_opt_int(d.get("expired")) or 0,
            pending=_opt_int(d.get("pending")) or 0,
            # the API sends the score as a number or a numeric string
            compliance_score=_opt_float(d.get("compliance_score")) or 0.0,
            overall_status=str(d.get("overall_status") or "pending"),
            can_operate=None if can_operate is None else _bool(can_operate),
        )


@dataclass
class ComplianceStatus:
    vehicle_id: int
    compliance_status: str
    operational_status: str
    compliance_score: float
    summary: ComplianceSummary
    required: List[ComplianceRequirement] = field(default_factory=list)
    optional: List[ComplianceRequirement] = field(default_factory=list)
    vehicle_type_name: Optional[str] = None
    state_of_operation: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceStatus":
        d = _dict(d)
        vehicle = _dict(d.get("vehicle"))
        reqs = _dict(d.get("requirements"))
        return cls(
            vehicle_id=_opt_int(vehicle.get("id")) or 0,
            compliance_status=str(vehicle.get("compliance_status") or "pending"),
            operational_status=str(vehicle.get("operational_status") or ""),
            compliance_score=_opt_float(vehicle.get("compliance_score")) or 0.0,
            vehicle_type_name=_opt_str(vehicle.get("vehicle_type_name")),
            state_of_operation=_opt_str(vehicle.get("state_of_operation")),
            summary=ComplianceSummary.from_dict(d.get("summary")),
            required=[ComplianceRequirement.from_dict(x) for x in _list(reqs.get("required"))],
            optional=[ComplianceRequirement.from_dict(x) for x in _list(reqs.get("optional"))],
        )


@dataclass(frozen=True)
class ComplianceHistoryEntry:
    id: int
    issue_date: Optional[str]
    expiry_date: Optional[str]
    is_current: bool
    status: str

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceHistoryEntry":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")) or 0,
            issue_date=_opt_str(d.get("issue_date")),
            expiry_date=_opt_str(d.get("expiry_date")),
            is_current=_bool(d.get("is_current")),
            status=str(d.get("status") or "pending"),
        )


@dataclass
class ComplianceHistory:
    requirement_id: int
    compliance_type_name: str
    history: List[ComplianceHistoryEntry] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceHistory":
        d = _dict(d)
        req = _dict(d.get("requirement"))
        return cls(
            requirement_id=_opt_int(req.get("id")) or 0,
            compliance_type_name=str(_dict(req.get("compliance_type")).get("name") or ""),
            history=[ComplianceHistoryEntry.from_dict(x) for x in _list(d.get("history"))],
        )


# =============================================================================
# Fleet compliance dashboard
# =============================================================================


@dataclass(frozen=True)
class FleetStatistics:
    total_vehicles: int = 0
    operational: int = 0
    non_operational: int = 0
    maintenance: int = 0
    compliant: int = 0
    at_risk: int = 0
    expired: int = 0
    pending: int = 0
    compliance_rate: float = 0.0
    compliant_vehicles: int = 0
    requirements_total: int = 0
    requirements_compliant: int = 0
    requirements_at_risk: int = 0
    requirements_expired: int = 0
    requirements_pending: int = 0
    expiring_within_7_days: int = 0
    expiring_within_14_days: int = 0
    expiring_within_30_days: int = 0
    average_compliance_score: float = 0.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "FleetStatistics":
        d = _dict(d)
        fleet = _dict(d.get("fleet_overview"))
        comp = _dict(d.get("compliance_overview"))
        rate = _dict(d.get("compliance_rate"))
        reqs = _dict(d.get("requirements_overview"))
        soon = _dict(d.get("expiring_soon"))
        return cls(
            total_vehicles=_opt_int(fleet.get("total_vehicles")) or 0,
            operational=_opt_int(fleet.get("operational")) or 0,
            non_operational=_opt_int(fleet.get("non_operational")) or 0,
            maintenance=_opt_int(fleet.get("maintenance")) or 0,
            compliant=_opt_int(comp.get("compliant")) or 0,
            at_risk=_opt_int(comp.get("at_risk")) or 0,
            expired=_opt_int(comp.get("expired")) or 0,
            pending=_opt_int(comp.get("pending")) or 0,
            compliance_rate=_opt_float(rate.get("percentage")) or 0.0,
            compliant_vehicles=_opt_int(rate.get("compliant_vehicles")) or 0,
            requirements_total=_opt_int(reqs.get("total_requirements")) or 0,
            requirements_compliant=_opt_int(reqs.get("compliant")) or 0,
            requirements_at_risk=_opt_int(reqs.get("at_risk")) or 0,
            requirements_expired=_opt_int(reqs.get("expired")) or 0,
            requirements_pending=_opt_int(reqs.get("pending")) or 0,
            expiring_within_7_days=_opt_int(soon.get("within_7_days")) or 0,
            expiring_within_14_days=_opt_int(soon.get("within_14_days")) or 0,
            expiring_within_30_days=_opt_int(soon.get("within_30_days")) or 0,
            average_compliance_score=_opt_float(d.get("average_compliance_score")) or 0.0,
        )


@dataclass(frozen=True)
class ProblematicRequirement:
    requirement_id: int
    compliance_type: str
    category: str
    status: str
    days_until_expiry: Optional[int]
    expiry_date: Optional[str]
    is_required: bool

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ProblematicRequirement":
        d = _dict(d)
        return cls(
            requirement_id=_opt_int(d.get("requirement_id")) or 0,
            compliance_type=str(d.get("compliance_type") or ""),
            category=str(d.get("category") or ""),
            status=str(d.get("status") or ""),
            days_until_expiry=_opt_int(d.get("days_until_expiry")),
            expiry_date=_opt_str(d.get("expiry_date")),
            is_required=_bool(d.get("is_required")),
        )


@dataclass
class VehicleAtRisk:
    vehicle_id: int
    vehicle_type: str
    compliance_status: str
    compliance_score: float
    operational_status: str
    state_of_operation: Optional[str] = None
    problematic_requirements: List[ProblematicRequirement] = field(default_factory=list)
    problem_count: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "VehicleAtRisk":
        d = _dict(d)
        problems = [ProblematicRequirement.from_dict(x) for x in _list(d.get("problematic_requirements"))]
        return cls(
            vehicle_id=_opt_int(d.get("vehicle_id")) or 0,
            vehicle_type=str(d.get("vehicle_type") or ""),
            state_of_operation=_opt_str(d.get("state_of_operation")),
            compliance_status=str(d.get("compliance_status") or ""),
            compliance_score=_opt_float(d.get("compliance_score")) or 0.0,
            operational_status=str(d.get("operational_status") or ""),
            problematic_requirements=problems,
            problem_count=_opt_int(d.get("problem_count")) or len(problems),
        )


@dataclass(frozen=True)
class OverdueItem:
    vehicle_id: int
    vehicle_type: str
    requirement_id: int
    compliance_type_id: Optional[int]
    compliance_type_name: str
    category: str
    is_required: bool
    expiry_date: Optional[str]
    days_overdue: int
    current_record_id: Optional[int]
    state_of_operation: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "OverdueItem":
        d = _dict(d)
        return cls(
            vehicle_id=_opt_int(d.get("vehicle_id")) or 0,
            vehicle_type=str(d.get("vehicle_type") or ""),
            state_of_operation=_opt_str(d.get("state_of_operation")),
            requirement_id=_opt_int(d.get("requirement_id")) or 0,
            compliance_type_id=_opt_int(d.get("compliance_type_id")),
            compliance_type_name=str(d.get("compliance_type_name") or ""),
            category=str(d.get("category") or ""),
            is_required=_bool(d.get("is_required")),
            expiry_date=_opt_str(d.get("expiry_date")),
            days_overdue=_opt_int(d.get("days_overdue")) or 0,
            current_record_id=_opt_int(d.get("current_record_id")),
        )


@dataclass(frozen=True)
class ExpiringItem:
    vehicle_id: int
    vehicle_type: str
    requirement_id: int
    compliance_type_id: Optional[int]
    compliance_type_name: str
    category: str
    is_required: bool
    status: str
    expiry_date: Optional[str]
    days_until_expiry: int
    current_record_id: Optional[int]
    state_of_operation: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExpiringItem":
        d = _dict(d)
        return cls(
            vehicle_id=_opt_int(d.get("vehicle_id")) or 0,
            vehicle_type=str(d.get("vehicle_type") or ""),
            state_of_operation=_opt_str(d.get("state_of_operation")),
            requirement_id=_opt_int(d.get("requirement_id")) or 0,
            compliance_type_id=_opt_int(d.get("compliance_type_id")),
            compliance_type_name=str(d.get("compliance_type_name") or ""),
            category=str(d.get("category") or ""),
            is_required=_bool(d.get("is_required")),
            status=str(d.get("status") or ""),
            expiry_date=_opt_str(d.get("expiry_date")),
            days_until_expiry=_opt_int(d.get("days_until_expiry")) or 0,
            current_record_id=_opt_int(d.get("current_record_id")),
        )


@dataclass(frozen=True)
class ComplianceAlert:
    alert_id: int
    alert_type: str
    status: str
    days_until_expiry: Optional[int]
    vehicle_id: Optional[int]
    vehicle_type: str
    vehicle_state: Optional[str]
    compliance_type: str
    category: str
    expiry_date: Optional[str]
    sent_at: Optional[str] = None
    acknowledged_at: Optional[str] = None
    acknowledged_by: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def is_acknowledged(self) -> bool:
        return self.status == "acknowledged"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ComplianceAlert":
        d = _dict(d)
        vehicle = _dict(d.get("vehicle"))
        return cls(
            alert_id=_opt_int(d.get("alert_id") or d.get("id")) or 0,
            alert_type=str(d.get("alert_type") or ""),
            status=str(d.get("status") or "pending"),
            days_until_expiry=_opt_int(d.get("days_until_expiry")),
            vehicle_id=_opt_int(vehicle.get("id")),
            vehicle_type=str(vehicle.get("type") or ""),
            vehicle_state=_opt_str(vehicle.get("state")),
            compliance_type=str(d.get("compliance_type") or ""),
            category=str(d.get("category") or ""),
            expiry_date=_opt_str(d.get("expiry_date")),
            sent_at=_opt_str(d.get("sent_at")),
            acknowledged_at=_opt_str(d.get("acknowledged_at")),
            acknowledged_by=_opt_str(d.get("acknowledged_by")),
            created_at=_opt_str(d.get("created_at")),
        )


@dataclass(frozen=True)
class CategorySummary:
    category: str
    total: int
    compliant: int
    at_risk: int
    expired: int
    pending: int
    compliance_rate: float

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CategorySummary":
        d = _dict(d)
        return cls(
            category=str(d.get("category") or ""),
            total=_opt_int(d.get("total")) or 0,
            compliant=_opt_int(d.get("compliant")) or 0,
            at_risk=_opt_int(d.get("at_risk")) or 0,
            expired=_opt_int(d.get("expired")) or 0,
            pending=_opt_int(d.get("pending")) or 0,
            compliance_rate=_opt_float(d.get("compliance_rate")) or 0.0,
        )


@dataclass(frozen=True)
class Pagination:
    current_page: int = 1
    per_page: int = 20
    total: int = 0
    total_pages: int = 1
    has_more: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Pagination":
        d = _dict(d)
        return cls(
            current_page=_opt_int(d.get("current_page")) or 1,
            per_page=_opt_int(d.get("per_page")) or 20,
            total=_opt_int(d.get("total")) or 0,
            total_pages=_opt_int(d.get("total_pages")) or 1,
            has_more=_bool(d.get("has_more")),
        )


@dataclass
class PaginatedResult(Generic[T]):
    items: List[T]
    pagination: Pagination
    total: Optional[int] = None


# =============================================================================
# Notifications
# =============================================================================


@dataclass(frozen=True)
class NotificationSummary:
    total: int = 0
    unread: int = 0
    overdue: int = 0
    expiring_soon: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NotificationSummary":
        d = _dict(d)
        by_priority = _dict(d.get("by_priority"))
        return cls(
            total=_opt_int(d.get("total")) or 0,
            unread=_opt_int(d.get("unread")) or 0,
            overdue=_opt_int(d.get("overdue")) or 0,
            expiring_soon=_opt_int(d.get("expiring_soon")) or 0,
            critical=_opt_int(by_priority.get("critical")) or 0,
            high=_opt_int(by_priority.get("high")) or 0,
            medium=_opt_int(by_priority.get("medium")) or 0,
            low=_opt_int(by_priority.get("low")) or 0,
        )


@dataclass(frozen=True)
class Notification:
    id: str
    type: str
    priority: str
    is_read: bool
    vehicle_id: Optional[int]
    vehicle_registration: Optional[str]
    vehicle_make: Optional[str]
    vehicle_model: Optional[str]
    vehicle_type: Optional[str]
    compliance_type_name: str
    compliance_category: Optional[str]
    requirement_id: Optional[int]
    record_id: Optional[int]
    expiry_date: Optional[str]
    days_until_expiry: Optional[int]
    message: str
    created_at: Optional[str] = None
    days_overdue: Optional[int] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Notification":
        d = _dict(d)
        vehicle = _dict(d.get("vehicle"))
        comp = _dict(d.get("compliance"))
        return cls(
            id=str(d.get("id") or ""),
            type=str(d.get("type") or ""),
            priority=str(d.get("priority") or "low"),
            is_read=_bool(d.get("is_read")),
            vehicle_id=_opt_int(vehicle.get("id")),
            vehicle_registration=_opt_str(vehicle.get("registration_number")),
            vehicle_make=_opt_str(vehicle.get("make")),
            vehicle_model=_opt_str(vehicle.get("model")),
            vehicle_type=_opt_str(vehicle.get("type")),
            compliance_type_name=str(comp.get("type_name") or ""),
            compliance_category=_opt_str(comp.get("category")),
            requirement_id=_opt_int(comp.get("requirement_id")),
            record_id=_opt_int(comp.get("record_id")),
            expiry_date=_opt_str(d.get("expiry_date")),
            days_until_expiry=_opt_int(d.get("days_until_expiry")),
            days_overdue=_opt_int(d.get("days_overdue")),
            message=str(d.get("message") or ""),
            created_at=_opt_str(d.get("created_at")),
        )


@dataclass
class NotificationFeed:
    success: bool
    message: str
    summary: NotificationSummary
    notifications: List[Notification] = field(default_factory=list)

    @classmethod
    def empty(cls, message: str = "Failed to fetch notifications") -> "NotificationFeed":
        return cls(success=False, message=message, summary=NotificationSummary(), notifications=[])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "NotificationFeed":
        d = _dict(d)
        data = _dict(d.get("data"))
        return cls(
            success=_bool(d.get("success")),
            message=str(d.get("message") or ""),
            summary=NotificationSummary.from_dict(data.get("summary")),
            notifications=[Notification.from_dict(x) for x in _list(data.get("notifications"))],
        )


@dataclass(frozen=True)
class Alert:
    """Legacy alert shape used by the alerts page and the notification bell."""
    id: str
    type: str  # expired | expiring_soon | compliance_at_risk | approval_required
    title: str
    message: str
    severity: str  # critical | warning | info
    entity_id: Optional[int]
    entity_type: str
    is_read: bool
    created_at: Optional[str] = None
    action_link: Optional[str] = None
    vehicle_id: Optional[int] = None


# =============================================================================
# Vehicle import
# =============================================================================


@dataclass
class ImportPreviewRow:
    row_number: int
    data: Dict[str, Any]
    errors: List[str]
    is_valid: bool

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ImportPreviewRow":
        d = _dict(d)
        errors = [str(e) for e in _list(d.get("errors"))]
        return cls(
            row_number=_opt_int(d.get("rowNumber") or d.get("row_number")) or 0,
            data=dict(_dict(d.get("data"))),
            errors=errors,
            is_valid=_bool(d.get("isValid", d.get("is_valid")), default=not errors),
        )


@dataclass
class ImportPreview:
    total_rows: int
    valid_rows: int
    invalid_rows: int
    rows: List[ImportPreviewRow]
    pagination: Pagination

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ImportPreview":
        d = _dict(d)
        return cls(
            total_rows=_opt_int(d.get("totalRows") or d.get("total_rows")) or 0,
            valid_rows=_opt_int(d.get("validRows") or d.get("valid_rows")) or 0,
            invalid_rows=_opt_int(d.get("invalidRows") or d.get("invalid_rows")) or 0,
            rows=[ImportPreviewRow.from_dict(x) for x in _list(d.get("rows"))],
            pagination=Pagination.from_dict(d.get("pagination")),
        )


# =============================================================================
# Public (QR) lookup
# =============================================================================


@dataclass
class PublicDocument:
    id: int
    document_name: str
    file_path: str
    document_type_name: Optional[str] = None
    document_number: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    expiry_date: Optional[str] = None
    is_expired: bool = False

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PublicDocument":
        d = _dict(d)
        return cls(
            id=_opt_int(d.get("id")) or 0,
            document_name=str(d.get("document_name") or ""),
            file_path=str(d.get("file_path") or ""),
            document_type_name=_opt_str(_dict(d.get("document_type")).get("name")),
            document_number=_opt_str(d.get("document_number")),
            file_type=_opt_str(d.get("file_type")),
            file_size=_opt_int(d.get("file_size")),
            expiry_date=_opt_str(d.get("expiry_date")),
            is_expired=_bool(d.get("is_expired")),
        )


@dataclass
class PublicVehicle:
    id: int
    vehicle_type: str
    status: str
    field_values: List[FieldValue] = field(default_factory=list)
    documents: List[PublicDocument] = field(default_factory=list)
    qr_code_token: Optional[str] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PublicVehicle":
        d = _dict(d)
        vt = d.get("vehicle_type")
        return cls(
            id=_opt_int(d.get("id")) or 0,
            vehicle_type=str(_dict(vt).get("name") if isinstance(vt, dict) else (vt or "")),
            status=str(d.get("status") or ""),
            field_values=[FieldValue.from_dict(x) for x in _list(d.get("field_values"))],
            documents=[PublicDocument.from_dict(x) for x in _list(d.get("documents"))],
            qr_code_token=_opt_str(d.get("qr_code_token")),
        )
