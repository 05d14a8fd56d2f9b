"""
Presentation rules.

Pure derivations from API records to what the pages show: breadcrumb labels,
badge states, expiry states, chart series and a few lookups. No IO and no
Streamlit imports; "today" is always passed in or taken from the clock.
"""
from __future__ import annotations

import math
import re
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from fleetdash.domain.models import (
    Alert,
    BusinessRegistration,
    FieldValue,
    ImportPreview,
    ImportPreviewRow,
    Notification,
    PublicDocument,
    PublicVehicle,
    Vehicle,
    VehicleAtRisk,
    VehicleDocument,
    VehicleType,
)
from fleetdash.infra.clock import parse_date, parse_datetime, today as clock_today


# Palette shared by every badge; hex so it works in plain HTML.
GREEN = "#22c55e"
ORANGE = "#f97316"
YELLOW = "#eab308"
RED = "#ef4444"
BLUE = "#3b82f6"
GRAY = "#6b7280"
SLATE = "#64748b"


@dataclass(frozen=True)
class BadgeStyle:
    label: str
    color: str
    variant: str = "default"  # default | secondary | destructive | outline
    icon: str = ""
    tooltip: str = ""


@dataclass(frozen=True)
class Breadcrumb:
    label: str
    href: Optional[str] = None
    is_last: bool = False


# =============================================================================
# Breadcrumbs
# =============================================================================


_ID_SEGMENT = re.compile(r"^[0-9a-f-]{36}$", re.IGNORECASE)
_DIGITS = re.compile(r"^\d+$")


def _title_case(segment: str) -> str:
    return " ".join(w[:1].upper() + w[1:] for w in segment.split("-"))


def format_segment_label(segment: str) -> str:
    """UUIDs and numeric ids are shortened to ``#<first 8>...``; anything else kebab → Title Case."""
    if _ID_SEGMENT.match(segment) or _DIGITS.match(segment):
        return f"#{segment[:8]}..."
    return _title_case(segment)


def generate_breadcrumbs(path: str) -> List[Breadcrumb]:
    """
    Breadcrumbs for the in-page trail (Home already stands for ``/dashboard``).

    ``[param]`` placeholder segments are skipped but still extend the href
    prefix of the crumbs after them. The last crumb has no href.
    """
    segments = [s for s in path.split("/") if s and s != "dashboard"]
    crumbs: List[Breadcrumb] = []
    current = ""
    for index, segment in enumerate(segments):
        current += f"/{segment}"
        is_last = index == len(segments) - 1
        if segment.startswith("[") and segment.endswith("]"):
            continue
        crumbs.append(
            Breadcrumb(
                label=format_segment_label(segment),
                href=None if is_last else f"/dashboard{current}",
                is_last=is_last,
            )
        )
    return crumbs


def header_breadcrumbs(path: str) -> List[Breadcrumb]:
    """Header variant: every segment becomes a crumb, ``dashboard`` included."""
    segments = [s for s in path.split("/") if s]
    return [
        Breadcrumb(
            label=_title_case(seg),
            href="/" + "/".join(segments[: i + 1]),
            is_last=i == len(segments) - 1,
        )
        for i, seg in enumerate(segments)
    ]


# =============================================================================
# Badges
# =============================================================================


def compliance_status_badge(status: Optional[str]) -> BadgeStyle:
    status = status or ""
    label = status.replace("_", " ", 1)
    s = status.lower()
    if s == "compliant":
        return BadgeStyle(label, GREEN)
    if s == "at_risk":
        return BadgeStyle(label, ORANGE)
    if s == "expired":
        return BadgeStyle(label, RED, variant="destructive")
    if s == "pending":
        return BadgeStyle(label, GRAY, variant="secondary")
    return BadgeStyle(label, SLATE, variant="secondary")


def operational_status_badge(status: Optional[str], can_operate: Optional[bool] = None) -> BadgeStyle:
    """``can_operate=False`` wins over whatever the status string says."""
    non_operational = BadgeStyle(
        "Non-Operational", RED, variant="destructive", icon="⚠️",
        tooltip="This vehicle cannot operate due to compliance issues or manual override.",
    )
    if can_operate is False:
        return non_operational

    s = (status or "").lower()
    if s == "operational":
        return BadgeStyle("Operational", GREEN, variant="outline", icon="✅",
                          tooltip="Vehicle is safe and ready for operation.")
    if s == "maintenance":
        return BadgeStyle("Maintenance", YELLOW, variant="outline", icon="🔧",
                          tooltip="Vehicle is currently under maintenance.")
    if s in ("non_operational", "non-operational"):
        return replace(non_operational, tooltip="Vehicle is not operational.")
    return BadgeStyle(status or "Unknown", GRAY, variant="outline", tooltip="Status unknown.")


@dataclass(frozen=True)
class ScoreStyle:
    score: int
    color: str
    circumference: float
    dash_offset: float


SCORE_RING_RADIUS = 18


def compliance_score_style(score: Optional[float]) -> ScoreStyle:
    value = float(score or 0)
    if value >= 80:
        color = GREEN
    elif value >= 50:
        color = YELLOW
    else:
        color = RED
    circumference = 2 * math.pi * SCORE_RING_RADIUS
    return ScoreStyle(
        # JS Math.round: halves round up
        score=int(math.floor(value + 0.5)),
        color=color,
        circumference=circumference,
        dash_offset=circumference - (value / 100) * circumference,
    )


def vehicle_status_style(status: Optional[str]) -> BadgeStyle:
    s = (status or "").lower()
    label = status or "unknown"
    if s in ("active", "operational"):
        return BadgeStyle(label, GREEN, variant="outline")
    if s == "maintenance":
        return BadgeStyle(label, YELLOW, variant="outline")
    if s == "inactive":
        return BadgeStyle(label, GRAY, variant="outline")
    if s == "sold":
        return BadgeStyle(label, BLUE, variant="outline")
    return BadgeStyle(label, SLATE, variant="outline")


# =============================================================================
# Documents
# =============================================================================


@dataclass(frozen=True)
class ExpiryStatus:
    status: str  # expired | expiring | valid
    label: str
    color: str
    days: int


def _days_between(expiry: Any, reference: Optional[date]) -> Optional[int]:
    """Floor of whole days from ``reference`` to the expiry date."""
    exp = parse_datetime(expiry)
    if exp is None:
        return None
    if reference is None:
        now = datetime.now(timezone.utc)
    elif isinstance(reference, datetime):
        now = reference if reference.tzinfo else reference.replace(tzinfo=timezone.utc)
    else:
        now = datetime(reference.year, reference.month, reference.day, tzinfo=timezone.utc)
    return math.floor((exp - now).total_seconds() / 86400)


def document_expiry_status(doc: Any, today: Optional[date] = None) -> Optional[ExpiryStatus]:
    expiry = getattr(doc, "expiry_date", None)
    if not expiry:
        return None
    days = _days_between(expiry, today or clock_today())
    if days is None:
        return None
    if getattr(doc, "is_expired", False) or days < 0:
        return ExpiryStatus("expired", "Expired", RED, days)
    if days <= 30:
        return ExpiryStatus("expiring", f"Expires in {days} days", YELLOW, days)
    return ExpiryStatus("valid", "Valid", GREEN, days)


def document_status_badge(doc: Any, today: Optional[date] = None) -> BadgeStyle:
    """Table badge: an unflagged past expiry still reads Expiring Soon."""
    if getattr(doc, "is_expired", False):
        return BadgeStyle("Expired", RED, variant="destructive")
    expiry = getattr(doc, "expiry_date", None)
    if expiry:
        days = _days_between(expiry, today or clock_today())
        if days is not None and days <= 30:
            return BadgeStyle("Expiring Soon", YELLOW, variant="outline")
        return BadgeStyle("Valid", BLUE, variant="outline")
    return BadgeStyle("No Expiry", GRAY, variant="outline")


def document_category_icon(doc_type: Optional[str]) -> Tuple[str, str]:
    """(emoji, color) for a document type name."""
    t = (doc_type or "").lower()
    if "registration" in t or "title" in t:
        return "📋", "#2563eb"
    if "insurance" in t:
        return "🛡️", "#16a34a"
    if "inspection" in t or "maintenance" in t:
        return "🔧", "#ea580c"
    if "permit" in t or "license" in t:
        return "📜", "#9333ea"
    if "receipt" in t or "invoice" in t:
        return "🧾", "#db2777"
    return "📄", "#4b5563"


def file_kind(file_type: Optional[str], file_path: Optional[str] = None) -> str:
    """pdf | image | word | excel | file"""
    ft = (file_type or "").lower()
    name = (file_path or "").lower()
    if "pdf" in ft or name.endswith(".pdf"):
        return "pdf"
    if "image" in ft or re.search(r"\.(jpg|jpeg|png|gif)$", name):
        return "image"
    if "word" in ft or re.search(r"\.(doc|docx)$", name):
        return "word"
    if "excel" in ft or re.search(r"\.(xls|xlsx)$", name):
        return "excel"
    return "file"


FILE_KIND_ICONS = {"pdf": "📕", "image": "🖼️", "word": "📝", "excel": "📊", "file": "📄"}


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return ""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.1f} MB"


def format_file_size_mb(size: Optional[int]) -> str:
    if not size:
        return "Unknown size"
    return f"{size / (1024 * 1024):.2f} MB"


def document_type_name(doc: VehicleDocument) -> str:
    dt = doc.document_type
    if isinstance(dt, str) and dt:
        return dt
    if doc.document_type_info and doc.document_type_info.name:
        return doc.document_type_info.name
    if dt is not None and not isinstance(dt, str) and dt.name:
        return dt.name
    return "Unknown"


def group_documents_by_type(documents: Iterable[PublicDocument]) -> "OrderedDict[str, List[PublicDocument]]":
    """Group by document type name, first-seen order kept."""
    groups: "OrderedDict[str, List[PublicDocument]]" = OrderedDict()
    for doc in documents:
        groups.setdefault(doc.document_type_name or "Other Documents", []).append(doc)
    return groups


def documents_in_category(documents: Iterable[PublicDocument], category: str) -> List[PublicDocument]:
    return [d for d in documents if d.document_type_name == category]


def expiring_documents(documents: Iterable[Any], today: Optional[date] = None, days: int = 30) -> List[Any]:
    """Documents expiring strictly after today and no later than ``today + days``."""
    ref = today or clock_today()
    horizon = ref + timedelta(days=days)
    result = []
    for doc in documents:
        exp = parse_date(getattr(doc, "expiry_date", None))
        if exp is not None and ref < exp <= horizon:
            result.append(doc)
    return result


def suggest_expiry_date(issue_date: Any, renewal_frequency_days: Optional[int]) -> Optional[date]:
    """Issue date plus the compliance type's renewal period, if it has one."""
    issued = parse_date(issue_date)
    if issued is None or not renewal_frequency_days:
        return None
    return issued + timedelta(days=renewal_frequency_days)


# =============================================================================
# Notifications
# =============================================================================


_PRIORITY_ICONS = {"critical": "🚨", "high": "⚠️", "medium": "⏰", "low": "📅"}
_PRIORITY_COLORS = {"critical": "#dc2626", "high": "#ea580c", "medium": "#ca8a04", "low": "#2563eb"}


def priority_icon(priority: Optional[str]) -> str:
    return _PRIORITY_ICONS.get(priority or "", "📋")


def priority_style(priority: Optional[str]) -> str:
    return _PRIORITY_COLORS.get(priority or "", "#4b5563")


def priority_to_severity(priority: Optional[str]) -> str:
    if priority in ("critical", "high"):
        return "critical"
    if priority == "medium":
        return "warning"
    return "info"


def notification_to_alert(notification: Notification) -> Alert:
    return Alert(
        id=notification.id,
        type="expired" if notification.type == "overdue" else "expiring_soon",
        title=notification.compliance_type_name,
        message=notification.message,
        severity=priority_to_severity(notification.priority),
        entity_id=notification.vehicle_id,
        entity_type="record",
        is_read=notification.is_read,
        created_at=notification.created_at,
        action_link=f"/dashboard/vehicles/{notification.vehicle_id}/compliance",
        vehicle_id=notification.vehicle_id,
    )


# =============================================================================
# Vehicle names and fields
# =============================================================================


def find_field_value(field_values: Sequence[FieldValue], key: str) -> Optional[str]:
    """First field whose key equals ``key`` or whose name contains it (case-insensitive)."""
    wanted = key.lower()
    for fv in field_values or ():
        if fv.key and fv.key.lower() == wanted:
            return fv.value or None
        if fv.name and wanted in fv.name.lower():
            return fv.value or None
    return None


def vehicle_display_name(vehicle: Vehicle) -> str:
    for key in ("name", "vehicle name", "model", "plate", "license"):
        value = find_field_value(vehicle.field_values, key)
        if value:
            return value
    if vehicle.name:
        return vehicle.name
    return f"Vehicle #{vehicle.id}"


def _exact_name_field(vehicle: PublicVehicle) -> Optional[str]:
    for fv in vehicle.field_values:
        if fv.name.lower() == "name" and fv.value:
            return fv.value
    return None


def public_vehicle_name(vehicle: PublicVehicle, grid: bool = False) -> str:
    name = _exact_name_field(vehicle)
    if name:
        return name
    if grid:
        return f"{vehicle.vehicle_type} #{vehicle.id}"
    return vehicle.vehicle_type or "Vehicle"


def parse_field_options(text: Optional[str]) -> Optional[Dict[str, str]]:
    """``key: value`` lines to a dict; lines missing either side are ignored."""
    options: Dict[str, str] = {}
    for line in (text or "").splitlines():
        parts = [p.strip() for p in line.split(":")]
        if len(parts) >= 2 and parts[0] and parts[1]:
            options[parts[0]] = parts[1]
    return options or None


def format_field_options(options: Optional[Dict[str, str]]) -> str:
    return "\n".join(f"{k}: {v}" for k, v in (options or {}).items())


# =============================================================================
# Dashboard aggregates
# =============================================================================


@dataclass(frozen=True)
class FleetCounts:
    total: int
    active: int
    maintenance: int
    inactive: int


def fleet_vehicle_counts(vehicles: Sequence[Vehicle]) -> FleetCounts:
    return FleetCounts(
        total=len(vehicles),
        active=sum(1 for v in vehicles if v.status == "active"),
        maintenance=sum(1 for v in vehicles if v.status == "maintenance"),
        inactive=sum(1 for v in vehicles if v.status == "inactive"),
    )


def recent_vehicles(vehicles: Sequence[Vehicle], limit: int = 5) -> List[Vehicle]:
    epoch = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(vehicles, key=lambda v: parse_datetime(v.created_at) or epoch, reverse=True)[:limit]


def vehicle_status_chart_data(active: int, maintenance: int, inactive: int) -> List[Dict[str, Any]]:
    total = active + maintenance + inactive
    rows = [
        ("Active", active, "#22c55e"),
        ("Maintenance", maintenance, "#eab308"),
        ("Inactive", inactive, "#6b7280"),
    ]
    return [
        {
            "status": name,
            "count": count,
            "percentage": round(count / total * 100, 1) if total > 0 else 0.0,
            "color": color,
        }
        for name, count, color in rows
        if count > 0
    ]


def compliance_chart_data(compliant: int, at_risk: int, expired: int, pending: int) -> List[Dict[str, Any]]:
    return [
        {"status": "Compliant", "count": compliant, "color": "#2563eb"},
        {"status": "At Risk", "count": at_risk, "color": "#3b82f6"},
        {"status": "Expired", "count": expired, "color": "#60a5fa"},
        {"status": "Pending", "count": pending, "color": "#93c5fd"},
    ]


@dataclass(frozen=True)
class AtRiskBanner:
    expired: int
    at_risk: int
    text: str


def at_risk_banner(total_at_risk: int, vehicles: Sequence[VehicleAtRisk]) -> Optional[AtRiskBanner]:
    """``None`` when nothing is at risk."""
    if not total_at_risk:
        return None
    expired = sum(1 for v in vehicles if v.compliance_status == "expired")
    at_risk = sum(1 for v in vehicles if v.compliance_status == "at_risk")
    parts = []
    if expired:
        parts.append(f"{expired} vehicle{'s' if expired != 1 else ''} expired")
    if at_risk:
        parts.append(f"{at_risk} at risk")
    return AtRiskBanner(expired=expired, at_risk=at_risk, text=", ".join(parts))


# =============================================================================
# Vehicle import
# =============================================================================


IMPORT_CONTENT_TYPES = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "text/csv",
)
IMPORT_EXTENSIONS = ("xlsx", "xls", "csv")


@dataclass(frozen=True)
class DetectedType:
    id: int
    name: str
    confidence: int


def detect_vehicle_type(filename: str, vehicle_types: Sequence[VehicleType]) -> Optional[DetectedType]:
    """Guess the vehicle type of an import file from its name."""
    name = filename.lower()
    for vt in vehicle_types:
        if vt.name and vt.name.lower() in name:
            return DetectedType(vt.id, vt.name, 95)
    m = re.match(r"^(.+)_import_template", name)
    if m:
        wanted = m.group(1).replace("_", " ")
        for vt in vehicle_types:
            if vt.name.lower() == wanted:
                return DetectedType(vt.id, vt.name, 90)
    return None


def import_template_filename(vehicle_type_name: Optional[str]) -> str:
    return f"{vehicle_type_name or 'vehicle'}_import_template.xlsx"


def validate_row_field(field_key: str, value: Any, current_year: Optional[int] = None) -> List[str]:
    errors: List[str] = []
    text = "" if value is None else str(value)
    if not text.strip() and field_key != "notes":
        errors.append(f"{field_key} is required")
    if field_key == "email" and text and not re.match(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", text):
        errors.append(f"{field_key} must be a valid email")
    if field_key == "year" and text:
        year_limit = (current_year or clock_today().year) + 1
        try:
            year = int(text)
        except ValueError:
            year = None
        if year is None or year < 1900 or year > year_limit:
            errors.append(f"{field_key} must be a valid year")
    return errors


def _revalidate(row: ImportPreviewRow, data: Dict[str, Any], field_key: str) -> ImportPreviewRow:
    others = [e for e in row.errors if field_key.lower() not in e.lower()]
    errors = others + validate_row_field(field_key, data.get(field_key))
    return ImportPreviewRow(row_number=row.row_number, data=data, errors=errors, is_valid=not errors)


def _with_rows(preview: ImportPreview, rows: List[ImportPreviewRow]) -> ImportPreview:
    valid = sum(1 for r in rows if r.is_valid)
    return ImportPreview(
        total_rows=preview.total_rows,
        valid_rows=valid,
        invalid_rows=len(rows) - valid,
        rows=rows,
        pagination=preview.pagination,
    )


def apply_cell_edit(
    preview: ImportPreview,
    edited_rows: Dict[int, Dict[str, Any]],
    row_number: int,
    field_key: str,
    value: str,
) -> Tuple[ImportPreview, Dict[int, Dict[str, Any]]]:
    """Set one cell, re-validate that field and record the edited row."""
    rows = []
    edits = dict(edited_rows)
    for row in preview.rows:
        if row.row_number == row_number:
            data = {**edits.get(row_number, row.data), field_key: value}
            edits[row_number] = data
            row = _revalidate(row, {**row.data, field_key: value}, field_key)
        rows.append(row)
    return _with_rows(preview, rows), edits


def fill_down(
    preview: ImportPreview,
    edited_rows: Dict[int, Dict[str, Any]],
    field_key: str,
) -> Tuple[ImportPreview, Dict[int, Dict[str, Any]]]:
    """
    Copy the first row's value of ``field_key`` into every row where it is empty.

    Raises:
        ValueError: the first row has no value for the field
    """
    fill = preview.rows[0].data.get(field_key) if preview.rows else None
    if not fill:
        raise ValueError("First row must have a value to fill down")
    rows = []
    edits = dict(edited_rows)
    for row in preview.rows:
        if not row.data.get(field_key):
            data = {**row.data, field_key: fill}
            edits[row.row_number] = data
            row = _revalidate(row, data, field_key)
        rows.append(row)
    return _with_rows(preview, rows), edits


def import_columns(preview: ImportPreview) -> List[str]:
    """Column keys in first-seen order across the preview rows."""
    seen: "OrderedDict[str, None]" = OrderedDict()
    for row in preview.rows:
        for key in row.data:
            seen.setdefault(key, None)
    return list(seen)


# =============================================================================
# Forms
# =============================================================================


_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_business_registration(reg: BusinessRegistration) -> Dict[str, str]:
    """Field → message for every rule the registration form breaks."""
    errors: Dict[str, str] = {}
    if len(reg.business_name.strip()) < 2:
        errors["business_name"] = "Business name must be at least 2 characters"
    if not _EMAIL.match(reg.business_email or ""):
        errors["business_email"] = "Invalid email address"
    if len(reg.admin_name.strip()) < 2:
        errors["admin_name"] = "Name must be at least 2 characters"
    if not _EMAIL.match(reg.admin_email or ""):
        errors["admin_email"] = "Invalid email address"
    if len(reg.admin_password) < 6:
        errors["admin_password"] = "Password must be at least 6 characters"
    if reg.admin_password != reg.admin_password_confirmation:
        errors["admin_password_confirmation"] = "Passwords don't match"
    return errors


def format_validation_errors(errors: Dict[str, Any]) -> str:
    """Server ``errors`` block as ``Field Name: msg, msg`` lines."""
    lines = []
    for field_name, messages in errors.items():
        label = " ".join(w[:1].upper() + w[1:] for w in field_name.replace("_", " ").split(" "))
        msgs = messages if isinstance(messages, list) else [messages]
        lines.append(f"{label}: {', '.join(str(m) for m in msgs)}")
    return "\n".join(lines)


# =============================================================================
# URLs
# =============================================================================


def storage_base(api_url: str) -> str:
    base = api_url.rstrip("/")
    return base[: -len("/api")] if base.endswith("/api") else base


def document_file_url(api_url: str, file_path: str) -> str:
    return f"{storage_base(api_url)}/storage/{file_path.lstrip('/')}"


def public_vehicle_url(base_url: str, token: str, page: str = "Public_Vehicle") -> str:
    """Public lookup page (the QR code target) for a vehicle token."""
    return f"{base_url.rstrip('/')}/{page}?token={token}"
