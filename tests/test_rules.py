"""
Unit tests: presentation rules
"""
from datetime import date
from types import SimpleNamespace

import pytest

from fleetdash.domain.models import (
    BusinessRegistration,
    FieldValue,
    ImportPreview,
    ImportPreviewRow,
    Notification,
    Pagination,
    PublicDocument,
    PublicVehicle,
    Vehicle,
    VehicleAtRisk,
    VehicleDocument,
    VehicleType,
    DocumentType,
)
from fleetdash.domain import rules
from fleetdash.domain.rules import (
    GREEN,
    ORANGE,
    RED,
    YELLOW,
    apply_cell_edit,
    at_risk_banner,
    compliance_chart_data,
    compliance_score_style,
    compliance_status_badge,
    detect_vehicle_type,
    document_expiry_status,
    document_file_url,
    document_status_badge,
    document_type_name,
    expiring_documents,
    file_kind,
    fill_down,
    fleet_vehicle_counts,
    format_file_size,
    format_file_size_mb,
    format_segment_label,
    format_validation_errors,
    generate_breadcrumbs,
    group_documents_by_type,
    header_breadcrumbs,
    import_columns,
    notification_to_alert,
    operational_status_badge,
    parse_field_options,
    priority_icon,
    priority_style,
    priority_to_severity,
    public_vehicle_name,
    public_vehicle_url,
    recent_vehicles,
    suggest_expiry_date,
    validate_business_registration,
    validate_row_field,
    vehicle_display_name,
    vehicle_status_chart_data,
)

TODAY = date(2024, 1, 1)


class TestBreadcrumbs:
    """Breadcrumb trail generation"""

    def test_segment_labels(self):
        assert format_segment_label("vehicle-types") == "Vehicle Types"
        assert format_segment_label("123") == "#123..."
        assert format_segment_label("550e8400-e29b-41d4-a716-446655440000") == "#550e8400..."

    def test_dashboard_root_has_no_trail(self):
        assert generate_breadcrumbs("/dashboard") == []

    def test_placeholder_segments_are_skipped(self):
        crumbs = generate_breadcrumbs("/dashboard/vehicles/[id]/compliance")

        assert [c.label for c in crumbs] == ["Vehicles", "Compliance"]
        assert crumbs[0].href == "/dashboard/vehicles"
        assert not crumbs[0].is_last
        assert crumbs[1].href is None
        assert crumbs[1].is_last

    def test_href_keeps_numeric_ids(self):
        crumbs = generate_breadcrumbs("/dashboard/vehicles/42/edit")
        assert crumbs[1].label == "#42..."
        assert crumbs[1].href == "/dashboard/vehicles/42"

    def test_header_variant_includes_dashboard(self):
        crumbs = header_breadcrumbs("/dashboard/vehicle-types")
        assert [(c.label, c.href, c.is_last) for c in crumbs] == [
            ("Dashboard", "/dashboard", False),
            ("Vehicle Types", "/dashboard/vehicle-types", True),
        ]

    @pytest.mark.parametrize("path,expected", [
        ("/", []),
        ("", []),
        ("/dashboard", [("Dashboard", "/dashboard", True)]),
    ])
    def test_header_variant_at_root(self, path, expected):
        assert [(c.label, c.href, c.is_last) for c in header_breadcrumbs(path)] == expected


class TestBadges:
    """Status badges and the compliance score ring"""

    def test_compliance_status(self):
        assert compliance_status_badge("at_risk").label == "at risk"
        assert compliance_status_badge("at_risk").color == ORANGE
        assert compliance_status_badge("expired").variant == "destructive"
        assert compliance_status_badge(None).variant == "secondary"

    def test_can_operate_false_overrides_status(self):
        badge = operational_status_badge("operational", can_operate=False)
        assert badge.label == "Non-Operational"
        assert badge.color == RED

    def test_operational_statuses(self):
        assert operational_status_badge("operational").label == "Operational"
        assert operational_status_badge("maintenance").color == YELLOW
        assert operational_status_badge("non_operational").label == "Non-Operational"
        assert operational_status_badge(None).label == "Unknown"

    @pytest.mark.parametrize("score,color", [(100, GREEN), (80, GREEN), (79.9, YELLOW), (50, YELLOW), (49.9, RED), (None, RED)])
    def test_score_colors(self, score, color):
        assert compliance_score_style(score).color == color

    def test_score_ring_geometry(self):
        full = compliance_score_style(100)
        assert full.dash_offset == pytest.approx(0)
        empty = compliance_score_style(0)
        assert empty.dash_offset == pytest.approx(empty.circumference)
        assert compliance_score_style(79.5).score == 80


class TestDocumentExpiry:
    """Expiry states for vehicle documents"""

    @pytest.mark.parametrize("expiry,status,label", [
        ("2023-12-31", "expired", "Expired"),
        ("2024-01-11", "expiring", "Expires in 10 days"),
        ("2024-01-31", "expiring", "Expires in 30 days"),
        ("2024-03-01", "valid", "Valid"),
    ])
    def test_expiry_status(self, expiry, status, label):
        result = document_expiry_status(SimpleNamespace(expiry_date=expiry, is_expired=False), TODAY)
        assert result.status == status
        assert result.label == label

    def test_flagged_document_is_expired(self):
        doc = SimpleNamespace(expiry_date="2030-01-01", is_expired=True)
        assert document_expiry_status(doc, TODAY).status == "expired"
        assert document_status_badge(doc, TODAY).label == "Expired"

    def test_no_expiry(self):
        doc = SimpleNamespace(expiry_date=None, is_expired=False)
        assert document_expiry_status(doc, TODAY) is None
        assert document_status_badge(doc, TODAY).label == "No Expiry"

    def test_unflagged_past_expiry_reads_expiring_soon(self):
        doc = SimpleNamespace(expiry_date="2023-06-01", is_expired=False)
        assert document_status_badge(doc, TODAY).label == "Expiring Soon"

    def test_expiring_window_excludes_today(self):
        docs = [SimpleNamespace(expiry_date=d) for d in ("2024-01-01", "2024-01-31", "2024-02-01", None)]
        assert [d.expiry_date for d in expiring_documents(docs, TODAY)] == ["2024-01-31"]

    def test_suggest_expiry_date(self):
        assert suggest_expiry_date("2024-01-01", 365) == date(2024, 12, 31)
        assert suggest_expiry_date("2024-01-01", None) is None
        assert suggest_expiry_date(None, 30) is None

    def test_document_type_name_fallbacks(self):
        assert document_type_name(VehicleDocument(id=1, document_type="Insurance")) == "Insurance"
        nested = VehicleDocument(id=2, document_type=DocumentType(id=3, name="Permit"))
        assert document_type_name(nested) == "Permit"
        assert document_type_name(VehicleDocument(id=4)) == "Unknown"

    def test_group_documents_keeps_first_seen_order(self):
        docs = [
            PublicDocument(id=1, document_name="a", file_path="a", document_type_name="Insurance"),
            PublicDocument(id=2, document_name="b", file_path="b", document_type_name=None),
            PublicDocument(id=3, document_name="c", file_path="c", document_type_name="Insurance"),
        ]
        groups = group_documents_by_type(docs)
        assert list(groups) == ["Insurance", "Other Documents"]
        assert [d.id for d in groups["Insurance"]] == [1, 3]


class TestNotifications:
    """Notification to alert mapping"""

    def _notification(self, **overrides):
        data = {
            "id": "n-1",
            "type": "overdue",
            "priority": "high",
            "vehicle": {"id": 9},
            "compliance": {"type_name": "Roadworthy"},
            "message": "Roadworthy overdue",
        }
        data.update(overrides)
        return Notification.from_dict(data)

    def test_overdue_becomes_expired_alert(self):
        alert = notification_to_alert(self._notification())
        assert alert.type == "expired"
        assert alert.severity == "critical"
        assert alert.title == "Roadworthy"
        assert alert.action_link == "/dashboard/vehicles/9/compliance"

    def test_upcoming_becomes_expiring_soon(self):
        alert = notification_to_alert(self._notification(type="upcoming", priority="low"))
        assert alert.type == "expiring_soon"
        assert alert.severity == "info"


class TestVehicleNames:
    """Vehicle display names"""

    def test_field_value_wins(self):
        vehicle = Vehicle(id=7, name="Fallback", field_values=[FieldValue(name="Plate", key="plate", value="ABC 123")])
        assert vehicle_display_name(vehicle) == "ABC 123"

    def test_falls_back_to_id(self):
        assert vehicle_display_name(Vehicle(id=7)) == "Vehicle #7"

    def test_public_name(self):
        vehicle = PublicVehicle(id=3, vehicle_type="Truck", status="active")
        assert public_vehicle_name(vehicle) == "Truck"
        assert public_vehicle_name(vehicle, grid=True) == "Truck #3"
        vehicle.field_values.append(FieldValue(name="Name", value="Big Red"))
        assert public_vehicle_name(vehicle, grid=True) == "Big Red"

    def test_parse_field_options(self):
        assert parse_field_options("a: Alpha\nbroken\n: nokey\nb:Beta") == {"a": "Alpha", "b": "Beta"}
        assert parse_field_options("") is None


class TestDashboardAggregates:
    """Chart series and the at-risk banner"""

    def test_status_chart_drops_empty_slices(self):
        data = vehicle_status_chart_data(2, 0, 2)
        assert [d["status"] for d in data] == ["Active", "Inactive"]
        assert [d["percentage"] for d in data] == [50.0, 50.0]
        assert vehicle_status_chart_data(0, 0, 0) == []

    def test_banner(self):
        vehicles = [VehicleAtRisk.from_dict({"compliance_status": s}) for s in ("expired", "expired", "at_risk")]
        banner = at_risk_banner(3, vehicles)
        assert banner.text == "2 vehicles expired, 1 at risk"
        assert at_risk_banner(0, vehicles) is None

    def test_compliance_chart_keeps_zero_counts(self):
        data = compliance_chart_data(3, 2, 1, 0)
        assert [(d["status"], d["count"]) for d in data] == [
            ("Compliant", 3), ("At Risk", 2), ("Expired", 1), ("Pending", 0),
        ]
        assert all(d["color"].startswith("#") for d in data)

    def test_fleet_vehicle_counts(self):
        vehicles = [Vehicle(id=i, status=s) for i, s in enumerate(
            ["active", "active", "maintenance", "inactive", "sold"]
        )]
        counts = fleet_vehicle_counts(vehicles)
        assert (counts.total, counts.active, counts.maintenance, counts.inactive) == (5, 2, 1, 1)
        assert fleet_vehicle_counts([]).total == 0

    def test_recent_vehicles_newest_first(self):
        vehicles = [
            Vehicle(id=1, created_at="2024-01-01T08:00:00Z"),
            Vehicle(id=2, created_at=None),
            Vehicle(id=3, created_at="2024-03-01T08:00:00Z"),
            Vehicle(id=4, created_at="2024-02-01"),
            Vehicle(id=5, created_at="not a date"),
        ]
        assert [v.id for v in recent_vehicles(vehicles)] == [3, 4, 1, 2, 5]
        assert [v.id for v in recent_vehicles(vehicles, limit=2)] == [3, 4]


class TestPriorityAndFiles:
    """Alert priority helpers and document file display"""

    @pytest.mark.parametrize("priority,severity", [
        ("critical", "critical"),
        ("high", "critical"),
        ("medium", "warning"),
        ("low", "info"),
        ("urgent", "info"),
        (None, "info"),
    ])
    def test_priority_to_severity(self, priority, severity):
        assert priority_to_severity(priority) == severity

    @pytest.mark.parametrize("priority", [None, "", "urgent"])
    def test_priority_fallbacks(self, priority):
        assert priority_icon(priority) == "📋"
        assert priority_style(priority) == "#4b5563"

    def test_known_priorities(self):
        assert priority_icon("critical") == "🚨"
        assert priority_style("low") == "#2563eb"

    @pytest.mark.parametrize("size,text", [
        (None, ""),
        (0, ""),
        (512, "512 B"),
        (1023, "1023 B"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024 - 1, "1024.0 KB"),
        (1024 * 1024, "1.0 MB"),
        (5 * 1024 * 1024 + 512 * 1024, "5.5 MB"),
    ])
    def test_format_file_size(self, size, text):
        assert format_file_size(size) == text

    @pytest.mark.parametrize("size,text", [
        (None, "Unknown size"),
        (0, "Unknown size"),
        (1024 * 1024, "1.00 MB"),
        (2621440, "2.50 MB"),
    ])
    def test_format_file_size_mb(self, size, text):
        assert format_file_size_mb(size) == text

    @pytest.mark.parametrize("file_type,file_path,kind", [
        ("application/pdf", None, "pdf"),
        (None, "docs/permit.PDF", "pdf"),
        ("image/png", None, "image"),
        (None, "scan.JPG", "image"),
        ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", None, "word"),
        (None, "policy.doc", "word"),
        ("application/vnd.ms-excel", None, "excel"),
        (None, "fleet.xlsx", "excel"),
        ("text/plain", "notes.txt", "file"),
        (None, None, "file"),
    ])
    def test_file_kind(self, file_type, file_path, kind):
        assert file_kind(file_type, file_path) == kind


class TestVehicleImport:
    """Import preview editing"""

    @pytest.fixture
    def preview(self):
        rows = [
            ImportPreviewRow(row_number=1, data={"make": "Ford", "year": "2020"}, errors=[], is_valid=True),
            ImportPreviewRow(row_number=2, data={"make": "", "year": "2021"}, errors=["make is required"], is_valid=False),
            ImportPreviewRow(row_number=3, data={"make": "Volvo", "year": "1800"}, errors=["year must be a valid year"], is_valid=False),
        ]
        return ImportPreview(total_rows=3, valid_rows=1, invalid_rows=2, rows=rows, pagination=Pagination())

    def test_detect_by_name(self):
        types = [VehicleType(id=1, name="Truck"), VehicleType(id=2, name="Box Van")]
        assert detect_vehicle_type("fleet_truck_2024.xlsx", types) == rules.DetectedType(1, "Truck", 95)
        assert detect_vehicle_type("box_van_import_template.xlsx", types) == rules.DetectedType(2, "Box Van", 90)
        assert detect_vehicle_type("vehicles.csv", types) is None

    def test_row_validation(self):
        assert validate_row_field("year", "1800", current_year=2024) == ["year must be a valid year"]
        assert validate_row_field("year", "2025", current_year=2024) == []
        assert validate_row_field("email", "nope") == ["email must be a valid email"]
        assert validate_row_field("notes", "") == []
        assert validate_row_field("make", " ") == ["make is required"]

    def test_fill_down_only_fills_empty_cells(self, preview):
        updated, edits = fill_down(preview, {}, "make")
        assert [r.data["make"] for r in updated.rows] == ["Ford", "Ford", "Volvo"]
        assert list(edits) == [2]
        assert updated.rows[1].is_valid
        assert updated.valid_rows == 2
        assert updated.invalid_rows == 1

    def test_fill_down_needs_first_value(self, preview):
        preview.rows[0].data["make"] = ""
        with pytest.raises(ValueError, match="First row"):
            fill_down(preview, {}, "make")

    def test_cell_edit_revalidates_field(self, preview):
        updated, edits = apply_cell_edit(preview, {}, 3, "year", "2019")
        assert edits == {3: {"make": "Volvo", "year": "2019"}}
        assert updated.rows[2].errors == []
        assert updated.valid_rows == 2

    def test_columns_first_seen(self, preview):
        preview.rows[2].data["vin"] = "X"
        assert import_columns(preview) == ["make", "year", "vin"]


class TestForms:
    """Registration validation and server error formatting"""

    def _registration(self, **overrides):
        data = dict(
            business_name="Acme Haulage",
            business_email="office@acme.test",
            admin_name="Sam",
            admin_email="sam@acme.test",
            admin_password="secret1",
            admin_password_confirmation="secret1",
        )
        data.update(overrides)
        return BusinessRegistration(**data)

    def test_valid_registration(self):
        assert validate_business_registration(self._registration()) == {}

    def test_invalid_registration(self):
        errors = validate_business_registration(
            self._registration(business_name="A", admin_email="x", admin_password="123", admin_password_confirmation="321")
        )
        assert set(errors) == {"business_name", "admin_email", "admin_password", "admin_password_confirmation"}
        assert errors["admin_password_confirmation"] == "Passwords don't match"

    def test_format_validation_errors(self):
        text = format_validation_errors({"business_email": ["taken", "invalid"], "admin_name": "required"})
        assert text.splitlines() == ["Business Email: taken, invalid", "Admin Name: required"]


class TestUrls:
    def test_document_file_url(self):
        assert document_file_url("http://api.test/api/", "/docs/a.pdf") == "http://api.test/storage/docs/a.pdf"
        assert document_file_url("http://files.test", "docs/a.pdf") == "http://files.test/storage/docs/a.pdf"

    def test_public_vehicle_url(self):
        assert public_vehicle_url("http://app.test/", "tok") == "http://app.test/Public_Vehicle?token=tok"


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
