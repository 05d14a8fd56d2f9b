"""
Unit tests: API record parsing
"""
import pytest

from fleetdash.domain.models import (
    AuthResult,
    BusinessRegistration,
    ComplianceRecord,
    ComplianceStatus,
    FieldValue,
    FleetStatistics,
    ImportPreview,
    NotificationFeed,
    PublicVehicle,
    Tenant,
    Vehicle,
    VehicleDocument,
    VehicleTypeField,
)


class TestLenientParsing:
    """Missing or odd keys never raise"""

    def test_empty_and_non_dict_inputs(self):
        assert Vehicle.from_dict({}).id == 0
        assert Vehicle.from_dict(None).field_values == []
        assert Tenant.from_dict("garbage").name == ""

    def test_vehicle_accepts_camel_case_relations(self):
        vehicle = Vehicle.from_dict({
            "id": "12",
            "year": "2019",
            "capacity": "7.5",
            "vehicleType": {"id": 2, "name": "Truck"},
            "fieldValues": [{"value": 40, "field": {"name": "Payload", "key": "payload", "unit": "t"}}],
        })
        assert vehicle.id == 12
        assert vehicle.year == 2019
        assert vehicle.capacity == 7.5
        assert vehicle.vehicle_type.name == "Truck"
        assert vehicle.field_values[0].display == "40 t"

    def test_field_value_display(self):
        assert FieldValue(name="Colour", value=None).display == "N/A"
        assert FieldValue.from_dict({"name": "Seats", "value": 5}).display == "5"

    def test_type_field_default_flag(self):
        assert VehicleTypeField.from_dict({"id": 1, "name": "VIN", "key": "vin"}).is_default
        custom = VehicleTypeField.from_dict({"id": 2, "name": "Depot", "key": "depot", "tenant_id": "t1",
                                             "options": {"n": "North"}})
        assert not custom.is_default
        assert custom.options == {"n": "North"}
        assert custom.sort_order == 100


class TestAccounts:
    def test_auth_result(self):
        result = AuthResult.from_dict({
            "success": True,
            "message": "ok",
            "data": {"token": "abc", "user": {"id": 1, "name": "Sam"}, "tenant": {"id": "t1", "name": "Acme"}},
        })
        assert result.token == "abc"
        assert result.user.name == "Sam"
        assert result.tenant.id == "t1"

    def test_auth_result_success_defaults_to_token_presence(self):
        assert AuthResult.from_dict({"data": {"token": "abc"}}).success
        assert not AuthResult.from_dict({}).success

    def test_tenant_public_token_alias(self):
        assert Tenant.from_dict({"id": "t1", "qr_code_token": "q"}).public_token == "q"

    def test_registration_payload_omits_blank_optionals(self):
        reg = BusinessRegistration("Acme", "a@acme.test", "Sam", "s@acme.test", "secret1", "secret1")
        assert "business_phone" not in reg.to_payload()
        reg.business_phone = "555"
        assert reg.to_payload()["business_phone"] == "555"


class TestDocumentsAndCompliance:
    def test_document_type_string_or_object(self):
        assert VehicleDocument.from_dict({"id": 1, "document_type": "Insurance"}).document_type == "Insurance"
        doc = VehicleDocument.from_dict({"id": 2, "document_type": {"id": 3, "name": "Permit"},
                                         "vehicle": {"id": 8, "name": "Truck 8"}})
        assert doc.document_type.name == "Permit"
        assert doc.vehicle_id == 8
        assert doc.vehicle_name == "Truck 8"

    def test_record_approval(self):
        assert not ComplianceRecord.from_dict({"id": 1}).is_approved
        assert ComplianceRecord.from_dict({"id": 1, "approved_at": "2024-01-01"}).is_approved

    def test_status_score_from_string(self):
        status = ComplianceStatus.from_dict({
            "vehicle": {"id": 4, "compliance_status": "at_risk"},
            "summary": {"compliance_score": "66.7", "can_operate": False},
            "requirements": {"required": [{"requirement_id": 1, "compliance_type": "roadworthy"}]},
        })
        assert status.summary.compliance_score == pytest.approx(66.7)
        assert status.summary.can_operate is False
        assert status.required[0].label == "roadworthy"
        assert status.optional == []

    def test_fleet_statistics_sections(self):
        stats = FleetStatistics.from_dict({
            "fleet_overview": {"total_vehicles": 10},
            "compliance_rate": {"percentage": 80},
            "expiring_soon": {"within_7_days": 2},
        })
        assert stats.total_vehicles == 10
        assert stats.compliance_rate == 80.0
        assert stats.expiring_within_7_days == 2


class TestFeedsAndImports:
    def test_notification_feed(self):
        feed = NotificationFeed.from_dict({
            "success": True,
            "data": {
                "summary": {"total": 1, "unread": 1, "by_priority": {"critical": 1}},
                "notifications": [{"id": "n1", "type": "overdue", "priority": "critical"}],
            },
        })
        assert feed.summary.critical == 1
        assert feed.notifications[0].id == "n1"
        assert not NotificationFeed.empty().success

    def test_import_preview_camel_case(self):
        preview = ImportPreview.from_dict({
            "totalRows": 2,
            "validRows": 1,
            "invalidRows": 1,
            "rows": [
                {"rowNumber": 1, "data": {"make": "Ford"}, "errors": [], "isValid": True},
                {"rowNumber": 2, "data": {}, "errors": ["make is required"]},
            ],
            "pagination": {"current_page": 1, "total_pages": 3, "has_more": True},
        })
        assert preview.total_rows == 2
        assert preview.rows[1].is_valid is False
        assert preview.pagination.has_more

    def test_public_vehicle(self):
        vehicle = PublicVehicle.from_dict({
            "id": 5,
            "vehicle_type": {"name": "Trailer"},
            "status": "active",
            "documents": [{"id": 1, "document_name": "Reg", "document_type": {"name": "Registration"}}],
        })
        assert vehicle.vehicle_type == "Trailer"
        assert vehicle.documents[0].document_type_name == "Registration"


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
