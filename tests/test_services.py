"""
Unit tests: endpoint wrappers with a mocked client
"""
from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from fleetdash.data.api_client import FileUpload
from fleetdash.data.session_store import AUTH_TOKEN, SessionStore
from fleetdash.domain.models import BusinessRegistration, ComplianceType, VehicleTypeField
from fleetdash.infra.exceptions import (
    APIError,
    AuthenticationError,
    NetworkError,
    NotFoundError,
    ProcessingError,
    ValidationError,
)
from fleetdash.services import (
    AlertsService,
    AuthService,
    ComplianceDashboardService,
    ComplianceRecordForm,
    ComplianceService,
    DocumentForm,
    DocumentService,
    PublicService,
    TenantService,
    VehicleService,
    VehicleTypeFieldService,
)
from fleetdash.services.base import parse_list, parse_one


@pytest.fixture
def client():
    mock = MagicMock()
    mock.base_url = "http://api.test/api"
    mock.url_for = lambda path: f"http://api.test/api/{path.lstrip('/')}"
    for verb in ("get", "post", "put", "delete", "download"):
        setattr(mock, verb, AsyncMock(return_value={}))
    return mock


@pytest.fixture
def store():
    return SessionStore()


AUTH_PAYLOAD = {
    "success": True,
    "message": "Login successful",
    "data": {"token": "tok", "user": {"id": 1, "name": "Sam"}, "tenant": {"id": "t1", "name": "Acme"}},
}


class TestAuthService:
    """Sign-in state lands in the session store"""

    async def test_login_stores_session(self, client, store):
        client.post.return_value = AUTH_PAYLOAD
        result = await AuthService(client, store).login("sam@acme.test", "secret1")

        client.post.assert_awaited_once_with("/auth/login", {"email": "sam@acme.test", "password": "secret1"})
        assert result.success
        assert store.token == "tok"
        assert store.tenant_id == "t1"
        assert store.get_user()["name"] == "Sam"

    async def test_logout_clears_even_on_failure(self, client, store):
        store.set_item(AUTH_TOKEN, "tok")
        client.post.side_effect = NetworkError("down")
        with pytest.raises(NetworkError):
            await AuthService(client, store).logout()
        assert not store.is_authenticated()

    def test_oauth_callback(self, client, store):
        auth = AuthService(client, store)
        assert auth.complete_oauth_callback({"token": "oauth-tok"}).succeeded
        assert store.token == "oauth-tok"
        failed = auth.complete_oauth_callback({"error": "access_denied"})
        assert not failed.succeeded
        assert failed.error == "access_denied"
        assert auth.google_login_url() == "http://api.test/api/auth/google/redirect"


class TestTenantService:
    async def test_register_business_signs_in(self, client, store):
        client.post.return_value = AUTH_PAYLOAD
        reg = BusinessRegistration("Acme", "a@acme.test", "Sam", "s@acme.test", "secret1", "secret1")
        await TenantService(client, store).register_business(reg)
        assert client.post.await_args.args[0] == "/tenants/register"
        assert store.is_authenticated()

    async def test_update_filters_fields(self, client, store):
        client.put.return_value = {"data": {"id": "t1", "name": "Acme Ltd"}}
        tenant = await TenantService(client, store).update_tenant({"name": "Acme Ltd", "plan": "gold"})
        client.put.assert_awaited_once_with("/tenant", {"name": "Acme Ltd"})
        assert tenant.name == "Acme Ltd"
        assert store.get_tenant()["name"] == "Acme Ltd"


class TestVehicleServices:
    async def test_get_by_type_filters_client_side(self, client):
        client.get.return_value = {"data": [{"id": 1, "vehicle_type_id": 2}, {"id": 2, "vehicle_type_id": 3}]}
        vehicles = await VehicleService(client).get_by_type(2)
        assert [v.id for v in vehicles] == [1]

    async def test_create_requires_type(self, client):
        with pytest.raises(ValidationError):
            await VehicleService(client).create({"name": "No type"})
        client.post.assert_not_awaited()

    async def test_create_drops_unknown_keys(self, client):
        client.post.return_value = {"data": {"id": 5}}
        await VehicleService(client).create({"vehicle_type_id": 2, "name": "T1", "bogus": 1})
        client.post.assert_awaited_once_with("/vehicles", {"vehicle_type_id": 2, "name": "T1"})

    async def test_import_sends_edited_rows(self, client):
        client.post.return_value = {"data": {"imported": 4}}
        upload = FileUpload("t.csv", b"x", "text/csv")
        count = await VehicleService(client).import_vehicles(upload, 2, {3: {"make": "Ford"}, 1: {"make": "VW"}})
        form = client.post.await_args.kwargs["form"]
        assert count == 4
        assert form["edited_rows"] == [{"rowNumber": 1, "data": {"make": "VW"}}, {"rowNumber": 3, "data": {"make": "Ford"}}]

    async def test_default_fields_are_read_only(self, client):
        service = VehicleTypeFieldService(client)
        default_field = VehicleTypeField(id=1, name="VIN", key="vin")
        with pytest.raises(ValidationError):
            await service.update(default_field, {"name": "x"})
        with pytest.raises(ValidationError):
            await service.delete(default_field)

    async def test_fields_sorted(self, client):
        client.get.return_value = {"data": [
            {"id": 2, "name": "B", "key": "b", "sort_order": 5},
            {"id": 1, "name": "A", "key": "a", "sort_order": 5},
            {"id": 3, "name": "C", "key": "c", "sort_order": 1},
        ]}
        fields = await VehicleTypeFieldService(client).get_for_type(7)
        assert [f.id for f in fields] == [3, 1, 2]


class TestDocumentService:
    async def test_create_requires_file(self, client):
        with pytest.raises(ValidationError):
            await DocumentService(client).create_document(1, DocumentForm(document_type_id=2, document_name="Reg"))

    async def test_update_uses_method_override(self, client):
        form = DocumentForm(document_name="Reg", expiry_date=date(2025, 1, 31), notes="")
        await DocumentService(client).update_document(1, 9, form)
        client.post.assert_awaited_once_with(
            "/vehicles/1/documents/9",
            form={"document_name": "Reg", "expiry_date": "2025-01-31", "_method": "PUT"},
        )

    def test_file_url(self, client):
        assert DocumentService(client).file_url("docs/a.pdf") == "http://api.test/storage/docs/a.pdf"


class TestComplianceServices:
    def test_record_form_picks_accepted_document_type(self):
        ctype = ComplianceType(id=4, name="Roadworthy", accepted_document_types=(11, 12))
        upload = FileUpload("cert.pdf", b"%PDF", "application/pdf")
        form = ComplianceRecordForm.for_type(ctype, "2024-01-01", "2025-01-01", file=upload)
        assert form.to_form()["document_type_id"] == 11
        no_file = ComplianceRecordForm.for_type(ctype, "2024-01-01", "2025-01-01")
        assert "document_type_id" not in no_file.to_form()

    async def test_create_requires_dates(self, client):
        form = ComplianceRecordForm(compliance_type_id=4, issue_date=None, expiry_date="2025-01-01")
        with pytest.raises(ValidationError):
            await ComplianceService(client).create_compliance_record(1, form)

    async def test_categories_from_list(self, client):
        client.get.return_value = {"data": ["road_safety", "insurance"]}
        assert await ComplianceService(client).get_categories() == {"road_safety": "Road Safety", "insurance": "Insurance"}

    async def test_fleet_at_risk_unwraps_nested_list(self, client):
        client.get.return_value = {
            "data": {"vehicles": [{"vehicle_id": 3, "compliance_status": "expired"}], "total_at_risk": 7},
            "pagination": {"current_page": 1, "total_pages": 2, "has_more": True},
        }
        result = await ComplianceDashboardService(client).get_fleet_at_risk(page=0)
        client.get.assert_awaited_once_with("/compliance/dashboard/fleet-at-risk", params={"page": 1, "limit": 20})
        assert result.total == 7
        assert result.items[0].vehicle_id == 3
        assert result.pagination.has_more

    async def test_bulk_delete_counts_failures(self, client):
        client.delete.side_effect = [{}, APIError("locked", status_code=409), {}]
        assert await ComplianceService(client).delete_compliance_records(1, [10, 11, 12]) == (2, 1)

    async def test_bulk_delete_stops_on_expired_session(self, client):
        client.delete.side_effect = [{}, AuthenticationError()]
        with pytest.raises(AuthenticationError):
            await ComplianceService(client).delete_compliance_records(1, [10, 11])

    async def test_queued_upload_reports_progress(self, client):
        client.post.side_effect = [{"data": {"id": 1}}, APIError("too big", status_code=413), {"data": {"id": 3}}]
        forms = [ComplianceRecordForm(compliance_type_id=t, issue_date="2024-01-01", expiry_date="2025-01-01")
                 for t in (4, 5, 6)]
        seen = []
        result = await ComplianceService(client).create_compliance_records(1, forms, progress=seen.append)
        assert result == (2, 1)
        assert seen == [0, 1, 2]

    async def test_queued_upload_stops_on_expired_session(self, client):
        client.post.side_effect = AuthenticationError()
        forms = [ComplianceRecordForm(compliance_type_id=4, issue_date="2024-01-01", expiry_date="2025-01-01")] * 2
        with pytest.raises(AuthenticationError):
            await ComplianceService(client).create_compliance_records(1, forms)
        assert client.post.await_count == 1


class TestParsing:
    """Malformed payloads surface as processing errors"""

    def test_factory_failure_becomes_processing_error(self):
        def strict(item):
            return int(item["id"])

        assert parse_list({"data": [{"id": "3"}]}, strict) == [3]
        with pytest.raises(ProcessingError):
            parse_list({"data": [{"id": "three"}]}, strict)
        with pytest.raises(ProcessingError):
            parse_one({"data": {}}, strict)

    async def test_import_with_odd_count_is_processing_error(self, client):
        client.post.return_value = {"data": {"imported": "lots"}}
        with pytest.raises(ProcessingError):
            await VehicleService(client).import_vehicles(FileUpload("t.csv", b"x", "text/csv"), 2)


class TestAlertsService:
    async def test_read_failure_degrades_to_empty_feed(self, client):
        client.get.side_effect = APIError("boom", status_code=500)
        service = AlertsService(client)
        feed = await service.get_notifications()
        assert not feed.success
        assert await service.get_alerts() == []

    async def test_alerts_limit(self, client):
        client.get.return_value = {"success": True, "data": {"notifications": [
            {"id": str(i), "type": "upcoming", "priority": "low", "vehicle": {"id": i}} for i in range(5)
        ]}}
        alerts = await AlertsService(client).get_alerts(limit=2)
        assert [a.id for a in alerts] == ["0", "1"]

    async def test_write_failure_propagates(self, client):
        client.post.side_effect = APIError("boom", status_code=500)
        with pytest.raises(APIError):
            await AlertsService(client).mark_all_as_read()


class TestPublicService:
    async def test_lookup_failure_is_not_found(self, client):
        client.get.side_effect = APIError("boom", status_code=500)
        with pytest.raises(NotFoundError):
            await PublicService(client).get_vehicle("abc")

    async def test_category_documents(self, client):
        client.get.return_value = {"data": {"id": 1, "vehicle_type": "Truck", "documents": [
            {"id": 1, "document_name": "Policy", "document_type": {"name": "Insurance"}},
            {"id": 2, "document_name": "Reg", "document_type": {"name": "Registration"}},
        ]}}
        docs = await PublicService(client).get_category_documents("abc", "Insurance")
        assert [d.document_name for d in docs] == ["Policy"]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
