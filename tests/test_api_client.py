"""
Integration tests: REST client against a local aiohttp server
"""
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from fleetdash.data.api_client import FileUpload, FleetApiClient, unwrap
from fleetdash.data.session_store import AUTH_TOKEN, SessionStore
from fleetdash.infra.exceptions import APIError, AuthenticationError, NetworkError, NotFoundError


async def echo_headers(request):
    return web.json_response({
        "success": True,
        "data": {
            "authorization": request.headers.get("Authorization"),
            "tenant": request.headers.get("X-Tenant"),
            "query": dict(request.query),
        },
    })


async def upload(request):
    form = await request.post()
    file_field = form["file"]
    return web.json_response({
        "data": {
            "filename": file_field.filename,
            "size": len(file_field.file.read()),
            "vehicle_type_id": form["vehicle_type_id"],
            "active": form["active"],
        }
    })


async def unauthorized(request):
    return web.json_response({"message": "Unauthenticated."}, status=401)


async def missing(request):
    return web.json_response({"message": "Vehicle not found"}, status=404)


async def invalid(request):
    return web.json_response({"message": "The given data was invalid.", "errors": {"name": ["required"]}}, status=422)


async def server_error(request):
    return web.Response(text="<html>oops</html>", status=500)


async def empty(request):
    return web.Response(status=204)


async def template(request):
    return web.Response(
        body=b"PK\x03\x04",
        content_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": 'attachment; filename="truck_import_template.xlsx"'},
    )


@pytest.fixture
async def server():
    app = web.Application()
    app.router.add_get("/api/echo", echo_headers)
    app.router.add_post("/api/upload", upload)
    app.router.add_get("/api/private", unauthorized)
    app.router.add_get("/api/missing", missing)
    app.router.add_post("/api/invalid", invalid)
    app.router.add_get("/api/broken", server_error)
    app.router.add_delete("/api/thing", empty)
    app.router.add_get("/api/template", template)
    test_server = TestServer(app)
    await test_server.start_server()
    yield test_server
    await test_server.close()


@pytest.fixture
def store():
    s = SessionStore()
    s.set_item(AUTH_TOKEN, "tok-123")
    s.set_tenant({"id": "tenant-9", "name": "Acme"})
    return s


def _base(server) -> str:
    return str(server.make_url("/api"))


class TestFleetApiClient:
    """Headers, decoding and status mapping"""

    async def test_auth_headers_and_params(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            payload = await client.get("/echo", params={"unread_only": True, "page": 2, "skip": None})
        data = unwrap(payload)
        assert data["authorization"] == "Bearer tok-123"
        assert data["tenant"] == "tenant-9"
        assert data["query"] == {"unread_only": "true", "page": "2"}

    async def test_no_store_sends_no_credentials(self, server):
        async with FleetApiClient(_base(server)) as client:
            data = unwrap(await client.get("echo"))
        assert data["authorization"] is None
        assert data["tenant"] is None

    async def test_multipart_upload(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            payload = await client.post("/upload", form={
                "file": FileUpload("trucks.csv", b"make\nFord\n", "text/csv"),
                "vehicle_type_id": 3,
                "active": True,
                "notes": None,
            })
        assert unwrap(payload) == {"filename": "trucks.csv", "size": 10, "vehicle_type_id": "3", "active": "1"}

    async def test_401_clears_session(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            with pytest.raises(AuthenticationError):
                await client.get("/private")
        assert not store.is_authenticated()
        assert store.get_tenant() is None

    async def test_404_maps_to_not_found(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            with pytest.raises(NotFoundError) as exc_info:
                await client.get("/missing")
        assert exc_info.value.message == "Vehicle not found"

    async def test_validation_errors_kept(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            with pytest.raises(APIError) as exc_info:
                await client.post("/invalid", {"name": ""})
        assert exc_info.value.status_code == 422
        assert exc_info.value.validation_errors == {"name": ["required"]}

    async def test_non_json_error_body(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            with pytest.raises(APIError) as exc_info:
                await client.get("/broken")
        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Request failed with status 500"

    async def test_empty_body_decodes_to_dict(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            assert await client.delete("/thing") == {}

    async def test_download(self, server, store):
        async with FleetApiClient(_base(server), store) as client:
            result = await client.download("/template")
        assert result.content == b"PK\x03\x04"
        assert result.filename == "truck_import_template.xlsx"
        assert result.content_type.startswith("application/vnd.openxmlformats")

    async def test_connection_refused(self, unused_tcp_port):
        async with FleetApiClient(f"http://127.0.0.1:{unused_tcp_port}/api", timeout=2) as client:
            with pytest.raises(NetworkError):
                await client.get("/echo")


class TestUnwrap:
    def test_envelope(self):
        assert unwrap({"success": True, "data": [1]}) == [1]
        assert unwrap({"data": None}, default=[]) == []
        assert unwrap([1, 2]) == [1, 2]
        assert unwrap(None, default={}) == {}


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
