from __future__ import annotations

import httpx
import pytest

from admin_console.api_client import AdminApiClient
from admin_console.errors import ApiError
from admin_console.models import LocationLevel, LocationNode


def build_client(handler):
    transport = httpx.MockTransport(handler)
    return AdminApiClient(
        base_url="https://console.example.com/api/v1/",
        client_factory=lambda: httpx.AsyncClient(transport=transport),
        headers={"Authorization": "Bearer token"},
    )


@pytest.mark.asyncio
async def test_fetch_options_builds_level_query() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            status_code=200,
            json={"success": True, "data": [{"id": 7, "name": "Pune", "nameLocal": "पुणे", "code": 527}]},
        )

    client = build_client(handler)
    options = await client.fetch_options(LocationLevel.DISTRICT, "s-1")

    assert seen[0].url.path == "/api/v1/admin/locations/districts"
    assert seen[0].url.params["state"] == "s-1"
    assert seen[0].headers["Authorization"] == "Bearer token"
    assert options == [LocationNode(id="7", name="Pune", code="527", name_local="पुणे")]


@pytest.mark.asyncio
async def test_fetch_countries_asks_for_active_only() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/admin/locations/countries")
        assert request.url.params["active"] == "true"
        return httpx.Response(status_code=200, json={"success": True, "data": []})

    client = build_client(handler)

    assert await client.fetch_options(LocationLevel.COUNTRY, None) == []


@pytest.mark.asyncio
async def test_fetch_options_needs_parent_below_state() -> None:
    client = build_client(lambda _: httpx.Response(status_code=200, json={"success": True, "data": []}))

    with pytest.raises(ValueError):
        await client.fetch_options(LocationLevel.BLOCK, None)


@pytest.mark.asyncio
async def test_fetch_page_parses_items_and_pagination() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/admin/users"
        assert request.url.params["hasLocation"] == "false"
        assert request.url.params["page"] == "2"
        assert "search" not in request.url.params
        assert "type" not in request.url.params
        return httpx.Response(
            status_code=200,
            json={
                "success": True,
                "data": {
                    "users": [{"id": "u-1"}, {"id": "u-2"}],
                    "pagination": {"page": 2, "limit": 2, "total": 9, "pages": 5},
                },
            },
        )

    client = build_client(handler)
    page = await client.fetch_page(
        "users",
        {"page": 2, "limit": 2, "search": "", "type": None, "hasLocation": False},
        items_key="users",
    )

    assert [item["id"] for item in page.items] == ["u-1", "u-2"]
    assert page.total == 9
    assert page.pages == 5


@pytest.mark.asyncio
async def test_fetch_subcollection_accepts_bare_list() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/admin/fpos/f-1/members"
        assert request.url.params["limit"] == "100"
        return httpx.Response(status_code=200, json={"success": True, "data": [{"userId": "u-1"}]})

    client = build_client(handler)

    assert await client.fetch_subcollection("fpos", "f-1", "members", limit=100) == [{"userId": "u-1"}]


@pytest.mark.asyncio
async def test_fetch_list_reads_named_items() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"success": True, "data": {"documents": [{"id": "doc-1"}]}})

    client = build_client(handler)

    assert await client.fetch_list("/admin/fpos/f-1/documents", items_key="documents") == [{"id": "doc-1"}]


@pytest.mark.asyncio
async def test_mutations_use_expected_methods() -> None:
    seen: list[tuple[str, str, bytes]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.content))
        if request.method == "DELETE":
            return httpx.Response(status_code=204)
        return httpx.Response(status_code=200, json={"success": True, "data": {"id": "b-1"}})

    client = build_client(handler)

    assert await client.create("/admin/brands", {"name": "Acme"}) == {"id": "b-1"}
    assert await client.update("/admin/brands/b-1", {"name": "Acme"}) == {"id": "b-1"}
    assert await client.delete("/admin/brands/b-1") is None
    assert [item[0] for item in seen] == ["POST", "PATCH", "DELETE"]
    assert b'"name"' in seen[0][2]


@pytest.mark.asyncio
async def test_http_error_message_is_taken_from_body() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=409, json={"success": False, "error": {"message": "Phone already exists"}})

    client = build_client(handler)
    with pytest.raises(ApiError) as exc_info:
        await client.create("/admin/users", {"name": "Ravi"})

    assert exc_info.value.code == "UPSTREAM_HTTP_ERROR"
    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Phone already exists"


@pytest.mark.asyncio
async def test_unsuccessful_envelope_raises() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"success": False, "message": "Not allowed"})

    client = build_client(handler)
    with pytest.raises(ApiError) as exc_info:
        await client.fetch_page("brands")

    assert exc_info.value.code == "API_UNSUCCESSFUL"
    assert str(exc_info.value) == "Not allowed"


@pytest.mark.asyncio
async def test_malformed_payload_raises() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=200, json={"success": True, "data": {"items": "nope"}})

    client = build_client(handler)
    with pytest.raises(ApiError) as exc_info:
        await client.fetch_page("brands")

    assert exc_info.value.code == "API_MALFORMED_PAYLOAD"


@pytest.mark.asyncio
async def test_timeout_maps_to_upstream_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    client = build_client(handler)
    with pytest.raises(ApiError) as exc_info:
        await client.fetch_page("users")

    assert exc_info.value.code == "UPSTREAM_TIMEOUT"
    assert exc_info.value.status_code == 504


@pytest.mark.asyncio
async def test_transport_failure_maps_to_upstream_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    client = build_client(handler)
    with pytest.raises(ApiError) as exc_info:
        await client.fetch_page("users")

    assert exc_info.value.code == "UPSTREAM_FAILURE"
