from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import httpx
from opentelemetry import trace
from pydantic import ValidationError

from admin_console.errors import ApiError
from admin_console.models import LocationLevel, LocationNode, Page
from admin_console.schemas import ApiEnvelope, LocationNodePayload, PageData

_LEVEL_PATHS: dict[LocationLevel, str] = {
    LocationLevel.COUNTRY: "countries",
    LocationLevel.STATE: "states",
    LocationLevel.DISTRICT: "districts",
    LocationLevel.BLOCK: "blocks",
    LocationLevel.VILLAGE: "villages",
}

_PARENT_PARAMS: dict[LocationLevel, str | None] = {
    LocationLevel.COUNTRY: None,
    LocationLevel.STATE: "country",
    LocationLevel.DISTRICT: "state",
    LocationLevel.BLOCK: "district",
    LocationLevel.VILLAGE: "block",
}


def _pick(item: Mapping[str, Any], *keys: str | None) -> Any:
    for key in keys:
        if key and key in item and item[key] is not None:
            return item[key]
    return None


def _query_params(params: Mapping[str, Any] | None) -> dict[str, str]:
    query: dict[str, str] = {}
    for key, value in (params or {}).items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        else:
            query[key] = str(value)
    return query


def _http_error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("message"):
            return str(body["message"])
    return f"HTTP {response.status_code}"


class AdminApiClient:
    """JSON API boundary of the console: ``{success, data}`` envelopes over httpx."""

    def __init__(
        self,
        base_url: str,
        connect_timeout_seconds: float | None = None,
        read_timeout_seconds: float | None = None,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(
            connect=connect_timeout_seconds,
            read=read_timeout_seconds,
            write=read_timeout_seconds,
            pool=connect_timeout_seconds,
        )
        self._client_factory = client_factory
        self._headers = dict(headers or {})
        self._tracer = trace.get_tracer("admin-console")

    async def fetch_options(self, level: LocationLevel, parent_key: str | None) -> list[LocationNode]:
        parent_param = _PARENT_PARAMS[level]
        if parent_key is None and level in {LocationLevel.DISTRICT, LocationLevel.BLOCK, LocationLevel.VILLAGE}:
            raise ValueError(f"{level.value} options need a parent key")
        params: dict[str, Any] = {}
        if parent_param and parent_key:
            params[parent_param] = parent_key
        if level is LocationLevel.COUNTRY:
            params["active"] = True
        data = await self._request("GET", f"/admin/locations/{_LEVEL_PATHS[level]}", params=params)
        if not isinstance(data, list):
            raise ApiError("API_MALFORMED_PAYLOAD", f"{level.value} list is not an array", 200)
        try:
            return [LocationNodePayload.model_validate(item).to_node() for item in data]
        except ValidationError as exc:
            raise ApiError("API_MALFORMED_PAYLOAD", f"invalid {level.value} option", 200) from exc

    async def fetch_page(
        self,
        resource: str,
        params: Mapping[str, Any] | None = None,
        items_key: str | None = None,
    ) -> Page[dict[str, Any]]:
        data = await self._request("GET", f"/admin/{resource}", params=params)
        if not isinstance(data, dict):
            raise ApiError("API_MALFORMED_PAYLOAD", f"{resource} page is not an object", 200)
        try:
            page = PageData.model_validate(
                {
                    "items": _pick(data, "items", items_key) or [],
                    "pagination": data.get("pagination") or {},
                }
            )
        except ValidationError as exc:
            raise ApiError("API_MALFORMED_PAYLOAD", f"invalid {resource} page", 200) from exc
        return Page(items=page.items, total=page.pagination.total, pages=page.pagination.pages)

    async def fetch_list(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        items_key: str | None = None,
    ) -> list[dict[str, Any]]:
        data = await self._request("GET", path, params=params)
        if isinstance(data, dict):
            data = _pick(data, "items", items_key)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ApiError("API_MALFORMED_PAYLOAD", f"{path} is not a list", 200)
        return data

    async def fetch_subcollection(
        self,
        resource: str,
        resource_id: str,
        subcollection: str,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        return await self.fetch_list(
            f"/admin/{resource}/{resource_id}/{subcollection}",
            params={"limit": limit},
            items_key=subcollection,
        )

    async def create(self, path: str, body: Mapping[str, Any]) -> Any:
        return await self._request("POST", path, json=dict(body))

    async def update(self, path: str, body: Mapping[str, Any]) -> Any:
        return await self._request("PATCH", path, json=dict(body))

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    async def _request(
        self,
        method: str,
        path: str,
        params: Mapping[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout))
        with self._tracer.start_as_current_span("admin_api.request") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.route", path)
            try:
                async with factory() as client:
                    response = await client.request(
                        method,
                        f"{self._base_url}{path}",
                        params=_query_params(params),
                        json=json,
                        headers=self._headers,
                    )
                    response.raise_for_status()
            except httpx.TimeoutException as exc:
                raise ApiError("UPSTREAM_TIMEOUT", "Request timed out", 504) from exc
            except httpx.HTTPStatusError as exc:
                span.set_attribute("http.status_code", exc.response.status_code)
                raise ApiError(
                    "UPSTREAM_HTTP_ERROR",
                    _http_error_message(exc.response),
                    exc.response.status_code,
                ) from exc
            except httpx.HTTPError as exc:
                raise ApiError("UPSTREAM_FAILURE", "Request failed", 502) from exc
            span.set_attribute("http.status_code", response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        try:
            envelope = ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ApiError("API_MALFORMED_PAYLOAD", "Response is not a valid envelope", response.status_code) from exc
        if not envelope.success:
            raise ApiError("API_UNSUCCESSFUL", envelope.error_message() or "Request failed", response.status_code)
        return envelope.data
