from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from admin_console.errors import ApiError, FormValidationError
from admin_console.screens.base import ListScreen, Row
from admin_console.screens.coverage import CoverageAreas

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderFilters:
    search: str = ""


@dataclass(frozen=True)
class ProviderForm:
    name: str = ""
    name_local: str = ""
    phone: str = ""
    whatsapp: str = ""
    email: str = ""
    website: str = ""
    address: str = ""
    logo_url: str = ""

    def validate(self) -> None:
        if not self.name.strip():
            raise FormValidationError("Name is required")

    def body(self) -> dict[str, Any]:
        body = {
            "name": self.name.strip(),
            "nameLocal": self.name_local.strip(),
            "phone": self.phone.strip(),
            "whatsapp": self.whatsapp.strip(),
            "email": self.email.strip(),
            "website": self.website.strip(),
            "address": self.address.strip(),
            "logoUrl": self.logo_url.strip(),
        }
        return {key: value for key, value in body.items() if value}


class ProvidersScreen(ListScreen[ProviderFilters]):
    resource = "service-providers"
    items_key = "providers"
    label = "service providers"

    def default_filters(self) -> ProviderFilters:
        return ProviderFilters()

    def build_params(self, filters: ProviderFilters) -> dict[str, Any]:
        return {"search": filters.search or None}

    def coverage(self, provider_id: str) -> CoverageAreas:
        return CoverageAreas(self._api, self.resource, provider_id, notifier=self._notifier, metrics=self._metrics)

    async def load_products(self, provider_id: str) -> list[Row]:
        try:
            page = await self._api.fetch_page(
                "products",
                {"providerId": provider_id, "limit": self._settings.DETAIL_FETCH_LIMIT},
                items_key="products",
            )
        except ApiError as exc:
            logger.warning(
                "provider_products_load_failed",
                extra={"component": "screens", "provider_id": provider_id, "error": exc.message},
            )
            return []
        return list(page.items)

    async def create_provider(self, form: ProviderForm) -> bool:
        try:
            form.validate()
        except FormValidationError as exc:
            return self._reject(exc)
        return await self._mutate(
            lambda: self._api.create(f"/admin/{self.resource}", form.body()),
            "Provider created",
            "Failed to create provider",
        )

    async def update_provider(self, provider_id: str, form: ProviderForm) -> bool:
        try:
            form.validate()
        except FormValidationError as exc:
            return self._reject(exc)
        return await self._mutate(
            lambda: self._api.update(f"/admin/{self.resource}/{provider_id}", form.body()),
            "Provider updated",
            "Failed to update provider",
        )

    async def delete_provider(self, provider_id: str) -> bool:
        return await self._mutate(
            lambda: self._api.delete(f"/admin/{self.resource}/{provider_id}"),
            "Provider deleted",
            "Failed to delete provider",
        )
