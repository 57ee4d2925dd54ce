from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from admin_console.errors import FormValidationError
from admin_console.screens.base import ListScreen


@dataclass(frozen=True)
class BrandFilters:
    search: str = ""


@dataclass(frozen=True)
class BrandForm:
    name: str = ""
    name_local: str = ""
    logo_url: str = ""
    website: str = ""

    def validate(self) -> None:
        if not self.name.strip():
            raise FormValidationError("Name is required")

    def body(self) -> dict[str, Any]:
        return {
            "name": self.name.strip(),
            "nameLocal": self.name_local or None,
            "logoUrl": self.logo_url or None,
            "website": self.website or None,
        }


class BrandsScreen(ListScreen[BrandFilters]):
    resource = "brands"
    items_key = "brands"
    label = "brands"

    def default_filters(self) -> BrandFilters:
        return BrandFilters()

    def build_params(self, filters: BrandFilters) -> dict[str, Any]:
        return {"search": filters.search or None}

    async def create_brand(self, form: BrandForm) -> bool:
        try:
            form.validate()
        except FormValidationError as exc:
            return self._reject(exc)
        return await self._mutate(
            lambda: self._api.create("/admin/brands", form.body()),
            "Brand created successfully",
            "Failed to create brand",
        )

    async def update_brand(self, brand_id: str, form: BrandForm) -> bool:
        try:
            form.validate()
        except FormValidationError as exc:
            return self._reject(exc)
        return await self._mutate(
            lambda: self._api.update(f"/admin/brands/{brand_id}", form.body()),
            "Brand updated successfully",
            "Failed to update brand",
        )

    async def delete_brand(self, brand_id: str) -> bool:
        return await self._mutate(
            lambda: self._api.delete(f"/admin/brands/{brand_id}"),
            "Brand deleted successfully",
            "Failed to delete brand",
        )
