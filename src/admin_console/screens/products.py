from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from admin_console.errors import ApiError
from admin_console.screens.base import ListScreen, Row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProductFilters:
    search: str = ""
    category_id: str | None = None
    brand_id: str | None = None
    provider_id: str | None = None

    def is_active(self) -> bool:
        return any((self.category_id, self.brand_id, self.provider_id))


@dataclass(frozen=True)
class ReferenceData:
    categories: list[Row]
    brands: list[Row]
    providers: list[Row]
    units: list[Row]
    currencies: list[Row]


class ProductsScreen(ListScreen[ProductFilters]):
    resource = "products"
    items_key = "products"
    label = "products"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.reference = ReferenceData(categories=[], brands=[], providers=[], units=[], currencies=[])
        self.reference_loading = False

    def default_filters(self) -> ProductFilters:
        return ProductFilters()

    def build_params(self, filters: ProductFilters) -> dict[str, Any]:
        return {
            "search": filters.search or None,
            "categoryId": filters.category_id,
            "brandId": filters.brand_id,
            "providerId": filters.provider_id,
        }

    async def load_reference_data(self) -> ReferenceData:
        limit = self._settings.REFERENCE_FETCH_LIMIT
        self.reference_loading = True
        try:
            categories, brands, providers, units, currencies = await asyncio.gather(
                self._api.fetch_list("/admin/categories"),
                self._api.fetch_page("brands", {"limit": limit}, items_key="brands"),
                self._api.fetch_page("service-providers", {"limit": limit}, items_key="providers"),
                self._api.fetch_list("/admin/units"),
                self._api.fetch_list("/admin/currencies"),
            )
        except ApiError as exc:
            logger.warning(
                "reference_data_load_failed",
                extra={"component": "screens", "resource": self.resource, "error": exc.message},
            )
            self._notifier.error("Failed to load reference data")
        else:
            self.reference = ReferenceData(
                categories=categories,
                brands=list(brands.items),
                providers=list(providers.items),
                units=units,
                currencies=currencies,
            )
        finally:
            self.reference_loading = False
        return self.reference
