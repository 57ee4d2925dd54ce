from __future__ import annotations

import asyncio

import pytest
from fakes import FakeAdminApi, fast_settings

from admin_console.models import Page
from admin_console.notifications import InMemoryNotifier
from admin_console.screens.brands import BrandForm, BrandsScreen
from admin_console.screens.products import ProductsScreen


@pytest.mark.asyncio
async def test_product_filters_map_to_params() -> None:
    api = FakeAdminApi()
    screen = ProductsScreen(api, settings=fast_settings())
    screen.start()
    await screen.wait()

    screen.set_filters(category_id="c-1", provider_id="p-1")
    await screen.wait()

    assert api.last_params == {
        "page": 1,
        "limit": 50,
        "search": None,
        "categoryId": "c-1",
        "brandId": None,
        "providerId": "p-1",
    }
    assert screen.filters.is_active()
    screen.clear_filters()
    assert not screen.filters.is_active()
    await screen.wait()


@pytest.mark.asyncio
async def test_reference_data_is_loaded_together() -> None:
    api = FakeAdminApi()
    api.lists["/admin/categories"] = [{"id": "c-1"}]
    api.lists["/admin/units"] = [{"id": "kg"}]
    api.lists["/admin/currencies"] = [{"code": "INR"}]
    api.pages["brands"] = Page(items=[{"id": "b-1"}], total=1, pages=1)
    api.pages["service-providers"] = Page(items=[{"id": "p-1"}], total=1, pages=1)
    screen = ProductsScreen(api, settings=fast_settings())

    reference = await screen.load_reference_data()

    assert reference.categories == [{"id": "c-1"}]
    assert reference.brands == [{"id": "b-1"}]
    assert reference.providers == [{"id": "p-1"}]
    assert reference.units == [{"id": "kg"}]
    assert reference.currencies == [{"code": "INR"}]
    assert ("brands", {"limit": 500}) in api.page_calls
    assert not screen.reference_loading


@pytest.mark.asyncio
async def test_reference_data_failure_notifies() -> None:
    api = FakeAdminApi()
    api.failing.add("/admin/units")
    notifier = InMemoryNotifier()
    screen = ProductsScreen(api, notifier=notifier, settings=fast_settings())

    reference = await screen.load_reference_data()

    assert reference.units == []
    assert notifier.of_level("error") == ["Failed to load reference data"]


@pytest.mark.asyncio
async def test_brand_search_is_debounced() -> None:
    api = FakeAdminApi()
    screen = BrandsScreen(api, settings=fast_settings())
    screen.start()
    await screen.wait()

    screen.type_search("ac")
    screen.type_search("acme")
    await asyncio.sleep(0.05)
    await screen.wait()

    assert [params.get("search") for _, params in api.page_calls] == [None, "acme"]
    screen.close()


@pytest.mark.asyncio
async def test_brand_name_is_required() -> None:
    api = FakeAdminApi()
    notifier = InMemoryNotifier()
    screen = BrandsScreen(api, notifier=notifier, settings=fast_settings())

    assert not await screen.create_brand(BrandForm(name="   "))
    assert notifier.of_level("error") == ["Name is required"]
    assert api.mutations == []


@pytest.mark.asyncio
async def test_brand_crud_reloads_list() -> None:
    api = FakeAdminApi()
    notifier = InMemoryNotifier()
    screen = BrandsScreen(api, notifier=notifier, settings=fast_settings())
    screen.start()
    await screen.wait()

    assert await screen.create_brand(BrandForm(name=" Acme ", website="https://acme.example"))
    assert await screen.update_brand("b-1", BrandForm(name="Acme Seeds"))
    assert await screen.delete_brand("b-1")
    await screen.wait()

    assert [(method, path) for method, path, _ in api.mutations] == [
        ("POST", "/admin/brands"),
        ("PATCH", "/admin/brands/b-1"),
        ("DELETE", "/admin/brands/b-1"),
    ]
    assert api.mutations[0][2] == {"name": "Acme", "nameLocal": None, "logoUrl": None, "website": "https://acme.example"}
    assert notifier.of_level("success") == [
        "Brand created successfully",
        "Brand updated successfully",
        "Brand deleted successfully",
    ]
