from __future__ import annotations

import asyncio
from dataclasses import dataclass

import pytest

from admin_console.errors import ApiError
from admin_console.list_controller import ListController
from admin_console.models import Page, Pagination
from admin_console.notifications import InMemoryNotifier
from admin_console.observability import InMemoryControllerMetricsCollector


@dataclass(frozen=True)
class Filters:
    search: str = ""
    role: str = "all"


class ControlledPager:
    def __init__(self) -> None:
        self.calls: list[tuple[Filters, Pagination, asyncio.Future[Page[str]]]] = []

    async def __call__(self, filters: Filters, pagination: Pagination) -> Page[str]:
        future: asyncio.Future[Page[str]] = asyncio.get_running_loop().create_future()
        self.calls.append((filters, pagination, future))
        return await future

    async def until(self, count: int) -> None:
        for _ in range(100):
            if len(self.calls) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} fetches, saw {len(self.calls)}")

    def resolve(self, index: int, items: list[str], total: int, pages: int) -> None:
        future = self.calls[index][2]
        if not future.done():
            future.set_result(Page(items=items, total=total, pages=pages))

    def fail(self, index: int, exc: Exception) -> None:
        future = self.calls[index][2]
        if not future.done():
            future.set_exception(exc)


def build(pager: ControlledPager, **kwargs) -> ListController[str, Filters]:
    return ListController(name="users", fetch_page=pager, default_filters=Filters, **kwargs)


@pytest.mark.asyncio
async def test_filter_change_resets_to_first_page() -> None:
    pager = ControlledPager()
    controller = build(pager)
    controller.start()
    await pager.until(1)
    pager.resolve(0, ["a"], total=500, pages=10)
    await controller.wait()

    controller.set_page(3)
    await pager.until(2)
    pager.resolve(1, ["c"], total=500, pages=10)
    await controller.wait()
    assert controller.pagination.current_page == 3

    controller.set_filters(search="ravi")
    assert controller.pagination.current_page == 1
    await pager.until(3)
    filters, pagination, _ = pager.calls[2]
    assert filters.search == "ravi"
    assert pagination.current_page == 1


@pytest.mark.asyncio
async def test_only_latest_page_size_fetch_is_committed() -> None:
    pager = ControlledPager()
    metrics = InMemoryControllerMetricsCollector()
    controller = build(pager, metrics=metrics)
    controller.start()
    await pager.until(1)
    pager.resolve(0, ["first"], total=1, pages=1)
    await controller.wait()
    controller.set_page(1)
    await pager.until(2)
    pager.resolve(1, ["first"], total=1, pages=1)
    await controller.wait()

    controller.set_page_size(100)
    await pager.until(3)
    controller.set_page_size(25)
    await pager.until(4)
    pager.resolve(2, ["size-100"], total=1, pages=1)
    pager.resolve(3, ["size-25"], total=1, pages=1)
    await controller.wait()

    assert controller.items == ["size-25"]
    assert controller.pagination.page_size == 25
    assert controller.pagination.current_page == 1
    assert pager.calls[2][1].page_size == 100
    assert pager.calls[3][1].page_size == 25
    assert metrics.totals[("users", "discarded")] == 1
    assert metrics.totals[("users", "committed")] == 3


@pytest.mark.asyncio
async def test_loading_flag_tracks_latest_request() -> None:
    pager = ControlledPager()
    controller = build(pager)

    controller.start()
    assert controller.loading
    await pager.until(1)
    pager.resolve(0, ["a", "b"], total=2, pages=1)
    await controller.wait()

    assert not controller.loading
    assert controller.has_loaded
    assert controller.items == ["a", "b"]
    assert controller.pagination.total_items == 2
    assert controller.pagination.total_pages == 1


@pytest.mark.asyncio
async def test_failure_after_success_keeps_previous_items() -> None:
    pager = ControlledPager()
    notifier = InMemoryNotifier()
    controller = build(pager, notifier=notifier)
    controller.start()
    await pager.until(1)
    pager.resolve(0, ["a"], total=1, pages=1)
    await controller.wait()

    controller.reload()
    await pager.until(2)
    pager.fail(1, ApiError("UPSTREAM_HTTP_ERROR", "Service unavailable", 503))
    await controller.wait()

    assert controller.items == ["a"]
    assert controller.error == "Service unavailable"
    assert not controller.loading
    assert notifier.of_level("error") == ["Service unavailable"]


@pytest.mark.asyncio
async def test_first_load_failure_uses_fallback_message() -> None:
    pager = ControlledPager()
    notifier = InMemoryNotifier()
    metrics = InMemoryControllerMetricsCollector()
    controller = build(pager, notifier=notifier, metrics=metrics)
    controller.start()
    await pager.until(1)
    pager.fail(0, RuntimeError())
    await controller.wait()

    assert controller.items == []
    assert controller.error == "Failed to load users"
    assert not controller.has_loaded
    assert metrics.totals[("users", "failed")] == 1


@pytest.mark.asyncio
async def test_reset_scope_clears_state_and_keeps_page_size() -> None:
    pager = ControlledPager()
    controller = build(pager, page_size=25)
    controller.start()
    await pager.until(1)
    pager.resolve(0, ["a"], total=100, pages=4)
    await controller.wait()
    controller.set_filters(search="x", role="admin")
    await pager.until(2)
    pager.resolve(1, ["b"], total=100, pages=4)
    await controller.wait()

    controller.reset_scope()

    assert controller.items == []
    assert not controller.has_loaded
    assert controller.filters == Filters()
    assert controller.pagination == Pagination(current_page=1, page_size=25)
    assert controller.loading
    await pager.until(3)
    assert pager.calls[2][0] == Filters()


@pytest.mark.asyncio
async def test_page_beyond_last_follows_shrunk_result() -> None:
    pager = ControlledPager()
    controller = build(pager)
    controller.start()
    await pager.until(1)
    pager.resolve(0, ["a"], total=250, pages=5)
    await controller.wait()
    controller.set_page(5)
    await pager.until(2)

    pager.resolve(1, [], total=120, pages=3)
    await pager.until(3)
    assert pager.calls[2][1].current_page == 3
    pager.resolve(2, ["last"], total=120, pages=3)
    await controller.wait()

    assert controller.items == ["last"]
    assert controller.pagination.current_page == 3


@pytest.mark.asyncio
async def test_set_page_validates_and_clamps() -> None:
    pager = ControlledPager()
    controller = build(pager)
    controller.start()
    await pager.until(1)
    pager.resolve(0, ["a"], total=100, pages=2)
    await controller.wait()

    with pytest.raises(ValueError):
        controller.set_page(0)
    controller.set_page(9)
    assert controller.pagination.current_page == 2


@pytest.mark.asyncio
async def test_close_stops_further_loads() -> None:
    pager = ControlledPager()
    controller = build(pager)
    controller.start()
    await pager.until(1)

    controller.close()
    controller.reload()
    await controller.wait()

    assert not controller.loading
    assert len(pager.calls) == 1
