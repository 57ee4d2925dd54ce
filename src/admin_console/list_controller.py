from __future__ import annotations

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from admin_console.errors import ApiError
from admin_console.models import Page, Pagination
from admin_console.notifications import LoggingNotifier, Notifier
from admin_console.observability import (
    OUTCOME_COMMITTED,
    OUTCOME_DISCARDED,
    OUTCOME_FAILED,
    ControllerMetricCollector,
    FetchOutcomeMetric,
)

T = TypeVar("T")
F = TypeVar("F")
logger = logging.getLogger(__name__)

FetchPage = Callable[[F, Pagination], Awaitable[Page[T]]]


def describe_error(exc: Exception, fallback: str) -> str:
    if isinstance(exc, ApiError):
        return exc.message or fallback
    return str(exc) or fallback


class ListController(Generic[T, F]):
    """Filters, pagination and the current page of one list screen.

    Every filter or pagination change supersedes the previous request: the
    in-flight task is cancelled and its sequence number no longer matches,
    so only the latest request can write ``items``.
    """

    def __init__(
        self,
        name: str,
        fetch_page: FetchPage[F, T],
        default_filters: Callable[[], F],
        page_size: int = 50,
        notifier: Notifier | None = None,
        metrics: ControllerMetricCollector | None = None,
        error_message: str | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.name = name
        self._fetch_page = fetch_page
        self._default_filters = default_filters
        self._notifier = notifier or LoggingNotifier()
        self._metrics = metrics
        self._error_message = error_message or f"Failed to load {name}"
        self.filters: F = default_filters()
        self.pagination = Pagination(page_size=page_size)
        self.items: list[T] = []
        self.loading = False
        self.error: str | None = None
        self.has_loaded = False
        self._sequence = 0
        self._task: asyncio.Task[None] | None = None
        self._closed = False

    @property
    def sequence(self) -> int:
        return self._sequence

    def start(self) -> None:
        self._reload()

    def reload(self) -> None:
        self._reload()

    def set_filters(self, reset_page: bool = True, **changes: Any) -> None:
        self.filters = dataclasses.replace(self.filters, **changes)
        if reset_page:
            self.pagination = dataclasses.replace(self.pagination, current_page=1)
        self._reload()

    def set_page(self, page: int) -> None:
        if page < 1:
            raise ValueError("page must be >= 1")
        if self.pagination.total_pages and page > self.pagination.total_pages:
            page = self.pagination.total_pages
        self.pagination = dataclasses.replace(self.pagination, current_page=page)
        self._reload()

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            raise ValueError("page_size must be >= 1")
        self.pagination = dataclasses.replace(self.pagination, page_size=page_size, current_page=1)
        self._reload()

    def clear_filters(self) -> None:
        self.filters = self._default_filters()
        self.pagination = dataclasses.replace(self.pagination, current_page=1)
        self._reload()

    def reset_scope(self) -> None:
        """Drop everything tied to the previous scope, then load the new one."""
        self._cancel_in_flight()
        self.items = []
        self.error = None
        self.has_loaded = False
        self.filters = self._default_filters()
        self.pagination = Pagination(page_size=self.pagination.page_size)
        self._reload()

    async def wait(self) -> None:
        while True:
            task = self._task
            if task is None or task.done():
                return
            await asyncio.wait({task})

    def close(self) -> None:
        self._closed = True
        self._sequence += 1
        self._cancel_in_flight()
        self.loading = False

    def _cancel_in_flight(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _reload(self) -> None:
        if self._closed:
            return
        self._sequence += 1
        self._cancel_in_flight()
        self.loading = True
        self.error = None
        self._task = asyncio.get_running_loop().create_task(
            self._load(self._sequence, self.filters, self.pagination)
        )

    async def _load(self, sequence: int, filters: F, pagination: Pagination) -> None:
        try:
            page = await self._fetch_page(filters, pagination)
        except asyncio.CancelledError:
            self._observe(OUTCOME_DISCARDED)
            raise
        except Exception as exc:
            if sequence != self._sequence:
                self._discard(sequence)
                return
            self.error = describe_error(exc, self._error_message)
            if not self.has_loaded:
                self.items = []
            self.loading = False
            logger.warning(
                "list_load_failed",
                extra={"component": "list_controller", "controller": self.name, "error": self.error},
            )
            self._observe(OUTCOME_FAILED)
            self._notifier.error(self.error)
            return

        if sequence != self._sequence:
            self._discard(sequence)
            return
        self.items = list(page.items)
        self.pagination = dataclasses.replace(self.pagination, total_items=page.total, total_pages=page.pages)
        self.loading = False
        self.has_loaded = True
        self._observe(OUTCOME_COMMITTED)
        if page.pages and self.pagination.current_page > page.pages:
            # The page shrank underneath us; follow it to the last page.
            self._task = None
            self.set_page(page.pages)

    def _discard(self, sequence: int) -> None:
        logger.debug(
            "list_response_discarded",
            extra={"component": "list_controller", "controller": self.name, "sequence": sequence},
        )
        self._observe(OUTCOME_DISCARDED)

    def _observe(self, outcome: str) -> None:
        if self._metrics:
            self._metrics.observe(FetchOutcomeMetric(controller=self.name, outcome=outcome))
