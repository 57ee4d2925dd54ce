from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Generic, TypeVar

from admin_console.api_client import AdminApiClient
from admin_console.config import ConsoleSettings, load_settings
from admin_console.debounce import Debouncer
from admin_console.errors import ApiError, FormValidationError
from admin_console.list_controller import ListController, describe_error
from admin_console.models import LocationNode, Page, Pagination
from admin_console.notifications import LoggingNotifier, Notifier
from admin_console.observability import ControllerMetricCollector
from admin_console.preferences import CountryScope

F = TypeVar("F")
logger = logging.getLogger(__name__)

Row = dict[str, Any]


class ListScreen(ABC, Generic[F]):
    resource: str
    items_key: str | None = None
    label: str = "items"

    def __init__(
        self,
        api: AdminApiClient,
        scope: CountryScope | None = None,
        notifier: Notifier | None = None,
        metrics: ControllerMetricCollector | None = None,
        settings: ConsoleSettings | None = None,
    ) -> None:
        self._settings = settings or load_settings()
        self._api = api
        self._scope = scope
        self._notifier = notifier or LoggingNotifier()
        self._metrics = metrics
        self.list: ListController[Row, F] = ListController(
            name=self.resource,
            fetch_page=self._fetch_page,
            default_filters=self.default_filters,
            page_size=self._settings.DEFAULT_PAGE_SIZE,
            notifier=self._notifier,
            metrics=metrics,
            error_message=f"Failed to load {self.label}",
        )
        self._search: Debouncer[str] = Debouncer(
            self._settings.SEARCH_DEBOUNCE_MS / 1000.0,
            on_settle=self._apply_search,
            initial="",
        )
        self._unsubscribe = scope.subscribe(self._on_scope_change) if scope else None

    @abstractmethod
    def default_filters(self) -> F:
        raise NotImplementedError

    @abstractmethod
    def build_params(self, filters: F) -> dict[str, Any]:
        raise NotImplementedError

    @property
    def country_code(self) -> str | None:
        return self._scope.country_code if self._scope else None

    @property
    def items(self) -> list[Row]:
        return self.list.items

    @property
    def filters(self) -> F:
        return self.list.filters

    @property
    def pagination(self) -> Pagination:
        return self.list.pagination

    def start(self) -> None:
        self.list.start()

    def type_search(self, text: str) -> None:
        self._search.push(text)

    def set_filters(self, **changes: Any) -> None:
        self.list.set_filters(**changes)
        self._on_view_change()

    def set_page(self, page: int) -> None:
        self.list.set_page(page)
        self._on_view_change()

    def set_page_size(self, page_size: int) -> None:
        self.list.set_page_size(page_size)
        self._on_view_change()

    def clear_filters(self) -> None:
        self._search.cancel()
        self.list.clear_filters()
        self._on_view_change()

    async def wait(self) -> None:
        await self.list.wait()

    def close(self) -> None:
        self._search.close()
        self.list.close()
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_view_change(self) -> None:
        """Hook for state that belongs to the visible page only."""

    def _apply_search(self, text: str) -> None:
        self.set_filters(search=text)

    def _on_scope_change(self, _: LocationNode | None) -> None:
        self._search.cancel()
        self._on_view_change()
        self.list.reset_scope()

    async def _fetch_page(self, filters: F, pagination: Pagination) -> Page[Row]:
        params = {"page": pagination.current_page, "limit": pagination.page_size}
        params.update(self.build_params(filters))
        return await self._api.fetch_page(self.resource, params, items_key=self.items_key)

    async def _mutate(
        self,
        action: Callable[[], Awaitable[Any]],
        success_message: str,
        failure_message: str,
        reload: bool = True,
    ) -> bool:
        try:
            await action()
        except (ApiError, FormValidationError) as exc:
            message = describe_error(exc, failure_message)
            logger.warning(
                "mutation_failed",
                extra={"component": "screens", "resource": self.resource, "error": message},
            )
            self._notifier.error(message)
            return False
        self._notifier.success(success_message)
        if reload:
            self.list.reload()
        return True

    def _reject(self, exc: FormValidationError) -> bool:
        self._notifier.error(str(exc))
        return False
