from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from admin_console.notifications import LoggingNotifier, Notifier

logger = logging.getLogger(__name__)

FetchDetail = Callable[[str], Awaitable[Sequence[Any]]]


class DetailLoader:
    """Secondary collections for the single expanded row of a table.

    The owner token is bumped before any request goes out and compared again
    when a response arrives, so a late answer for a row the user already left
    never reaches ``collections``. Each collection also numbers its requests,
    so after a ``refresh`` only the newest answer for that collection lands.
    """

    def __init__(
        self,
        fetchers: Mapping[str, FetchDetail],
        notifier: Notifier | None = None,
        error_messages: Mapping[str, str] | None = None,
        name: str = "detail",
    ) -> None:
        if not fetchers:
            raise ValueError("at least one detail fetcher is required")
        self.name = name
        self._fetchers = dict(fetchers)
        self._notifier = notifier or LoggingNotifier()
        self._error_messages = dict(error_messages or {})
        self.expanded_id: str | None = None
        self.collections: dict[str, list[Any]] = {key: [] for key in self._fetchers}
        self.loading: dict[str, bool] = {key: False for key in self._fetchers}
        self._generation = 0
        self._requests: dict[str, int] = {key: 0 for key in self._fetchers}
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def toggle(self, row_id: str) -> None:
        if row_id == self.expanded_id:
            self.collapse()
        else:
            self.expand(row_id)

    def expand(self, row_id: str) -> None:
        self._generation += 1
        token = self._generation
        self.expanded_id = row_id
        self._clear_collections()
        for key in self._fetchers:
            self._schedule(key, row_id, token)

    def collapse(self) -> None:
        self._generation += 1
        self.expanded_id = None
        self._clear_collections()

    def set_expanded(self, row_id: str | None) -> None:
        if row_id is None:
            self.collapse()
        elif row_id != self.expanded_id:
            self.expand(row_id)

    def refresh(self, key: str | None = None) -> None:
        if self.expanded_id is None:
            return
        keys = [key] if key is not None else list(self._fetchers)
        for item in keys:
            if item not in self._fetchers:
                raise KeyError(item)
            self._schedule(item, self.expanded_id, self._generation)

    async def wait(self) -> None:
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        for task in list(self._tasks):
            task.cancel()
        self.collapse()

    def _is_owner(self, key: str, row_id: str, token: int, request: int) -> bool:
        return token == self._generation and row_id == self.expanded_id and request == self._requests[key]

    def _clear_collections(self) -> None:
        for key in self._fetchers:
            self.collections[key] = []
            self.loading[key] = False

    def _schedule(self, key: str, row_id: str, token: int) -> None:
        self._requests[key] += 1
        self.loading[key] = True
        task = asyncio.get_running_loop().create_task(self._load(key, row_id, token, self._requests[key]))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load(self, key: str, row_id: str, token: int, request: int) -> None:
        try:
            items = await self._fetchers[key](row_id)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._is_owner(key, row_id, token, request):
                logger.debug(
                    "detail_failure_discarded",
                    extra={"component": "detail_loader", "loader": self.name, "collection": key, "row_id": row_id},
                )
                return
            self.loading[key] = False
            logger.warning(
                "detail_load_failed",
                extra={
                    "component": "detail_loader",
                    "loader": self.name,
                    "collection": key,
                    "row_id": row_id,
                    "error": str(exc),
                },
            )
            self._notifier.error(self._error_messages.get(key, f"Failed to load {key}"))
            return

        if not self._is_owner(key, row_id, token, request):
            logger.debug(
                "detail_load_discarded",
                extra={"component": "detail_loader", "loader": self.name, "collection": key, "row_id": row_id},
            )
            return
        self.collections[key] = list(items)
        self.loading[key] = False
