from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Protocol

from admin_console.models import LocationNode

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    @abstractmethod
    async def get(self, key: str) -> Any | None:
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    async def delete(self, key: str) -> None:
        raise NotImplementedError


class RedisLikePreferenceClient(Protocol):
    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> bool | None: ...

    async def delete(self, *keys: str) -> int: ...


class InMemoryPreferenceStore(PreferenceStore):
    def __init__(self) -> None:
        self._items: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        raw = self._items.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value, ensure_ascii=True)

    async def delete(self, key: str) -> None:
        self._items.pop(key, None)


class RedisPreferenceStore(PreferenceStore):
    def __init__(self, client: RedisLikePreferenceClient, prefix: str = "admin_console:prefs:") -> None:
        self._client = client
        self._prefix = prefix

    async def get(self, key: str) -> Any | None:
        raw = await self._client.get(f"{self._prefix}{key}")
        if not raw:
            return None
        return json.loads(raw)

    async def set(self, key: str, value: Any) -> None:
        await self._client.set(f"{self._prefix}{key}", json.dumps(value, ensure_ascii=True))

    async def delete(self, key: str) -> None:
        await self._client.delete(f"{self._prefix}{key}")


ScopeListener = Callable[[LocationNode | None], None]


class CountryScope:
    """Selected country shared by every list screen.

    Listeners fire only when the country id actually changes; screens use
    that to drop data that belongs to the previous country.
    """

    def __init__(self, store: PreferenceStore, key: str = "fc-admin-selected-country") -> None:
        self._store = store
        self._key = key
        self._listeners: list[ScopeListener] = []
        self.selected: LocationNode | None = None

    @property
    def country_code(self) -> str | None:
        return self.selected.code if self.selected else None

    @property
    def needs_selection(self) -> bool:
        return self.selected is None

    def subscribe(self, listener: ScopeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def select(self, country: LocationNode) -> None:
        await self._store.set(
            self._key,
            {"id": country.id, "code": country.code, "name": country.name},
        )
        self._apply(country)

    async def restore(self) -> LocationNode | None:
        try:
            stored = await self._store.get(self._key)
            if stored is None:
                return None
            country = LocationNode(id=str(stored["id"]), name=str(stored["name"]), code=stored.get("code"))
        except (TypeError, KeyError, AttributeError, ValueError):
            logger.warning("stored_country_invalid", extra={"component": "preferences", "key": self._key})
            await self._store.delete(self._key)
            return None
        self._apply(country)
        return country

    async def clear(self) -> None:
        await self._store.delete(self._key)
        self._apply(None)

    def _apply(self, country: LocationNode | None) -> None:
        previous_id = self.selected.id if self.selected else None
        self.selected = country
        if (country.id if country else None) == previous_id:
            return
        logger.info(
            "country_scope_changed",
            extra={"component": "preferences", "country_code": country.code if country else None},
        )
        for listener in list(self._listeners):
            listener(country)
