from __future__ import annotations

import logging
from collections.abc import Callable

from admin_console.api_client import AdminApiClient
from admin_console.cascade import CascadingSelector, coverage_config
from admin_console.errors import ApiError
from admin_console.list_controller import describe_error
from admin_console.models import SelectionValue
from admin_console.notifications import LoggingNotifier, Notifier
from admin_console.observability import ControllerMetricCollector
from admin_console.screens.base import Row

logger = logging.getLogger(__name__)


def _name(item: Row, key: str) -> str | None:
    node = item.get(key)
    if isinstance(node, dict) and node.get("name"):
        return str(node["name"])
    return None


def format_coverage(item: Row) -> str:
    """``State > District > Block > Village`` with "(All ...)" for open levels."""
    district = _name(item, "district")
    block = _name(item, "block")
    village = _name(item, "village")
    parts = [_name(item, "state") or ""]
    parts.append(district or "(All Districts)")
    if block:
        parts.append(block)
    elif district:
        parts.append("(All Blocks)")
    if village:
        parts.append(village)
    elif block:
        parts.append("(All Villages)")
    return " > ".join(parts)


def coverage_level(item: Row) -> str:
    for key, label in (("village", "Village"), ("block", "Block"), ("district", "District")):
        if item.get(key):
            return label
    return "State"


class CoverageAreas:
    """Operating regions of one FPO or service provider."""

    def __init__(
        self,
        api: AdminApiClient,
        resource: str,
        owner_id: str,
        notifier: Notifier | None = None,
        metrics: ControllerMetricCollector | None = None,
    ) -> None:
        self._api = api
        self._path = f"/admin/{resource}/{owner_id}/coverage"
        self._notifier = notifier or LoggingNotifier()
        self._metrics = metrics
        self.items: list[Row] = []
        self.loading = False

    def selector(self, on_change: Callable[[SelectionValue], None] | None = None) -> CascadingSelector:
        return CascadingSelector(coverage_config(self._api.fetch_options, metrics=self._metrics), on_change=on_change)

    async def load(self) -> list[Row]:
        self.loading = True
        try:
            items = await self._api.fetch_list(self._path, items_key="coverage")
        except ApiError as exc:
            logger.warning("coverage_load_failed", extra={"component": "coverage", "path": self._path, "error": exc.message})
            self._notifier.error("Failed to load coverage areas")
        else:
            self.items = list(items)
        finally:
            self.loading = False
        return self.items

    async def add(self, value: SelectionValue) -> bool:
        if not value.state_id:
            self._notifier.error("Please select at least a state")
            return False
        body = {
            "stateId": value.state_id,
            "districtId": value.district_id,
            "blockId": value.block_id,
            "villageId": value.village_id,
        }
        try:
            await self._api.create(self._path, {key: item for key, item in body.items() if item})
        except ApiError as exc:
            self._notifier.error(describe_error(exc, "Failed to add coverage area"))
            return False
        self._notifier.success("Coverage area added")
        await self.load()
        return True

    async def delete(self, coverage_id: str) -> bool:
        try:
            await self._api.delete(f"{self._path}/{coverage_id}")
        except ApiError:
            self._notifier.error("Failed to remove coverage area")
            return False
        self._notifier.success("Coverage area removed")
        self.items = [item for item in self.items if item.get("id") != coverage_id]
        return True
