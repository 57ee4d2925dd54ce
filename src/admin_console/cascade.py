from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from admin_console.errors import SelectionError
from admin_console.models import LocationLevel, LocationNode, SelectionValue
from admin_console.options import (
    MAX_VISIBLE_OPTIONS,
    SEARCH_THRESHOLD,
    LevelStatus,
    OptionLevel,
    OptionView,
)
from admin_console.observability import (
    OUTCOME_COMMITTED,
    OUTCOME_DISCARDED,
    OUTCOME_FAILED,
    ControllerMetricCollector,
    FetchOutcomeMetric,
)

logger = logging.getLogger(__name__)

FetchOptions = Callable[[LocationLevel, str | None], Awaitable[Sequence[LocationNode]]]


@dataclass(frozen=True)
class LevelSpec:
    level: LocationLevel
    field: str
    optional: bool = False
    key_attr: str = "id"
    label: str = ""


@dataclass(frozen=True)
class CascadeConfig:
    levels: tuple[LevelSpec, ...]
    fetch_options: FetchOptions
    root_parent_key: str | None = None
    optional_label: str = "(Entire region)"
    visible_limit: int = MAX_VISIBLE_OPTIONS
    search_threshold: int = SEARCH_THRESHOLD
    name: str = "location_selector"
    metrics: ControllerMetricCollector | None = None

    def __post_init__(self) -> None:
        if not self.levels:
            raise ValueError("cascade needs at least one level")
        if self.levels[0].optional:
            raise ValueError("top level cannot be optional")


def coverage_config(
    fetch_options: FetchOptions,
    show_district: bool = True,
    show_block: bool = True,
    show_village: bool = True,
    optional_label: str = "(Entire region)",
    metrics: ControllerMetricCollector | None = None,
) -> CascadeConfig:
    """State by id, then optional district/block/village for coverage areas."""
    levels = [LevelSpec(LocationLevel.STATE, "state_id", label="State")]
    for level, field, shown, label in (
        (LocationLevel.DISTRICT, "district_id", show_district, "District"),
        (LocationLevel.BLOCK, "block_id", show_block, "Block"),
        (LocationLevel.VILLAGE, "village_id", show_village, "Village"),
    ):
        if not shown:
            break
        levels.append(LevelSpec(level, field, optional=True, label=label))
    return CascadeConfig(
        levels=tuple(levels),
        fetch_options=fetch_options,
        optional_label=optional_label,
        name="coverage_selector",
        metrics=metrics,
    )


def location_config(
    fetch_options: FetchOptions,
    show_country: bool = False,
    country_filter: str | None = None,
    metrics: ControllerMetricCollector | None = None,
) -> CascadeConfig:
    """Country/state by code, then district/block/village by id.

    Without a country level the states are scoped by ``country_filter``.
    """
    levels: list[LevelSpec] = []
    if show_country:
        levels.append(LevelSpec(LocationLevel.COUNTRY, "country_code", key_attr="code", label="Country"))
    levels.extend(
        [
            LevelSpec(LocationLevel.STATE, "state_code", key_attr="code", label="State"),
            LevelSpec(LocationLevel.DISTRICT, "district_id", label="District"),
            LevelSpec(LocationLevel.BLOCK, "block_id", label="Block"),
            LevelSpec(LocationLevel.VILLAGE, "village_id", label="Village"),
        ]
    )
    return CascadeConfig(
        levels=tuple(levels),
        fetch_options=fetch_options,
        root_parent_key=None if show_country else country_filter,
        metrics=metrics,
    )


class CascadingSelector:
    """Dependent dropdowns where each level's options hang off the parent pick.

    Selecting at one level resets every level below it synchronously and
    schedules the next level's fetch; results only land if the level still
    expects them.
    """

    def __init__(
        self,
        config: CascadeConfig,
        on_change: Callable[[SelectionValue], None] | None = None,
    ) -> None:
        self._config = config
        self._specs = config.levels
        self._index = {spec.level: idx for idx, spec in enumerate(self._specs)}
        self._levels = {spec.level: OptionLevel(spec.level) for spec in self._specs}
        self._selected: dict[LocationLevel, str | None] = {spec.level: None for spec in self._specs}
        self._decided: dict[LocationLevel, bool] = {spec.level: False for spec in self._specs}
        self._on_change = on_change
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def levels(self) -> tuple[LevelSpec, ...]:
        return self._specs

    @property
    def value(self) -> SelectionValue:
        return SelectionValue(**{spec.field: self._selected[spec.level] for spec in self._specs})

    def start(self) -> None:
        top = self._levels[self._specs[0].level]
        if top.status in {LevelStatus.EMPTY, LevelStatus.ERROR}:
            self._schedule_load(0, self._config.root_parent_key)

    def select(self, level: LocationLevel, value: str | None) -> SelectionValue:
        idx = self._position(level)
        spec = self._specs[idx]
        if not self.is_enabled(level):
            raise SelectionError(f"{level.value} cannot be selected before its parent")
        if value is None and not spec.optional:
            raise SelectionError(f"{level.value} requires a selection")
        state = self._levels[level]
        if value is not None:
            if state.status is not LevelStatus.LOADED or state.find(value, spec.key_attr) is None:
                raise SelectionError(f"unknown {level.value} option '{value}'")

        self._selected[level] = value
        self._decided[level] = True
        self._reset_below(idx)
        if value is not None and idx + 1 < len(self._specs):
            self._schedule_load(idx + 1, value)
        return self._emit()

    def load_value(self, value: SelectionValue) -> None:
        """Adopt an existing selection, e.g. when an edit dialog opens."""
        parent_key = self._config.root_parent_key
        parent_set = True
        for idx, spec in enumerate(self._specs):
            selected = value.get(spec.field) if parent_set else None
            self._selected[spec.level] = selected
            self._decided[spec.level] = selected is not None
            state = self._levels[spec.level]
            if idx == 0:
                if state.status in {LevelStatus.EMPTY, LevelStatus.ERROR} or state.parent_key != parent_key:
                    self._schedule_load(0, parent_key)
            elif parent_set:
                self._schedule_load(idx, parent_key)
            else:
                state.clear()
            parent_key = selected
            parent_set = selected is not None

    def set_search(self, level: LocationLevel, text: str) -> OptionView:
        state = self._state(level)
        state.search_text = text
        return self.view(level)

    def view(self, level: LocationLevel) -> OptionView:
        state = self._state(level)
        return state.view(limit=self._config.visible_limit, search_threshold=self._config.search_threshold)

    def status(self, level: LocationLevel) -> LevelStatus:
        return self._state(level).status

    def options(self, level: LocationLevel) -> tuple[LocationNode, ...]:
        return self._state(level).options

    def selected(self, level: LocationLevel) -> str | None:
        return self._selected[self._level(level)]

    def is_decided(self, level: LocationLevel) -> bool:
        return self._decided[self._level(level)]

    def is_enabled(self, level: LocationLevel) -> bool:
        idx = self._position(level)
        if idx == 0:
            return True
        return self._selected[self._specs[idx - 1].level] is not None

    async def wait(self) -> None:
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        self._closed = True
        for task in list(self._tasks):
            task.cancel()

    def _position(self, level: LocationLevel) -> int:
        idx = self._index.get(level)
        if idx is None:
            raise SelectionError(f"{level.value} is not part of this selector")
        return idx

    def _level(self, level: LocationLevel) -> LocationLevel:
        return self._specs[self._position(level)].level

    def _state(self, level: LocationLevel) -> OptionLevel:
        return self._levels[self._level(level)]

    def _reset_below(self, idx: int) -> None:
        for spec in self._specs[idx + 1 :]:
            self._selected[spec.level] = None
            self._decided[spec.level] = False
            self._levels[spec.level].clear()

    def _emit(self) -> SelectionValue:
        value = self.value
        if self._on_change:
            self._on_change(value)
        return value

    def _schedule_load(self, idx: int, parent_key: str | None) -> None:
        if self._closed:
            return
        spec = self._specs[idx]
        token = self._levels[spec.level].begin_load(parent_key)
        task = asyncio.get_running_loop().create_task(self._load(spec, token, parent_key))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _load(self, spec: LevelSpec, token: int, parent_key: str | None) -> None:
        state = self._levels[spec.level]
        try:
            options = await self._config.fetch_options(spec.level, parent_key)
        except asyncio.CancelledError:
            self._observe(OUTCOME_DISCARDED)
            raise
        except Exception as exc:
            if state.fail(token, parent_key):
                logger.warning(
                    "option_load_failed",
                    extra={"component": "cascade", "level": spec.level.value, "parent_key": parent_key, "error": str(exc)},
                )
                self._observe(OUTCOME_FAILED)
            else:
                logger.debug(
                    "option_failure_discarded",
                    extra={"component": "cascade", "level": spec.level.value, "parent_key": parent_key},
                )
                self._observe(OUTCOME_DISCARDED)
            return
        if not state.commit(token, parent_key, options):
            logger.debug(
                "option_load_discarded",
                extra={"component": "cascade", "level": spec.level.value, "parent_key": parent_key},
            )
            self._observe(OUTCOME_DISCARDED)
            return
        self._observe(OUTCOME_COMMITTED)

    def _observe(self, outcome: str) -> None:
        if self._config.metrics:
            self._config.metrics.observe(FetchOutcomeMetric(controller=self._config.name, outcome=outcome))
