from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from admin_console.models import LocationLevel, LocationNode

MAX_VISIBLE_OPTIONS = 50
SEARCH_THRESHOLD = 10


class LevelStatus(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class TruncationNotice:
    kind: str
    shown: int
    of: int

    @property
    def message(self) -> str:
        return f"Showing {self.shown} of {self.of} {self.kind}"


@dataclass(frozen=True)
class OptionView:
    items: tuple[LocationNode, ...]
    total: int
    matched: int
    search_text: str
    show_search: bool
    truncation: TruncationNotice | None = None

    @property
    def no_matches(self) -> bool:
        return bool(self.search_text) and not self.items


def filter_options(options: Sequence[LocationNode], search_text: str) -> list[LocationNode]:
    if not search_text:
        return list(options)
    needle = search_text.lower()
    return [option for option in options if needle in option.name.lower()]


def build_option_view(
    options: Sequence[LocationNode],
    search_text: str = "",
    limit: int = MAX_VISIBLE_OPTIONS,
    search_threshold: int = SEARCH_THRESHOLD,
) -> OptionView:
    if limit < 1:
        raise ValueError("limit must be >= 1")
    matched = filter_options(options, search_text)
    truncation = None
    if len(matched) > limit:
        kind = "matches" if search_text else "total"
        truncation = TruncationNotice(kind=kind, shown=limit, of=len(matched))
    return OptionView(
        items=tuple(matched[:limit]),
        total=len(options),
        matched=len(matched),
        search_text=search_text,
        show_search=len(options) > search_threshold,
        truncation=truncation,
    )


class OptionLevel:
    """Options cached for one hierarchy level, keyed by the parent selection.

    ``generation`` changes on every load or reset, so a fetch that resolves
    after its level moved on can be recognised and dropped.
    """

    def __init__(self, level: LocationLevel) -> None:
        self.level = level
        self.status = LevelStatus.EMPTY
        self.options: tuple[LocationNode, ...] = ()
        self.parent_key: str | None = None
        self.search_text = ""
        self.generation = 0

    def begin_load(self, parent_key: str | None) -> int:
        if parent_key != self.parent_key:
            self.options = ()
            self.search_text = ""
        self.parent_key = parent_key
        self.status = LevelStatus.LOADING
        self.generation += 1
        return self.generation

    def is_current(self, token: int, parent_key: str | None) -> bool:
        return token == self.generation and parent_key == self.parent_key

    def commit(self, token: int, parent_key: str | None, options: Iterable[LocationNode]) -> bool:
        if not self.is_current(token, parent_key):
            return False
        self.options = tuple(options)
        self.status = LevelStatus.LOADED
        return True

    def fail(self, token: int, parent_key: str | None) -> bool:
        if not self.is_current(token, parent_key):
            return False
        self.options = ()
        self.status = LevelStatus.ERROR
        return True

    def clear(self) -> None:
        self.generation += 1
        self.status = LevelStatus.EMPTY
        self.options = ()
        self.parent_key = None
        self.search_text = ""

    def find(self, key: str, key_attr: str = "id") -> LocationNode | None:
        for option in self.options:
            if getattr(option, key_attr) == key:
                return option
        return None

    def view(self, limit: int = MAX_VISIBLE_OPTIONS, search_threshold: int = SEARCH_THRESHOLD) -> OptionView:
        return build_option_view(self.options, self.search_text, limit=limit, search_threshold=search_threshold)
