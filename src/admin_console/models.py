from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Generic, TypeVar

from admin_console.errors import SelectionError

T = TypeVar("T")


class LocationLevel(str, Enum):
    COUNTRY = "country"
    STATE = "state"
    DISTRICT = "district"
    BLOCK = "block"
    VILLAGE = "village"


class HasLocationFilter(str, Enum):
    ALL = "all"
    YES = "yes"
    NO = "no"

    def as_query(self) -> bool | None:
        if self is HasLocationFilter.YES:
            return True
        if self is HasLocationFilter.NO:
            return False
        return None


@dataclass(frozen=True)
class LocationNode:
    id: str
    name: str
    code: str | None = None
    name_local: str | None = None


_PARAM_NAMES: dict[str, str] = {
    "country_code": "countryCode",
    "state_id": "stateId",
    "state_code": "stateCode",
    "district_id": "districtId",
    "block_id": "blockId",
    "village_id": "villageId",
}


@dataclass(frozen=True)
class SelectionValue:
    """Partial location tuple produced by a cascading selector.

    Fields below the state are prefix-consistent: a district needs a state,
    a block needs a district and a village needs a block. The country is
    optional because several screens take it from the selected scope instead.
    """

    country_code: str | None = None
    state_id: str | None = None
    state_code: str | None = None
    district_id: str | None = None
    block_id: str | None = None
    village_id: str | None = None

    def __post_init__(self) -> None:
        chain = (
            ("state", self.state_id or self.state_code),
            ("district_id", self.district_id),
            ("block_id", self.block_id),
            ("village_id", self.village_id),
        )
        for (parent_name, parent), (child_name, child) in zip(chain, chain[1:]):
            if child and not parent:
                raise SelectionError(f"{child_name} is set without {parent_name}")

    def get(self, field_name: str) -> str | None:
        if field_name not in _PARAM_NAMES:
            raise KeyError(field_name)
        return getattr(self, field_name)

    def is_empty(self) -> bool:
        return all(getattr(self, item.name) is None for item in fields(self))

    def as_params(self) -> dict[str, str]:
        return {
            _PARAM_NAMES[item.name]: getattr(self, item.name)
            for item in fields(self)
            if getattr(self, item.name)
        }


@dataclass(frozen=True)
class Pagination:
    current_page: int = 1
    page_size: int = 50
    total_items: int = 0
    total_pages: int = 0


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    total: int = 0
    pages: int = 0
