from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from admin_console.models import LocationNode


def _as_text(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ApiEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    success: bool
    data: Any = None
    message: str | None = None
    error: Any = None

    def error_message(self) -> str | None:
        if isinstance(self.error, dict) and self.error.get("message"):
            return str(self.error["message"])
        if isinstance(self.error, str) and self.error:
            return self.error
        return self.message


class LocationNodePayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    name: str
    code: str | None = None
    name_local: str | None = Field(default=None, alias="nameLocal")

    @field_validator("id", "code", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _as_text(value)

    def to_node(self) -> LocationNode:
        return LocationNode(id=self.id, name=self.name, code=self.code, name_local=self.name_local)


class PaginationMeta(BaseModel):
    model_config = ConfigDict(extra="ignore")

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)
    total: int = Field(default=0, ge=0)
    pages: int = Field(default=0, ge=0)


class PageData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    items: list[dict[str, Any]] = Field(default_factory=list)
    pagination: PaginationMeta = Field(default_factory=PaginationMeta)
