from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from admin_console.detail_loader import DetailLoader
from admin_console.errors import ApiError, FormValidationError
from admin_console.models import HasLocationFilter, SelectionValue
from admin_console.screens.base import ListScreen, Row
from admin_console.screens.coverage import CoverageAreas

logger = logging.getLogger(__name__)

MEMBERS = "members"
DOCUMENTS = "documents"


@dataclass(frozen=True)
class FpoFilters:
    search: str = ""
    location: SelectionValue = field(default_factory=SelectionValue)
    has_location: HasLocationFilter = HasLocationFilter.ALL

    def is_active(self) -> bool:
        return not self.location.is_empty() or self.has_location is not HasLocationFilter.ALL


@dataclass(frozen=True)
class FpoForm:
    name: str = ""
    name_local: str = ""
    registration_number: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    location: SelectionValue = field(default_factory=SelectionValue)

    def validate(self) -> None:
        if not self.name:
            raise FormValidationError("Name is required")

    def create_body(self) -> dict[str, Any]:
        body = {
            "name": self.name,
            "nameLocal": self.name_local or None,
            "registrationNumber": self.registration_number or None,
            "phone": self.phone or None,
            "email": self.email or None,
            "address": self.address or None,
            "villageId": self.location.village_id,
        }
        return {key: value for key, value in body.items() if value is not None}

    def update_body(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "nameLocal": self.name_local or None,
            "registrationNumber": self.registration_number or None,
            "phone": self.phone or None,
            "email": self.email or None,
            "address": self.address or None,
        }


@dataclass(frozen=True)
class DocumentForm:
    name: str = ""
    type: str = "registration"
    description: str = ""
    file_url: str = ""

    def validate(self) -> None:
        if not self.name or not self.file_url:
            raise FormValidationError("Name and File URL are required")

    def create_body(self) -> dict[str, Any]:
        body = {
            "name": self.name,
            "type": self.type,
            "description": self.description or None,
            "fileUrl": self.file_url,
        }
        return {key: value for key, value in body.items() if value is not None}


class FposScreen(ListScreen[FpoFilters]):
    resource = "fpos"
    items_key = "fpos"
    label = "FPOs"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.details = DetailLoader(
            {MEMBERS: self._fetch_members, DOCUMENTS: self._fetch_documents},
            notifier=self._notifier,
            error_messages={
                MEMBERS: "Failed to load FPO members",
                DOCUMENTS: "Failed to load FPO documents",
            },
            name="fpos",
        )
        self.available_farmers: list[Row] = []
        self.farmers_loading = False

    @property
    def expanded_id(self) -> str | None:
        return self.details.expanded_id

    @property
    def members(self) -> list[Row]:
        return self.details.collections[MEMBERS]

    @property
    def documents(self) -> list[Row]:
        return self.details.collections[DOCUMENTS]

    def default_filters(self) -> FpoFilters:
        return FpoFilters()

    def build_params(self, filters: FpoFilters) -> dict[str, Any]:
        params: dict[str, Any] = {
            "search": filters.search or None,
            "countryCode": self.country_code,
            "hasLocation": filters.has_location.as_query(),
        }
        location = filters.location.as_params()
        location.pop("countryCode", None)
        params.update(location)
        return params

    def toggle_expand(self, fpo_id: str) -> None:
        self.details.toggle(fpo_id)

    def coverage(self, fpo_id: str) -> CoverageAreas:
        return CoverageAreas(self._api, self.resource, fpo_id, notifier=self._notifier, metrics=self._metrics)

    async def wait(self) -> None:
        await super().wait()
        await self.details.wait()

    def close(self) -> None:
        self.details.close()
        super().close()

    async def load_available_farmers(self) -> list[Row]:
        self.farmers_loading = True
        try:
            page = await self._api.fetch_page(
                "users",
                {"type": "farmer", "limit": self._settings.FARMER_FETCH_LIMIT},
                items_key="users",
            )
        except ApiError as exc:
            logger.warning(
                "farmers_load_failed",
                extra={"component": "screens", "resource": self.resource, "error": exc.message},
            )
        else:
            self.available_farmers = list(page.items)
        finally:
            self.farmers_loading = False
        return self.available_farmers

    async def create_fpo(self, form: FpoForm) -> bool:
        try:
            form.validate()
        except FormValidationError as exc:
            return self._reject(exc)
        return await self._mutate(
            lambda: self._api.create("/admin/fpos", form.create_body()),
            "FPO created successfully",
            "Failed to create FPO",
        )

    async def update_fpo(self, fpo_id: str, form: FpoForm) -> bool:
        return await self._mutate(
            lambda: self._api.update(f"/admin/fpos/{fpo_id}", form.update_body()),
            "FPO updated successfully",
            "Failed to update FPO",
        )

    async def delete_fpo(self, fpo_id: str) -> bool:
        deleted = await self._mutate(
            lambda: self._api.delete(f"/admin/fpos/{fpo_id}"),
            "FPO deleted successfully",
            "Failed to delete FPO",
        )
        if deleted and self.details.expanded_id == fpo_id:
            self.details.collapse()
        return deleted

    async def update_location(self, fpo_id: str, village_id: str) -> bool:
        return await self._mutate(
            lambda: self._api.update(f"/admin/fpos/{fpo_id}/location", {"villageId": village_id}),
            "Location updated successfully",
            "Failed to update location",
        )

    async def add_member(self, fpo_id: str, user_id: str, role: str) -> bool:
        return await self._member_change(
            fpo_id,
            lambda: self._api.create(f"/admin/fpos/{fpo_id}/members", {"userId": user_id, "role": role}),
            "Member added successfully",
            "Failed to add member",
        )

    async def remove_member(self, fpo_id: str, user_id: str) -> bool:
        return await self._member_change(
            fpo_id,
            lambda: self._api.delete(f"/admin/fpos/{fpo_id}/members/{user_id}"),
            "Member removed successfully",
            "Failed to remove member",
        )

    async def change_role(self, fpo_id: str, user_id: str, role: str) -> bool:
        return await self._member_change(
            fpo_id,
            lambda: self._api.update(f"/admin/fpos/{fpo_id}/members/{user_id}", {"role": role}),
            "Role updated successfully",
            "Failed to update role",
        )

    async def add_document(self, fpo_id: str, form: DocumentForm) -> bool:
        try:
            form.validate()
        except FormValidationError as exc:
            return self._reject(exc)
        changed = await self._mutate(
            lambda: self._api.create(f"/admin/fpos/{fpo_id}/documents", form.create_body()),
            "Document added successfully",
            "Failed to add document",
            reload=False,
        )
        if changed and self.details.expanded_id == fpo_id:
            self.details.refresh(DOCUMENTS)
        return changed

    async def delete_document(self, fpo_id: str, document_id: str) -> bool:
        changed = await self._mutate(
            lambda: self._api.delete(f"/admin/fpos/{fpo_id}/documents/{document_id}"),
            "Document deleted successfully",
            "Failed to delete document",
            reload=False,
        )
        if changed and self.details.expanded_id == fpo_id:
            self.details.refresh(DOCUMENTS)
        return changed

    async def _member_change(
        self,
        fpo_id: str,
        action: Callable[[], Awaitable[Any]],
        success: str,
        failure: str,
    ) -> bool:
        changed = await self._mutate(action, success, failure)
        if changed and self.details.expanded_id == fpo_id:
            self.details.refresh(MEMBERS)
        return changed

    async def _fetch_members(self, fpo_id: str) -> list[Row]:
        return await self._api.fetch_subcollection("fpos", fpo_id, MEMBERS, limit=self._settings.DETAIL_FETCH_LIMIT)

    async def _fetch_documents(self, fpo_id: str) -> list[Row]:
        return await self._api.fetch_subcollection("fpos", fpo_id, DOCUMENTS)

    def _on_view_change(self) -> None:
        self.details.collapse()
