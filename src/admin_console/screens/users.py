from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from admin_console.errors import ApiError, FormValidationError
from admin_console.models import HasLocationFilter, SelectionValue
from admin_console.screens.base import ListScreen

USER_TYPES = ("farmer", "partner", "provider", "admin")
ADMIN_ROLES = ("super_admin", "country_admin", "state_admin")


@dataclass(frozen=True)
class UserFilters:
    user_type: str = "all"
    search: str = ""
    location: SelectionValue = field(default_factory=SelectionValue)
    date_from: date | None = None
    date_to: date | None = None
    has_location: HasLocationFilter = HasLocationFilter.ALL

    def is_active(self) -> bool:
        return (
            self.user_type != "all"
            or not self.location.is_empty()
            or self.date_from is not None
            or self.date_to is not None
            or self.has_location is not HasLocationFilter.ALL
        )


@dataclass(frozen=True)
class UserForm:
    name: str = ""
    name_local: str = ""
    phone: str = ""
    email: str = ""
    type: str = "farmer"
    fpo_id: str | None = None
    fpo_role: str = "member"
    location: SelectionValue = field(default_factory=SelectionValue)
    admin_role: str | None = None
    admin_country_id: str | None = None
    admin_state_id: str | None = None

    def validate_admin(self) -> None:
        if not self.admin_role:
            raise FormValidationError("Admin role is required")
        if self.admin_role not in ADMIN_ROLES:
            raise FormValidationError(f"Unknown admin role '{self.admin_role}'")
        if self.admin_role == "country_admin" and not self.admin_country_id:
            raise FormValidationError("Country is required for Country Admin")
        if self.admin_role == "state_admin" and not self.admin_state_id:
            raise FormValidationError("State is required for State Admin")

    def validate_new(self) -> None:
        if not self.name:
            raise FormValidationError("Name is required")
        if self.type not in USER_TYPES:
            raise FormValidationError(f"Unknown user type '{self.type}'")
        if self.type == "admin":
            self.validate_admin()

    def create_body(self) -> dict[str, Any]:
        is_admin = self.type == "admin"
        is_farmer = self.type == "farmer"
        body = {
            "name": self.name,
            "nameLocal": self.name_local or None,
            "phone": self.phone or None,
            "email": self.email or None,
            "type": self.type,
            "villageId": self.location.village_id,
            "fpoId": self.fpo_id if is_farmer else None,
            "fpoRole": self.fpo_role if is_farmer else None,
            "adminRole": self.admin_role if is_admin else None,
            "adminCountryId": self.admin_country_id if is_admin and self.admin_role != "super_admin" else None,
            "adminStateId": self.admin_state_id if is_admin and self.admin_role == "state_admin" else None,
        }
        return {key: value for key, value in body.items() if value is not None}

    def update_body(self, user_type: str) -> dict[str, Any]:
        body: dict[str, Any] = {
            "name": self.name,
            "nameLocal": self.name_local or None,
            "phone": self.phone or None,
            "email": self.email or None,
        }
        if user_type == "admin":
            body["adminRole"] = self.admin_role
            body["adminCountryId"] = self.admin_country_id if self.admin_role != "super_admin" else None
            body["adminStateId"] = self.admin_state_id if self.admin_role == "state_admin" else None
        return body


class UsersScreen(ListScreen[UserFilters]):
    resource = "users"
    items_key = "users"
    label = "users"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.selected_ids: set[str] = set()

    def default_filters(self) -> UserFilters:
        return UserFilters()

    def build_params(self, filters: UserFilters) -> dict[str, Any]:
        params: dict[str, Any] = {
            "type": filters.user_type if filters.user_type != "all" else None,
            "search": filters.search or None,
            "countryCode": self.country_code,
            "createdAfter": filters.date_from.isoformat() if filters.date_from else None,
            "createdBefore": filters.date_to.isoformat() if filters.date_to else None,
            "hasLocation": filters.has_location.as_query(),
        }
        location = filters.location.as_params()
        location.pop("countryCode", None)
        params.update(location)
        return params

    def toggle_selection(self, user_id: str) -> None:
        if user_id in self.selected_ids:
            self.selected_ids.discard(user_id)
        else:
            self.selected_ids.add(user_id)

    def toggle_all(self, user_ids: list[str]) -> None:
        if self.selected_ids == set(user_ids):
            self.selected_ids = set()
        else:
            self.selected_ids = set(user_ids)

    def clear_selection(self) -> None:
        self.selected_ids = set()

    async def create_user(self, form: UserForm) -> bool:
        try:
            form.validate_new()
        except FormValidationError as exc:
            return self._reject(exc)
        return await self._mutate(
            lambda: self._api.create("/admin/users", form.create_body()),
            "User created successfully",
            "Failed to create user",
        )

    async def update_user(self, user_id: str, form: UserForm, user_type: str) -> bool:
        if user_type == "admin":
            try:
                form.validate_admin()
            except FormValidationError as exc:
                return self._reject(exc)
        return await self._mutate(
            lambda: self._api.update(f"/admin/users/{user_id}", form.update_body(user_type)),
            "User updated successfully",
            "Failed to update user",
        )

    async def delete_user(self, user_id: str) -> bool:
        deleted = await self._mutate(
            lambda: self._api.delete(f"/admin/users/{user_id}"),
            "User deleted successfully",
            "Failed to delete user",
        )
        if deleted:
            self.selected_ids.discard(user_id)
        return deleted

    async def update_location(self, user_id: str, village_id: str) -> bool:
        return await self._mutate(
            lambda: self._api.update(f"/admin/users/{user_id}/location", {"villageId": village_id}),
            "Location updated successfully",
            "Failed to update location",
        )

    async def bulk_assign_fpo(self, user_ids: list[str], fpo_id: str, fpo_role: str) -> bool:
        return await self._bulk_assign(
            {"userIds": user_ids, "fpoId": fpo_id, "fpoRole": fpo_role},
            "users assigned to FPO",
            "users could not be assigned",
            "Failed to assign users to FPO",
        )

    async def bulk_assign_location(self, user_ids: list[str], village_id: str) -> bool:
        return await self._bulk_assign(
            {"userIds": user_ids, "villageId": village_id},
            "users location updated",
            "users could not be updated",
            "Failed to update locations",
        )

    async def bulk_delete(self, user_ids: list[str]) -> bool:
        deleted = 0
        failed = 0
        for user_id in user_ids:
            try:
                await self._api.delete(f"/admin/users/{user_id}")
            except ApiError:
                failed += 1
            else:
                deleted += 1
                self.selected_ids.discard(user_id)
        self._notifier.success(f"{deleted} users deleted")
        if failed:
            self._notifier.warning(f"{failed} users could not be deleted")
        self.list.reload()
        return True

    async def _bulk_assign(
        self,
        body: dict[str, Any],
        updated_suffix: str,
        failed_suffix: str,
        failure_message: str,
    ) -> bool:
        try:
            result = await self._api.create("/admin/users/bulk-assign", body)
        except ApiError as exc:
            self._notifier.error(exc.message or failure_message)
            return False
        if isinstance(result, dict):
            self._notifier.success(f"{int(result.get('updated', 0))} {updated_suffix}")
            failed = int(result.get("failed", 0))
            if failed > 0:
                self._notifier.warning(f"{failed} {failed_suffix}")
        self.list.reload()
        return True

    def _on_view_change(self) -> None:
        self.clear_selection()
