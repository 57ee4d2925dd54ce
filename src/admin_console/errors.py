from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int

    def __str__(self) -> str:
        return self.message


class SelectionError(ValueError):
    """Raised when a location selection would break the parent-child chain."""


class FormValidationError(ValueError):
    """Raised when a form fails client-side checks before reaching the API."""
