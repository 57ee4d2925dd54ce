"""Client-side state controllers for the marketplace admin console."""

from admin_console.api_client import AdminApiClient
from admin_console.cascade import CascadeConfig, CascadingSelector, LevelSpec, coverage_config, location_config
from admin_console.config import ConsoleSettings, load_settings
from admin_console.debounce import Debouncer
from admin_console.detail_loader import DetailLoader
from admin_console.errors import ApiError, FormValidationError, SelectionError
from admin_console.list_controller import ListController
from admin_console.models import (
    HasLocationFilter,
    LocationLevel,
    LocationNode,
    Page,
    Pagination,
    SelectionValue,
)
from admin_console.options import LevelStatus, OptionLevel, OptionView, build_option_view
from admin_console.preferences import CountryScope, InMemoryPreferenceStore, PreferenceStore, RedisPreferenceStore

__all__ = [
    "AdminApiClient",
    "ApiError",
    "CascadeConfig",
    "CascadingSelector",
    "ConsoleSettings",
    "CountryScope",
    "Debouncer",
    "DetailLoader",
    "FormValidationError",
    "HasLocationFilter",
    "InMemoryPreferenceStore",
    "LevelSpec",
    "LevelStatus",
    "ListController",
    "LocationLevel",
    "LocationNode",
    "OptionLevel",
    "OptionView",
    "Page",
    "Pagination",
    "PreferenceStore",
    "RedisPreferenceStore",
    "SelectionError",
    "SelectionValue",
    "build_option_view",
    "coverage_config",
    "load_settings",
    "location_config",
]
