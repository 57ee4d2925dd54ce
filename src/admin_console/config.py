from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsoleSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "admin-console"
    API_BASE_URL: str = "http://localhost:3000/api/v1"
    # None keeps the request open until the server answers.
    API_CONNECT_TIMEOUT_SECONDS: float | None = None
    API_READ_TIMEOUT_SECONDS: float | None = None
    SEARCH_DEBOUNCE_MS: int = 300
    DEFAULT_PAGE_SIZE: int = 50
    OPTION_VISIBLE_LIMIT: int = 50
    OPTION_SEARCH_THRESHOLD: int = 10
    DETAIL_FETCH_LIMIT: int = 100
    REFERENCE_FETCH_LIMIT: int = 500
    FARMER_FETCH_LIMIT: int = 200
    SELECTED_COUNTRY_KEY: str = "fc-admin-selected-country"


def load_settings() -> ConsoleSettings:
    return ConsoleSettings()
