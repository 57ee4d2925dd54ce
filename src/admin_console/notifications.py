from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier(Notifier):
    def success(self, message: str) -> None:
        logger.info("notify_success", extra={"component": "notifier", "message_text": message})

    def warning(self, message: str) -> None:
        logger.warning("notify_warning", extra={"component": "notifier", "message_text": message})

    def error(self, message: str) -> None:
        logger.error("notify_error", extra={"component": "notifier", "message_text": message})


class InMemoryNotifier(Notifier):
    def __init__(self) -> None:
        self.messages: list[tuple[str, str]] = []

    def success(self, message: str) -> None:
        self.messages.append(("success", message))

    def warning(self, message: str) -> None:
        self.messages.append(("warning", message))

    def error(self, message: str) -> None:
        self.messages.append(("error", message))

    def of_level(self, level: str) -> list[str]:
        return [message for item_level, message in self.messages if item_level == level]
