from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")
logger = logging.getLogger(__name__)

_NOTHING = object()


class Debouncer(Generic[T]):
    """Trailing-edge debounce bound to the running event loop.

    Every ``push`` restarts the timer; only the last value of a burst is
    delivered to ``on_settle`` once ``delay_seconds`` pass without input.
    """

    def __init__(
        self,
        delay_seconds: float,
        on_settle: Callable[[T], None] | None = None,
        initial: T | None = None,
    ) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self._delay_seconds = delay_seconds
        self._on_settle = on_settle
        self._value = initial
        self._pending: object = _NOTHING
        self._handle: asyncio.TimerHandle | None = None
        self._closed = False

    @property
    def value(self) -> T | None:
        return self._value

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def push(self, value: T) -> None:
        if self._closed:
            logger.debug("debounce_push_after_close", extra={"component": "debounce"})
            return
        self._cancel_timer()
        self._pending = value
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self._delay_seconds, self._fire)

    def flush(self) -> None:
        if self._handle is None:
            return
        self._cancel_timer()
        self._fire()

    def cancel(self) -> None:
        self._cancel_timer()
        self._pending = _NOTHING

    def close(self) -> None:
        self.cancel()
        self._closed = True

    def _cancel_timer(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        if self._pending is _NOTHING:
            return
        value = self._pending
        self._pending = _NOTHING
        self._value = value  # type: ignore[assignment]
        if self._on_settle:
            self._on_settle(value)  # type: ignore[arg-type]
