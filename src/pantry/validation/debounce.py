"""
Debounced validation for fields that are edited rapidly.

Each call restarts the timer. When it fires, only the latest value is
validated and every caller still waiting gets that one result.
Call cancel() on teardown so nothing fires after disposal.
"""

import asyncio
from typing import Any

from pantry.validation.core import validate
from pantry.validation.results import ValidationResult


class DebouncedValidator:
    """Coalesces rapid validate calls into one, `delay` seconds after the last call."""

    def __init__(self, schema: Any, delay: float = 0.3) -> None:
        self.schema = schema
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None
        self._waiters: list[asyncio.Future] = []

    @property
    def pending(self) -> bool:
        """True while a validation is scheduled."""
        return self._handle is not None

    def __call__(self, data: Any) -> "asyncio.Future[ValidationResult]":
        loop = asyncio.get_running_loop()
        if self._handle is not None:
            self._handle.cancel()

        future: asyncio.Future = loop.create_future()
        self._waiters.append(future)
        self._handle = loop.call_later(self.delay, self._fire, data)
        return future

    def _fire(self, data: Any) -> None:
        self._handle = None
        result = validate(self.schema, data)
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(result)

    def cancel(self) -> None:
        """Drop the scheduled validation and cancel every waiting caller."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        waiters, self._waiters = self._waiters, []
        for future in waiters:
            future.cancel()
