"""Trailing-edge debounced simulation calls shared by form and chart edits."""

from __future__ import annotations

import itertools
import threading
from typing import Any, Callable

from mortgasim.services.mortgage_api import MortgageApiError
from mortgasim.utils.logging import get_logger
from mortgasim.utils.scheduling import Scheduler, TimerHandle

LOGGER = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.5

SimulateFn = Callable[[dict[str, Any]], dict[str, Any]]


class DebouncedSimulation:
    """Cancel-and-replace scheduling of simulation requests.

    Only the last request of a burst is sent. Each dispatched request carries
    a sequence number and a response older than the last applied one is
    discarded, so a slow superseded call cannot overwrite newer results.
    """

    def __init__(
        self,
        simulate: SimulateFn,
        scheduler: Scheduler,
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_success: Callable[[dict[str, Any]], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._simulate = simulate
        self._scheduler = scheduler
        self.debounce_seconds = float(debounce_seconds)
        self.on_success = on_success
        self.on_error = on_error
        self._lock = threading.Lock()
        self._timer: TimerHandle | None = None
        self._sequence = itertools.count(1)
        self._last_applied = 0
        self._in_flight = 0
        self.data: dict[str, Any] | None = None
        self.error: Exception | None = None
        self.last_request: dict[str, Any] | None = None

    @property
    def is_debouncing(self) -> bool:
        return self._timer is not None

    @property
    def is_pending(self) -> bool:
        return self._in_flight > 0

    def cancel_pending(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def debounced_submit(self, request: dict[str, Any]) -> None:
        """Schedule ``request`` after the quiet period, replacing any pending one."""
        self.cancel_pending()
        with self._lock:
            self._timer = self._scheduler.call_later(self.debounce_seconds, lambda: self._fire(request))

    def submit(self, request: dict[str, Any]) -> dict[str, Any] | None:
        """Send immediately, dropping any pending debounced request."""
        self.cancel_pending()
        return self._dispatch(request)

    def _fire(self, request: dict[str, Any]) -> None:
        with self._lock:
            self._timer = None
        self._dispatch(request)

    def _dispatch(self, request: dict[str, Any]) -> dict[str, Any] | None:
        with self._lock:
            seq = next(self._sequence)
            self._in_flight += 1
            self.last_request = request
        try:
            result = self._simulate(request)
        except MortgageApiError as exc:
            self._apply_error(seq, exc)
            return None
        finally:
            with self._lock:
                self._in_flight -= 1
        return result if self._apply_result(seq, result) else None

    def _apply_result(self, seq: int, result: dict[str, Any]) -> bool:
        with self._lock:
            if seq < self._last_applied:
                LOGGER.debug('Discarding stale simulation response #%s (latest #%s)', seq, self._last_applied)
                return False
            self._last_applied = seq
            self.data = result
            self.error = None
        if self.on_success is not None:
            self.on_success(result)
        return True

    def _apply_error(self, seq: int, exc: Exception) -> None:
        with self._lock:
            if seq < self._last_applied:
                LOGGER.debug('Discarding stale simulation error #%s: %s', seq, exc)
                return
            self._last_applied = seq
            self.error = exc
        LOGGER.warning('Simulation request #%s failed: %s', seq, exc)
        if self.on_error is not None:
            self.on_error(exc)
