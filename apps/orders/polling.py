"""
Client-side order status polling.

After the embedded checkout reports completion, the caller waits for the
webhook to land by polling the order's status. The poller only reads; it
stops on success, on cancel() or once max_duration has elapsed.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from django.conf import settings

from .models import Order

logger = logging.getLogger(__name__)

SUCCESS_STATUSES = frozenset({Order.STATUS_PAID, Order.STATUS_COMPLETED})


@dataclass(frozen=True)
class PollResult:
    status: str | None
    timed_out: bool = False
    cancelled: bool = False
    attempts: int = 0

    @property
    def succeeded(self) -> bool:
        return self.status in SUCCESS_STATUSES


def _polling_setting(key: str, default: float) -> float:
    return float(getattr(settings, "ORDER_STATUS_POLLING", {}).get(key, default))


def fetch_order_status(order_id: Any) -> str | None:
    return Order.objects.filter(pk=order_id).values_list("status", flat=True).first()


class OrderStatusPoller:
    """
    Bounded, cancellable status poll.

    Use run() to poll on the calling thread, or start() to poll on a daemon
    thread and collect the result with wait().
    """

    def __init__(
        self,
        fetch_status: Callable[[], str | None],
        initial_delay: float | None = None,
        interval: float | None = None,
        max_duration: float | None = None,
        on_result: Callable[[PollResult], None] | None = None,
    ) -> None:
        self.fetch_status = fetch_status
        self.initial_delay = initial_delay if initial_delay is not None else _polling_setting("INITIAL_DELAY_SECONDS", 2)
        self.interval = interval if interval is not None else _polling_setting("INTERVAL_SECONDS", 3)
        self.max_duration = max_duration if max_duration is not None else _polling_setting("MAX_DURATION_SECONDS", 120)
        self.on_result = on_result

        self._cancelled = threading.Event()
        self._thread: threading.Thread | None = None
        self._result: PollResult | None = None

    @classmethod
    def for_order(cls, order_id: Any, **kwargs: Any) -> OrderStatusPoller:
        return cls(lambda: fetch_order_status(order_id), **kwargs)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def result(self) -> PollResult | None:
        return self._result

    def run(self) -> PollResult:
        started = time.monotonic()
        deadline = started + self.max_duration
        attempts = 0
        status: str | None = None

        if self._cancelled.wait(min(self.initial_delay, self.max_duration)):
            return self._finish(PollResult(status=None, cancelled=True))

        while True:
            attempts += 1
            try:
                status = self.fetch_status()
            except Exception as e:
                logger.warning(f"⚠️ [Polling] Status check {attempts} failed: {e}")
            else:
                if status in SUCCESS_STATUSES:
                    return self._finish(PollResult(status=status, attempts=attempts))

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                logger.info(
                    f"⏱️ [Polling] Gave up after {attempts} checks; last status {status}",
                    extra={"attempts": attempts, "status": status},
                )
                return self._finish(PollResult(status=status, timed_out=True, attempts=attempts))

            if self._cancelled.wait(min(self.interval, remaining)):
                return self._finish(PollResult(status=status, cancelled=True, attempts=attempts))

    def start(self) -> OrderStatusPoller:
        if self._thread is not None:
            raise RuntimeError("Poller already started")
        self._thread = threading.Thread(target=self.run, name="order-status-poller", daemon=True)
        self._thread.start()
        return self

    def wait(self, timeout: float | None = None) -> PollResult | None:
        """Block until a started poll finishes; None if it is still running"""
        if self._thread is None:
            return self._result
        self._thread.join(timeout)
        return self._result

    def _finish(self, result: PollResult) -> PollResult:
        self._result = result
        if self.on_result is not None:
            self.on_result(result)
        return result
