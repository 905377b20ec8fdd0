"""Subscription interface between sensor sources and the recorder."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from ..sensors.motion import Sample, SensorKind

logger = logging.getLogger(__name__)

# Called with (sample, None) on success or (None, error) when a reading
# failed. Deliveries for one source happen on a single execution context.
SampleHandler = Callable[[Optional[Sample], Optional[BaseException]], None]


class SensorError(RuntimeError):
    """A reading could not be produced; the delivery carries no sample."""


class SensorUnavailableError(RuntimeError):
    """The source cannot produce the requested sensor kind."""


class Subscription:
    """
    Cancellable handle returned by :meth:`SensorSource.subscribe`.

    ``cancel`` is idempotent. Once cancelled, no further deliveries reach the
    handler, even ones already queued.
    """

    def __init__(
        self,
        kind: SensorKind,
        interval_s: float,
        on_cancel: Optional[Callable[["Subscription"], None]] = None,
    ) -> None:
        self.kind = kind
        self.interval_s = float(interval_s)
        self._stop_event = threading.Event()
        self._on_cancel = on_cancel

    @property
    def active(self) -> bool:
        return not self._stop_event.is_set()

    @property
    def stop_event(self) -> threading.Event:
        return self._stop_event

    def cancel(self) -> None:
        if self._stop_event.is_set():
            return
        self._stop_event.set()
        logger.debug("Subscription for %s cancelled", self.kind.value)
        if self._on_cancel is not None:
            self._on_cancel(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "cancelled"
        return f"Subscription({self.kind.value}, every {self.interval_s}s, {state})"


class SensorSource(Protocol):
    """What the recorder needs from a motion-sensor backend."""

    def is_available(self, kind: SensorKind) -> bool:  # pragma: no cover - protocol
        ...

    def is_active(self, kind: SensorKind) -> bool:  # pragma: no cover - protocol
        ...

    def subscribe(
        self,
        kind: SensorKind,
        interval_s: float,
        handler: SampleHandler,
    ) -> Subscription:  # pragma: no cover - protocol
        ...


def deliver(subscription: Subscription, handler: SampleHandler, sample, error) -> None:
    """Invoke ``handler`` unless the subscription was cancelled meanwhile."""
    if not subscription.active:
        return
    handler(sample, error)
