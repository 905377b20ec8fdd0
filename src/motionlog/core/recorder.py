"""Coordinator wiring a sensor source to session loggers and a display."""

from __future__ import annotations

import logging
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union

from ..sensors.motion import (
    ALL_KINDS,
    DeviceMotionSample,
    MotionComponent,
    Sample,
    SensorKind,
    format_line,
)
from ..sources.base import SensorSource, Subscription
from .dispatch import DispatchQueue
from .display import MotionDisplay, NullDisplay
from .sample_logger import SampleLogger
from .session import Session

logger = logging.getLogger(__name__)

DRAIN_TIMEOUT_S = 2.0


class MotionRecorder:
    """
    Start and stop sensor updates for one logging session at a time.

    Each delivered sample is formatted into a log line for its kind and its
    vectors are forwarded to ``display``. Deliveries carrying an error are
    dropped. ``stop`` unsubscribes, waits for in-flight deliveries on
    ``dispatch`` to finish, and saves one file per kind that received data.

    ``source`` may be ``None`` (no sensor hardware configured); ``start`` is
    then a no-op.
    """

    def __init__(
        self,
        source: Optional[SensorSource],
        out_dir: Union[str, Path],
        *,
        update_interval_s: float = 0.1,
        kinds: Iterable[Union[str, SensorKind]] = ALL_KINDS,
        display: Optional[MotionDisplay] = None,
        dispatch: Optional[DispatchQueue] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if update_interval_s <= 0:
            raise ValueError(f"update_interval_s must be positive, got {update_interval_s}")
        self.source = source
        self.out_dir = Path(out_dir)
        self.update_interval_s = float(update_interval_s)
        self.kinds = tuple(SensorKind.parse(k) for k in kinds)
        self.display: MotionDisplay = display if display is not None else NullDisplay()
        self.dispatch = dispatch
        self._clock = clock
        self.selected = MotionComponent.ATTITUDE

        self._session: Optional[Session] = None
        self._unsaved: List[Session] = []
        self._subscriptions: Dict[SensorKind, Subscription] = {}
        self.counts: Dict[SensorKind, int] = {}
        self.dropped: Dict[SensorKind, int] = {}

    # ------------------------------------------------------------------ state
    @property
    def configured(self) -> bool:
        return self.source is not None

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def running(self) -> bool:
        return self._session is not None

    def active_kinds(self) -> tuple:
        return tuple(kind for kind, sub in self._subscriptions.items() if sub.active)

    # ------------------------------------------------------------------ control
    def start(self) -> Optional[Session]:
        """
        Begin a new session and subscribe every available kind.

        A running session is stopped (and saved) first.
        """
        if self.source is None:
            logger.info("No sensor source configured; nothing to record")
            return None
        if self._session is not None:
            self.stop()

        self._session = Session.start(self.out_dir, clock=self._clock)
        self.counts = {kind: 0 for kind in self.kinds}
        self.dropped = {kind: 0 for kind in self.kinds}
        for kind in self.kinds:
            self._start_updates(kind)
        return self._session

    def _start_updates(self, kind: SensorKind) -> bool:
        source = self.source
        if source is None or not source.is_available(kind):
            logger.info("%s updates unavailable; skipping", kind.value)
            return False
        self._subscriptions[kind] = source.subscribe(
            kind,
            self.update_interval_s,
            partial(self._on_sample, kind),
        )
        logger.debug("Started %s updates every %.3fs", kind.value, self.update_interval_s)
        return True

    def stop(self) -> Dict[SensorKind, bool]:
        """End the session; returns the save outcome for each logged kind."""
        session = self._session
        if session is None:
            return {}

        for sub in self._subscriptions.values():
            sub.cancel()
        self._subscriptions.clear()

        if self.dispatch is not None and not self.dispatch.drain(DRAIN_TIMEOUT_S):
            logger.warning("Timed out waiting for pending deliveries before save")

        results = session.close()
        self._session = None
        if session.unsaved():
            self._unsaved.append(session)
        logger.info(
            "Session %s stopped: %s",
            session.stamp,
            ", ".join(f"{k.value}={self.counts.get(k, 0)}" for k in self.kinds),
        )
        return results

    @property
    def unsaved(self) -> Tuple[SampleLogger, ...]:
        """Loggers of stopped sessions whose save failed, oldest first."""
        return tuple(sl for session in self._unsaved for sl in session.unsaved().values())

    def retry_save(self) -> Dict[Path, bool]:
        """Try again to write every unsaved logger; returns outcome per file."""
        results: Dict[Path, bool] = {}
        pending = self._unsaved
        self._unsaved = []
        for session in pending:
            paths = {kind: sl.path for kind, sl in session.unsaved().items()}
            for kind, ok in session.close().items():
                if kind in paths:
                    results[paths[kind]] = ok
            if session.unsaved():
                self._unsaved.append(session)
        return results

    def set_update_interval(self, seconds: float) -> None:
        """Change the update interval, re-subscribing kinds already running."""
        if seconds <= 0:
            raise ValueError(f"update interval must be positive, got {seconds}")
        self.update_interval_s = float(seconds)
        if self._session is None:
            return
        for kind in self.active_kinds():
            self._start_updates(kind)

    def select(self, component: Union[int, MotionComponent]) -> None:
        """Choose which device-motion vector feeds ``display.show_values``."""
        self.selected = MotionComponent(component)

    # ------------------------------------------------------------------ delivery
    def _on_sample(
        self,
        kind: SensorKind,
        sample: Optional[Sample],
        error: Optional[BaseException],
    ) -> None:
        if error is not None or sample is None:
            self.dropped[kind] = self.dropped.get(kind, 0) + 1
            logger.debug("Dropped %s delivery (%s)", kind.value, error)
            return

        session = self._session
        if session is None:
            return
        session.logger_for(kind).append(format_line(sample))
        self.counts[kind] = self.counts.get(kind, 0) + 1

        try:
            self._route(kind, sample)
        except Exception:
            logger.exception("Display update failed for %s sample", kind.value)

    def _route(self, kind: SensorKind, sample: Sample) -> None:
        if isinstance(sample, DeviceMotionSample):
            for component in MotionComponent:
                self.display.add(component, sample.vector(component))
            self.display.show_values(self.selected, sample.vector(self.selected))
        else:
            self.display.add(kind, sample.as_vector())
