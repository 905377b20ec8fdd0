"""Display sinks that receive per-sample vectors from the recorder."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol, Tuple, Union

import numpy as np

from ..sensors.motion import MotionComponent, SensorKind

__all__ = ["MotionDisplay", "NullDisplay", "LatestValuesDisplay", "Channel"]

# Device-motion vectors are keyed by component, raw sensors by kind.
Channel = Union[MotionComponent, SensorKind]


class MotionDisplay(Protocol):
    """Anything that can show live motion vectors (graphs, labels, ...)."""

    def add(self, channel: Channel, vector: np.ndarray) -> None:  # pragma: no cover - protocol
        ...

    def show_values(self, component: MotionComponent, vector: np.ndarray) -> None:  # pragma: no cover - protocol
        ...


@dataclass(slots=True)
class NullDisplay:
    """No-op display used when nothing is attached."""

    def add(self, channel: Channel, vector: np.ndarray) -> None:  # pragma: no cover - trivial
        return

    def show_values(self, component: MotionComponent, vector: np.ndarray) -> None:  # pragma: no cover - trivial
        return


@dataclass(slots=True)
class LatestValuesDisplay:
    """Keep the newest vector per channel, readable from any thread."""

    _latest: Dict[Channel, np.ndarray] = field(init=False, default_factory=dict, repr=False)
    _selected: Optional[Tuple[MotionComponent, np.ndarray]] = field(init=False, default=None, repr=False)
    _updates: int = field(init=False, default=0)
    _lock: threading.Lock = field(init=False, default_factory=threading.Lock, repr=False)

    def add(self, channel: Channel, vector: np.ndarray) -> None:
        values = np.array(vector, dtype=float, copy=True).reshape(3)
        with self._lock:
            self._latest[channel] = values
            self._updates += 1

    def show_values(self, component: MotionComponent, vector: np.ndarray) -> None:
        values = np.array(vector, dtype=float, copy=True).reshape(3)
        with self._lock:
            self._selected = (MotionComponent(component), values)

    def latest(self, channel: Channel) -> Optional[np.ndarray]:
        with self._lock:
            return self._latest.get(channel)

    def selected(self) -> Optional[Tuple[MotionComponent, np.ndarray]]:
        with self._lock:
            return self._selected

    @property
    def updates(self) -> int:
        with self._lock:
            return self._updates
