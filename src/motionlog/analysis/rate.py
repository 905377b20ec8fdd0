from __future__ import annotations

from collections import deque
from typing import Deque, Sequence

import numpy as np


class RateEstimator:
    """
    Estimate the effective sample rate from delivery timestamps.

    Notes
    -----
    - Timestamps are seconds and expected to be increasing.
    - The estimate uses the median interval over the last ``window_size``
      timestamps, so a few late deliveries do not skew it.
    """

    def __init__(self, window_size: int = 100, default_hz: float = 0.0) -> None:
        if window_size <= 1:
            raise ValueError("window_size must be > 1")
        self._times: Deque[float] = deque(maxlen=window_size)
        self.default_hz = float(default_hz)

    def add_sample_time(self, t: float) -> None:
        """
        Append a new sample timestamp.

        Parameters
        ----------
        t:
            Sample timestamp in seconds.
        """
        self._times.append(float(t))

    @property
    def estimated_hz(self) -> float:
        """Current estimate, or ``default_hz`` with fewer than two samples."""
        if len(self._times) < 2:
            return self.default_hz
        return estimate_rate_hz(self._times, default_hz=self.default_hz)

    def reset(self) -> None:
        self._times.clear()


def estimate_rate_hz(timestamps: Sequence[float], default_hz: float = 0.0) -> float:
    """
    Return ``1 / median(dt)`` for a timestamp sequence.

    Non-positive intervals (duplicates, clock steps) are ignored; if none
    remain, ``default_hz`` is returned.
    """
    t = np.asarray(timestamps, dtype=float).reshape(-1)
    if t.size < 2:
        return float(default_hz)
    dt = np.diff(t)
    dt = dt[dt > 0]
    if dt.size == 0:
        return float(default_hz)
    return float(1.0 / np.median(dt))
