"""Sensor sources feeding the recorder.

Every source implements :class:`base.SensorSource`: ``subscribe`` returns a
cancellable :class:`base.Subscription`, and handlers are called with either
a sample or an error. :mod:`simulated` generates synthetic motion on timer
threads; :mod:`replay` plays back recorded logs synchronously.
"""

from .base import (
    SampleHandler,
    SensorError,
    SensorSource,
    SensorUnavailableError,
    Subscription,
)
from .replay import ReplaySource
from .simulated import SimulatedSource

__all__ = [
    "SampleHandler",
    "SensorError",
    "SensorSource",
    "SensorUnavailableError",
    "Subscription",
    "ReplaySource",
    "SimulatedSource",
]
