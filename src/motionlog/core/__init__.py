"""Core recording pieces: loggers, sessions, dispatch and the recorder.

:class:`SampleLogger` buffers lines for one file, :class:`Session` owns one
logger per sensor kind, and :class:`MotionRecorder` wires a sensor source to
both and to an optional display.
"""

# Execution context shared by sources and the recorder
from .dispatch import DispatchQueue

# Buffers and session bookkeeping
from .sample_logger import LoggerState, SampleLogger
from .session import Session

# High-level controller and display sinks
from .display import LatestValuesDisplay, MotionDisplay, NullDisplay
from .recorder import MotionRecorder

__all__ = [
    "DispatchQueue",
    "LoggerState",
    "SampleLogger",
    "Session",
    "LatestValuesDisplay",
    "MotionDisplay",
    "NullDisplay",
    "MotionRecorder",
]
