"""Motion sample types and their log-line format.

:mod:`motion` defines the per-kind sample dataclasses used across the
recorder, the sources, and the log reader.
"""

from .motion import (
    ALL_KINDS,
    AccelerometerSample,
    DeviceMotionSample,
    GyroSample,
    MotionComponent,
    Sample,
    SensorKind,
    field_names,
    format_line,
    sample_from_fields,
)

__all__ = [
    "ALL_KINDS",
    "AccelerometerSample",
    "DeviceMotionSample",
    "GyroSample",
    "MotionComponent",
    "Sample",
    "SensorKind",
    "field_names",
    "format_line",
    "sample_from_fields",
]
