"""
Motion samples delivered by a sensor source.

Three sensor kinds are recorded, each into its own log file:

  - deviceMotion   : fused attitude (roll, pitch, yaw) in radians, plus the
                     rotation rate, gravity and user acceleration vectors
  - accelerometers : raw acceleration x, y, z in g
  - gyroscope      : raw rotation rate x, y, z in rad/s

``format_line()`` turns a sample into the text line written to the log::

    timestamp: 12.5, roll: 0.1, pitch: -0.02, yaw: 1.57
    timestamp: 12.5, x: 0.01, y: -0.98, z: 0.02
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import ClassVar, Mapping, Tuple, Union

import numpy as np

Vec3 = Tuple[float, float, float]

_ZERO: Vec3 = (0.0, 0.0, 0.0)


class SensorKind(str, Enum):
    """Sensor streams that get their own log file.

    The values are the suffixes used in log file names.
    """

    DEVICE_MOTION = "deviceMotion"
    ACCELEROMETER = "accelerometers"
    GYROSCOPE = "gyroscope"

    @classmethod
    def parse(cls, value: Union[str, "SensorKind"]) -> "SensorKind":
        """Resolve a kind from its value, its name, or a short alias."""
        if isinstance(value, SensorKind):
            return value
        text = str(value).strip()
        for kind in cls:
            if text == kind.value:
                return kind
        key = text.lower().replace("-", "_")
        if key in _KIND_ALIASES:
            return _KIND_ALIASES[key]
        raise ValueError(f"Unknown sensor kind {value!r}")


_KIND_ALIASES = {
    "device_motion": SensorKind.DEVICE_MOTION,
    "devicemotion": SensorKind.DEVICE_MOTION,
    "motion": SensorKind.DEVICE_MOTION,
    "accelerometer": SensorKind.ACCELEROMETER,
    "accelerometers": SensorKind.ACCELEROMETER,
    "accel": SensorKind.ACCELEROMETER,
    "acc": SensorKind.ACCELEROMETER,
    "gyroscope": SensorKind.GYROSCOPE,
    "gyro": SensorKind.GYROSCOPE,
    "gyr": SensorKind.GYROSCOPE,
}

ALL_KINDS: Tuple[SensorKind, ...] = tuple(SensorKind)


class MotionComponent(IntEnum):
    """The four vectors carried by a device-motion sample."""

    ATTITUDE = 0
    ROTATION_RATE = 1
    GRAVITY = 2
    USER_ACCELERATION = 3


def _vec3(values) -> Vec3:
    x, y, z = (float(v) for v in values)
    return (x, y, z)


@dataclass(frozen=True)
class DeviceMotionSample:
    timestamp: float
    roll: float
    pitch: float
    yaw: float
    rotation_rate: Vec3 = _ZERO
    gravity: Vec3 = _ZERO
    user_acceleration: Vec3 = _ZERO

    kind: ClassVar[SensorKind] = SensorKind.DEVICE_MOTION

    def __post_init__(self) -> None:
        # Store plain floats so numpy scalars never leak into log lines.
        for name in ("timestamp", "roll", "pitch", "yaw"):
            object.__setattr__(self, name, float(getattr(self, name)))
        for name in ("rotation_rate", "gravity", "user_acceleration"):
            object.__setattr__(self, name, _vec3(getattr(self, name)))

    @property
    def attitude(self) -> Vec3:
        return (self.roll, self.pitch, self.yaw)

    def fields(self) -> Tuple[Tuple[str, float], ...]:
        return (
            ("timestamp", self.timestamp),
            ("roll", self.roll),
            ("pitch", self.pitch),
            ("yaw", self.yaw),
        )

    def vector(self, component: MotionComponent) -> np.ndarray:
        """Return one of the four motion vectors as a ``(3,)`` float array."""
        component = MotionComponent(component)
        if component is MotionComponent.ATTITUDE:
            values = self.attitude
        elif component is MotionComponent.ROTATION_RATE:
            values = self.rotation_rate
        elif component is MotionComponent.GRAVITY:
            values = self.gravity
        else:
            values = self.user_acceleration
        return np.asarray(values, dtype=float)


@dataclass(frozen=True)
class _AxisSample:
    timestamp: float
    x: float
    y: float
    z: float

    def __post_init__(self) -> None:
        for name in ("timestamp", "x", "y", "z"):
            object.__setattr__(self, name, float(getattr(self, name)))

    def fields(self) -> Tuple[Tuple[str, float], ...]:
        return (
            ("timestamp", self.timestamp),
            ("x", self.x),
            ("y", self.y),
            ("z", self.z),
        )

    def as_vector(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)


@dataclass(frozen=True)
class AccelerometerSample(_AxisSample):
    """Raw accelerometer reading in g."""

    kind: ClassVar[SensorKind] = SensorKind.ACCELEROMETER


@dataclass(frozen=True)
class GyroSample(_AxisSample):
    """Raw gyroscope reading in rad/s."""

    kind: ClassVar[SensorKind] = SensorKind.GYROSCOPE


Sample = Union[DeviceMotionSample, AccelerometerSample, GyroSample]

_SAMPLE_TYPES = {
    SensorKind.DEVICE_MOTION: DeviceMotionSample,
    SensorKind.ACCELEROMETER: AccelerometerSample,
    SensorKind.GYROSCOPE: GyroSample,
}


def field_names(kind: SensorKind) -> Tuple[str, ...]:
    """Names written to the log for ``kind``, timestamp first."""
    if SensorKind.parse(kind) is SensorKind.DEVICE_MOTION:
        return ("timestamp", "roll", "pitch", "yaw")
    return ("timestamp", "x", "y", "z")


def format_line(sample: Sample) -> str:
    """Render ``sample`` as one ``name: value`` log line."""
    return ", ".join(f"{name}: {float(value)!r}" for name, value in sample.fields())


def sample_from_fields(kind: SensorKind, values: Mapping[str, float]) -> Sample:
    """Build a sample of ``kind`` from a parsed log line.

    Device-motion logs only carry the attitude, so the other vectors are
    left at zero.
    """
    kind = SensorKind.parse(kind)
    missing = [name for name in field_names(kind) if name not in values]
    if missing:
        raise KeyError(f"{kind.value} line is missing {', '.join(missing)}")
    cls = _SAMPLE_TYPES[kind]
    return cls(**{name: values[name] for name in field_names(kind)})
