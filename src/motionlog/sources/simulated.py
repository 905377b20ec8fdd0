"""Synthetic motion source for demos and tests without hardware."""

from __future__ import annotations

import logging
import math
import threading
import time
from typing import Callable, Dict, Iterable, Optional

import numpy as np

from ..core.dispatch import DispatchQueue
from ..sensors.motion import (
    ALL_KINDS,
    AccelerometerSample,
    DeviceMotionSample,
    GyroSample,
    Sample,
    SensorKind,
)
from .base import (
    SampleHandler,
    SensorError,
    SensorUnavailableError,
    Subscription,
    deliver,
)

logger = logging.getLogger(__name__)

# Slow sway around roll/pitch plus a steady yaw drift.
ROLL_AMPLITUDE = 0.35
ROLL_FREQ_HZ = 0.5
PITCH_AMPLITUDE = 0.2
PITCH_FREQ_HZ = 0.3
YAW_RATE = 0.1
NOISE_STD = 0.01

# How long cancel waits for an emitter thread to wind down.
JOIN_TIMEOUT_S = 1.0


def _attitude(t: float) -> tuple[float, float, float]:
    roll = ROLL_AMPLITUDE * math.sin(2.0 * math.pi * ROLL_FREQ_HZ * t)
    pitch = PITCH_AMPLITUDE * math.sin(2.0 * math.pi * PITCH_FREQ_HZ * t)
    yaw = math.remainder(YAW_RATE * t, 2.0 * math.pi)
    return roll, pitch, yaw


def _rotation_rate(t: float) -> np.ndarray:
    droll = ROLL_AMPLITUDE * 2.0 * math.pi * ROLL_FREQ_HZ * math.cos(2.0 * math.pi * ROLL_FREQ_HZ * t)
    dpitch = PITCH_AMPLITUDE * 2.0 * math.pi * PITCH_FREQ_HZ * math.cos(2.0 * math.pi * PITCH_FREQ_HZ * t)
    return np.array([droll, dpitch, YAW_RATE], dtype=float)


def _gravity(roll: float, pitch: float) -> np.ndarray:
    # Unit vector in g, device frame.
    return np.array(
        [
            -math.sin(roll) * math.cos(pitch),
            math.sin(pitch),
            -math.cos(roll) * math.cos(pitch),
        ],
        dtype=float,
    )


def synthesize(kind: SensorKind, t: float, rng: np.random.Generator) -> Sample:
    """Build one synthetic sample of ``kind`` at time ``t`` seconds."""
    roll, pitch, yaw = _attitude(t)
    gravity = _gravity(roll, pitch)
    rotation = _rotation_rate(t)
    user_acc = rng.normal(0.0, NOISE_STD, 3)

    if kind is SensorKind.DEVICE_MOTION:
        return DeviceMotionSample(
            timestamp=t,
            roll=roll,
            pitch=pitch,
            yaw=yaw,
            rotation_rate=rotation,
            gravity=gravity,
            user_acceleration=user_acc,
        )
    if kind is SensorKind.ACCELEROMETER:
        x, y, z = gravity + user_acc + rng.normal(0.0, NOISE_STD, 3)
        return AccelerometerSample(timestamp=t, x=x, y=y, z=z)
    x, y, z = rotation + rng.normal(0.0, NOISE_STD, 3)
    return GyroSample(timestamp=t, x=x, y=y, z=z)


class SimulatedSource:
    """
    Emit synthetic samples for each subscribed kind on its own timer thread.

    Deliveries are posted to ``dispatch`` so handlers run serially on one
    thread. ``error_rate`` makes that fraction of deliveries carry a
    :class:`SensorError` instead of a sample.
    """

    def __init__(
        self,
        dispatch: DispatchQueue,
        kinds: Iterable[SensorKind] = ALL_KINDS,
        *,
        error_rate: float = 0.0,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if not 0.0 <= error_rate <= 1.0:
            raise ValueError(f"error_rate must be within [0, 1], got {error_rate}")
        self.dispatch = dispatch
        self.kinds = frozenset(SensorKind.parse(k) for k in kinds)
        self.error_rate = float(error_rate)
        self._rng = np.random.default_rng(seed)
        self._clock = clock
        self._t0 = clock()
        self._subscriptions: Dict[SensorKind, Subscription] = {}
        self._threads: Dict[Subscription, threading.Thread] = {}
        self._lock = threading.Lock()

    def is_available(self, kind: SensorKind) -> bool:
        return SensorKind.parse(kind) in self.kinds

    def is_active(self, kind: SensorKind) -> bool:
        with self._lock:
            sub = self._subscriptions.get(SensorKind.parse(kind))
        return sub is not None and sub.active

    def subscribe(self, kind: SensorKind, interval_s: float, handler: SampleHandler) -> Subscription:
        kind = SensorKind.parse(kind)
        if not self.is_available(kind):
            raise SensorUnavailableError(f"{kind.value} is not available")
        if interval_s <= 0:
            raise ValueError(f"interval_s must be positive, got {interval_s}")

        with self._lock:
            previous = self._subscriptions.pop(kind, None)
        if previous is not None:
            previous.cancel()

        sub = Subscription(kind, interval_s, on_cancel=self._forget)
        thread = threading.Thread(
            target=self._emit_loop,
            args=(sub, handler),
            name=f"SimulatedSource({kind.value})",
            daemon=True,
        )
        with self._lock:
            self._subscriptions[kind] = sub
            self._threads[sub] = thread
        thread.start()
        logger.debug("Simulated %s updates every %.3fs", kind.value, interval_s)
        return sub

    def _forget(self, sub: Subscription) -> None:
        with self._lock:
            if self._subscriptions.get(sub.kind) is sub:
                del self._subscriptions[sub.kind]
            thread = self._threads.pop(sub, None)
        if thread is not None and thread is not threading.current_thread():
            thread.join(JOIN_TIMEOUT_S)
            if thread.is_alive():
                logger.warning("%s did not stop within %.1fs", thread.name, JOIN_TIMEOUT_S)

    def _next_delivery(self, kind: SensorKind):
        t = self._clock() - self._t0
        with self._lock:
            failed = self.error_rate > 0.0 and self._rng.random() < self.error_rate
            if failed:
                return None, SensorError(f"simulated {kind.value} dropout at t={t:.3f}")
            return synthesize(kind, t, self._rng), None

    def _emit_loop(self, sub: Subscription, handler: SampleHandler) -> None:
        while not sub.stop_event.wait(sub.interval_s):
            sample, error = self._next_delivery(sub.kind)
            if not self.dispatch.submit(deliver, sub, handler, sample, error):
                break

    def stop_all(self) -> None:
        """Cancel every subscription and wait for its emitter thread."""
        with self._lock:
            subs = list(self._subscriptions.values())
        for sub in subs:
            sub.cancel()
