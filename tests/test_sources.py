from __future__ import annotations

import threading
import time
from datetime import datetime

import numpy as np
import pytest

from motionlog.core.dispatch import DispatchQueue
from motionlog.core.recorder import MotionRecorder
from motionlog.sensors.motion import (
    AccelerometerSample,
    DeviceMotionSample,
    GyroSample,
    SensorKind,
)
from motionlog.sources.base import SensorUnavailableError, Subscription
from motionlog.sources.replay import ReplaySource
from motionlog.sources.simulated import SimulatedSource, synthesize


def _wait_for(predicate, timeout: float = 2.0) -> bool:
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def test_dispatch_queue_runs_jobs_in_order_on_one_thread() -> None:
    dispatch = DispatchQueue()
    seen = []
    threads = set()

    def job(i: int) -> None:
        seen.append(i)
        threads.add(threading.get_ident())

    for i in range(200):
        assert dispatch.submit(job, i)
    assert dispatch.drain(timeout=2.0)
    dispatch.close()

    assert seen == list(range(200))
    assert len(threads) == 1
    assert threading.get_ident() not in threads


def test_dispatch_queue_survives_failing_job() -> None:
    dispatch = DispatchQueue()
    seen = []

    def boom() -> None:
        raise RuntimeError("boom")

    dispatch.submit(boom)
    dispatch.submit(seen.append, "after")
    assert dispatch.drain(timeout=2.0)
    dispatch.close()

    assert seen == ["after"]
    assert dispatch.submit(seen.append, "late") is False


def test_subscription_cancel_is_idempotent() -> None:
    cancelled = []
    sub = Subscription(SensorKind.GYROSCOPE, 0.1, on_cancel=cancelled.append)

    assert sub.active
    sub.cancel()
    sub.cancel()

    assert not sub.active
    assert cancelled == [sub]


def test_synthesize_returns_plausible_samples() -> None:
    rng = np.random.default_rng(0)

    motion = synthesize(SensorKind.DEVICE_MOTION, 1.25, rng)
    acc = synthesize(SensorKind.ACCELEROMETER, 1.25, rng)
    gyr = synthesize(SensorKind.GYROSCOPE, 1.25, rng)

    assert isinstance(motion, DeviceMotionSample)
    assert isinstance(acc, AccelerometerSample)
    assert isinstance(gyr, GyroSample)
    assert np.linalg.norm(motion.gravity) == pytest.approx(1.0)
    assert np.linalg.norm(acc.as_vector()) == pytest.approx(1.0, abs=0.1)
    assert motion.timestamp == acc.timestamp == 1.25


def test_simulated_source_rejects_unavailable_kind() -> None:
    dispatch = DispatchQueue()
    source = SimulatedSource(dispatch, kinds=[SensorKind.GYROSCOPE])

    assert source.is_available(SensorKind.GYROSCOPE)
    assert not source.is_available(SensorKind.ACCELEROMETER)
    with pytest.raises(SensorUnavailableError):
        source.subscribe(SensorKind.ACCELEROMETER, 0.1, lambda s, e: None)
    with pytest.raises(ValueError):
        SimulatedSource(dispatch, error_rate=1.5)
    dispatch.close()


def test_simulated_source_delivers_on_dispatch_thread() -> None:
    dispatch = DispatchQueue()
    source = SimulatedSource(dispatch, kinds=[SensorKind.GYROSCOPE], seed=3)
    received = []
    threads = set()

    def handler(sample, error) -> None:
        received.append((sample, error))
        threads.add(threading.current_thread().name)

    sub = source.subscribe(SensorKind.GYROSCOPE, 0.01, handler)
    assert _wait_for(lambda: len(received) >= 5)
    sub.cancel()
    dispatch.drain(timeout=2.0)
    count = len(received)
    time.sleep(0.05)
    dispatch.drain(timeout=2.0)
    dispatch.close()

    assert len(received) == count
    assert threads == {"MotionLogDispatch"}
    assert all(isinstance(s, GyroSample) and e is None for s, e in received)
    assert not source.is_active(SensorKind.GYROSCOPE)


def test_resubscribing_replaces_previous_subscription() -> None:
    dispatch = DispatchQueue()
    source = SimulatedSource(dispatch, kinds=[SensorKind.ACCELEROMETER])

    first = source.subscribe(SensorKind.ACCELEROMETER, 0.05, lambda s, e: None)
    second = source.subscribe(SensorKind.ACCELEROMETER, 0.02, lambda s, e: None)

    assert not first.active
    assert second.active
    assert source.is_active(SensorKind.ACCELEROMETER)
    source.stop_all()
    assert not second.active
    dispatch.close()


def test_recorder_with_simulated_source_writes_every_delivered_line(tmp_path) -> None:
    dispatch = DispatchQueue()
    source = SimulatedSource(dispatch, seed=7)
    recorder = MotionRecorder(
        source,
        tmp_path,
        update_interval_s=0.01,
        dispatch=dispatch,
        clock=lambda: datetime(2016, 1, 1),
    )

    recorder.start()
    assert _wait_for(lambda: all(recorder.counts[k] >= 3 for k in recorder.kinds))
    results = recorder.stop()
    dispatch.close()

    assert results == {kind: True for kind in SensorKind}
    for kind in SensorKind:
        path = tmp_path / f"20160101000000_{kind.value}.txt"
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == recorder.counts[kind]
        assert all(line.startswith("timestamp: ") for line in lines)
        stamps = [float(line.split(",")[0].split(":")[1]) for line in lines]
        assert stamps == sorted(stamps)


def test_recorder_drops_every_failed_delivery(tmp_path) -> None:
    dispatch = DispatchQueue()
    source = SimulatedSource(dispatch, kinds=[SensorKind.GYROSCOPE], error_rate=1.0)
    recorder = MotionRecorder(source, tmp_path, update_interval_s=0.01, dispatch=dispatch)

    recorder.start()
    assert _wait_for(lambda: recorder.dropped.get(SensorKind.GYROSCOPE, 0) >= 3)
    results = recorder.stop()
    dispatch.close()

    assert results == {}
    assert recorder.counts[SensorKind.GYROSCOPE] == 0
    assert list(tmp_path.iterdir()) == []


def test_replay_source_interleaves_by_timestamp() -> None:
    source = ReplaySource(
        {
            "gyro": [GyroSample(timestamp=t, x=0, y=0, z=0) for t in (0.0, 0.2)],
            "accel": [AccelerometerSample(timestamp=t, x=0, y=0, z=0) for t in (0.1, 0.3)],
        }
    )
    order = []
    source.subscribe(SensorKind.GYROSCOPE, 0.1, lambda s, e: order.append(("g", s.timestamp)))
    source.subscribe(SensorKind.ACCELEROMETER, 0.1, lambda s, e: order.append(("a", s.timestamp)))

    assert source.pump() == 4
    assert order == [("g", 0.0), ("a", 0.1), ("g", 0.2), ("a", 0.3)]
    assert source.remaining(SensorKind.GYROSCOPE) == 0


def test_replay_source_from_files(tmp_path) -> None:
    path = tmp_path / "20160101000000_gyroscope.txt"
    path.write_text("timestamp: 0.0, x: 1.0, y: 2.0, z: 3.0\n", encoding="utf-8")

    source = ReplaySource.from_files([path])

    assert source.is_available(SensorKind.GYROSCOPE)
    assert not source.is_available(SensorKind.DEVICE_MOTION)
    with pytest.raises(SensorUnavailableError):
        source.subscribe(SensorKind.DEVICE_MOTION, 0.1, lambda s, e: None)
    with pytest.raises(ValueError):
        ReplaySource.from_files([tmp_path / "notes.txt"])


def test_cancel_and_stop_all_join_emitter_threads() -> None:
    dispatch = DispatchQueue()
    source = SimulatedSource(dispatch, kinds=[SensorKind.GYROSCOPE, SensorKind.ACCELEROMETER])

    gyro = source.subscribe(SensorKind.GYROSCOPE, 0.01, lambda s, e: None)
    gyro_thread = source._threads[gyro]
    first = source.subscribe(SensorKind.ACCELEROMETER, 0.01, lambda s, e: None)
    first_thread = source._threads[first]
    second = source.subscribe(SensorKind.ACCELEROMETER, 0.02, lambda s, e: None)
    second_thread = source._threads[second]

    # Re-subscribing waited for the replaced emitter.
    assert not first_thread.is_alive()
    assert second_thread.is_alive()

    gyro.cancel()
    assert not gyro_thread.is_alive()
    assert second_thread.is_alive()

    source.stop_all()
    assert not second_thread.is_alive()
    assert source._threads == {}
    dispatch.close()
