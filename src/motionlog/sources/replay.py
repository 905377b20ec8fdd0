"""Replay previously recorded logs through the subscription interface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from ..dataio.log_loader import load_log
from ..dataio.file_paths import kind_from_path
from ..sensors.motion import Sample, SensorKind
from .base import SampleHandler, SensorUnavailableError, Subscription

logger = logging.getLogger(__name__)

# A replay item is either a sample or an error delivered in its place.
ReplayItem = Union[Sample, BaseException]


class ReplaySource:
    """
    Deliver stored items synchronously, in timestamp order, via :meth:`pump`.

    Nothing runs in the background, so the caller's thread is the single
    delivery context. The subscription interval is recorded but replay is
    not paced.
    """

    def __init__(self, items: Mapping[Union[str, SensorKind], Sequence[ReplayItem]]) -> None:
        self._items: Dict[SensorKind, List[ReplayItem]] = {
            SensorKind.parse(kind): list(seq) for kind, seq in items.items()
        }
        self._cursor: Dict[SensorKind, int] = {kind: 0 for kind in self._items}
        self._subscriptions: Dict[SensorKind, Tuple[Subscription, SampleHandler]] = {}

    @classmethod
    def from_files(cls, paths: Iterable[Union[str, Path]]) -> "ReplaySource":
        """Build a source from ``<stamp>_<kind>.txt`` log files."""
        items: Dict[SensorKind, List[ReplayItem]] = {}
        for path in paths:
            kind = kind_from_path(path)
            if kind is None:
                raise ValueError(f"Cannot infer sensor kind from {Path(path).name!r}")
            samples = load_log(path, kind)
            logger.info("Loaded %d %s samples from %s", len(samples), kind.value, path)
            items.setdefault(kind, []).extend(samples)
        return cls(items)

    def is_available(self, kind: SensorKind) -> bool:
        return SensorKind.parse(kind) in self._items

    def is_active(self, kind: SensorKind) -> bool:
        entry = self._subscriptions.get(SensorKind.parse(kind))
        return entry is not None and entry[0].active

    def subscribe(self, kind: SensorKind, interval_s: float, handler: SampleHandler) -> Subscription:
        kind = SensorKind.parse(kind)
        if not self.is_available(kind):
            raise SensorUnavailableError(f"No recorded {kind.value} data to replay")
        previous = self._subscriptions.pop(kind, None)
        if previous is not None:
            previous[0].cancel()
        sub = Subscription(kind, interval_s, on_cancel=self._forget)
        self._subscriptions[kind] = (sub, handler)
        return sub

    def _forget(self, sub: Subscription) -> None:
        entry = self._subscriptions.get(sub.kind)
        if entry is not None and entry[0] is sub:
            del self._subscriptions[sub.kind]

    def remaining(self, kind: SensorKind) -> int:
        kind = SensorKind.parse(kind)
        return len(self._items.get(kind, ())) - self._cursor.get(kind, 0)

    def _peek_time(self, kind: SensorKind) -> float:
        item = self._items[kind][self._cursor[kind]]
        if isinstance(item, BaseException):
            return float("-inf")
        return item.timestamp

    def pump(self, limit: Optional[int] = None) -> int:
        """
        Deliver up to ``limit`` pending items to the active subscriptions.

        Items of different kinds are interleaved by timestamp; an error item
        is delivered as soon as it is reached in its own stream. Returns the
        number of deliveries made.
        """
        delivered = 0
        while limit is None or delivered < limit:
            pending = [
                kind for kind in self._subscriptions
                if self._cursor[kind] < len(self._items[kind])
            ]
            if not pending:
                break
            kind = min(pending, key=self._peek_time)
            _, handler = self._subscriptions[kind]
            item = self._items[kind][self._cursor[kind]]
            self._cursor[kind] += 1
            if isinstance(item, BaseException):
                handler(None, item)
            else:
                handler(item, None)
            delivered += 1
        return delivered

    def rewind(self) -> None:
        for kind in self._cursor:
            self._cursor[kind] = 0
