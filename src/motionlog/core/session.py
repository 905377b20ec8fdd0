"""One logging run: a start time, an output folder, and a logger per kind."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..dataio import file_paths
from ..sensors.motion import SensorKind
from .sample_logger import SampleLogger

logger = logging.getLogger(__name__)

KindLike = Union[str, SensorKind]


class Session:
    """
    Owns the :class:`SampleLogger` for each sensor kind seen in a run.

    Loggers are created lazily on the first ``logger_for`` call for a kind,
    and every file name is derived from ``started_at`` so two sessions that
    start in different seconds never share a file.
    """

    def __init__(self, started_at: datetime, out_dir: Union[str, Path]) -> None:
        self.started_at = started_at
        self.out_dir = Path(out_dir)
        self._loggers: Dict[SensorKind, SampleLogger] = {}

    @classmethod
    def start(
        cls,
        out_dir: Union[str, Path],
        clock: Callable[[], datetime] = datetime.now,
    ) -> "Session":
        session = cls(started_at=clock(), out_dir=out_dir)
        logger.info("Session %s started (out_dir=%s)", session.stamp, session.out_dir)
        return session

    @property
    def stamp(self) -> str:
        return file_paths.format_session_timestamp(self.started_at)

    def file_name(self, kind: KindLike) -> str:
        return file_paths.session_file_name(self.started_at, kind)

    def path_for(self, kind: KindLike) -> Path:
        return file_paths.session_file_path(self.started_at, kind, self.out_dir)

    def logger_for(self, kind: KindLike) -> SampleLogger:
        """Return the logger for ``kind``, creating it on first use."""
        kind = SensorKind.parse(kind)
        sample_logger = self._loggers.get(kind)
        if sample_logger is None:
            sample_logger = SampleLogger(self.path_for(kind))
            self._loggers[kind] = sample_logger
        return sample_logger

    def get_logger(self, kind: KindLike) -> Optional[SampleLogger]:
        """Return the logger for ``kind`` or ``None`` if none was created."""
        return self._loggers.get(SensorKind.parse(kind))

    @property
    def kinds(self) -> tuple:
        return tuple(self._loggers)

    def save(self, kind: KindLike) -> bool:
        sample_logger = self.get_logger(kind)
        if sample_logger is None:
            return False
        return sample_logger.save()

    def save_all(self) -> Dict[SensorKind, bool]:
        return {kind: sample_logger.save() for kind, sample_logger in self._loggers.items()}

    def unsaved(self) -> Dict[SensorKind, SampleLogger]:
        """Loggers still holding lines, e.g. after a failed save."""
        return {kind: sl for kind, sl in self._loggers.items() if len(sl)}

    def close(self) -> Dict[SensorKind, bool]:
        """
        Save every logger and release the ones that no longer hold data.

        A logger whose save failed keeps its lines and stays reachable
        through :meth:`get_logger` and :meth:`unsaved`, so calling ``close``
        again retries the write.
        """
        results = self.save_all()
        for kind in list(self._loggers):
            remaining = len(self._loggers[kind])
            if remaining:
                logger.warning(
                    "Session %s keeping %d unsaved %s lines for retry",
                    self.stamp,
                    remaining,
                    kind.value,
                )
            else:
                del self._loggers[kind]
        return results

    def __repr__(self) -> str:
        return f"Session(started_at={self.started_at.isoformat()}, out_dir={str(self.out_dir)!r})"
