"""In-memory line buffer that is flushed to one log file on demand."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..tools.debug import time_block

logger = logging.getLogger(__name__)


class LoggerState(Enum):
    ACCUMULATING = "accumulating"
    SAVED = "saved"


class SampleLogger:
    """
    Accumulate formatted sample lines and persist them to ``path``.

    ``append`` only touches memory. ``save`` writes every buffered line,
    each terminated by a newline, overwriting the file, then releases the
    buffer. An empty buffer is never written, so a session that received no
    data leaves no file behind.

    Not thread-safe: ``append`` and ``save`` must run on the same thread
    (the recorder's dispatch queue).
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self._lines: List[str] = []
        self._state = LoggerState.ACCUMULATING
        self.last_error: Optional[OSError] = None

    def append(self, line: str) -> None:
        """
        Append one line to the buffer.

        Embedded ``\\r`` and ``\\n`` are written as the two-character escapes
        so every call stays exactly one line in the file.
        """
        if "\n" in line or "\r" in line:
            line = line.replace("\r", "\\r").replace("\n", "\\n")
        self._lines.append(line)
        self._state = LoggerState.ACCUMULATING

    def save(self) -> bool:
        """
        Write the buffer to disk.

        Returns True when a file was written. An empty buffer is a no-op and
        returns False. Write failures are logged, recorded in
        :attr:`last_error` and return False; the buffer is kept so the caller
        can retry.
        """
        if not self._lines:
            logger.debug("Nothing to save for %s", self.path.name)
            return False

        payload = "".join(f"{line}\n" for line in self._lines)
        try:
            with time_block(f"save {self.path.name}", log=logger):
                self.path.parent.mkdir(parents=True, exist_ok=True)
                with self.path.open("w", encoding="utf-8", newline="\n") as fh:
                    fh.write(payload)
        except OSError as exc:
            self.last_error = exc
            logger.error(
                "Failed to save %d lines to %s (%s)",
                len(self._lines),
                self.path,
                exc,
                exc_info=True,
            )
            return False

        logger.info("Saved %d lines to %s", len(self._lines), self.path)
        self.last_error = None
        self._lines = []
        self._state = LoggerState.SAVED
        return True

    @property
    def state(self) -> LoggerState:
        return self._state

    @property
    def lines(self) -> Tuple[str, ...]:
        """Snapshot of the buffered lines in arrival order."""
        return tuple(self._lines)

    def clear(self) -> None:
        """Drop buffered lines without writing them."""
        self._lines = []

    def __len__(self) -> int:
        return len(self._lines)

    def __repr__(self) -> str:
        return (
            f"SampleLogger(path={str(self.path)!r}, lines={len(self._lines)}, "
            f"state={self._state.value})"
        )
