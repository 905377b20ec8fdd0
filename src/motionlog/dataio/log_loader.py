"""Utilities for loading recorded motion logs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np

from ..sensors.motion import Sample, SensorKind, sample_from_fields
from .file_paths import kind_from_path

logger = logging.getLogger(__name__)


def parse_line(line: str) -> Optional[Dict[str, float]]:
    """
    Parse one ``name: value, name: value`` log line into a dict.

    Blank or malformed lines return ``None`` so callers can skip them.
    """
    text = line.strip()
    if not text:
        return None

    values: Dict[str, float] = {}
    for part in text.split(","):
        name, sep, raw = part.partition(":")
        name = name.strip()
        if not sep or not name:
            logger.warning("Malformed field %r in log line: %r", part, text)
            return None
        try:
            values[name] = float(raw)
        except ValueError:
            logger.warning("Bad value for %s in log line: %r", name, text)
            return None
    return values


def load_log(
    path: Union[str, Path],
    kind: Optional[Union[str, SensorKind]] = None,
) -> List[Sample]:
    """
    Read a log file back into samples.

    ``kind`` defaults to the one encoded in the file name. Lines that cannot
    be parsed are skipped with a warning.
    """
    path = Path(path)
    resolved = SensorKind.parse(kind) if kind is not None else kind_from_path(path)
    if resolved is None:
        raise ValueError(f"Cannot infer sensor kind from {path.name!r}; pass kind=")

    samples: List[Sample] = []
    with path.open("r", encoding="utf-8") as fh:
        for lineno, line in enumerate(fh, start=1):
            values = parse_line(line)
            if values is None:
                continue
            try:
                samples.append(sample_from_fields(resolved, values))
            except KeyError as exc:
                logger.warning("%s:%d skipped (%s)", path.name, lineno, exc)
    return samples


def load_array(
    path: Union[str, Path],
    kind: Optional[Union[str, SensorKind]] = None,
) -> np.ndarray:
    """Load a log as an ``(n, 4)`` array, timestamp in the first column."""
    samples = load_log(path, kind)
    if not samples:
        return np.empty((0, 4))
    return np.array([[value for _, value in s.fields()] for s in samples], dtype=float)

