"""Helpers for constructing session log file names."""

from __future__ import annotations

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..sensors.motion import SensorKind

SESSION_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
LOG_SUFFIX = ".txt"

# Allow only alphanumerics, underscore, dot, and dash.
_KIND_NAME_RE = re.compile(r"[^A-Za-z0-9_.-]+")
_LOG_NAME_RE = re.compile(r"^(?P<ts>\d{14})_(?P<kind>[A-Za-z0-9_.-]+)\.txt$")


def sanitize_kind(kind: Union[str, SensorKind]) -> str:
    """
    Return the file-name token for ``kind``.

    Known kinds map to their canonical value; free text has disallowed
    characters replaced with '_' and falls back to 'sensor' when empty.
    """
    if isinstance(kind, SensorKind):
        return kind.value
    try:
        return SensorKind.parse(kind).value
    except ValueError:
        cleaned = _KIND_NAME_RE.sub("_", str(kind)).strip("_")
        return cleaned or "sensor"


def format_session_timestamp(started_at: datetime) -> str:
    """Return the 14-digit ``yyyyMMddHHmmss`` stamp used in file names."""
    return started_at.strftime(SESSION_TIMESTAMP_FORMAT)


def session_file_name(started_at: datetime, kind: Union[str, SensorKind]) -> str:
    """
    Name of the log file for one (session, sensor kind) pair.

    Example: "20160101000000_deviceMotion.txt"
    """
    return f"{format_session_timestamp(started_at)}_{sanitize_kind(kind)}{LOG_SUFFIX}"


def session_file_path(
    started_at: datetime,
    kind: Union[str, SensorKind],
    out_dir: Path,
) -> Path:
    return Path(out_dir) / session_file_name(started_at, kind)


def kind_from_path(path: Union[str, Path]) -> Optional[SensorKind]:
    """Return the sensor kind encoded in a log file name, if recognised."""
    match = _LOG_NAME_RE.match(Path(path).name)
    if match is None:
        return None
    try:
        return SensorKind.parse(match.group("kind"))
    except ValueError:
        return None


def session_timestamp_from_path(path: Union[str, Path]) -> Optional[datetime]:
    """Return the session start time encoded in a log file name."""
    match = _LOG_NAME_RE.match(Path(path).name)
    if match is None:
        return None
    try:
        return datetime.strptime(match.group("ts"), SESSION_TIMESTAMP_FORMAT)
    except ValueError:
        return None
