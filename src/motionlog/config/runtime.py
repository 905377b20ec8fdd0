"""Runtime configuration for recording sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import yaml

from ..sensors.motion import ALL_KINDS, SensorKind
from .app_config import AppPaths

logger = logging.getLogger(__name__)

# Bounds of the update-interval slider, in seconds.
MIN_UPDATE_INTERVAL_S = 0.01
MAX_UPDATE_INTERVAL_S = 1.0


@dataclass(slots=True)
class MotionLogConfig:
    """
    Knobs for one recording run.

    The defaults record every sensor kind at 10 Hz into ``AppPaths().logs``.
    """

    update_interval_s: float = 0.1
    out_dir: Optional[str] = None
    kinds: Tuple[str, ...] = tuple(k.value for k in ALL_KINDS)
    simulated_error_rate: float = 0.0
    seed: Optional[int] = None

    @property
    def sensor_kinds(self) -> Tuple[SensorKind, ...]:
        return _parse_kinds(self.kinds)

    def resolved_out_dir(self) -> Path:
        if self.out_dir:
            return Path(self.out_dir).expanduser()
        return AppPaths().logs


def _interval(value: Any) -> float:
    interval = _number("update_interval_s", value)
    if interval <= 0:
        raise ValueError(f"update_interval_s must be positive, got {interval}")
    return min(MAX_UPDATE_INTERVAL_S, max(MIN_UPDATE_INTERVAL_S, interval))


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    try:
        return float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


def _error_rate(value: Any) -> float:
    return max(0.0, min(1.0, _number("simulated_error_rate", value)))


def _seed(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"seed must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"seed must be an integer, got {value!r}") from None


def _out_dir(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if not isinstance(value, (str, Path)):
        raise ValueError(f"out_dir must be a path, got {value!r}")
    return str(value)


def _parse_kinds(kinds: Any) -> Tuple[SensorKind, ...]:
    """Accept ``"gyro,accel"`` or a YAML list of kind names and aliases."""
    if isinstance(kinds, str):
        kinds = [k for k in kinds.split(",") if k.strip()]
    elif not isinstance(kinds, (list, tuple)):
        raise ValueError(f"kinds must be a list or comma-separated string, got {kinds!r}")
    parsed = []
    for kind in kinds:
        if not isinstance(kind, (str, SensorKind)):
            raise ValueError(f"Unknown sensor kind {kind!r}")
        resolved = SensorKind.parse(kind)
        if resolved not in parsed:
            parsed.append(resolved)
    if not parsed:
        raise ValueError("at least one sensor kind must be enabled")
    return tuple(parsed)


def _kind_names(value: Any) -> Tuple[str, ...]:
    return tuple(k.value for k in _parse_kinds(value))


# Key in the YAML file -> validator producing the MotionLogConfig value.
_FIELD_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "update_interval_s": _interval,
    "out_dir": _out_dir,
    "kinds": _kind_names,
    "simulated_error_rate": _error_rate,
    "seed": _seed,
}


def config_from_mapping(data: Mapping[str, Any] | None) -> MotionLogConfig:
    """
    Build a validated :class:`MotionLogConfig` from parsed YAML.

    Settings may sit at the top level or under a ``motionlog:`` block; the
    block wins when both name a key. Unknown keys are ignored, bad values
    raise ``ValueError`` naming the key.
    """
    if not data:
        return MotionLogConfig()
    settings: Dict[str, Any] = {k: v for k, v in data.items() if k != "motionlog"}
    block = data.get("motionlog")
    if isinstance(block, Mapping):
        settings.update(block)
    elif block is not None:
        raise ValueError(f"'motionlog' must be a mapping, got {type(block).__name__}")

    values = {}
    for key, value in settings.items():
        parse = _FIELD_PARSERS.get(key)
        if parse is None:
            logger.debug("Ignoring unknown config key %r", key)
            continue
        values[key] = parse(value)
    return MotionLogConfig(**values)


def load_config(path: str | Path | None) -> MotionLogConfig:
    """
    Read a recording config from a YAML file.

    No path, or a path that does not exist, gives the defaults.
    """
    if path is None:
        return MotionLogConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        logger.info("Config %s not found; using defaults", cfg_path)
        return MotionLogConfig()
    with cfg_path.open("r", encoding="utf-8") as fh:
        try:
            raw = yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Cannot parse {cfg_path}: {exc}") from exc
    if not isinstance(raw, Mapping):
        raise ValueError(f"Expected mapping in {cfg_path}, got {type(raw).__name__}")
    return config_from_mapping(raw)


__all__ = ["MotionLogConfig", "config_from_mapping", "load_config"]
