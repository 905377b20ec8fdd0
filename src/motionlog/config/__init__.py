"""Configuration objects and helpers for motionlog.

This package knows how to load a YAML file describing how a recording runs
(update interval, output folder, sensor kinds). The resulting
:class:`MotionLogConfig` is consumed by the CLI to build the recorder.
"""

from .app_config import AppPaths
from .runtime import MotionLogConfig, config_from_mapping, load_config

__all__ = ["AppPaths", "MotionLogConfig", "config_from_mapping", "load_config"]
