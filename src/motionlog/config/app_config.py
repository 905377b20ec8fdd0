"""Default application paths."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class AppPaths:
    """
    Commonly used paths for the recorder.

    ``MOTIONLOG_DATA_ROOT`` overrides the default ``data`` folder under the
    current working directory so installs can store logs elsewhere.
    """

    base: Path = field(default_factory=Path.cwd)
    data_root: Path = field(init=False)
    logs: Path = field(init=False)

    def __post_init__(self) -> None:
        env_data_root = os.environ.get("MOTIONLOG_DATA_ROOT")
        if env_data_root:
            self.data_root = Path(env_data_root).expanduser()
        else:
            self.data_root = Path(self.base) / "data"
        self.logs = self.data_root / "logs"

    def ensure(self) -> None:
        """Create directories if they do not yet exist."""
        for path in (self.data_root, self.logs):
            path.mkdir(parents=True, exist_ok=True)
