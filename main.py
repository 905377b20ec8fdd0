"""Run ``motionlog`` from a source checkout: ``python main.py record ...``."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from motionlog.cli import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
