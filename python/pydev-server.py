#!/usr/bin/env python3
"""Entry point for the pydev editor bridge."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from pydev_server import main  # noqa: E402


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
