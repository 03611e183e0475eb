#!/usr/bin/env python3

"""Run ovhctl from a fresh checkout without installing it.

The project is packaged under `src/ovhctl`; this wrapper puts `src` on
sys.path before importing the package.
"""

import sys
from pathlib import Path


sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from ovhctl.cli import main  # noqa: E402


if __name__ == "__main__":
    main()
