"""Test package initialisation.

The project modules live one directory above this package. Append the
repository root to ``sys.path`` so ``import modules.bzr`` and friends resolve
when the tests are executed in isolation.
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))
