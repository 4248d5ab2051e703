"""Test package initialisation for Number Mask."""

from pathlib import Path
import sys

# Ensure the repository root is importable when tests run from an isolated
# working directory. The project ships top-level modules such as
# ``number_mask`` rather than a package, so the root must be on ``sys.path``.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
