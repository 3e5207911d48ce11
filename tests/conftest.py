from __future__ import annotations

import sys
from pathlib import Path

# Make the src/ layout importable without an editable install.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))
