"""Run the CLI from a source checkout, e.g. `python main.py version-manager list`.

The packages live under `src/`; an editable install (`pip install -e .`)
provides the `generator-cli` script instead.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

from cli.main import run  # noqa: E402

if __name__ == "__main__":
    # The version table uses box-drawing and checkbox glyphs.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
    run()
