"""Run the CLI from a checkout without installing it: `python -m main ...`.

The packages live under `src/`, which is not on `sys.path` until installed.
"""

from __future__ import annotations

import sys
from pathlib import Path


def main() -> None:
    src = str(Path(__file__).resolve().parent / "src")
    if src not in sys.path:
        sys.path.insert(0, src)

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
