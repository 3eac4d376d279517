"""
Merge a local JSON export into the remote drink log.

    python scripts/import_records.py export.json [--dry-run]
"""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from drinklog.import_cli import main


if __name__ == "__main__":
    raise SystemExit(main())
