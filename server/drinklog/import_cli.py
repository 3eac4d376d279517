"""
Merge a local JSON export of drink records into the remote data file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from drinklog.config import get_settings
from drinklog.dependencies import build_document_store
from drinklog.errors import DrinkLogError
from drinklog.records import is_date_key
from drinklog.services import import_days
from drinklog.stats import summarize
from drinklog.storage import DocumentStore

logger = logging.getLogger(__name__)


def load_export(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object of date -> records")
    # A saved /api/load response wraps the document in "data".
    if isinstance(data.get("data"), dict) and not any(map(is_date_key, data)):
        data = data["data"]
    return data


def main(argv: Optional[Sequence[str]] = None, store: Optional[DocumentStore] = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.strip())
    parser.add_argument("path", type=Path, help="JSON file to import")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate and summarize the file without writing",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")

    try:
        data = load_export(args.path)
    except (OSError, ValueError) as exc:
        logger.error("Could not read %s: %s", args.path, exc)
        return 1

    bad_keys = sorted(key for key in data if not is_date_key(key))
    if bad_keys:
        logger.warning("Keys that are not YYYY-MM-DD dates: %s", ", ".join(bad_keys))

    stats = summarize(data)
    print(
        f"{args.path}: {stats.totalDays} days, {len(stats.memberStats)} members, "
        f"{stats.wineStats.totalBeer:.2f} beer-equivalents"
    )
    if args.dry_run:
        return 0

    store = store or build_document_store(get_settings())
    try:
        count = import_days(store, data)
    except DrinkLogError as exc:
        logger.error("Import failed (%s): %s", exc.category, exc.message)
        return 1
    print(f"Imported {count} days of data")
    return 0


if __name__ == "__main__":
    sys.exit(main())
