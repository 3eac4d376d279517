"""
Read-modify-write operations on the drink log document.

Each operation is a single linear sequence against the store; nothing is
kept between calls.
"""

from __future__ import annotations

import logging
from typing import Any

from drinklog.errors import ConflictError, ValidationError
from drinklog.records import Document, is_date_key
from drinklog.stats import DerivedStats, summarize
from drinklog.storage import DocumentStore

logger = logging.getLogger(__name__)


def _is_missing(value: Any) -> bool:
    # Empty objects and lists are valid payloads; other falsy values are not.
    if isinstance(value, (dict, list)):
        return False
    return not value


def _commit(store: DocumentStore, doc: Document, revision: str | None) -> None:
    result = store.write_if_match(doc, revision)
    if result.conflict:
        raise ConflictError(
            "Data file was modified by another writer; reload and try again"
        )


def load_document(store: DocumentStore) -> Document:
    return store.read()


def save_day(store: DocumentStore, date: Any, data: Any) -> str:
    """Replace the record for one date, leaving every other date untouched."""
    if _is_missing(date) or _is_missing(data):
        raise ValidationError("Missing required parameters: date and data")
    if not is_date_key(date):
        raise ValidationError("Invalid date format, expected YYYY-MM-DD")

    snapshot = store.snapshot()
    doc = snapshot.document
    doc[date] = data
    _commit(store, doc, snapshot.revision)
    logger.info("Saved records for %s", date)
    return date


def import_days(store: DocumentStore, data: Any) -> int:
    """
    Merge a date -> record mapping into the document.

    Imported dates replace existing records for the same date; dates not in
    the import are preserved.
    """
    if not isinstance(data, dict):
        raise ValidationError("Invalid data format, expected an object of dates")

    snapshot = store.snapshot()
    doc = snapshot.document
    doc.update(data)
    _commit(store, doc, snapshot.revision)
    logger.info("Imported %d days", len(data))
    return len(data)


def compute_stats(store: DocumentStore) -> DerivedStats:
    return summarize(store.read())
