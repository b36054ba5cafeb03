"""Whole-ledger export and import as a single JSON document."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from ..logging_config import get_logger
from .store import (
    LAST_PERIOD_KEY,
    RECORD_TYPES,
    SETTINGS_KEY,
    StoreState,
    TransactionStore,
    decode_value,
    encode_state,
)

logger = get_logger(__name__)

EXPORT_FORMAT_VERSION = 1


class DataImportError(ValueError):
    """Raised when an import document cannot be applied; the store is unchanged."""


def export_all(store: TransactionStore) -> str:
    """Serialize every collection, settings and the period key to JSON."""

    document = {
        "version": EXPORT_FORMAT_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        **encode_state(store.snapshot()),
    }
    return json.dumps(document, indent=2)


def parse_export(blob: str | bytes) -> StoreState:
    """Validate an export document without touching any store.

    Missing collections decode as empty; anything malformed raises.

    Raises:
        DataImportError: if the document or any record in it is invalid.
    """

    try:
        document = json.loads(blob)
    except (TypeError, ValueError) as exc:
        raise DataImportError(f"Import is not valid JSON: {exc}") from exc
    if not isinstance(document, dict):
        raise DataImportError("Import document must be a JSON object")

    version = document.get("version", EXPORT_FORMAT_VERSION)
    if version != EXPORT_FORMAT_VERSION:
        raise DataImportError(f"Unsupported export version: {version!r}")

    state = StoreState()
    for key in (*RECORD_TYPES, SETTINGS_KEY, LAST_PERIOD_KEY):
        if key not in document:
            continue
        try:
            setattr(state, key, decode_value(key, document[key]))
        except ValueError as exc:
            raise DataImportError(f"Invalid '{key}' in import: {exc}") from exc
    return state


def import_all(store: TransactionStore, blob: str | bytes) -> StoreState:
    """Replace all store contents with the exported document, all or nothing.

    Raises:
        DataImportError: on malformed input; the store is left untouched.
    """

    state = parse_export(blob)
    store.apply_state(state)
    store.persist()
    logger.info(
        "Imported ledger",
        extra={
            "expenses": len(state.expenses),
            "incomes": len(state.incomes),
            "saving_goals": len(state.saving_goals),
        },
    )
    return state


def export_to_file(store: TransactionStore, output_path: Path) -> Path:
    """Write ``export_all`` output to ``output_path`` and return it."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(export_all(store), encoding="utf-8")
    return output_path


def import_from_file(store: TransactionStore, source: Path) -> StoreState:
    """Read an export file and import it.

    Raises:
        FileNotFoundError: if ``source`` does not exist.
        DataImportError: on malformed content.
    """

    if not source.exists():
        raise FileNotFoundError(f"Import file not found: {source}")
    return import_all(store, source.read_text(encoding="utf-8"))
