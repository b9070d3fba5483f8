"""Candidate item normalization for a mention trigger."""

from __future__ import annotations

import logging
import unicodedata
from typing import Any, Iterable

logger = logging.getLogger(__name__)

MentionRecord = dict[str, Any]


class DataError(ValueError):
    """An item record lacks the label key it is filtered and sorted by."""


def label_sort_key(label: str) -> tuple[str, str]:
    """Locale-style ordering: accents and case only break ties."""
    folded = unicodedata.normalize("NFKD", label)
    folded = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return folded.casefold(), label


def coerce_item(item: Any, label_key: str) -> MentionRecord:
    """Lift a plain string into a record and check the label is present.

    Raises ``DataError`` for records whose label is missing or empty.
    """
    if isinstance(item, str):
        record: MentionRecord = {label_key: item}
    elif isinstance(item, dict):
        record = item
    else:
        raise DataError(f"Unsupported item type: {type(item).__name__}")

    label = record.get(label_key)
    if not label or not isinstance(label, str):
        raise DataError(f"Item has no '{label_key}' label: {record!r}")
    return record


class ItemCatalog:
    """The sorted, label-validated item list of one mention config."""

    def __init__(self, items: Iterable[Any], label_key: str) -> None:
        self.label_key = label_key
        self.items: list[MentionRecord] = normalize_items(items, label_key)

    def label_of(self, item: MentionRecord) -> str:
        return item[self.label_key]

    def __len__(self) -> int:
        return len(self.items)


def normalize_items(items: Iterable[Any], label_key: str) -> list[MentionRecord]:
    """Return records sorted by label, dropping any without one.

    Running it again on its own output returns an equal list.
    """
    records: list[MentionRecord] = []
    for item in items or []:
        try:
            records.append(coerce_item(item, label_key))
        except DataError as exc:
            logger.debug("Dropping mention item: %s", exc)

    records.sort(key=lambda record: label_sort_key(record[label_key]))
    return records
