"""Prefix filtering of mention items."""

from __future__ import annotations

from typing import Sequence

from pi.mention.catalog import MentionRecord


def filter_items(
    items: Sequence[MentionRecord],
    term: str | None,
    disable_search: bool,
    max_items: int,
    label_key: str = "label",
) -> list[MentionRecord]:
    """Return the items to show for ``term``.

    With ``disable_search`` the items are assumed to be filtered already (for
    example by an async lookup) and are only truncated. Otherwise items whose
    label starts with ``term``, ignoring case, are kept in their sorted order.
    ``max_items <= 0`` means no limit.
    """
    if disable_search or not term:
        matches = list(items)
    else:
        needle = term.casefold()
        matches = [
            item for item in items if item.get(label_key, "").casefold().startswith(needle)
        ]

    if max_items > 0:
        matches = matches[:max_items]
    return matches
