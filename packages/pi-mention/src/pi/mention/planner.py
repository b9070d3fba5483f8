"""Text splice computation for a committed mention."""

from __future__ import annotations

from dataclasses import dataclass

from pi.mention.catalog import MentionRecord
from pi.mention.config import MentionConfig


@dataclass(frozen=True)
class Splice:
    """Replace ``[start, end)`` of the surface text with ``text``."""

    start: int
    end: int
    text: str


def default_formatter(config: MentionConfig, item: MentionRecord) -> str:
    # Never appends a trailing space
    return (config.trigger_char or "") + config.label_of(item)


def format_selection(config: MentionConfig, item: MentionRecord) -> str:
    if config.select_formatter is not None:
        return config.select_formatter(item)
    return default_formatter(config, item)


def plan_insertion(
    start_pos: int,
    pos: int,
    item: MentionRecord,
    config: MentionConfig,
    has_frame: bool = False,
) -> Splice:
    """Compute the splice that inserts ``item`` for a session started at ``start_pos``.

    A session without a resolved start (the host committed a selection that
    was not preceded by a normal open) replaces the leading label-sized span.
    """
    if not has_frame and start_pos < 0:
        label = config.label_of(item)
        start_pos = 0
        pos = len(label) + 1 if label else 0

    return Splice(start=max(start_pos, 0), end=max(pos, 0), text=format_selection(config, item))


def apply_splice(text: str, splice: Splice) -> str:
    return text[: splice.start] + splice.text + text[splice.end :]
