"""Suggestion popup for mention sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol

from pi.mention.catalog import MentionRecord
from pi.mention.utils import truncate_to_width

if TYPE_CHECKING:
    from pi.mention.surface import Surface


class Popup(Protocol):
    """What the mention machine needs from a suggestion list."""

    items: list[MentionRecord]
    hidden: bool
    label_key: str
    active_index: int
    on_item_click: Callable[[], None] | None

    @property
    def active_item(self) -> MentionRecord | None: ...

    def position(self, surface: Surface, frame: Any = None) -> None: ...

    def activate_next_item(self) -> None: ...

    def activate_previous_item(self) -> None: ...

    def reset_scroll(self) -> None: ...


class MentionListTheme(Protocol):
    selected_text: Callable[[str], str]
    description: Callable[[str], str]
    scroll_info: Callable[[str], str]


class _PlainTheme:
    @staticmethod
    def selected_text(text: str) -> str:
        return text

    @staticmethod
    def description(text: str) -> str:
        return text

    @staticmethod
    def scroll_info(text: str) -> str:
        return text


class MentionList:
    """Terminal list of mention matches with wrap-around navigation."""

    def __init__(
        self,
        max_visible: int = 5,
        theme: MentionListTheme | None = None,
        description_key: str | None = None,
    ) -> None:
        self._items: list[MentionRecord] = []
        self._max_visible = max(1, max_visible)
        self._theme: MentionListTheme = theme or _PlainTheme()
        self._scroll_top = 0

        self.hidden: bool = True
        self.label_key: str = "label"
        self.description_key = description_key
        self.active_index: int = 0
        self.column: int = 0

        self.on_item_click: Callable[[], None] | None = None

    @property
    def items(self) -> list[MentionRecord]:
        return self._items

    @items.setter
    def items(self, items: list[MentionRecord]) -> None:
        self._items = items
        if self.active_index >= len(items):
            self.active_index = 0
        self._scroll_top = min(self._scroll_top, max(0, len(items) - self._max_visible))

    @property
    def active_item(self) -> MentionRecord | None:
        if 0 <= self.active_index < len(self._items):
            return self._items[self.active_index]
        return None

    def position(self, surface: Surface, frame: Any = None) -> None:
        self.column = surface.get_caret_position(frame)

    def activate_next_item(self) -> None:
        if not self._items:
            return
        self.active_index = (self.active_index + 1) % len(self._items)
        self._scroll_to_active()

    def activate_previous_item(self) -> None:
        if not self._items:
            return
        self.active_index = (self.active_index - 1) % len(self._items)
        self._scroll_to_active()

    def reset_scroll(self) -> None:
        self._scroll_top = 0

    def click_item(self, index: int) -> None:
        """Make ``index`` active and report the click to the owner."""
        if not 0 <= index < len(self._items):
            return
        self.active_index = index
        if self.on_item_click:
            self.on_item_click()

    def _scroll_to_active(self) -> None:
        if self.active_index < self._scroll_top:
            self._scroll_top = self.active_index
        elif self.active_index >= self._scroll_top + self._max_visible:
            self._scroll_top = self.active_index - self._max_visible + 1

    def render(self, width: int) -> list[str]:
        if self.hidden or not self._items:
            return []

        indent = " " * min(self.column, max(0, width - 20))
        avail = width - len(indent)
        end = min(self._scroll_top + self._max_visible, len(self._items))
        lines: list[str] = []

        for i in range(self._scroll_top, end):
            item = self._items[i]
            label = str(item.get(self.label_key, ""))
            description = item.get(self.description_key) if self.description_key else None

            text = truncate_to_width(label, avail - 2, "")
            if description and avail > 40:
                spacing = " " * max(1, 24 - len(text))
                remaining = avail - 2 - len(text) - len(spacing)
                if remaining > 10:
                    text += self._theme.description(
                        spacing + truncate_to_width(str(description), remaining, "")
                    )

            if i == self.active_index:
                lines.append(indent + self._theme.selected_text(f"→ {text}"))
            else:
                lines.append(f"{indent}  {text}")

        if self._scroll_top > 0 or end < len(self._items):
            info = f"  ({self.active_index + 1}/{len(self._items)})"
            lines.append(indent + self._theme.scroll_info(truncate_to_width(info, avail, "")))

        return lines
