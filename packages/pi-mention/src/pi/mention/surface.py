"""Editable text surfaces the mention machine can drive."""

from __future__ import annotations

from typing import Any, Callable, Protocol

from pi.mention.keys import (
    KEY_BACKSPACE,
    KEY_BUFFERED,
    KEY_DELETE,
    KEY_END,
    KEY_HOME,
    KEY_LEFT,
    KEY_RIGHT,
    KeyEvent,
    key_event_from_terminal,
)
from pi.mention.utils import (
    first_grapheme_length,
    last_grapheme_length,
    truncate_to_width,
    visible_width,
)


class Surface(Protocol):
    """Caret measurement and text splicing on an editable surface.

    ``frame`` is an opaque frame context for surfaces nested in another
    document; simple surfaces ignore it.
    """

    def get_value(self) -> str: ...

    def get_caret_position(self, frame: Any = None) -> int: ...

    def set_caret_position(self, anchor: Any, offset: int, frame: Any = None) -> None: ...

    def get_anchor(self, frame: Any = None) -> Any: ...

    def anchor_length(self, anchor: Any) -> int: ...

    def insert_value(self, start: int, end: int, text: str, frame: Any = None) -> None: ...

    def focus(self) -> None: ...

    def dispatch_input_event(self) -> None: ...


class TextSurface:
    """Single-line in-memory text surface fed with raw terminal input.

    Key events go to ``key_listener`` before any default editing happens,
    the way a keydown handler sees the text before the browser changes it.
    When the listener returns ``True`` the default is skipped.
    """

    def __init__(self, value: str = "") -> None:
        self._value = value
        self._cursor = len(value)
        self.focused: bool = False

        self.key_listener: Callable[[KeyEvent], bool] | None = None
        self.text_listener: Callable[[str], None] | None = None
        self.blur_listener: Callable[[], None] | None = None
        self.on_change: Callable[[str], None] | None = None

    # -- Surface protocol ----------------------------------------------------

    def get_value(self) -> str:
        return self._value

    def get_caret_position(self, frame: Any = None) -> int:
        return self._cursor

    def set_caret_position(self, anchor: Any, offset: int, frame: Any = None) -> None:
        self._cursor = max(0, min(offset, len(self._value)))

    def get_anchor(self, frame: Any = None) -> Any:
        return self

    def anchor_length(self, anchor: Any) -> int:
        return len(self._value)

    def insert_value(self, start: int, end: int, text: str, frame: Any = None) -> None:
        start = max(0, min(start, len(self._value)))
        end = max(start, min(end, len(self._value)))
        self._value = self._value[:start] + text + self._value[end:]
        self._cursor = start + len(text)

    def focus(self) -> None:
        self.focused = True

    def dispatch_input_event(self) -> None:
        if self.on_change:
            self.on_change(self._value)

    # -- Input ---------------------------------------------------------------

    def set_value(self, value: str) -> None:
        self._value = value
        self._cursor = min(self._cursor, len(value))

    def blur(self) -> None:
        self.focused = False
        if self.blur_listener:
            self.blur_listener()

    def handle_input(self, data: str) -> None:
        event = key_event_from_terminal(data)
        if event is None:
            # Pastes and other multi-character chunks bypass key handling
            if data.isprintable():
                self._insert(data)
            return

        if self.key_listener and self.key_listener(event):
            return
        if event.default_prevented:
            return
        self._apply_default(event)

    def compose(self, text: str) -> None:
        """Deliver IME-composed text: a buffered keydown, then the text."""
        if not text:
            return
        event = KeyEvent(key_code=KEY_BUFFERED, key="Process", which=KEY_BUFFERED)
        if self.key_listener:
            self.key_listener(event)
        if self.text_listener:
            self.text_listener(text)
        self._insert(text)

    def _apply_default(self, event: KeyEvent) -> None:
        code = event.key_code
        if code == KEY_BACKSPACE:
            if self._cursor > 0:
                size = last_grapheme_length(self._value[: self._cursor])
                self._value = self._value[: self._cursor - size] + self._value[self._cursor :]
                self._cursor -= size
                self.dispatch_input_event()
        elif code == KEY_DELETE:
            if self._cursor < len(self._value):
                size = first_grapheme_length(self._value[self._cursor :])
                self._value = self._value[: self._cursor] + self._value[self._cursor + size :]
                self.dispatch_input_event()
        elif code == KEY_LEFT:
            if self._cursor > 0:
                self._cursor -= last_grapheme_length(self._value[: self._cursor])
        elif code == KEY_RIGHT:
            if self._cursor < len(self._value):
                self._cursor += first_grapheme_length(self._value[self._cursor :])
        elif code == KEY_HOME:
            self._cursor = 0
        elif code == KEY_END:
            self._cursor = len(self._value)
        elif (
            event.key is not None
            and len(event.key) == 1
            and event.key.isprintable()
            and not (event.ctrl_key or event.meta_key or event.alt_key)
        ):
            self._insert(event.key)

    def _insert(self, text: str) -> None:
        self._value = self._value[: self._cursor] + text + self._value[self._cursor :]
        self._cursor += len(text)
        self.dispatch_input_event()

    def render(self, width: int, prompt: str = "> ") -> list[str]:
        """Draw the value with a reverse-video cursor cell."""
        before = self._value[: self._cursor]
        after = self._value[self._cursor :]
        if after:
            size = first_grapheme_length(after)
            cursor_char, after = after[:size], after[size:]
        else:
            cursor_char = " "

        # Scroll horizontally so the cursor cell stays visible
        available = max(0, width - visible_width(prompt) - 1)
        while before and visible_width(before) > available:
            before = before[first_grapheme_length(before) :]
        after = truncate_to_width(after, available - visible_width(before), "")
        return [f"{prompt}{before}\x1b[7m{cursor_char}\x1b[27m{after}"]
