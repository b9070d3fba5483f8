"""Trigger detection and selection state machine.

One ``TriggerSessionMachine`` serves one editable surface. It sees every key
event before the surface applies it, decides whether a mention session opens,
continues or ends, keeps the popup of the owning trigger in sync, and splices
the chosen item into the text on commit.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from pi.mention.catalog import MentionRecord
from pi.mention.config import MentionConfig, MentionDefaults, normalize_configs
from pi.mention.keys import (
    KEY_BACKSPACE,
    KEY_BUFFERED,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_SHIFT,
    KEY_TAB,
    KEY_UP,
    NAVIGATION_KEYS,
    KeyEvent,
    key_event_from_terminal,
    resolve_char,
)
from pi.mention.planner import plan_insertion
from pi.mention.search import filter_items
from pi.mention.search_list import MentionList, Popup
from pi.mention.surface import Surface
from pi.mention.utils import last_grapheme_length

logger = logging.getLogger(__name__)

# A space only opens a trigger right after one of these
CONTINUATION_CHARS = (",", "+")
# Backspacing to one of these reopens the fallback list
FALLBACK_REOPEN_CHARS = (" ", ",")

PopupFactory = Callable[[MentionConfig], Popup]


@dataclass
class Session:
    """The active mention search.

    ``start_pos`` is where the trigger was typed, or ``-1`` when the host
    opened the fallback list without a keystroke.
    """

    config: MentionConfig
    start_pos: int
    start_anchor: Any = None
    search_string: str | None = None
    stopped: bool = False


def _is_printable(char: str | None) -> bool:
    return char is not None and len(char) == 1 and char.isprintable()


def _default_popup_factory(config: MentionConfig) -> Popup:
    return MentionList()


class TriggerSessionMachine:
    """Mention session state for one surface.

    Callbacks:
        on_search_term: the search term changed.
        on_select: an item was committed into the text.
        on_trigger_char: a trigger's popup was shown (``""`` for fallback).
    """

    def __init__(
        self,
        surface: Surface,
        configs: Sequence[MentionConfig | dict[str, Any]] = (),
        *,
        empty_trigger: bool = False,
        popup_factory: PopupFactory | None = None,
        defaults: MentionDefaults | None = None,
        frame: Any = None,
    ) -> None:
        self.surface = surface
        self.empty_trigger = empty_trigger
        self.configs: list[MentionConfig] = []

        self._popup_factory = popup_factory or _default_popup_factory
        self._defaults = defaults
        self._frame = frame
        self._raw_configs: Sequence[MentionConfig | dict[str, Any]] | None = None
        self._popups: dict[str, Popup] = {}
        self._session: Session | None = None
        self._last_key_code: int | None = None

        self.on_search_term: Callable[[str], None] | None = None
        self.on_select: Callable[[MentionRecord], None] | None = None
        self.on_trigger_char: Callable[[str], None] | None = None

        self.set_configs(configs)

    # -- Host API ------------------------------------------------------------

    @property
    def session(self) -> Session | None:
        return self._session

    def set_configs(self, configs: Sequence[MentionConfig | dict[str, Any]]) -> None:
        """Normalize ``configs`` unless this exact list is already in use.

        Raises ``ConfigError`` for duplicate triggers.
        """
        if configs is self._raw_configs:
            return
        self.configs = normalize_configs(configs, self._defaults)
        self._raw_configs = configs
        self._session = None

        by_trigger = {config.trigger_char or "": config for config in self.configs}
        for trigger in list(self._popups):
            popup = self._popups[trigger]
            popup.hidden = True
            config = by_trigger.get(trigger)
            if config is None:
                popup.on_item_click = None
                del self._popups[trigger]
            else:
                popup.label_key = config.label_key or "label"

    def set_frame(self, frame: Any) -> None:
        self._frame = frame

    def popup_for(self, config: MentionConfig) -> Popup | None:
        return self._popups.get(config.trigger_char or "")

    def bind(self) -> None:
        """Subscribe to the listener hooks of a ``TextSurface``."""
        self.surface.key_listener = self.handle_key  # type: ignore[attr-defined]
        self.surface.text_listener = self.handle_text_input  # type: ignore[attr-defined]
        self.surface.blur_listener = self.handle_blur  # type: ignore[attr-defined]

    def open_fallback(self) -> bool:
        """Show the fallback list without a keystroke."""
        fallback = self._config_for_char("")
        if not self.empty_trigger or fallback is None:
            return False
        self._session = Session(
            config=fallback, start_pos=-1, start_anchor=self.surface.get_anchor(self._frame)
        )
        self._present(fallback)
        return True

    def close(self) -> None:
        """Hide and drop every popup and forget the session."""
        for popup in self._popups.values():
            popup.hidden = True
            popup.on_item_click = None
        self._popups.clear()
        self._session = None

    # -- Event entry points --------------------------------------------------

    def handle_key(self, event: KeyEvent) -> bool:
        """Process one keydown. Returns ``True`` when the key was consumed."""
        try:
            return self._transition(event)
        except Exception:
            logger.exception("Mention key handling failed (key code %s)", event.key_code)
            return False

    def handle_text_input(self, data: str) -> None:
        """Replay composed text as a keystroke after a buffered keydown."""
        if self._last_key_code != KEY_BUFFERED or not data:
            return
        event = key_event_from_terminal(data[0])
        if event is not None:
            self.handle_key(event)

    def handle_blur(self) -> None:
        if self._session is not None:
            self._session.stopped = True
        for popup in self._popups.values():
            popup.hidden = True

    # -- Transitions ---------------------------------------------------------

    def _transition(self, event: KeyEvent) -> bool:
        code = event.key_code
        self._last_key_code = code
        if code == KEY_BUFFERED:
            # The text input that follows carries the real character
            return False

        val = self.surface.get_value()
        pos = self.surface.get_caret_position(self._frame)
        char = resolve_char(event)
        session = self._session

        if (
            session is not None
            and (code == KEY_TAB or (code == KEY_ENTER and event.was_click))
            and pos < session.start_pos
        ):
            # A popup click moved focus away; put the caret back first
            pos = self.surface.anchor_length(session.start_anchor)
            self.surface.set_caret_position(session.start_anchor, pos, self._frame)

        config = self._config_for_char(char)
        if (
            config is None
            and _is_printable(char)
            and char != " "
            and self.empty_trigger
            and not val
            and code not in NAVIGATION_KEYS
            and not event.was_click
            and not (event.ctrl_key or event.meta_key or event.alt_key)
        ):
            config = self._config_for_char("")

        if config is not None and (char != " " or val.endswith(CONTINUATION_CHARS)):
            seed = char if config.is_fallback and not val else None
            self._open(config, pos, seed)
            return False

        if session is None or session.stopped:
            return False
        config = session.config
        popup = self.popup_for(config)
        if popup is None:
            return False

        if pos <= session.start_pos and not self.empty_trigger:
            popup.hidden = True
            return False

        if code == KEY_SHIFT or event.meta_key or event.alt_key or event.ctrl_key:
            return False
        if not (pos > session.start_pos or self.empty_trigger):
            return False

        if code == KEY_BACKSPACE and pos > 0:
            # The surface deletes a whole grapheme
            pos -= last_grapheme_length(val[:pos])
            if pos == 0:
                session.stopped = True
            popup.hidden = session.stopped
            if session.stopped:
                logger.debug("Mention search for %r reached start of text", config.trigger_char)
                if self.empty_trigger and val.endswith(FALLBACK_REOPEN_CHARS):
                    self._reopen_fallback(pos)
                return False
        elif not popup.hidden:
            if code in (KEY_TAB, KEY_ENTER):
                return self._commit(session, event, pos)
            if code == KEY_ESCAPE:
                event.prevent_default()
                popup.hidden = True
                session.stopped = True
                logger.debug("Mention search for %r cancelled", config.trigger_char)
                return True
            if code == KEY_DOWN:
                event.prevent_default()
                popup.activate_next_item()
                return True
            if code == KEY_UP:
                event.prevent_default()
                popup.activate_previous_item()
                return True

        if code in (KEY_LEFT, KEY_RIGHT):
            event.prevent_default()
            return True

        if code != KEY_BACKSPACE and not _is_printable(char):
            return False

        begin = max(session.start_pos, 0) + len(config.trigger_char or "")
        mention = val[begin:pos]
        if code != KEY_BACKSPACE:
            mention += char or ""
        session.search_string = mention
        if self.on_search_term:
            self.on_search_term(mention)

        if (
            code == KEY_BACKSPACE
            and self.empty_trigger
            and (pos == 0 or mention == "")
            and val.endswith(FALLBACK_REOPEN_CHARS)
        ):
            self._reopen_fallback(pos)
            return False

        self._present(config)
        return False

    def _open(self, config: MentionConfig, pos: int, seed: str | None) -> None:
        self._session = Session(
            config=config,
            start_pos=pos,
            start_anchor=self.surface.get_anchor(self._frame),
            search_string=seed,
        )
        logger.debug("Mention search opened for %r at %d", config.trigger_char, pos)
        self._present(config)

    def _reopen_fallback(self, pos: int) -> None:
        fallback = self._config_for_char("")
        if fallback is None:
            return
        self._session = Session(
            config=fallback, start_pos=pos, start_anchor=self.surface.get_anchor(self._frame)
        )
        self._present(fallback)

    def _commit(self, session: Session, event: KeyEvent, pos: int) -> bool:
        config = session.config
        popup = self.popup_for(config)
        event.prevent_default()

        item = popup.active_item if popup is not None else None
        if popup is not None:
            popup.hidden = True
        if item is None:
            self._session = None
            return True

        splice = plan_insertion(
            session.start_pos, pos, item, config, has_frame=self._frame is not None
        )
        self.surface.insert_value(splice.start, splice.end, splice.text, self._frame)
        logger.debug("Mention %r inserted at [%d, %d)", splice.text, splice.start, splice.end)

        if self.on_select:
            self.on_select(item)
        self.surface.dispatch_input_event()
        self._session = None
        return True

    # -- Popup management ----------------------------------------------------

    def _config_for_char(self, char: str | None) -> MentionConfig | None:
        if char is None:
            return None
        for config in self.configs:
            if config.trigger_char == char:
                return config
        return None

    def _present(self, config: MentionConfig) -> None:
        self._show_search_list(config)
        self._update_search_list(config)

    def _show_search_list(self, config: MentionConfig) -> None:
        for popup in self._popups.values():
            popup.hidden = True

        key = config.trigger_char or ""
        popup = self._popups.get(key)
        if popup is None:
            popup = self._popup_factory(config)
            popup.label_key = config.label_key or "label"
            popup.position(self.surface, self._frame)
            popup.on_item_click = self._handle_item_click
            self._popups[key] = popup
        else:
            popup.active_index = 0
            popup.label_key = config.label_key or "label"
            popup.position(self.surface, self._frame)
            self._defer(popup.reset_scroll)

        if self.on_trigger_char:
            self.on_trigger_char(key)

    def _update_search_list(self, config: MentionConfig) -> None:
        term = self._session.search_string if self._session is not None else None
        matches = filter_items(
            config.items,
            term,
            bool(config.disable_search),
            config.max_items or 0,
            config.label_key or "label",
        )
        popup = self._popups[config.trigger_char or ""]
        popup.items = matches
        popup.hidden = not matches

    def _handle_item_click(self) -> None:
        self.surface.focus()
        self.handle_key(KeyEvent(key_code=KEY_ENTER, was_click=True))

    @staticmethod
    def _defer(callback: Callable[[], None]) -> None:
        """Run ``callback`` on the next loop tick, or now without a running loop."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback()
            return
        loop.call_soon(callback)
