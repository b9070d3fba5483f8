"""Key events, character resolution and terminal input translation.

The state machine works on browser-style key events (numeric key codes plus a
logical ``key`` string). Terminals deliver raw byte sequences instead, so
``key_event_from_terminal`` maps legacy and kitty-protocol sequences onto the
same ``KeyEvent`` shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Key codes
# ---------------------------------------------------------------------------

KEY_BACKSPACE = 8
KEY_TAB = 9
KEY_ENTER = 13
KEY_SHIFT = 16
KEY_ESCAPE = 27
KEY_SPACE = 32
KEY_END = 35
KEY_HOME = 36
KEY_LEFT = 37
KEY_UP = 38
KEY_RIGHT = 39
KEY_DOWN = 40
KEY_DELETE = 46
KEY_BUFFERED = 229

NAVIGATION_KEYS = frozenset({KEY_ENTER, KEY_TAB, KEY_DOWN, KEY_UP})


@dataclass
class KeyEvent:
    """A single keystroke as seen by the mention state machine."""

    key_code: int = 0
    key: str | None = None
    which: int = 0
    shift_key: bool = False
    meta_key: bool = False
    ctrl_key: bool = False
    alt_key: bool = False
    was_click: bool = False
    default_prevented: bool = False

    def prevent_default(self) -> None:
        # Clicks come from the popup, there is no native default to stop.
        if not self.was_click:
            self.default_prevented = True


def resolve_char(event: KeyEvent) -> str | None:
    """Return the character a key event stands for.

    Uses the logical ``key`` when the event carries one. Otherwise derives it
    from ``which``/``key_code``: unshifted ``A``-``Z`` codes are lowered,
    everything else is taken as the code point itself.
    """
    if event.key:
        return event.key

    char_code = event.which or event.key_code
    if not char_code:
        return None
    if not event.shift_key and 65 <= char_code <= 90:
        return chr(char_code + 32)
    return chr(char_code)


# ---------------------------------------------------------------------------
# Terminal translation
# ---------------------------------------------------------------------------

_LEGACY_SEQUENCES: dict[str, tuple[int, str]] = {
    "\x7f": (KEY_BACKSPACE, "Backspace"),
    "\x08": (KEY_BACKSPACE, "Backspace"),
    "\t": (KEY_TAB, "Tab"),
    "\r": (KEY_ENTER, "Enter"),
    "\n": (KEY_ENTER, "Enter"),
    "\x1b": (KEY_ESCAPE, "Escape"),
    "\x1b[A": (KEY_UP, "ArrowUp"),
    "\x1bOA": (KEY_UP, "ArrowUp"),
    "\x1b[B": (KEY_DOWN, "ArrowDown"),
    "\x1bOB": (KEY_DOWN, "ArrowDown"),
    "\x1b[C": (KEY_RIGHT, "ArrowRight"),
    "\x1bOC": (KEY_RIGHT, "ArrowRight"),
    "\x1b[D": (KEY_LEFT, "ArrowLeft"),
    "\x1bOD": (KEY_LEFT, "ArrowLeft"),
    "\x1b[H": (KEY_HOME, "Home"),
    "\x1bOH": (KEY_HOME, "Home"),
    "\x1b[1~": (KEY_HOME, "Home"),
    "\x1b[F": (KEY_END, "End"),
    "\x1bOF": (KEY_END, "End"),
    "\x1b[4~": (KEY_END, "End"),
    "\x1b[3~": (KEY_DELETE, "Delete"),
}

# Kitty functional code points for the keys the machine cares about
_KITTY_CODEPOINTS: dict[int, tuple[int, str]] = {
    127: (KEY_BACKSPACE, "Backspace"),
    9: (KEY_TAB, "Tab"),
    13: (KEY_ENTER, "Enter"),
    27: (KEY_ESCAPE, "Escape"),
    57441: (KEY_SHIFT, "Shift"),
    57447: (KEY_SHIFT, "Shift"),
}

_KITTY_CSI_U_RE = re.compile(r"^\x1b\[(\d+)(?::\d*)*(?:;(\d+)(?::\d+)?)?u$")
_MODIFIED_ARROW_RE = re.compile(r"^\x1b\[1;(\d+)([ABCD])$")

_ARROW_LETTERS: dict[str, tuple[int, str]] = {
    "A": (KEY_UP, "ArrowUp"),
    "B": (KEY_DOWN, "ArrowDown"),
    "C": (KEY_RIGHT, "ArrowRight"),
    "D": (KEY_LEFT, "ArrowLeft"),
}

_SHIFT = 1
_ALT = 2
_CTRL = 4
_META = 8


def _char_key_code(char: str) -> int:
    # Browsers report letters by their upper-case code
    if "a" <= char <= "z":
        return ord(char.upper())
    if char == " " or "0" <= char <= "9":
        return ord(char)
    # Punctuation codes depend on the keyboard layout
    return 0


def _with_modifiers(event: KeyEvent, modifier: int) -> KeyEvent:
    mod = max(modifier - 1, 0)
    event.shift_key = bool(mod & _SHIFT)
    event.alt_key = bool(mod & _ALT)
    event.ctrl_key = bool(mod & _CTRL)
    event.meta_key = bool(mod & _META)
    return event


def key_event_from_terminal(data: str) -> KeyEvent | None:
    """Translate one chunk of raw terminal input into a ``KeyEvent``.

    Returns ``None`` for empty input and for sequences that do not map to a
    single key (pastes, unknown escape sequences).
    """
    if not data:
        return None

    legacy = _LEGACY_SEQUENCES.get(data)
    if legacy is not None:
        code, name = legacy
        return KeyEvent(key_code=code, key=name, which=code)

    match = _KITTY_CSI_U_RE.match(data)
    if match:
        codepoint = int(match.group(1))
        modifier = int(match.group(2)) if match.group(2) else 1
        named = _KITTY_CODEPOINTS.get(codepoint)
        if named is not None:
            code, name = named
            return _with_modifiers(KeyEvent(key_code=code, key=name, which=code), modifier)
        char = chr(codepoint)
        event = _with_modifiers(KeyEvent(), modifier)
        if event.shift_key and char.isalpha():
            char = char.upper()
        event.key = char
        event.key_code = event.which = _char_key_code(char.lower())
        return event

    match = _MODIFIED_ARROW_RE.match(data)
    if match:
        code, name = _ARROW_LETTERS[match.group(2)]
        return _with_modifiers(
            KeyEvent(key_code=code, key=name, which=code), int(match.group(1))
        )

    # alt+char arrives as ESC prefix
    if len(data) == 2 and data[0] == "\x1b" and data[1].isprintable():
        char = data[1]
        return KeyEvent(
            key_code=_char_key_code(char.lower()),
            key=char,
            which=_char_key_code(char.lower()),
            alt_key=True,
            shift_key=char.isupper(),
        )

    if len(data) == 1:
        code = ord(data)
        # ctrl+a .. ctrl+z
        if 1 <= code <= 26:
            letter = chr(code + 96)
            return KeyEvent(
                key_code=ord(letter.upper()), key=letter, which=ord(letter.upper()), ctrl_key=True
            )
        if data.isprintable():
            return KeyEvent(
                key_code=_char_key_code(data.lower()),
                key=data,
                which=_char_key_code(data.lower()),
                shift_key=data.isupper(),
            )

    return None
