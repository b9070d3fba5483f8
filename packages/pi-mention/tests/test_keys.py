"""Tests for key events, character resolution and terminal translation."""

from __future__ import annotations

from pi.mention.keys import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_HOME,
    KEY_LEFT,
    KEY_TAB,
    KEY_UP,
    KeyEvent,
    key_event_from_terminal,
    resolve_char,
)


class TestResolveChar:
    """The logical key wins; otherwise the character code is decoded."""

    def test_uses_logical_key(self) -> None:
        assert resolve_char(KeyEvent(key_code=50, key="@")) == "@"

    def test_unshifted_letter_code_is_lowered(self) -> None:
        assert resolve_char(KeyEvent(key_code=65)) == "a"

    def test_shifted_letter_code_stays_upper(self) -> None:
        assert resolve_char(KeyEvent(key_code=65, shift_key=True)) == "A"

    def test_which_takes_precedence_over_key_code(self) -> None:
        assert resolve_char(KeyEvent(key_code=0, which=66)) == "b"

    def test_non_letter_code_is_taken_verbatim(self) -> None:
        assert resolve_char(KeyEvent(key_code=64)) == "@"
        assert resolve_char(KeyEvent(key_code=97)) == "a"

    def test_lower_case_code_is_not_changed(self) -> None:
        assert resolve_char(KeyEvent(key_code=ord("z"), shift_key=True)) == "z"

    def test_no_code_resolves_to_none(self) -> None:
        assert resolve_char(KeyEvent()) is None


class TestPreventDefault:
    def test_marks_event(self) -> None:
        event = KeyEvent(key_code=KEY_ENTER)
        event.prevent_default()
        assert event.default_prevented

    def test_click_events_are_left_alone(self) -> None:
        event = KeyEvent(key_code=KEY_ENTER, was_click=True)
        event.prevent_default()
        assert not event.default_prevented


class TestTerminalTranslation:
    """Raw terminal input maps onto browser-style key events."""

    def test_printable_char(self) -> None:
        event = key_event_from_terminal("a")
        assert event is not None
        assert (event.key, event.key_code, event.shift_key) == ("a", 65, False)

    def test_upper_case_char_sets_shift(self) -> None:
        event = key_event_from_terminal("A")
        assert event is not None
        assert (event.key, event.key_code, event.shift_key) == ("A", 65, True)

    def test_symbol_char(self) -> None:
        event = key_event_from_terminal("@")
        assert event is not None
        assert resolve_char(event) == "@"

    def test_space(self) -> None:
        event = key_event_from_terminal(" ")
        assert event is not None
        assert resolve_char(event) == " "

    def test_named_keys(self) -> None:
        expected = {
            "\x7f": KEY_BACKSPACE,
            "\t": KEY_TAB,
            "\r": KEY_ENTER,
            "\x1b": KEY_ESCAPE,
            "\x1b[A": KEY_UP,
            "\x1b[B": KEY_DOWN,
            "\x1bOD": KEY_LEFT,
            "\x1b[H": KEY_HOME,
        }
        for data, code in expected.items():
            event = key_event_from_terminal(data)
            assert event is not None, repr(data)
            assert event.key_code == code, repr(data)

    def test_ctrl_letter(self) -> None:
        event = key_event_from_terminal("\x01")
        assert event is not None
        assert event.ctrl_key
        assert event.key == "a"

    def test_alt_prefix(self) -> None:
        event = key_event_from_terminal("\x1bb")
        assert event is not None
        assert event.alt_key
        assert event.key == "b"

    def test_kitty_char_with_ctrl(self) -> None:
        event = key_event_from_terminal("\x1b[97;5u")
        assert event is not None
        assert event.ctrl_key
        assert not event.shift_key
        assert event.key == "a"

    def test_kitty_named_key(self) -> None:
        event = key_event_from_terminal("\x1b[13u")
        assert event is not None
        assert event.key_code == KEY_ENTER

    def test_kitty_shifted_letter(self) -> None:
        event = key_event_from_terminal("\x1b[97;2u")
        assert event is not None
        assert event.shift_key
        assert event.key == "A"

    def test_modified_arrow(self) -> None:
        event = key_event_from_terminal("\x1b[1;2A")
        assert event is not None
        assert event.key_code == KEY_UP
        assert event.shift_key

    def test_empty_and_multi_char_input(self) -> None:
        assert key_event_from_terminal("") is None
        assert key_event_from_terminal("hello") is None

    def test_punctuation_does_not_collide_with_named_keys(self) -> None:
        for char in "#$%&'(.":
            event = key_event_from_terminal(char)
            assert event is not None
            assert event.key_code == 0, char
            assert resolve_char(event) == char
