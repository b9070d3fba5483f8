"""Tests for the MentionList popup."""

from __future__ import annotations

from pi.mention.search_list import MentionList
from pi.mention.surface import TextSurface


def _make_list(*labels: str, max_visible: int = 5) -> MentionList:
    popup = MentionList(max_visible=max_visible)
    popup.items = [{"label": label} for label in labels]
    popup.hidden = False
    return popup


class TestMentionListNavigation:
    """Next/previous wrap at both ends."""

    def test_starts_on_first_item(self) -> None:
        popup = _make_list("al", "amy", "bob")
        assert popup.active_item == {"label": "al"}

    def test_next_advances(self) -> None:
        popup = _make_list("al", "amy", "bob")
        popup.activate_next_item()
        assert popup.active_index == 1

    def test_next_wraps_to_first(self) -> None:
        popup = _make_list("al", "amy")
        popup.activate_next_item()
        popup.activate_next_item()
        assert popup.active_index == 0

    def test_previous_wraps_to_last(self) -> None:
        popup = _make_list("al", "amy", "bob")
        popup.activate_previous_item()
        assert popup.active_item == {"label": "bob"}

    def test_navigation_on_empty_list_is_a_no_op(self) -> None:
        popup = _make_list()
        popup.activate_next_item()
        popup.activate_previous_item()
        assert popup.active_item is None

    def test_shrinking_items_resets_active_index(self) -> None:
        popup = _make_list("al", "amy", "bob")
        popup.activate_previous_item()
        popup.items = [{"label": "al"}]
        assert popup.active_index == 0


class TestMentionListClick:
    def test_click_activates_and_notifies(self) -> None:
        popup = _make_list("al", "amy")
        clicks: list[int] = []
        popup.on_item_click = lambda: clicks.append(popup.active_index)
        popup.click_item(1)
        assert clicks == [1]

    def test_click_out_of_range_is_ignored(self) -> None:
        popup = _make_list("al")
        clicks: list[int] = []
        popup.on_item_click = lambda: clicks.append(1)
        popup.click_item(5)
        assert clicks == []


class TestMentionListRender:
    """Rendering marks the active item and scrolls long lists."""

    def test_hidden_renders_nothing(self) -> None:
        popup = _make_list("al")
        popup.hidden = True
        assert popup.render(40) == []

    def test_active_item_has_arrow(self) -> None:
        popup = _make_list("al", "amy")
        lines = popup.render(40)
        assert lines[0] == "→ al"
        assert lines[1] == "  amy"

    def test_label_key_is_used(self) -> None:
        popup = MentionList()
        popup.label_key = "name"
        popup.items = [{"name": "zed"}]
        popup.hidden = False
        assert popup.render(40) == ["→ zed"]

    def test_scroll_indicator_for_long_lists(self) -> None:
        popup = _make_list("a", "b", "c", max_visible=2)
        lines = popup.render(40)
        assert len(lines) == 3
        assert "(1/3)" in lines[-1]

    def test_scrolls_to_keep_active_visible(self) -> None:
        popup = _make_list("a", "b", "c", max_visible=2)
        popup.activate_previous_item()
        lines = popup.render(40)
        assert "→ c" in lines
        assert "  a" not in lines

    def test_reset_scroll_returns_to_top(self) -> None:
        popup = _make_list("a", "b", "c", max_visible=2)
        popup.activate_previous_item()
        popup.active_index = 0
        popup.reset_scroll()
        assert popup.render(40)[0] == "→ a"

    def test_description_column(self) -> None:
        popup = MentionList(description_key="role")
        popup.items = [{"label": "amy", "role": "admin"}]
        popup.hidden = False
        [line] = popup.render(80)
        assert line.startswith("→ amy")
        assert line.endswith("admin")

    def test_position_indents_to_caret(self) -> None:
        popup = _make_list("al")
        popup.position(TextSurface("hi @"))
        assert popup.render(40) == ["    → al"]
