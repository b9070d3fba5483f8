"""Tests for insertion planning."""

from __future__ import annotations

from pi.mention.config import MentionConfig, normalize_configs
from pi.mention.planner import Splice, apply_splice, plan_insertion


def _config(**fields: object) -> MentionConfig:
    [config] = normalize_configs([fields])
    return config


class TestPlanInsertion:
    """The splice replaces [start_pos, pos) with the formatted item."""

    def test_default_formatter_prefixes_trigger(self) -> None:
        config = _config(items=["al"])
        splice = plan_insertion(0, 2, {"label": "al"}, config)
        assert splice == Splice(start=0, end=2, text="@al")

    def test_default_formatter_has_no_trailing_space(self) -> None:
        config = _config(triggerChar="#", items=["tag"])
        assert plan_insertion(4, 6, {"label": "tag"}, config).text == "#tag"

    def test_fallback_trigger_inserts_bare_label(self) -> None:
        config = _config(triggerChar="", items=["bob"])
        assert plan_insertion(0, 2, {"label": "bob"}, config).text == "bob"

    def test_custom_formatter(self) -> None:
        config = _config(items=["al"], mentionSelect=lambda item: f"[[{item['label']}]]")
        assert plan_insertion(0, 2, {"label": "al"}, config).text == "[[al]]"

    def test_custom_label_key(self) -> None:
        config = _config(labelKey="name", items=[{"name": "amy"}])
        assert plan_insertion(0, 1, {"name": "amy"}, config).text == "@amy"

    def test_unresolved_start_uses_label_span(self) -> None:
        config = _config(items=["amy"])
        splice = plan_insertion(-1, 9, {"label": "amy"}, config)
        assert (splice.start, splice.end) == (0, 4)

    def test_unresolved_start_without_label(self) -> None:
        config = _config(items=["amy"])
        splice = plan_insertion(-1, 9, {"id": 1}, config)
        assert (splice.start, splice.end) == (0, 0)

    def test_unresolved_start_in_frame_keeps_caret(self) -> None:
        config = _config(items=["amy"])
        splice = plan_insertion(-1, 3, {"label": "amy"}, config, has_frame=True)
        assert (splice.start, splice.end) == (0, 3)


class TestApplySplice:
    def test_replaces_span(self) -> None:
        assert apply_splice("hi @a there", Splice(3, 5, "@al")) == "hi @al there"

    def test_insert_at_end(self) -> None:
        assert apply_splice("@a", Splice(0, 2, "@amy")) == "@amy"
