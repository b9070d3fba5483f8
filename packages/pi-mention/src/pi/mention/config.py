"""Mention trigger configuration and normalization.

Configs use Pydantic models with snake_case fields and camelCase aliases, so
they can be built from Python keyword arguments or loaded from JSON written
with camelCase keys such as ``triggerChar`` and ``labelKey``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pi.mention.catalog import ItemCatalog, MentionRecord

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Mention configuration cannot be used (duplicate triggers, bad files)."""


class MentionDefaults(BaseModel):
    """Host-wide values for fields a config leaves unset."""

    model_config = ConfigDict(populate_by_name=True)

    trigger_char: str = Field(default="@", alias="triggerChar")
    label_key: str = Field(default="label", alias="labelKey")
    disable_search: bool = Field(default=False, alias="disableSearch")
    max_items: int = Field(default=-1, alias="maxItems")


class MentionConfig(BaseModel):
    """One trigger character and the items it offers.

    ``trigger_char`` of ``""`` is the fallback trigger used when the surface
    is empty and fallback mode is on.
    """

    model_config = ConfigDict(populate_by_name=True)

    trigger_char: str | None = Field(default=None, alias="triggerChar")
    label_key: str | None = Field(default=None, alias="labelKey")
    disable_search: bool | None = Field(default=None, alias="disableSearch")
    max_items: int | None = Field(default=None, alias="maxItems")
    items: list[Any] = Field(default_factory=list)
    select_formatter: Callable[[MentionRecord], str] | None = Field(
        default=None, alias="mentionSelect", exclude=True
    )

    @property
    def is_fallback(self) -> bool:
        return self.trigger_char == ""

    def label_of(self, item: MentionRecord) -> str:
        return item.get(self.label_key or "label", "")


def _normalize_one(config: MentionConfig, defaults: MentionDefaults) -> MentionConfig:
    if "trigger_char" not in config.model_fields_set:
        trigger_char = defaults.trigger_char
    else:
        trigger_char = config.trigger_char or ""

    label_key = config.label_key or defaults.label_key
    disable_search = (
        config.disable_search if config.disable_search is not None else defaults.disable_search
    )
    max_items = config.max_items if config.max_items else defaults.max_items

    return MentionConfig(
        trigger_char=trigger_char,
        label_key=label_key,
        disable_search=disable_search,
        max_items=max_items,
        items=ItemCatalog(config.items, label_key).items,
        select_formatter=config.select_formatter,
    )


def normalize_configs(
    configs: Iterable[MentionConfig | dict[str, Any]],
    defaults: MentionDefaults | None = None,
) -> list[MentionConfig]:
    """Fill defaults, normalize items and reject duplicate triggers.

    Accepts config models or plain dicts. Normalizing an already normalized
    list returns equal configs.
    """
    defaults = defaults or MentionDefaults()
    normalized: list[MentionConfig] = []
    seen: set[str] = set()

    for raw in configs:
        try:
            config = raw if isinstance(raw, MentionConfig) else MentionConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(f"Invalid mention config: {exc}") from exc

        config = _normalize_one(config, defaults)
        trigger = config.trigger_char or ""
        if trigger in seen:
            label = repr(trigger) if trigger else "empty trigger"
            raise ConfigError(f"Duplicate mention trigger: {label}")
        seen.add(trigger)
        normalized.append(config)

    logger.debug("Normalized %d mention configs", len(normalized))
    return normalized


def load_mention_configs(
    path: str | Path, defaults: MentionDefaults | None = None
) -> list[MentionConfig]:
    """Load and normalize configs from a JSON file.

    The file holds either a list of configs or an object with ``mentions``
    and optional ``defaults`` keys. Defaults in the file take precedence over
    the ``defaults`` argument.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read mention config {path}: {exc}") from exc

    if isinstance(data, dict):
        try:
            if "defaults" in data:
                defaults = MentionDefaults.model_validate(data["defaults"])
        except ValidationError as exc:
            raise ConfigError(f"Invalid mention defaults in {path}: {exc}") from exc
        data = data.get("mentions", [])

    if not isinstance(data, list):
        raise ConfigError(f"Mention config {path} must contain a list of mentions")

    return normalize_configs(data, defaults)
