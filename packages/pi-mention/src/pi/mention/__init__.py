"""pi-mention: trigger-driven mention suggestions for editable text surfaces."""

# Configuration
from pi.mention.config import (
    ConfigError,
    MentionConfig,
    MentionDefaults,
    load_mention_configs,
    normalize_configs,
)

# Item catalog
from pi.mention.catalog import DataError, ItemCatalog, MentionRecord, normalize_items

# Key events
from pi.mention.keys import KeyEvent, key_event_from_terminal, resolve_char

# State machine
from pi.mention.machine import Session, TriggerSessionMachine

# Insertion planning
from pi.mention.planner import Splice, apply_splice, plan_insertion

# Filtering
from pi.mention.search import filter_items

# Popup
from pi.mention.search_list import MentionList, MentionListTheme, Popup

# Surfaces
from pi.mention.surface import Surface, TextSurface

__all__ = [
    # Configuration
    "ConfigError",
    "MentionConfig",
    "MentionDefaults",
    "load_mention_configs",
    "normalize_configs",
    # Item catalog
    "DataError",
    "ItemCatalog",
    "MentionRecord",
    "normalize_items",
    # Key events
    "KeyEvent",
    "key_event_from_terminal",
    "resolve_char",
    # State machine
    "Session",
    "TriggerSessionMachine",
    # Insertion planning
    "Splice",
    "apply_splice",
    "plan_insertion",
    # Filtering
    "filter_items",
    # Popup
    "MentionList",
    "MentionListTheme",
    "Popup",
    # Surfaces
    "Surface",
    "TextSurface",
]
