"""Picker options and persistent JSON config helpers.

Components take explicit immutable values (:class:`PickerOptions`,
:class:`KeyBindingsConfig`); this module only turns the on-disk JSON object
into those values. Malformed or missing config falls back to defaults, except
for key bindings that would be ambiguous, which raise
:class:`KeyBindingError` before any session starts.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

from .input.actions import KeyAction
from .input.bindings import KeyBindingError, KeyBindingsConfig, validate_bindings
from .paging.scheduler import MAX_PAGE_SIZE

logger = logging.getLogger(__name__)

APP_NAME = "lazypicker"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


@dataclass(frozen=True)
class PickerOptions:
    """Per-session picker behavior."""

    enable_fuzzy_search: bool = True
    max_visible_items: int = 15
    page_size: int = 100
    prefetch_margin: int = 3
    picker_timeout: float | None = None
    highlight_matches: bool = True

    def __post_init__(self) -> None:
        if self.max_visible_items < 1:
            object.__setattr__(self, "max_visible_items", 1)
        if not 1 <= self.page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        if self.prefetch_margin < 0:
            object.__setattr__(self, "prefetch_margin", 0)


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are logged and otherwise ignored.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _coerce_positive_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def load_picker_options(base: PickerOptions | None = None) -> PickerOptions:
    """Overlay the ``"selection"`` config section onto ``base`` options.

    Invalid field values are dropped individually.
    """
    options = base if base is not None else PickerOptions()
    section = load_config().get("selection")
    if not isinstance(section, dict):
        return options

    updates: dict[str, object] = {}
    enable_fuzzy = section.get("enable_fuzzy_search")
    if isinstance(enable_fuzzy, bool):
        updates["enable_fuzzy_search"] = enable_fuzzy
    highlight = section.get("highlight_matches")
    if isinstance(highlight, bool):
        updates["highlight_matches"] = highlight
    max_visible = _coerce_positive_int(section.get("max_visible_items"))
    if max_visible is not None:
        updates["max_visible_items"] = max_visible
    page_size = _coerce_positive_int(section.get("page_size"))
    if page_size is not None and page_size <= MAX_PAGE_SIZE:
        updates["page_size"] = page_size
    timeout_ms = _coerce_positive_int(section.get("picker_timeout_ms"))
    if timeout_ms is not None:
        updates["picker_timeout"] = timeout_ms / 1000.0
    return replace(options, **updates)


def load_key_bindings(base: KeyBindingsConfig | None = None) -> KeyBindingsConfig:
    """Overlay the ``"key_bindings"`` config section onto ``base`` bindings.

    Unknown action names and non-string sequences are skipped. The merged
    result is validated so ambiguous bindings fail here, before a session.
    """
    bindings = base if base is not None else KeyBindingsConfig()
    data = load_config()

    timeout_ms = _coerce_positive_int(data.get("sequence_timeout_ms"))
    if timeout_ms is not None:
        bindings = KeyBindingsConfig(bindings=bindings.bindings, sequence_timeout=timeout_ms / 1000.0)

    section = data.get("key_bindings")
    if isinstance(section, dict):
        overrides: dict[KeyAction, str] = {}
        for name, sequence in section.items():
            if not isinstance(name, str) or not isinstance(sequence, str):
                continue
            try:
                action = KeyAction.from_name(name)
            except ValueError:
                logger.warning("ignoring binding for unknown action %r", name)
                continue
            overrides[action] = sequence
        bindings = bindings.with_overrides(overrides)

    try:
        validate_bindings(bindings.bindings)
    except KeyBindingError as exc:
        raise KeyBindingError(f"{CONFIG_PATH}: {exc}") from exc
    return bindings


def save_key_bindings(bindings: KeyBindingsConfig) -> None:
    """Persist key bindings and their timeout in normalized JSON form."""
    validate_bindings(bindings.bindings)
    config = load_config()
    config["key_bindings"] = {action.value: sequence for action, sequence in bindings.bindings}
    config["sequence_timeout_ms"] = int(round(bindings.sequence_timeout * 1000))
    save_config(config)
