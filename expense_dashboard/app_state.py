"""Lightweight persistent store for UI preferences between sessions."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .config import STATE_PATH
from .logging_setup import get_logger
from .organize import GroupBy, SortBy

logger = get_logger(__name__)

DEFAULT_STATE: Dict[str, Any] = {
    'active_file': None,
    'sort_by': SortBy.DATE.value,
    'group_by': GroupBy.MONTH.value,
    'theme': 'sunset',
}

_ENUM_KEYS = {'sort_by': SortBy, 'group_by': GroupBy}


def load_state(path: Path | None = None) -> Dict[str, Any]:
    target = path or STATE_PATH
    if not target.exists():
        return DEFAULT_STATE.copy()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable state file %s: %s", target, e)
        return DEFAULT_STATE.copy()
    if not isinstance(data, dict):
        return DEFAULT_STATE.copy()
    merged = DEFAULT_STATE.copy()
    merged.update({k: v for k, v in data.items() if k in DEFAULT_STATE})
    for key, enum_type in _ENUM_KEYS.items():
        try:
            enum_type(merged[key])
        except ValueError:
            merged[key] = DEFAULT_STATE[key]
    return merged


def save_state(state: Dict[str, Any], path: Path | None = None) -> None:
    target = path or STATE_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = DEFAULT_STATE.copy()
    for key, value in state.items():
        if key not in DEFAULT_STATE:
            continue
        if isinstance(value, (SortBy, GroupBy)):
            value = value.value
        elif isinstance(value, Path):
            value = str(value)
        payload[key] = value
    with target.open('w', encoding='utf-8') as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
