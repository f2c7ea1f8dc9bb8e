"""Configuration management for the expense dashboard.

This module centralizes all configuration values including paths,
defaults, and environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path

# Base project root - assumes this file is in expense_dashboard/
_PROJECT_ROOT = Path(__file__).parent.parent.resolve()

# Data directories
DATA_DIR = Path(os.getenv("EXPENSE_DASHBOARD_DATA_DIR", _PROJECT_ROOT / "data"))

# Entry file opened on startup when no other file was active
ENTRIES_PATH = Path(
    os.getenv("EXPENSE_DASHBOARD_ENTRIES_PATH", DATA_DIR / "entries.csv")
).resolve()

# Category registry (names, limits, displayed flags)
CATEGORIES_PATH = Path(
    os.getenv("EXPENSE_DASHBOARD_CATEGORIES_PATH", DATA_DIR / "categories.json")
).resolve()

# UI preferences carried between sessions
STATE_PATH = Path(
    os.getenv("EXPENSE_DASHBOARD_STATE_PATH", DATA_DIR / "app_state.json")
).resolve()

# Suffix swapped in for the entry file's own suffix when backing it up
BACKUP_SUFFIX = ".backup"

# Categories registered on first launch
DEFAULT_CATEGORIES = (
    "food",
    "groceries",
    "misc",
    "rent",
    "transportation",
    "utilities",
)


def ensure_data_directories() -> None:
    """Create all required data directories if they don't exist."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)
