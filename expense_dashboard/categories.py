"""Category registry - user-defined categories and their spending limits.

Categories are an open set of names chosen by the user.  Each one carries
an optional monthly spending limit and a flag controlling whether it is
shown in the chart.  The registry can optionally be persisted to a JSON
file so limits survive between sessions.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

from .entry import CategoryName, Entry
from .errors import CategoryInUseError, DuplicateCategoryError, UnknownCategoryError
from .logging_setup import get_logger

logger = get_logger(__name__)

NameLike = Union[CategoryName, str]


@dataclass
class CategoryInfo:
    """Per-category settings."""
    limit: Optional[float] = None  # None means no limit
    displayed: bool = True


class LimitResult(Enum):
    NO_LIMIT_SET = 'no_limit_set'
    UNDER_LIMIT = 'under_limit'
    EXCEEDED = 'exceeded'
    # entry is outside the current month, limits are not applied retroactively
    NOT_CHECKED = 'not_checked'


class CategoryManager:
    """Stores user-defined categories (case-insensitive) and manages spending limits."""

    def __init__(self, storage_path: Optional[Path] = None):
        """Initialize the registry.

        Args:
            storage_path: JSON file to load from and save to after every
                change.  ``None`` keeps the registry in memory only.
        """
        self.storage_path = Path(storage_path) if storage_path is not None else None
        self._categories: Dict[CategoryName, CategoryInfo] = {}
        self._warnings_enabled = False
        self._load()

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    def _load(self) -> None:
        if self.storage_path is None or not self.storage_path.exists():
            return

        try:
            with self.storage_path.open('r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Error loading categories from %s: %s", self.storage_path, e)
            return
        if not isinstance(data, dict):
            logger.error("Ignoring categories file %s: unexpected layout", self.storage_path)
            return

        stored = data.get('categories') or {}
        if not isinstance(stored, dict):
            stored = {}
        for raw_name, raw_info in stored.items():
            try:
                name = CategoryName(raw_name)
            except ValueError:
                logger.warning("Skipping invalid stored category %r", raw_name)
                continue
            raw_info = raw_info if isinstance(raw_info, dict) else {}
            limit = raw_info.get('limit')
            try:
                limit = float(limit) if limit is not None else None
            except (TypeError, ValueError):
                limit = None
            self._categories[name] = CategoryInfo(
                limit=_normalize_limit(limit),
                displayed=bool(raw_info.get('displayed', True)),
            )
        self._warnings_enabled = bool(data.get('warnings_enabled', False))
        logger.debug("Loaded %d categories from %s", len(self._categories), self.storage_path)

    def save(self) -> None:
        """Write the registry to ``storage_path`` if one is set."""
        if self.storage_path is None:
            return
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        payload = {
            'categories': {
                name.display(): {'limit': info.limit, 'displayed': info.displayed}
                for name, info in self.items()
            },
            'warnings_enabled': self._warnings_enabled,
        }
        with self.storage_path.open('w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2, sort_keys=True)

    def _changed(self) -> None:
        try:
            self.save()
        except OSError as e:
            logger.error("Error saving categories to %s: %s", self.storage_path, e)

    # -----------------------------------------------------------------------
    # Registry
    # -----------------------------------------------------------------------

    def register(self, name_text: NameLike) -> CategoryName:
        """Add a new category with default settings.

        Raises:
            InvalidCategoryNameError: If the name fails validation.
            DuplicateCategoryError: If the normalized name already exists.
        """
        name = CategoryName.parse(name_text)
        if name in self._categories:
            logger.debug("Category already exists: %s", name)
            raise DuplicateCategoryError(name.display())

        logger.debug("Adding category: %s", name)
        self._categories[name] = CategoryInfo()
        self._resort()
        self._changed()
        return name

    def register_many(self, names: Iterable[NameLike]) -> None:
        """Add several categories, ignoring ones that already exist.

        Used to reconcile the registry with the categories found in an
        imported entry file.
        """
        added = False
        try:
            for name_text in names:
                name = CategoryName.parse(name_text)
                if name in self._categories:
                    logger.debug("Duplicate category '%s' ignored.", name)
                    continue
                self._categories[name] = CategoryInfo()
                added = True
        finally:
            if added:
                self._resort()
                self._changed()

    def delete(self, name_text: NameLike, referenced: Iterable[NameLike] = ()) -> None:
        """Remove a category.

        Args:
            name_text: Category to remove.
            referenced: Categories still used by entries; deleting one of
                them is refused so entries never point at a missing category.

        Raises:
            UnknownCategoryError: If the category does not exist.
            CategoryInUseError: If the category is in ``referenced``.
        """
        name = self._require(name_text)
        if name in {CategoryName.parse(ref) for ref in referenced}:
            raise CategoryInUseError(name.display())
        logger.debug("Deleting category: %s", name)
        del self._categories[name]
        self._changed()

    def _require(self, name_text: NameLike) -> CategoryName:
        name = CategoryName.parse(name_text)
        if name not in self._categories:
            raise UnknownCategoryError(name.display())
        return name

    def _resort(self) -> None:
        self._categories = dict(sorted(self._categories.items(), key=lambda item: item[0]))

    # -----------------------------------------------------------------------
    # Settings
    # -----------------------------------------------------------------------

    def set_limit(self, name_text: NameLike, amount: Optional[float]) -> None:
        """Set or clear a monthly limit.  ``None`` or ``amount <= 0`` clears it."""
        name = self._require(name_text)
        self._categories[name].limit = _normalize_limit(amount)
        self._changed()

    def toggle_displayed(self, name_text: NameLike, displayed: bool) -> None:
        name = self._require(name_text)
        self._categories[name].displayed = bool(displayed)
        self._changed()

    def set_all_displayed(self, displayed: bool) -> None:
        for info in self._categories.values():
            info.displayed = bool(displayed)
        self._changed()

    @property
    def warnings_enabled(self) -> bool:
        """Whether the UI should warn when a spending limit is exceeded."""
        return self._warnings_enabled

    @warnings_enabled.setter
    def warnings_enabled(self, enabled: bool) -> None:
        self._warnings_enabled = bool(enabled)
        self._changed()

    # -----------------------------------------------------------------------
    # Queries
    # -----------------------------------------------------------------------

    def categories(self) -> List[CategoryName]:
        """All categories, sorted alphabetically."""
        return list(self._categories)

    def selected_categories(self) -> List[CategoryName]:
        return [name for name, info in self._categories.items() if info.displayed]

    def items(self) -> List[tuple]:
        return list(self._categories.items())

    def info(self, name_text: NameLike) -> CategoryInfo:
        return self._categories[self._require(name_text)]

    def limit_for(self, name_text: NameLike) -> Optional[float]:
        info = self._categories.get(CategoryName.parse(name_text))
        return info.limit if info is not None else None

    def __contains__(self, name_text: object) -> bool:
        try:
            return CategoryName.parse(name_text) in self._categories  # type: ignore[arg-type]
        except ValueError:
            return False

    def __iter__(self) -> Iterator[CategoryName]:
        return iter(list(self._categories))

    def __len__(self) -> int:
        return len(self._categories)

    # -----------------------------------------------------------------------
    # Limits
    # -----------------------------------------------------------------------

    def check_limit(self, entry: Entry, total_spent: float, today: Optional[date] = None) -> LimitResult:
        """Check whether ``entry``'s category limit has been met for this month.

        Only entries dated in the current calendar month are checked;
        anything else is treated as retroactive and never produces a
        warning.

        Args:
            entry: The entry that was just added.
            total_spent: Total spent in the entry's category this month,
                including ``entry``.
            today: Reference date, defaults to the local calendar date.
        """
        limit = self.limit_for(entry.category)
        if limit is None:
            logger.debug("No limit set for category: %s", entry.category)
            return LimitResult.NO_LIMIT_SET

        today = today or date.today()
        if (entry.date.year, entry.date.month) != (today.year, today.month):
            logger.debug("Entry's date doesn't match the current month. Skipping limit check")
            return LimitResult.NOT_CHECKED

        if total_spent >= limit:
            logger.warning("Limit for category: %s ($%s) has been exceeded!", entry.category, limit)
            return LimitResult.EXCEEDED

        logger.debug(
            "Limit for category: %s ($%s) has NOT been exceeded. Total cost is %s",
            entry.category, limit, total_spent,
        )
        return LimitResult.UNDER_LIMIT


def _normalize_limit(amount: Optional[float]) -> Optional[float]:
    # 0 is the editor's "unset" value
    if amount is None or not amount > 0:
        return None
    return float(amount)
