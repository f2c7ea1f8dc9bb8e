"""Entry storage, ordering and cost aggregation.

:class:`DataManager` owns the list of entries shown by the dashboard.  The
list is always kept in increasing order of the active sort key; views in
decreasing order are produced by iterating it backwards, which is why
positions coming from the UI are translated in :meth:`DataManager.remove_at`.

Every change to the list is written through to the active entry file, when
there is one.  A failed write is logged and never undoes the change.

The aggregation used by the chart lives here too.  :meth:`DataManager.cost_map`
sums costs per category and per day, month or year, and zero-fills every
bucket between the earliest and latest entry so all categories share the
same set of bars.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

import pandas as pd

from . import csv_codec
from .entry import CategoryName, Entry
from .errors import EntryIndexError
from .logging_setup import get_logger
from .organize import GroupBy, SortBy, align_dates, bucket_range

logger = get_logger(__name__)

CostMap = Dict[CategoryName, Dict[date, float]]

FRAME_COLUMNS = ['name', 'date', 'cost', 'category']


def _sort_key(sort_by: SortBy):
    if sort_by is SortBy.COST:
        return lambda entry: entry.cost.as_number()
    return lambda entry: entry.date


class DataManager:
    """Owns the entry collection and its backing file."""

    def __init__(
        self,
        entries: Optional[Iterable[Entry]] = None,
        sort_by: SortBy = SortBy.DATE,
        active_file: Optional[Union[str, Path]] = None,
    ):
        self._entries: List[Entry] = list(entries or [])
        self.sort_by = sort_by
        self.active_file: Optional[Path] = Path(active_file) if active_file is not None else None
        # Set when the collection is replaced wholesale; the chart resets its view once
        self.plot_reset_next_frame = False
        self._apply_sort()

    # -----------------------------------------------------------------------
    # Access
    # -----------------------------------------------------------------------

    @property
    def entries(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def iter_entries(self, reversed: bool = False) -> Iterator[Entry]:
        """Iterate in storage order, or backwards for a decreasing view."""
        if reversed:
            return iter(self._entries[::-1])
        return iter(list(self._entries))

    def categories_in_use(self) -> Set[CategoryName]:
        return {entry.category for entry in self._entries}

    def date_extremes(self) -> Optional[Tuple[date, date]]:
        """Earliest and latest entry dates, regardless of the sort key."""
        if not self._entries:
            return None
        dates = [entry.date for entry in self._entries]
        return min(dates), max(dates)

    def to_frame(self) -> pd.DataFrame:
        """The entries as a DataFrame, in storage order."""
        return pd.DataFrame(
            {
                'name': [entry.name for entry in self._entries],
                'date': [entry.date for entry in self._entries],
                'cost': pd.Series([entry.cost.as_number() for entry in self._entries], dtype=float),
                'category': [entry.category.display() for entry in self._entries],
            },
            columns=FRAME_COLUMNS,
        )

    def consume_reset_view(self) -> bool:
        """Return whether the chart should reset its view, clearing the flag."""
        reset = self.plot_reset_next_frame
        self.plot_reset_next_frame = False
        return reset

    # -----------------------------------------------------------------------
    # Mutation
    # -----------------------------------------------------------------------

    def add(self, entry: Entry) -> None:
        self._entries.append(entry)
        # keep the list consistent with the active sort key
        self._apply_sort()
        self._data_changed()

    def remove_at(self, index: int, reversed: bool = False) -> Entry:
        """Remove the entry shown at ``index``.

        Args:
            index: Position in the displayed list.
            reversed: ``True`` when the list is displayed in decreasing order.

        Raises:
            EntryIndexError: If ``index`` is outside the list.
        """
        length = len(self._entries)
        if not 0 <= index < length:
            raise EntryIndexError(index, length)
        actual = length - 1 - index if reversed else index
        removed = self._entries.pop(actual)
        self._data_changed()
        return removed

    def sort(self, sort_by: SortBy) -> None:
        """Re-sort by ``sort_by``; the file is rewritten only if the key changed."""
        sort_by = SortBy(sort_by)
        changed = sort_by is not self.sort_by
        self.sort_by = sort_by
        self._apply_sort()
        if changed:
            self._data_changed()

    def replace_all(self, entries: Iterable[Entry]) -> None:
        """Take ``entries`` as the new collection without sorting or saving."""
        self._entries = list(entries)
        self.plot_reset_next_frame = True

    def _apply_sort(self) -> None:
        self._entries.sort(key=_sort_key(self.sort_by))

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    def read_entries_from_csv(self, file_path: Union[str, Path]) -> None:
        """Load ``file_path`` and make it the active file.

        On failure the current entries and active file are left untouched.

        Raises:
            OSError: If the file cannot be read.
            MalformedRecordError: If any line of the file is malformed.
        """
        path = Path(file_path)
        try:
            entries = csv_codec.read_entries_from_file(path)
        except (OSError, ValueError) as e:
            logger.error('Error reading entries from file "%s": %s', path, e)
            raise
        self.replace_all(entries)
        self._apply_sort()
        self.active_file = path
        logger.debug("Loaded %d entries from %s", len(entries), path)

    def write_entries_to_csv(self, file_path: Optional[Union[str, Path]] = None) -> bool:
        """Write the entries to ``file_path``, or to the active file.

        A given ``file_path`` becomes the active file once it has been
        written.  Returns ``False`` when nothing was written (no file, or an
        I/O error which is logged); the active file is then unchanged.
        """
        if file_path is None:
            if self.active_file is None:
                logger.debug("write entries to CSV with unspecified path & no active file - skipping")
                return False
            path = self.active_file
        else:
            path = Path(file_path)

        try:
            csv_codec.write_entries_to_file(self._entries, path)
        except OSError as e:
            logger.error("Error writing entries to CSV: %s", e)
            return False

        self.active_file = path
        return True

    def _data_changed(self) -> None:
        logger.debug("Data changed, calling write_entries_to_csv")
        self.write_entries_to_csv(None)

    # -----------------------------------------------------------------------
    # Aggregation
    # -----------------------------------------------------------------------

    def cost_map(self, group_by: GroupBy, categories: Iterable[Union[CategoryName, str]]) -> CostMap:
        """Total cost per category per bucket, with every bucket present.

        The bucket range runs from the earliest to the latest entry of the
        whole collection, so every requested category gets the same keys
        even if it has no entries at all.  Categories are returned in name
        order and buckets in date order.
        """
        if not self._entries:
            return {}

        requested = sorted({CategoryName.parse(category) for category in categories})
        earliest, latest = self.date_extremes()  # type: ignore[misc]
        buckets = bucket_range(earliest, latest, group_by)
        result: CostMap = {category: dict.fromkeys(buckets, 0.0) for category in requested}
        if not requested:
            return result

        frame = self.to_frame()
        by_label = {category.display(): category for category in requested}
        frame = frame[frame['category'].isin(list(by_label))]
        if frame.empty:
            return result

        frame = frame.assign(bucket=align_dates(frame['date'], group_by))
        totals = frame.groupby(['category', 'bucket'], sort=True)['cost'].sum()
        for (label, bucket), total in totals.items():
            result[by_label[label]][bucket] += float(total)
        return result

    def monthly_cost(self, category: Union[CategoryName, str], when: date) -> float:
        """Total spent in ``category`` during the month of ``when`` (the day is ignored)."""
        category = CategoryName.parse(category)
        return float(sum(
            entry.cost.as_number()
            for entry in self._entries
            if entry.category == category
            and entry.date.year == when.year
            and entry.date.month == when.month
        ))
