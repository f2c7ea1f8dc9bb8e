"""Grouping and ordering options shared by the data layer and the UI."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import List

import pandas as pd


class GroupBy(Enum):
    """Aggregation granularity for the cost map."""

    DAY = 'day'
    MONTH = 'month'
    YEAR = 'year'

    @property
    def period_alias(self) -> str:
        return {GroupBy.DAY: 'D', GroupBy.MONTH: 'M', GroupBy.YEAR: 'Y'}[self]

    @property
    def range_freq(self) -> str:
        # bucket starts: every day, every month start, every year start
        return {GroupBy.DAY: 'D', GroupBy.MONTH: 'MS', GroupBy.YEAR: 'YS'}[self]

    def __str__(self) -> str:
        return self.value.capitalize()


class SortBy(Enum):
    DATE = 'date'
    COST = 'cost'

    def __str__(self) -> str:
        return self.value.capitalize()


class SortOrder(Enum):
    """Order the UI shows entries in; storage is always increasing."""

    INCREASING = 'increasing'
    DECREASING = 'decreasing'

    @property
    def reversed(self) -> bool:
        return self is SortOrder.DECREASING

    def __str__(self) -> str:
        return self.value.capitalize()


def align_date(value: date, group_by: GroupBy) -> date:
    """Return the bucket key ``value`` falls into."""
    if group_by is GroupBy.MONTH:
        return value.replace(day=1)
    if group_by is GroupBy.YEAR:
        return value.replace(month=1, day=1)
    return value


def align_dates(dates: pd.Series, group_by: GroupBy) -> pd.Series:
    """Vectorised :func:`align_date` returning ``datetime.date`` values."""
    if dates.empty:
        return pd.Series([], index=dates.index, dtype=object)
    periods = pd.to_datetime(dates).dt.to_period(group_by.period_alias)
    return periods.dt.start_time.dt.date


def bucket_range(start: date, end: date, group_by: GroupBy) -> List[date]:
    """Every bucket key from the bucket of ``start`` through ``end``, ascending."""
    first = align_date(start, group_by)
    if end < first:
        return []
    stamps = pd.date_range(start=first, end=end, freq=group_by.range_freq)
    return [stamp.date() for stamp in stamps]
