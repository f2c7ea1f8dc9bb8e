#!/usr/bin/env python3
"""Print per-category spending totals for an entry file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import pandas as pd

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from expense_dashboard import config
from expense_dashboard.data_manager import DataManager
from expense_dashboard.errors import ExpenseError
from expense_dashboard.logging_setup import configure_logging
from expense_dashboard.organize import GroupBy
from expense_dashboard.visualization import cost_map_to_frame


def main(path: Path, group_by: GroupBy, categories: list[str]) -> int:
    manager = DataManager()
    try:
        manager.read_entries_from_csv(path)
    except (OSError, ExpenseError) as exc:
        print(f"Could not read {path}: {exc}")
        return 1

    if not len(manager):
        print("No entries recorded.")
        return 0

    wanted = categories or sorted(manager.categories_in_use())
    try:
        cost_map = manager.cost_map(group_by, wanted)
    except ExpenseError as exc:
        print(exc)
        return 1
    df = cost_map_to_frame(cost_map, group_by)
    table = df.pivot(index='Label', columns='Category', values='Cost')
    table['Total'] = table.sum(axis=1)

    earliest, latest = manager.date_extremes()
    print(f"{len(manager)} entries from {earliest} to {latest}")
    with pd.option_context('display.float_format', '{:,.2f}'.format):
        print(table.to_string())
    return 0


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Summarize spending per category.')
    parser.add_argument('path', nargs='?', type=Path, default=config.ENTRIES_PATH, help='Entry file to read')
    parser.add_argument(
        '--group-by', choices=[g.value for g in GroupBy], default=GroupBy.MONTH.value,
        help='Bucket size',
    )
    parser.add_argument('--category', action='append', default=[], help='Limit to a category (repeatable)')
    parser.add_argument('--log-level', default=None, help='Logging level')
    args = parser.parse_args()
    configure_logging(args.log_level)
    raise SystemExit(main(args.path, GroupBy(args.group_by), args.category))
