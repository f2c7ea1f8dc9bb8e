from __future__ import annotations

import json

from expense_dashboard.app_state import DEFAULT_STATE, load_state, save_state
from expense_dashboard.organize import GroupBy, SortBy


def test_load_state_defaults_when_missing(tmp_path) -> None:
    assert load_state(tmp_path / "state.json") == DEFAULT_STATE


def test_save_and_load_round_trip(tmp_path) -> None:
    path = tmp_path / "state.json"
    save_state(
        {'active_file': tmp_path / "entries.csv", 'sort_by': SortBy.COST, 'group_by': GroupBy.YEAR, 'extra': 1},
        path,
    )
    data = json.loads(path.read_text(encoding='utf-8'))
    assert 'extra' not in data
    state = load_state(path)
    assert state['active_file'] == str(tmp_path / "entries.csv")
    assert state['sort_by'] == 'cost'
    assert state['group_by'] == 'year'
    assert state['theme'] == DEFAULT_STATE['theme']


def test_load_state_discards_bad_values(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text(json.dumps({'sort_by': 'name', 'group_by': 'week', 'unknown': True}), encoding='utf-8')
    assert load_state(path) == DEFAULT_STATE


def test_load_state_corrupt_file(tmp_path) -> None:
    path = tmp_path / "state.json"
    path.write_text("[1, 2", encoding='utf-8')
    assert load_state(path) == DEFAULT_STATE
