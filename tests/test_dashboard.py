import json
import types
from datetime import date

from expense_dashboard import csv_codec, dashboard
from expense_dashboard.app_state import save_state
from expense_dashboard.categories import LimitResult
from expense_dashboard.config import DEFAULT_CATEGORIES
from expense_dashboard.entry import CategoryName
from expense_dashboard.inbox import ImportResult
from expense_dashboard.organize import SortBy, SortOrder

TODAY = date(2024, 3, 15)


def _init(tmp_path, **prefs):
    state_path = tmp_path / 'state.json'
    if prefs:
        save_state(prefs, state_path)
    state = {}
    dashboard.init_session_state(state, categories_path=tmp_path / 'categories.json', state_path=state_path)
    return state


def test_init_registers_default_categories(tmp_path):
    state = _init(tmp_path)
    assert [c.display() for c in state['categories'].categories()] == list(DEFAULT_CATEGORIES)
    assert len(state['data_manager']) == 0
    assert state['data_manager'].active_file is None


def test_init_is_idempotent(tmp_path):
    state = _init(tmp_path)
    manager = state['data_manager']
    dashboard.init_session_state(state, categories_path=tmp_path / 'other.json')
    assert state['data_manager'] is manager


def test_init_loads_last_active_file(tmp_path):
    entries = tmp_path / 'entries.csv'
    entries.write_text("Cake,2024-03-02,12.0,treats\nRent,2024-03-01,1500.0,rent\n", encoding='utf-8')
    state = _init(tmp_path, active_file=entries, sort_by=SortBy.COST)

    manager = state['data_manager']
    assert manager.active_file == entries
    assert manager.sort_by is SortBy.COST
    assert [e.name for e in manager.entries] == ['Cake', 'Rent']
    assert 'treats' in state['categories']


def test_init_survives_broken_active_file(tmp_path):
    entries = tmp_path / 'entries.csv'
    entries.write_text("not an entry\n", encoding='utf-8')
    state = _init(tmp_path, active_file=entries)
    assert len(state['data_manager']) == 0
    assert state['data_manager'].active_file is None


def test_submit_entry_reports_limit(tmp_path):
    state = _init(tmp_path)
    state['categories'].set_limit('rent', 1000.0)

    result = dashboard.submit_entry(state, 'Deposit', 400.0, date(2024, 3, 1), 'rent', today=TODAY)
    assert result is LimitResult.UNDER_LIMIT
    result = dashboard.submit_entry(state, ' Rent ', 600.0, date(2024, 3, 2), 'rent', today=TODAY)
    assert result is LimitResult.EXCEEDED
    assert state['data_manager'].entries[-1].name == 'Rent'

    result = dashboard.submit_entry(state, 'Bus', 3.0, date(2024, 3, 2), 'transportation', today=TODAY)
    assert result is LimitResult.NO_LIMIT_SET


def test_delete_displayed_uses_display_order(tmp_path):
    state = _init(tmp_path)
    for day in (1, 2, 3):
        dashboard.submit_entry(state, f'd{day}', 1.0, date(2024, 1, day), 'misc')
    removed = dashboard.delete_displayed(state, 0, SortOrder.DECREASING)
    assert removed.name == 'd3'
    removed = dashboard.delete_displayed(state, 0, SortOrder.INCREASING)
    assert removed.name == 'd1'
    assert [e.name for e in state['data_manager'].entries] == ['d2']


def test_collect_import_applies_pending_result(tmp_path):
    state = _init(tmp_path)
    assert dashboard.collect_import(state) is None

    parsed = csv_codec.parse("Cake,2024-03-02,12.0,treats\n")
    state['inbox'].deposit(ImportResult(source='upload.csv', entries=parsed))
    result = dashboard.collect_import(state)
    assert result.ok
    assert [e.name for e in state['data_manager'].entries] == ['Cake']
    assert CategoryName('treats') in state['categories']


def test_persist_prefs_writes_state_file(tmp_path):
    state = _init(tmp_path)
    manager = state['data_manager']
    manager.active_file = tmp_path / 'entries.csv'
    manager.sort(SortBy.COST)
    dashboard.persist_prefs(state)

    data = json.loads((tmp_path / 'state.json').read_text(encoding='utf-8'))
    assert data['active_file'] == str(tmp_path / 'entries.csv')
    assert data['sort_by'] == 'cost'
    assert data['group_by'] == 'month'


def test_rerun_prefers_streamlit_rerun(monkeypatch):
    called = {}

    def fake_rerun():
        called['method'] = 'rerun'

    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(rerun=fake_rerun))
    dashboard._rerun()
    assert called['method'] == 'rerun'


def test_rerun_falls_back_to_experimental(monkeypatch):
    called = {}

    def fake_experimental():
        called['method'] = 'experimental'

    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(experimental_rerun=fake_experimental))
    dashboard._rerun()
    assert called['method'] == 'experimental'


def test_init_survives_non_utf8_active_file(tmp_path):
    entries = tmp_path / 'entries.csv'
    entries.write_bytes(b"Caf\xe9,2024-03-01,4.5,misc\n")
    state = _init(tmp_path, active_file=entries)
    assert len(state['data_manager']) == 0
    assert state['data_manager'].active_file is None
    assert len(state['categories']) == len(DEFAULT_CATEGORIES)


def _upload(file_id, text="Cake,2024-03-02,12.0,treats\n", name='upload.csv'):
    return types.SimpleNamespace(name=name, file_id=file_id, getvalue=lambda: text.encode('utf-8'))


def test_start_import_runs_each_upload_once(tmp_path):
    state = _init(tmp_path)
    assert dashboard.start_import(state, _upload('first', text="broken\n")) is True
    state['import_thread'].join(timeout=5)
    assert not dashboard.import_running(state)
    assert not dashboard.collect_import(state).ok

    # same widget value on the next rerun
    assert dashboard.start_import(state, _upload('first', text="broken\n")) is False

    # corrected file uploaded under the same name
    assert dashboard.start_import(state, _upload('second')) is True
    state['import_thread'].join(timeout=5)
    result = dashboard.collect_import(state)
    assert result.ok and result.source == 'upload.csv'
    assert [e.name for e in state['data_manager'].entries] == ['Cake']


def test_import_running_without_worker(tmp_path):
    assert dashboard.import_running(_init(tmp_path)) is False
