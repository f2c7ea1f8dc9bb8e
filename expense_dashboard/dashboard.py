"""Streamlit app for the Expense Dashboard.

This module defines the user interface only.  All state lives in the
:class:`~expense_dashboard.data_manager.DataManager` and
:class:`~expense_dashboard.categories.CategoryManager` stored in
``st.session_state``; the page reads them, renders widgets and calls
their operations when the user acts.

To run the dashboard from the command line::

    streamlit run expense_dashboard/dashboard.py

or use ``run_dashboard.py`` at the project root.
"""

from __future__ import annotations

import os
import sys
import time
from datetime import date
from pathlib import Path
from typing import Any, MutableMapping, Optional

import streamlit as st

# Support both ``streamlit run expense_dashboard/dashboard.py`` and
# package imports (tests, ``python -m``).
if __package__:
    from . import config
    from . import csv_codec
    from . import visualization as viz
    from .app_state import load_state, save_state
    from .categories import CategoryManager, LimitResult
    from .data_manager import DataManager
    from .entry import Entry
    from .errors import ExpenseError
    from .inbox import ResultInbox, apply_pending, pick_async
    from .logging_setup import configure_logging, get_logger
    from .organize import GroupBy, SortBy, SortOrder
else:
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from expense_dashboard import config  # type: ignore
    from expense_dashboard import csv_codec  # type: ignore
    from expense_dashboard import visualization as viz  # type: ignore
    from expense_dashboard.app_state import load_state, save_state  # type: ignore
    from expense_dashboard.categories import CategoryManager, LimitResult  # type: ignore
    from expense_dashboard.data_manager import DataManager  # type: ignore
    from expense_dashboard.entry import Entry  # type: ignore
    from expense_dashboard.errors import ExpenseError  # type: ignore
    from expense_dashboard.inbox import ResultInbox, apply_pending, pick_async  # type: ignore
    from expense_dashboard.logging_setup import configure_logging, get_logger  # type: ignore
    from expense_dashboard.organize import GroupBy, SortBy, SortOrder  # type: ignore

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


def init_session_state(
    state: MutableMapping[str, Any],
    categories_path: Optional[Path] = None,
    state_path: Optional[Path] = None,
) -> None:
    """Create the data services once per browser session."""
    if 'data_manager' in state:
        return

    prefs = load_state(state_path)
    manager = DataManager(sort_by=SortBy(prefs['sort_by']))
    categories = CategoryManager(categories_path or config.CATEGORIES_PATH)
    if not len(categories):
        categories.register_many(config.DEFAULT_CATEGORIES)

    active_file = prefs.get('active_file')
    if active_file and Path(active_file).exists():
        try:
            manager.read_entries_from_csv(active_file)
        except (OSError, ExpenseError):
            # already logged; start with an empty collection
            pass
        else:
            categories.register_many(sorted(manager.categories_in_use()))

    state['data_manager'] = manager
    state['categories'] = categories
    state['inbox'] = ResultInbox()
    state['prefs'] = prefs
    state['state_path'] = state_path


def persist_prefs(state: MutableMapping[str, Any]) -> None:
    prefs = dict(state['prefs'])
    manager: DataManager = state['data_manager']
    prefs['active_file'] = str(manager.active_file) if manager.active_file else None
    prefs['sort_by'] = manager.sort_by.value
    state['prefs'] = prefs
    try:
        save_state(prefs, state.get('state_path'))
    except OSError as e:
        logger.error("Could not save preferences: %s", e)


def submit_entry(
    state: MutableMapping[str, Any],
    name: str,
    cost: float,
    when: date,
    category: str,
    today: Optional[date] = None,
) -> LimitResult:
    """Add an entry from the form and run the limit check on it."""
    manager: DataManager = state['data_manager']
    categories: CategoryManager = state['categories']
    entry = Entry.create(name.strip(), cost, when, category)
    manager.add(entry)
    return categories.check_limit(entry, manager.monthly_cost(entry.category, entry.date), today=today)


def delete_displayed(state: MutableMapping[str, Any], index: int, order: SortOrder) -> Entry:
    manager: DataManager = state['data_manager']
    return manager.remove_at(index, reversed=order.reversed)


def start_import(state: MutableMapping[str, Any], uploaded) -> bool:
    """Start parsing ``uploaded`` in the background unless it was already picked up.

    Uploads are told apart by their widget file id, so the same file name
    uploaded again (say, after fixing a bad line) is imported again.
    """
    upload_id = getattr(uploaded, 'file_id', None) or uploaded.name
    if state.get('last_upload') == upload_id:
        return False
    state['last_upload'] = upload_id
    state['import_thread'] = pick_async(csv_codec.parse, uploaded.getvalue(), state['inbox'], label=uploaded.name)
    return True


def import_running(state: MutableMapping[str, Any]) -> bool:
    thread = state.get('import_thread')
    return thread is not None and thread.is_alive()


def collect_import(state: MutableMapping[str, Any]):
    """Poll the import inbox once and load whatever arrived."""
    return apply_pending(state['inbox'], state['data_manager'], state['categories'])


def _rerun() -> None:
    rerun_fn = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun_fn:
        rerun_fn()


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _render_file_controls() -> None:
    manager: DataManager = st.session_state['data_manager']
    st.sidebar.header("Entry file")
    default_path = str(manager.active_file or config.ENTRIES_PATH)
    path_text = st.sidebar.text_input("Path", value=default_path)

    open_col, save_col = st.sidebar.columns(2)
    if open_col.button("Open"):
        try:
            manager.read_entries_from_csv(path_text)
        except (OSError, ExpenseError) as exc:
            st.sidebar.error(f"Could not open {path_text}: {exc}")
        else:
            st.session_state['categories'].register_many(sorted(manager.categories_in_use()))
            persist_prefs(st.session_state)
    if save_col.button("Save as"):
        if manager.write_entries_to_csv(path_text):
            persist_prefs(st.session_state)
            st.sidebar.success(f"Saved {len(manager)} entries")
        else:
            st.sidebar.error(f"Could not write {path_text}")

    uploaded = st.sidebar.file_uploader("Import CSV", type=["csv"], accept_multiple_files=False)
    if uploaded is not None and start_import(st.session_state, uploaded):
        st.sidebar.info("Importing…")

    result = collect_import(st.session_state)
    if result is None:
        if import_running(st.session_state) or st.session_state['inbox'].has_pending():
            # the worker cannot trigger a rerun itself, so poll again shortly
            time.sleep(0.1)
            _rerun()
    elif result.ok:
        st.sidebar.success(f"Imported {len(result.entries)} entries from {result.source}")
    else:
        st.sidebar.error(f"Import of {result.source} failed: {result.error}")


def _render_add_entry() -> None:
    categories: CategoryManager = st.session_state['categories']
    st.subheader("Add entry")
    options = [name.display() for name in categories.categories()]
    if not options:
        st.info("Add a category before recording purchases.")
        return
    with st.form("add_entry", clear_on_submit=True):
        date_col, name_col, cost_col, cat_col = st.columns([1, 2, 1, 1])
        when = date_col.date_input("Date", value=date.today())
        name = name_col.text_input("Purchase", placeholder="Enter purchase name")
        cost = cost_col.number_input("Cost ($)", min_value=0.0, max_value=10_000.0, step=2.5)
        category = cat_col.selectbox("Category", options=options)
        submitted = st.form_submit_button("Add")

    if not submitted:
        return
    if not name.strip():
        st.warning("Enter a purchase name.")
        return
    try:
        result = submit_entry(st.session_state, name, cost, when, category)
    except ExpenseError as exc:
        st.error(str(exc))
        return
    if result is LimitResult.EXCEEDED and categories.warnings_enabled:
        st.warning(f"Spending limit for '{category}' has been reached this month.")


def _render_entries() -> None:
    manager: DataManager = st.session_state['data_manager']
    st.subheader("Entries")
    sort_col, order_col = st.columns(2)
    sort_by = sort_col.selectbox(
        "Sort by", options=list(SortBy), index=list(SortBy).index(manager.sort_by), format_func=str,
    )
    order = order_col.selectbox("Order", options=list(SortOrder), index=1, format_func=str)
    if sort_by is not manager.sort_by:
        manager.sort(sort_by)
        persist_prefs(st.session_state)

    if not len(manager):
        st.info("No entries yet.")
        return

    rows = [
        {'Date': e.date, 'Name': e.name, 'Cost': e.cost.as_number(), 'Category': e.category.display()}
        for e in manager.iter_entries(reversed=order.reversed)
    ]
    st.dataframe(rows, use_container_width=True)

    index = st.number_input("Row to delete", min_value=0, max_value=len(manager) - 1, step=1)
    if st.button("Delete row"):
        removed = delete_displayed(st.session_state, int(index), order)
        st.success(f"Deleted {removed.name}")
        _rerun()


def _render_chart() -> None:
    manager: DataManager = st.session_state['data_manager']
    categories: CategoryManager = st.session_state['categories']
    prefs = st.session_state['prefs']
    st.subheader("Spending")

    group_col, theme_col = st.columns(2)
    group_by = group_col.selectbox(
        "Group by", options=list(GroupBy), index=list(GroupBy).index(GroupBy(prefs['group_by'])), format_func=str,
    )
    themes = list(viz.THEMES)
    theme = theme_col.selectbox(
        "Theme", options=themes, index=themes.index(prefs['theme']) if prefs['theme'] in themes else 0,
    )
    if group_by.value != prefs['group_by'] or theme != prefs['theme']:
        st.session_state['prefs'] = {**prefs, 'group_by': group_by.value, 'theme': theme}
        persist_prefs(st.session_state)

    with st.expander("Displayed categories"):
        all_col, none_col = st.columns(2)
        if all_col.button("Select all"):
            categories.set_all_displayed(True)
        if none_col.button("Deselect all"):
            categories.set_all_displayed(False)
        for name, info in categories.items():
            shown = st.checkbox(name.display(), value=info.displayed, key=f"show_{name.display()}")
            if shown != info.displayed:
                categories.toggle_displayed(name, shown)

    cost_map = manager.cost_map(group_by, categories.selected_categories())
    if manager.consume_reset_view():
        st.session_state['chart_revision'] = st.session_state.get('chart_revision', 0) + 1
    fig = viz.create_cost_bar_chart(cost_map, group_by, theme)
    # a new uirevision discards the user's zoom/pan after a bulk load
    fig.update_layout(uirevision=st.session_state.get('chart_revision', 0))
    st.plotly_chart(fig, use_container_width=True)


def _render_categories() -> None:
    manager: DataManager = st.session_state['data_manager']
    categories: CategoryManager = st.session_state['categories']
    st.subheader("Categories")

    new_col, add_col = st.columns([3, 1])
    new_name = new_col.text_input("New category", key="new_category")
    if add_col.button("Add category"):
        try:
            categories.register(new_name)
        except ExpenseError as exc:
            st.error(str(exc))

    in_use = manager.categories_in_use()
    for name in categories.categories():
        label_col, delete_col = st.columns([3, 1])
        label_col.write(name.display())
        if delete_col.button("Delete", key=f"delete_{name.display()}"):
            try:
                categories.delete(name, referenced=in_use)
            except ExpenseError as exc:
                st.error(str(exc))
            else:
                _rerun()


def _render_limits() -> None:
    manager: DataManager = st.session_state['data_manager']
    categories: CategoryManager = st.session_state['categories']
    today = date.today()
    st.subheader("Spending limits")

    enabled = st.checkbox(
        "Enable spending warnings",
        value=categories.warnings_enabled,
        help=(
            "Warn when a category's monthly limit is reached while adding an entry. "
            f"Only entries in the current month ({today.month}/{today.year}) are checked."
        ),
    )
    if enabled != categories.warnings_enabled:
        categories.warnings_enabled = enabled

    for name, info in categories.items():
        value = st.number_input(
            f"{name.display()} ($, 0 = no limit)",
            min_value=0.0,
            max_value=1_000_000.0,
            step=10.0,
            value=float(info.limit or 0.0),
            key=f"limit_{name.display()}",
        )
        if (value or None) != info.limit:
            categories.set_limit(name, value)

    limits = {name: info.limit for name, info in categories.items()}
    spent = {name: manager.monthly_cost(name, today) for name in limits}
    st.plotly_chart(viz.create_limit_chart(spent, limits), use_container_width=True)


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    config.ensure_data_directories()
    st.set_page_config(page_title="Expense Dashboard", layout="wide", initial_sidebar_state="expanded")
    st.title("Expense Dashboard")

    init_session_state(st.session_state)
    _render_file_controls()

    entries_tab, chart_tab, categories_tab, limits_tab = st.tabs(["Entries", "Chart", "Categories", "Limits"])
    with entries_tab:
        _render_add_entry()
        _render_entries()
    with chart_tab:
        _render_chart()
    with categories_tab:
        _render_categories()
    with limits_tab:
        _render_limits()


if __name__ == "__main__":  # pragma: no cover
    main()
