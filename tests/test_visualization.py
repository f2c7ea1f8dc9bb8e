from __future__ import annotations

from datetime import date

from expense_dashboard import visualization as viz
from expense_dashboard.entry import CategoryName
from expense_dashboard.organize import GroupBy


def _cost_map():
    return {
        CategoryName("misc"): {date(2024, 2, 1): 0.0, date(2024, 3, 1): 4.5},
        CategoryName("rent"): {date(2024, 2, 1): 1500.0, date(2024, 3, 1): 1500.0},
    }


def test_bucket_labels() -> None:
    day = date(2024, 3, 1)
    assert viz.bucket_label(day, GroupBy.DAY) == "2024-03-01"
    assert viz.bucket_label(day, GroupBy.MONTH) == "2024-03"
    assert viz.bucket_label(day, GroupBy.YEAR) == "2024"


def test_cost_map_to_frame_is_long_and_ordered() -> None:
    df = viz.cost_map_to_frame(_cost_map(), GroupBy.MONTH)
    assert list(df.columns) == ["Bucket", "Label", "Category", "Cost"]
    assert df["Category"].tolist() == ["misc", "misc", "rent", "rent"]
    assert df["Label"].tolist() == ["2024-02", "2024-03", "2024-02", "2024-03"]
    assert df["Cost"].sum() == 3004.5


def test_cost_bar_chart_has_one_stacked_trace_per_category() -> None:
    fig = viz.create_cost_bar_chart(_cost_map(), GroupBy.MONTH, theme="gentle")
    assert [trace.name for trace in fig.data] == ["misc", "rent"]
    assert fig.layout.barmode == "stack"
    palette = viz.theme_colors("gentle")
    assert fig.data[0].marker.color == palette[0]
    assert fig.data[1].marker.color == palette[1]


def test_cost_bar_chart_empty() -> None:
    fig = viz.create_cost_bar_chart({}, GroupBy.DAY)
    assert len(fig.data) == 0
    assert fig.layout.title.text == "No data to display"


def test_unknown_theme_falls_back() -> None:
    assert viz.theme_colors("neon") == viz.theme_colors(viz.DEFAULT_THEME)


def test_limit_chart_skips_categories_without_limits() -> None:
    spent = {CategoryName("rent"): 1500.0, CategoryName("food"): 20.0}
    limits = {CategoryName("rent"): 1000.0, CategoryName("food"): None, CategoryName("fun"): 50.0}
    fig = viz.create_limit_chart(spent, limits)
    bars = fig.data[0]
    assert list(bars.x) == ["rent", "fun"]
    assert list(bars.y) == [1500.0, 0.0]
    assert list(bars.marker.color) == ["#d62728", "#2ca02c"]


def test_limit_chart_without_limits() -> None:
    fig = viz.create_limit_chart({}, {CategoryName("rent"): None})
    assert fig.layout.title.text == "No spending limits set"
