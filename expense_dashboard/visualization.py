"""Plotly visualisation helpers for the expense dashboard.

The functions here accept the structures produced by
:class:`~expense_dashboard.data_manager.DataManager` (chiefly the cost
map) and return interactive Plotly figures that Streamlit renders via
``st.plotly_chart``.

Colours are handed out in category-name order, and the cost map is
already ordered by name, so a category keeps its colour from one rerun to
the next.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, List, Mapping, Optional

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .organize import GroupBy

THEMES: Dict[str, List[str]] = {
    'sunset': px.colors.qualitative.Plotly,
    'desert': px.colors.qualitative.Antique,
    'harlequin': px.colors.qualitative.Bold,
    'gentle': px.colors.qualitative.Pastel,
}
DEFAULT_THEME = 'sunset'


def theme_colors(theme: str) -> List[str]:
    """Return the palette for ``theme``, falling back to the default."""
    return list(THEMES.get(str(theme).lower(), THEMES[DEFAULT_THEME]))


def bucket_label(bucket: date, group_by: GroupBy) -> str:
    """Axis label for a bucket key."""
    if group_by is GroupBy.YEAR:
        return f"{bucket.year:04d}"
    if group_by is GroupBy.MONTH:
        return f"{bucket.year:04d}-{bucket.month:02d}"
    return bucket.isoformat()


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def cost_map_to_frame(cost_map: Mapping, group_by: GroupBy) -> pd.DataFrame:
    """Flatten a cost map into long format.

    Parameters
    ----------
    cost_map : mapping
        ``{category: {bucket_date: total}}`` as returned by
        ``DataManager.cost_map``.
    group_by : GroupBy
        Granularity the map was built with; used for the labels.

    Returns
    -------
    pandas.DataFrame
        Columns ``Bucket``, ``Label``, ``Category`` and ``Cost``, one row
        per category and bucket, in category then date order.
    """
    rows = [
        {
            'Bucket': bucket,
            'Label': bucket_label(bucket, group_by),
            'Category': str(category),
            'Cost': float(total),
        }
        for category, series in cost_map.items()
        for bucket, total in series.items()
    ]
    return pd.DataFrame(rows, columns=['Bucket', 'Label', 'Category', 'Cost'])


def create_cost_bar_chart(
    cost_map: Mapping,
    group_by: GroupBy,
    theme: str = DEFAULT_THEME,
    title: Optional[str] = None,
) -> go.Figure:
    """Stacked bar chart of spending per bucket, one trace per category.

    Parameters
    ----------
    cost_map : mapping
        Zero-filled cost map; every category shares the same buckets.
    group_by : GroupBy
        Granularity of the buckets.
    theme : str
        Palette name from :data:`THEMES`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Stacked bar chart.
    """
    df = cost_map_to_frame(cost_map, group_by)
    if df.empty:
        return _empty_figure()

    colors = theme_colors(theme)
    fig = go.Figure()
    for idx, (category, group) in enumerate(df.groupby('Category', sort=False)):
        fig.add_trace(
            go.Bar(
                x=group['Label'],
                y=group['Cost'],
                name=category,
                marker_color=colors[idx % len(colors)],
                hovertemplate="%{x}: " + category + "<br>$%{y:.2f}<extra></extra>",
            )
        )
    fig.update_layout(
        title=title or f"Spending by {group_by.value}",
        barmode='stack',
        xaxis_title=str(group_by),
        yaxis_title="Cost",
        yaxis_tickprefix="$",
        xaxis_type='category',
    )
    return fig


def create_limit_chart(
    spent: Mapping,
    limits: Mapping,
    title: Optional[str] = None,
) -> go.Figure:
    """Compare this month's spending with each category's limit.

    Parameters
    ----------
    spent : mapping
        Category to amount spent in the current month.
    limits : mapping
        Category to limit; categories without a limit are skipped.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Bars of spending (red where the limit is met) with limit markers.
    """
    rows = [
        (str(category), float(spent.get(category, 0.0)), float(limit))
        for category, limit in limits.items()
        if limit is not None
    ]
    if not rows:
        return _empty_figure("No spending limits set")

    df = pd.DataFrame(rows, columns=['Category', 'Spent', 'Limit'])
    colors = np.where(df['Spent'] >= df['Limit'], '#d62728', '#2ca02c')
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df['Category'], y=df['Spent'], name="Spent", marker_color=list(colors)))
    fig.add_trace(
        go.Scatter(
            x=df['Category'],
            y=df['Limit'],
            name="Limit",
            mode='markers',
            marker={'symbol': 'line-ew-open', 'size': 28, 'color': '#333333'},
        )
    )
    fig.update_layout(
        title=title or "Spending this month vs. limits",
        xaxis_title="Category",
        yaxis_title="Cost",
        yaxis_tickprefix="$",
    )
    return fig
