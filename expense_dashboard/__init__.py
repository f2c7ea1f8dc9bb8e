"""Top‑level package for the Expense Dashboard.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``entry`` – the ``Entry``, ``Cost`` and ``CategoryName`` value types
* ``categories`` – the category registry and spending limits
* ``data_manager`` – entry storage, sorting and cost aggregation
* ``csv_codec`` – reading and writing entry files
* ``visualization`` – functions that generate Plotly figures
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run expense_dashboard/dashboard.py
```
"""

from . import csv_codec  # noqa: F401  # re-exported for convenience
from . import visualization  # noqa: F401  # re-exported for convenience
from .categories import CategoryInfo, CategoryManager, LimitResult
from .data_manager import DataManager
from .entry import CategoryName, Cost, Entry
from .organize import GroupBy, SortBy, SortOrder

__all__ = [
    "CategoryInfo",
    "CategoryManager",
    "CategoryName",
    "Cost",
    "DataManager",
    "Entry",
    "GroupBy",
    "LimitResult",
    "SortBy",
    "SortOrder",
    "csv_codec",
    "visualization",
]
