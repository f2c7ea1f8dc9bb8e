"""Unit tests for the entry value types."""

from __future__ import annotations

import math
from datetime import date

import pytest

from expense_dashboard.entry import CategoryName, Cost, Entry
from expense_dashboard.errors import InvalidCategoryNameError, InvalidCostError, MalformedRecordError


def test_cost_accepts_zero_and_positive() -> None:
    assert Cost(0).as_number() == 0.0
    assert Cost(4.5).as_number() == 4.5
    assert float(Cost(1500)) == 1500.0


@pytest.mark.parametrize("value", [-0.01, -100, math.nan, "abc", None, True])
def test_cost_rejects_invalid_values(value) -> None:
    with pytest.raises(InvalidCostError):
        Cost(value)


def test_cost_is_immutable() -> None:
    cost = Cost(3.0)
    with pytest.raises(AttributeError):
        cost.value = 5.0  # type: ignore[misc]


@pytest.mark.parametrize("text", ["Food", "FOOD", "  food ", "fOoD\t"])
def test_category_name_normalizes_case_and_whitespace(text: str) -> None:
    assert CategoryName.parse(text).display() == "food"


def test_category_name_keeps_inner_whitespace() -> None:
    assert str(CategoryName("Eating Out")) == "eating out"


@pytest.mark.parametrize("text", ["", " ", "\t\n", "food1", "a.b", "_abcde!.eg/", "rent,misc"])
def test_category_name_rejects_invalid(text: str) -> None:
    with pytest.raises(InvalidCategoryNameError):
        CategoryName.parse(text)


def test_category_name_ordering_is_lexicographic() -> None:
    names = [CategoryName("rent"), CategoryName("Food"), CategoryName("misc")]
    assert [n.display() for n in sorted(names)] == ["food", "misc", "rent"]


def test_entry_equality_ignores_cost() -> None:
    a = Entry.create("Coffee", 4.5, date(2024, 3, 1), "misc")
    b = Entry.create("Coffee", 9.0, date(2024, 3, 1), "MISC")
    c = Entry.create("Coffee", 4.5, date(2024, 3, 2), "misc")
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert len({a, b, c}) == 2


def test_entry_create_parses_iso_date() -> None:
    entry = Entry.create("Rent", "1500", "2024-03-01", "rent")
    assert entry.date == date(2024, 3, 1)
    assert entry.cost.as_number() == 1500.0


def test_entry_record_round_trip() -> None:
    entry = Entry.create("Coffee", 4.5, date(2024, 3, 1), "misc")
    record = entry.to_record()
    assert record == ["Coffee", "2024-03-01", "4.5", "misc"]
    restored = Entry.from_record(record)
    assert restored == entry
    assert restored.cost == entry.cost


@pytest.mark.parametrize(
    "fields",
    [
        ["Coffee", "2024-03-01", "4.5"],
        ["Coffee", "2024-03-01", "4.5", "misc", "extra"],
        ["Coffee", "03/01/2024", "4.5", "misc"],
        ["Coffee", "2024-03-01", "four", "misc"],
        ["Coffee", "2024-03-01", "-1", "misc"],
        ["Coffee", "2024-03-01", "4.5", "misc2"],
    ],
)
def test_entry_from_record_rejects_malformed(fields) -> None:
    with pytest.raises(MalformedRecordError):
        Entry.from_record(fields)
