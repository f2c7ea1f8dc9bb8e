"""Purchase records and the validated values they are built from.

``Cost`` and ``CategoryName`` can only be created through their
constructors, which is where validation happens; once built they are
immutable.  ``Entry`` ties a free-text name and a calendar date to one of
each.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Sequence, Union

from .errors import InvalidCategoryNameError, InvalidCostError, MalformedRecordError, ValidationError

DATE_FORMAT = "%Y-%m-%d"


@dataclass(frozen=True)
class Cost:
    """A non-negative monetary amount."""

    value: float

    def __post_init__(self) -> None:
        raw = self.value
        if isinstance(raw, bool):
            raise InvalidCostError(raw)
        try:
            amount = float(raw)
        except (TypeError, ValueError):
            raise InvalidCostError(raw) from None
        # NaN fails every comparison, so this also rejects it
        if not amount >= 0:
            raise InvalidCostError(raw)
        object.__setattr__(self, 'value', amount)

    def as_number(self) -> float:
        return self.value

    def __float__(self) -> float:
        return self.value


@dataclass(frozen=True, order=True)
class CategoryName:
    """A user-defined category label, stored trimmed and lower-cased.

    Only alphabetic characters and whitespace are allowed, so names can be
    written to the entry file without escaping and compare
    case-insensitively.
    """

    value: str

    def __post_init__(self) -> None:
        text = self.value
        if not isinstance(text, str):
            raise InvalidCategoryNameError(text)
        trimmed = text.strip()
        if not trimmed or not all(ch.isalpha() or ch.isspace() for ch in trimmed):
            raise InvalidCategoryNameError(text)
        object.__setattr__(self, 'value', trimmed.lower())

    @classmethod
    def parse(cls, text: Union[str, CategoryName]) -> CategoryName:
        if isinstance(text, CategoryName):
            return text
        return cls(text)

    def display(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(eq=False)
class Entry:
    """One recorded purchase.

    Two entries are equal when name, date and category match; the cost is
    not part of the identity.
    """

    name: str
    cost: Cost
    date: date
    category: CategoryName

    @classmethod
    def create(
        cls,
        name: str,
        cost: Union[Cost, float, str],
        when: Union[date, str],
        category: Union[CategoryName, str],
    ) -> Entry:
        """Build an entry from loosely typed UI or script input."""
        if not isinstance(cost, Cost):
            cost = Cost(cost)
        if isinstance(when, str):
            try:
                when = datetime.strptime(when.strip(), DATE_FORMAT).date()
            except ValueError:
                raise ValidationError(f"Invalid date: {when!r} (expected YYYY-MM-DD)") from None
        elif isinstance(when, datetime):
            when = when.date()
        return cls(name=name, cost=cost, date=when, category=CategoryName.parse(category))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entry):
            return NotImplemented
        return (self.name, self.date, self.category) == (other.name, other.date, other.category)

    def __hash__(self) -> int:
        return hash((self.name, self.date, self.category))

    def __str__(self) -> str:
        return f"Entry(name: {self.name}, cost: {self.cost.value!r}, date: {self.date.isoformat()})"

    # -----------------------------------------------------------------------
    # Record conversion
    # -----------------------------------------------------------------------

    def to_record(self) -> List[str]:
        """Return the persisted fields: name, ISO date, cost, category."""
        return [self.name, self.date.isoformat(), repr(self.cost.value), self.category.display()]

    @classmethod
    def from_record(cls, fields: Sequence[str]) -> Entry:
        if len(fields) != 4:
            raise MalformedRecordError(f"record must have exactly 4 fields, found {len(fields)}")
        name, date_text, cost_text, category_text = fields

        try:
            when = datetime.strptime(date_text.strip(), DATE_FORMAT).date()
        except ValueError:
            raise MalformedRecordError(f"invalid date {date_text!r}") from None

        try:
            amount = float(cost_text)
        except ValueError:
            raise MalformedRecordError(f"invalid cost {cost_text!r}") from None

        try:
            cost = Cost(amount)
            category = CategoryName(category_text)
        except ValidationError as exc:
            raise MalformedRecordError(str(exc)) from exc

        return cls(name=name, cost=cost, date=when, category=category)
