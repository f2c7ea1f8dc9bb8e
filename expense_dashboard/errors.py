"""Exception hierarchy for the expense dashboard.

Every error raised by the data model derives from :class:`ExpenseError` so
the UI can catch one type.  Where a builtin exception already describes the
failure (``ValueError`` for bad input, ``KeyError`` for a missing category,
``IndexError`` for a bad position) the error also inherits from it.
"""

from __future__ import annotations

from typing import Optional


class ExpenseError(Exception):
    """Base class for all expense dashboard errors."""


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class ValidationError(ExpenseError, ValueError):
    """A value failed validation at construction time."""


class InvalidCostError(ValidationError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid cost: {value!r} (must be a number >= 0)")


class InvalidCategoryNameError(ValidationError):
    def __init__(self, text: object):
        self.text = text
        super().__init__(f"Invalid category name: {text!r}")


# ---------------------------------------------------------------------------
# Category registry
# ---------------------------------------------------------------------------


class DuplicateCategoryError(ExpenseError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category already exists: {name}")


class UnknownCategoryError(ExpenseError, KeyError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown category: {name}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class CategoryInUseError(ExpenseError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category '{name}' is still used by existing entries")


# ---------------------------------------------------------------------------
# Parsing and collection access
# ---------------------------------------------------------------------------


class ParseError(ExpenseError, ValueError):
    """Persisted or imported data could not be read."""


class MalformedRecordError(ParseError):
    """A single line of an entry file is malformed.

    The whole parse is aborted when this is raised; ``line_number`` is
    1-based and ``None`` when the record was not read from a file.
    """

    def __init__(self, reason: str, line_number: Optional[int] = None, line: Optional[str] = None):
        self.reason = reason
        self.line_number = line_number
        self.line = line
        location = f"line {line_number}: " if line_number is not None else ""
        super().__init__(f"Malformed record ({location}{reason})")


class EntryIndexError(ExpenseError, IndexError):
    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Entry index {index} out of range for {length} entries")
