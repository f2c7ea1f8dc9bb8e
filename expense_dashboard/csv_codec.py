"""Reading and writing entry files.

An entry file holds one purchase per line with the fields
``name,date,cost,category`` and no header row::

    Coffee,2024-03-01,4.5,misc
    Rent,2024-03-01,1500.0,rent

Dates are ``YYYY-MM-DD``, costs are plain float literals and categories
use their normalized (lower-case) form.  Fields are written with minimal
CSV quoting, so a line only gains quotes when a name contains a comma,
a quote or a line break; every other line is plain comma-separated text.

Parsing is all or nothing: the first malformed line aborts the read with
:class:`~expense_dashboard.errors.MalformedRecordError`.
"""

from __future__ import annotations

import csv
import io
import shutil
from pathlib import Path
from typing import IO, Iterable, List, Union

from .config import BACKUP_SUFFIX
from .entry import Entry
from .errors import MalformedRecordError
from .logging_setup import get_logger

logger = get_logger(__name__)

Source = Union[str, bytes, IO[str], IO[bytes]]


# ---------------------------------------------------------------------------
# Text codec
# ---------------------------------------------------------------------------


def serialize(entries: Iterable[Entry]) -> str:
    """Render entries as entry-file text, one line per entry."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n', quoting=csv.QUOTE_MINIMAL)
    for entry in entries:
        writer.writerow(entry.to_record())
    return buffer.getvalue()


def _read_text(source: Source) -> str:
    try:
        if hasattr(source, 'read'):
            source = source.read()  # type: ignore[union-attr]
        if isinstance(source, bytes):
            return source.decode('utf-8-sig')
    except UnicodeDecodeError as exc:
        raise MalformedRecordError(f"not UTF-8 text: {exc}") from exc
    return source  # type: ignore[return-value]


def parse(source: Source) -> List[Entry]:
    """Parse entry-file text (or a stream of it) into entries.

    Blank lines are ignored.

    Raises:
        MalformedRecordError: If the text is not UTF-8, or for the first
            line that does not hold exactly four valid fields.
    """
    text = _read_text(source)
    entries: List[Entry] = []
    reader = csv.reader(io.StringIO(text, newline=''), strict=True)
    line_number = 0
    while True:
        try:
            fields = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            raise MalformedRecordError(str(exc), reader.line_num) from exc
        line_number = reader.line_num
        if not fields or (len(fields) == 1 and not fields[0].strip()):
            continue
        try:
            entries.append(Entry.from_record(fields))
        except MalformedRecordError as exc:
            raise MalformedRecordError(exc.reason, line_number, ','.join(fields)) from exc
    return entries


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


def read_entries_from_file(file_path: Union[str, Path]) -> List[Entry]:
    """Read all entries from ``file_path``.

    Raises:
        OSError: If the file cannot be opened.
        MalformedRecordError: If the file is not UTF-8 or any line is malformed.
    """
    path = Path(file_path)
    with path.open('r', encoding='utf-8-sig', newline='') as handle:
        return parse(handle)


def backup_path_for(file_path: Union[str, Path]) -> Path:
    """Where the previous contents of ``file_path`` are kept before a write."""
    return Path(file_path).with_suffix(BACKUP_SUFFIX)


def write_entries_to_file(entries: Iterable[Entry], file_path: Union[str, Path]) -> None:
    """Overwrite ``file_path`` with ``entries``.

    The current file is first copied to :func:`backup_path_for`.  A failed
    backup is logged and does not stop the write; the backup is never
    removed afterwards.

    Raises:
        OSError: If the file itself cannot be written.
    """
    path = Path(file_path)
    if path.exists():
        backup = backup_path_for(path)
        try:
            shutil.copyfile(path, backup)
        except OSError as e:
            logger.warning("Could not back up %s to %s: %s", path, backup, e)
        else:
            logger.debug("Backed up %s to %s", path, backup)

    path.parent.mkdir(parents=True, exist_ok=True)
    text = serialize(entries)
    logger.debug("Writing entries to %s", path)
    with path.open('w', encoding='utf-8', newline='') as handle:
        handle.write(text)
