"""Hand-off of imported entry files from a background reader to the UI loop.

Uploads and file picks are parsed on a worker thread so the UI keeps
rendering.  The worker drops its result into a :class:`ResultInbox`; the UI
polls the inbox once per run and feeds whatever it finds into the
:class:`~expense_dashboard.data_manager.DataManager`.

The inbox holds at most one result.  A newer result replaces one that has
not been collected yet, and polling never waits on the worker: if the
worker is holding the lock the poll returns ``None`` and the UI simply
tries again on its next run.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Generic, List, Optional, TypeVar

from .entry import Entry
from .logging_setup import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


@dataclass
class ImportResult:
    """Outcome of reading one picked file."""
    source: str
    entries: Optional[List[Entry]] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.entries is not None


class ResultInbox(Generic[T]):
    """A single slot guarded by a lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._slot: Optional[T] = None

    def deposit(self, value: T) -> None:
        with self._lock:
            if self._slot is not None:
                logger.debug("Replacing uncollected result in inbox")
            self._slot = value

    def poll(self) -> Optional[T]:
        """Take and clear the pending value without blocking."""
        if not self._lock.acquire(blocking=False):
            return None
        try:
            value, self._slot = self._slot, None
        finally:
            self._lock.release()
        return value

    def has_pending(self) -> bool:
        with self._lock:
            return self._slot is not None


def pick_async(
    loader: Callable[[Any], List[Entry]],
    source: Any,
    inbox: ResultInbox[ImportResult],
    label: Optional[str] = None,
) -> threading.Thread:
    """Run ``loader(source)`` on a daemon thread and deposit the outcome.

    Errors raised by ``loader`` are captured in the deposited
    :class:`ImportResult` instead of escaping the thread.
    """
    name = label or str(source)

    def _work() -> None:
        try:
            entries = loader(source)
        except Exception as exc:  # reported to the UI through the inbox
            logger.error("Import of %s failed: %s", name, exc)
            inbox.deposit(ImportResult(source=name, error=exc))
            return
        inbox.deposit(ImportResult(source=name, entries=list(entries)))

    thread = threading.Thread(target=_work, name=f"import-{name}", daemon=True)
    thread.start()
    return thread


def apply_pending(inbox: ResultInbox[ImportResult], data_manager, categories=None) -> Optional[ImportResult]:
    """Collect a pending import, if any, and load it into ``data_manager``.

    Successful imports replace the entries, are re-sorted by the active key
    and register any new categories with ``categories``.  Failed imports
    leave everything untouched.  Returns the collected result, or ``None``.
    """
    result = inbox.poll()
    if result is None:
        return None
    if not result.ok:
        logger.error("Discarding failed import from %s: %s", result.source, result.error)
        return result

    data_manager.replace_all(result.entries)
    data_manager.sort(data_manager.sort_by)
    if categories is not None:
        categories.register_many(sorted({entry.category for entry in result.entries}))
    logger.debug("Imported %d entries from %s", len(result.entries), result.source)
    return result
