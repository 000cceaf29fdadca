"""Cache of Rea portal time entries keyed by date range."""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime

from jira_rea_sync.errors import OperationCancelled, SyncError
from jira_rea_sync.rea.models import ReaTimeEntry

logger = logging.getLogger(__name__)


def _day(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


@dataclass(frozen=True)
class DateRangeKey:
    """Order-independent window of days used as cache key.

    Datetimes are truncated to the day and reversed bounds are swapped, so
    `DateRangeKey(a, b) == DateRangeKey(b, a)` and `start <= end` always holds.
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        start, end = _day(self.start), _day(self.end)
        if end < start:
            start, end = end, start
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def from_dates(cls, first: date, second: date) -> "DateRangeKey":
        """Build a key from two days in either order."""
        return cls(first, second)

    def overlaps(self, entry: ReaTimeEntry) -> bool:
        """Whether a time entry intersects this window."""
        return entry.start_date <= self.end and entry.end_date >= self.start

    def __str__(self) -> str:
        return f"{self.start.isoformat()}..{self.end.isoformat()}"


FetchEntries = Callable[[DateRangeKey], list[ReaTimeEntry]]


class EntryCache:
    """Rea time entries already fetched, per date range.

    Only valid for one authenticated portal identity: clear it on logout or when the
    session changes. Lists returned by `get` and `ensure` are the cached lists themselves.
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[DateRangeKey, list[ReaTimeEntry]] = {}

    def get(self, key: DateRangeKey) -> list[ReaTimeEntry] | None:
        """Get the cached entries of a range, or None if the range is not cached."""
        return self._entries.get(key)

    def ensure(
        self,
        key: DateRangeKey,
        fetch: FetchEntries,
        force_refresh: bool = False,
        on_warning: Callable[[str], None] | None = None,
    ) -> list[ReaTimeEntry]:
        """Return the entries of a range, fetching them when missing or forced.

        Fetched entries not overlapping the range are dropped before storing. A failed
        fetch removes the range from the cache and returns an empty list; the failure
        is logged and passed to `on_warning`. A cancelled fetch leaves the cache untouched.

        Args:
            key: Date range.
            fetch: Called with the key to load the entries from the portal.
            force_refresh: Fetch even if the range is cached.
            on_warning: Receives the message of a failed fetch.

        Returns:
            The cached list for the range (possibly empty).

        Raises:
            OperationCancelled: If the fetch was cancelled.
        """
        if not force_refresh:
            cached = self._entries.get(key)
            if cached is not None:
                return cached

        try:
            fetched = fetch(key)
        except OperationCancelled:
            raise
        except SyncError as e:
            message = f"Could not load Rea time entries for {key}: {e}"
            logger.warning(message)
            self._entries.pop(key, None)
            if on_warning is not None:
                on_warning(message)
            return []

        entries = [entry for entry in fetched if key.overlaps(entry)]
        self._entries[key] = entries
        logger.debug(f"Cached {len(entries)} of {len(fetched)} Rea time entries for {key}")
        return entries

    def append(self, key: DateRangeKey, entry: ReaTimeEntry) -> bool:
        """Add an entry to the cached list of a range.

        Entries not overlapping the range are never stored in its list.

        Returns:
            True if the range was cached and the entry added, False otherwise.
        """
        cached = self._entries.get(key)
        if cached is None or not key.overlaps(entry):
            return False
        cached.append(entry)
        return True

    def clear(self) -> None:
        """Drop every cached range."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
