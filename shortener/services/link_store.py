"""
Link Store

This service owns the two-way mapping between long URLs and short codes:
- long_to_short: long URL -> short code
- short_to_record: short code -> LinkRecord (long URL, clicks, created_at)
- counter: last counter value consumed by code generation

Design Decisions:
- Counter-based codes: every new link consumes exactly one counter value,
  and counter values are never reused (the counter is persisted)
- Idempotent shortening: a long URL keeps its first short code forever
- Single writer: every read and mutation runs under one lock, so the two
  maps, the counter and the dirty flag are never observed half-updated
- No delete, update or eviction: entries are permanent once created
"""

import logging
import threading
from typing import Optional

from shortener.core.exceptions import InvalidURLError, ShortCodeNotFoundError
from shortener.core.validators import MAX_URL_LENGTH, is_valid_url
from shortener.db.models import LinkRecord, StoreState, now_millis
from shortener.services.short_code import encode_base26

logger = logging.getLogger(__name__)


class LinkStore:
    """
    In-memory link store.

    Mutations set the dirty flag; the persistence manager takes a snapshot
    (clearing the flag) and writes it to disk.
    """

    def __init__(self, max_url_length: int = MAX_URL_LENGTH, clock=now_millis):
        """
        Initialize an empty link store.

        Args:
            max_url_length: Longest long URL accepted by shorten()
            clock: Callable returning the current time in epoch milliseconds
        """
        self.max_url_length = max_url_length
        self._clock = clock
        self._long_to_short: dict[str, str] = {}
        self._short_to_record: dict[str, LinkRecord] = {}
        self._counter = 0
        self._dirty = False
        self._lock = threading.Lock()

    @classmethod
    def from_state(cls, state: StoreState, **kwargs) -> "LinkStore":
        """Build a store from restored state. The new store starts clean."""
        store = cls(**kwargs)
        store._long_to_short = dict(state.long_to_short)
        store._short_to_record = {
            code: record.copy() for code, record in state.short_to_record.items()
        }
        store._counter = state.counter
        return store

    @property
    def counter(self) -> int:
        with self._lock:
            return self._counter

    @property
    def dirty(self) -> bool:
        with self._lock:
            return self._dirty

    def __len__(self) -> int:
        with self._lock:
            return len(self._short_to_record)

    def _next_counter(self) -> int:
        # Caller holds self._lock
        self._counter += 1
        return self._counter

    def shorten(self, long_url: str) -> str:
        """
        Return the short code for a long URL, creating it if needed.

        Args:
            long_url: The URL to shorten; surrounding whitespace is ignored

        Returns:
            The short code

        Raises:
            InvalidURLError: If the URL is not http(s)://<something> or is too long
        """
        if not is_valid_url(long_url, self.max_url_length):
            raise InvalidURLError(
                long_url,
                reason="Invalid URL format. URL must start with http:// or https:// followed by a host"
            )
        long_url = long_url.strip()

        with self._lock:
            short_code = self._long_to_short.get(long_url)
            if short_code is not None:
                return short_code

            short_code = encode_base26(self._next_counter())
            self._long_to_short[long_url] = short_code
            self._short_to_record[short_code] = LinkRecord(
                long_url=long_url,
                clicks=0,
                created_at=self._clock(),
            )
            self._dirty = True

        logger.info(f"Shortened {long_url} -> {short_code}")
        return short_code

    def resolve(self, short_code: str) -> Optional[str]:
        """
        Look up a short code and count the click.

        Args:
            short_code: The short code to resolve

        Returns:
            The long URL, or None if the code is unknown (nothing is modified)
        """
        with self._lock:
            record = self._short_to_record.get(short_code)
            if record is None:
                return None
            record.clicks += 1
            self._dirty = True
            return record.long_url

    def get_record(self, short_code: str) -> LinkRecord:
        """
        Return a copy of the record for a short code without counting a click.

        Raises:
            ShortCodeNotFoundError: If the code is unknown
        """
        with self._lock:
            record = self._short_to_record.get(short_code)
            if record is None:
                raise ShortCodeNotFoundError(short_code)
            return record.copy()

    def snapshot(self, clear_dirty: bool = False) -> StoreState:
        """
        Copy the complete state under the store lock.

        Args:
            clear_dirty: Clear the dirty flag in the same critical section
        """
        with self._lock:
            if clear_dirty:
                self._dirty = False
            return self._copy_state()

    def snapshot_if_dirty(self) -> Optional[StoreState]:
        """Copy the state and clear the dirty flag, or return None when clean."""
        with self._lock:
            if not self._dirty:
                return None
            self._dirty = False
            return self._copy_state()

    def mark_dirty(self) -> None:
        """Flag unsaved changes, e.g. after a failed snapshot write."""
        with self._lock:
            self._dirty = True

    def _copy_state(self) -> StoreState:
        return StoreState(
            long_to_short=dict(self._long_to_short),
            short_to_record={
                code: record.copy() for code, record in self._short_to_record.items()
            },
            counter=self._counter,
        )
