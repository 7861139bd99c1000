"""
Snapshot Persistence Manager

Keeps the in-memory link store durable without touching the request path:
- restore(): load the last snapshot at startup (empty state if there is none)
- flush_if_dirty(): write a snapshot when there are unsaved changes
- flush_now(): unconditional write, used at shutdown
- start()/stop(): repeating flush timer on the event loop

Guarantees:
- A crash loses at most one flush interval of changes
- A clean shutdown loses nothing (stop() always performs a final flush)
- A failed write re-arms the dirty flag so the next tick retries

Loading rules:
- A missing, unreadable or invalid snapshot is logged and replaced by empty state
- shortToRecord is authoritative; longToShort is rebuilt from it
- The counter is raised to the highest counter value implied by a stored code,
  so a restored store never reissues an existing code
"""

import asyncio
import logging
import threading
from typing import Optional

from shortener.core.exceptions import SnapshotReadError, SnapshotWriteError
from shortener.core.setting import MIN_SAVE_INTERVAL_MS
from shortener.db.interface import SnapshotAdapter
from shortener.db.models import LinkRecord, SnapshotDocument, StoreState
from shortener.services.link_store import LinkStore
from shortener.services.short_code import decode_base26

logger = logging.getLogger(__name__)


def state_from_document(document: SnapshotDocument) -> StoreState:
    """
    Rebuild store state from a parsed snapshot.

    Args:
        document: Validated snapshot

    Returns:
        StoreState whose maps satisfy the long/short bijection
    """
    short_to_record = {
        code: LinkRecord(
            long_url=record.long_url,
            clicks=record.clicks,
            created_at=record.created_at,
        )
        for code, record in document.short_to_record
    }

    declared = dict(document.long_to_short)
    long_to_short: dict[str, str] = {}
    for code, record in short_to_record.items():
        if record.long_url in long_to_short:
            continue
        declared_code = declared.get(record.long_url)
        if (
            declared_code is not None
            and declared_code in short_to_record
            and short_to_record[declared_code].long_url == record.long_url
        ):
            long_to_short[record.long_url] = declared_code
        else:
            long_to_short[record.long_url] = code

    if long_to_short != declared:
        logger.warning(
            f"Snapshot longToShort disagrees with shortToRecord "
            f"({len(declared)} declared, {len(long_to_short)} rebuilt); using shortToRecord"
        )

    counter = document.counter
    highest = 0
    for code in short_to_record:
        try:
            highest = max(highest, decode_base26(code))
        except ValueError:
            logger.warning(f"Snapshot contains non-generated short code '{code}'")
    if highest > counter:
        logger.warning(f"Snapshot counter {counter} is behind stored codes, raising to {highest}")
        counter = highest

    return StoreState(
        long_to_short=long_to_short,
        short_to_record=short_to_record,
        counter=counter,
    )


class SnapshotManager:
    """
    Restores and flushes link store snapshots.

    One manager owns one snapshot location. Writes are serialised, so the
    timer and the shutdown flush never write concurrently.
    """

    def __init__(
        self,
        adapter: SnapshotAdapter,
        interval_ms: int = 60000,
        store: Optional[LinkStore] = None,
    ):
        """
        Initialize the persistence manager.

        Args:
            adapter: Snapshot storage backend
            interval_ms: Milliseconds between flushes (at least 1000)
            store: Link store to flush; set by open_store() when omitted
        """
        if interval_ms < MIN_SAVE_INTERVAL_MS:
            raise ValueError(
                f"Flush interval must be at least {MIN_SAVE_INTERVAL_MS} ms, got {interval_ms}"
            )
        self.adapter = adapter
        self.interval_ms = interval_ms
        self.store = store
        self._write_lock = threading.Lock()
        self._task: Optional[asyncio.Task] = None

    def restore(self) -> StoreState:
        """
        Load the last snapshot.

        Returns:
            Restored state, or empty state if the snapshot cannot be used
        """
        try:
            document = self.adapter.read()
        except SnapshotReadError as e:
            logger.warning(f"Starting with an empty link store: {e}")
            return StoreState()

        state = state_from_document(document)
        logger.info(
            f"Restored {len(state.short_to_record)} links from {self.adapter.describe()} "
            f"(counter={state.counter})"
        )
        return state

    def open_store(self, **store_kwargs) -> LinkStore:
        """Restore the snapshot into a new LinkStore and manage it."""
        self.store = LinkStore.from_state(self.restore(), **store_kwargs)
        return self.store

    def _require_store(self) -> LinkStore:
        if self.store is None:
            raise RuntimeError("SnapshotManager has no link store; call open_store() first")
        return self.store

    def flush_if_dirty(self) -> bool:
        """
        Write a snapshot if the store has unsaved changes.

        Returns:
            True if a snapshot was written
        """
        store = self._require_store()
        with self._write_lock:
            state = store.snapshot_if_dirty()
            if state is None:
                return False
            return self._write(store, state)

    def flush_now(self) -> bool:
        """
        Write a snapshot regardless of the dirty flag.

        Returns:
            True if the snapshot was written
        """
        store = self._require_store()
        with self._write_lock:
            return self._write(store, store.snapshot(clear_dirty=True))

    def _write(self, store: LinkStore, state: StoreState) -> bool:
        # Caller holds self._write_lock from the copy until the write completes,
        # so an older copy can never overwrite a newer snapshot.
        try:
            self.adapter.write(SnapshotDocument.from_state(state))
        except SnapshotWriteError as e:
            store.mark_dirty()
            logger.error(f"Snapshot flush failed, will retry: {e}", exc_info=True)
            return False

        logger.debug(
            f"Flushed {len(state.short_to_record)} links to {self.adapter.describe()}"
        )
        return True

    async def _run(self) -> None:
        interval = self.interval_ms / 1000
        while True:
            await asyncio.sleep(interval)
            try:
                await asyncio.to_thread(self.flush_if_dirty)
            except Exception as e:
                logger.error(f"Periodic snapshot flush crashed: {str(e)}", exc_info=True)

    async def start(self) -> None:
        """Start the repeating flush timer on the running event loop."""
        self._require_store()
        if self._task is not None:
            logger.warning("Snapshot flush timer already running")
            return
        self._task = asyncio.create_task(self._run())
        logger.info(f"Snapshot flush timer started: every {self.interval_ms} ms")

    async def stop(self) -> None:
        """Cancel the flush timer and perform the final flush."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        if self.store is not None:
            if self.flush_now():
                logger.info(f"Final snapshot written to {self.adapter.describe()}")
