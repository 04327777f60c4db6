"""ActionCatalog — the deduplicated, TTL-refreshed set of discovered actions.

The catalog holds an immutable snapshot (a tuple of frozen records).  Only
:meth:`ActionCatalog.refresh` replaces it, and it does so with a single
reference swap under a lock, so readers always see a complete snapshot.
The scan itself runs in a worker thread and never holds that lock.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from collections import Counter
from typing import TYPE_CHECKING

from intentbridge.utils.telemetry import ATTR_CATALOG_FORCED, ATTR_CATALOG_SIZE, get_tracer

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from intentbridge.discovery.models import ActionRecord
    from intentbridge.discovery.scanner import ActionScanner

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_TTL = 300.0


class ActionCatalog:
    """In-memory catalog of :class:`ActionRecord` keyed by ``id``.

    Usage::

        catalog = ActionCatalog(BundleScanner())
        await catalog.refresh()
        catalog.search("reminder")
    """

    def __init__(
        self,
        scanner: ActionScanner,
        *,
        ttl: float = DEFAULT_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._scanner = scanner
        self._ttl = ttl
        self._clock = clock
        self._snapshot: tuple[ActionRecord, ...] = ()
        self._index: dict[str, ActionRecord] = {}
        self._last_refreshed: float | None = None
        self._swap_lock = threading.Lock()
        self._refresh_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    @property
    def last_refreshed(self) -> float | None:
        """Clock reading of the last successful scan, or ``None``."""
        return self._last_refreshed

    @property
    def is_stale(self) -> bool:
        """True when a non-forced refresh would re-scan."""
        if not self.records or self._last_refreshed is None:
            return True
        return self._clock() - self._last_refreshed >= self._ttl

    async def refresh(self, force: bool = False) -> tuple[ActionRecord, ...]:
        """Return the snapshot, re-scanning first if forced or stale.

        Refreshers are serialized; one that waited on another re-checks
        freshness, so back-to-back non-forced calls scan at most once.
        Scanner errors propagate and leave the previous snapshot in place.
        """
        if not force and not self.is_stale:
            return self.records

        async with self._refresh_lock:
            if not force and not self.is_stale:
                return self.records

            with _tracer.start_as_current_span("catalog.refresh") as span:
                span.set_attribute(ATTR_CATALOG_FORCED, force)
                scanned = await asyncio.to_thread(self._scanner.scan)
                records = dedupe(scanned)
                index = {record.id: record for record in records}
                with self._swap_lock:
                    self._snapshot = records
                    self._index = index
                    self._last_refreshed = self._clock()
                span.set_attribute(ATTR_CATALOG_SIZE, len(records))

        dropped = len(scanned) - len(records)
        logger.info(
            "Catalog refreshed: %d actions from %d owners (%d duplicates dropped)",
            len(records),
            len(self.owners()),
            dropped,
        )
        return records

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[ActionRecord, ...]:
        """The current snapshot."""
        with self._swap_lock:
            return self._snapshot

    def get(self, action_id: str) -> ActionRecord | None:
        """Exact lookup by id."""
        with self._swap_lock:
            return self._index.get(action_id)

    def search(self, query: str) -> list[ActionRecord]:
        """Case-insensitive substring match over name, description and owner."""
        needle = query.lower()
        return [record for record in self.records if record.matches(needle)]

    def for_owner(self, owner_id: str) -> list[ActionRecord]:
        """All actions published by *owner_id*, in catalog order."""
        return [record for record in self.records if record.owner_id == owner_id]

    def owners(self) -> list[str]:
        """Distinct owner ids in first-seen order."""
        return list(dict.fromkeys(record.owner_id for record in self.records))

    def list_owners(self) -> list[tuple[str, int]]:
        """``(owner_id, count)`` pairs, most actions first.

        Ties keep first-seen owner order: ``Counter`` preserves insertion
        order and ``sorted`` is stable.
        """
        counts = Counter(record.owner_id for record in self.records)
        return sorted(counts.items(), key=lambda item: -item[1])

    def __len__(self) -> int:
        return len(self.records)


def dedupe(records: Iterable[ActionRecord]) -> tuple[ActionRecord, ...]:
    """Drop records whose id was already seen; first occurrence wins."""
    seen: dict[str, ActionRecord] = {}
    for record in records:
        seen.setdefault(record.id, record)
    return tuple(seen.values())
