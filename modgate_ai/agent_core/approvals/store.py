"""In-memory store of pending invocations.

Entries are keyed by their opaque request id. ``pop`` removes the entry and
returns it in one step under the store lock, so two concurrent decisions on
the same id can never both obtain it.

Evicted entries leave a tombstone behind for another TTL period (and at most
``max_tombstones`` of them), so a late decision is still reported as expired
rather than unknown.
"""

import asyncio
import logging
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from ..errors import RequestExpiredError, RequestNotFoundError
from ..schemas.domain import PendingInvocation

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PendingInvocationStore:
    """TTL-bounded mapping of request id to ``PendingInvocation``.

    Attributes:
        ttl_seconds: Lifetime applied to entries stored without ``expires_at``.
    """

    def __init__(
        self,
        ttl_seconds: float = 900.0,
        clock: Optional[Callable[[], datetime]] = None,
        max_tombstones: int = 10000,
    ) -> None:
        self._entries: Dict[str, PendingInvocation] = {}
        self._tombstones: "OrderedDict[str, datetime]" = OrderedDict()
        self._max_tombstones = max_tombstones
        self._lock = asyncio.Lock()
        self._clock = clock or _utc_now
        self.ttl_seconds = ttl_seconds

    async def put(self, pending: PendingInvocation) -> PendingInvocation:
        """Store ``pending``, stamping its expiry when it has none.

        Returns:
            The stored entry (with ``expires_at`` set).
        """
        if pending.expires_at is None:
            pending = pending.model_copy(update={"expires_at": self._clock() + timedelta(seconds=self.ttl_seconds)})
        async with self._lock:
            self._evict_expired_locked()
            self._entries[pending.request_id] = pending
        logger.debug(f"Stored pending invocation {pending.request_id} for {pending.module}.{pending.command}")
        return pending

    async def pop(self, request_id: str) -> PendingInvocation:
        """Atomically remove and return the entry for ``request_id``.

        Raises:
            RequestNotFoundError: If no entry exists (unknown or already consumed).
            RequestExpiredError: If the entry's TTL has elapsed, whether or not it
                was already evicted. The entry is removed either way.
        """
        async with self._lock:
            pending = self._entries.pop(request_id, None)
            self._evict_expired_locked()
            evicted = self._tombstones.pop(request_id, None) if pending is None else None
        if evicted is not None:
            logger.info(f"Pending invocation {request_id} expired at {evicted.isoformat()} before a decision arrived")
            raise RequestExpiredError(request_id)
        if pending is None:
            raise RequestNotFoundError(request_id)
        if pending.is_expired(self._clock()):
            logger.info(f"Pending invocation {request_id} expired before a decision arrived")
            raise RequestExpiredError(request_id)
        return pending

    async def get(self, request_id: str) -> Optional[PendingInvocation]:
        """Return the live entry for ``request_id`` without consuming it."""
        async with self._lock:
            pending = self._entries.get(request_id)
        if pending is None or pending.is_expired(self._clock()):
            return None
        return pending

    async def purge_expired(self) -> List[str]:
        """Evict every expired entry and return the evicted ids."""
        async with self._lock:
            return self._evict_expired_locked()

    async def size(self) -> int:
        async with self._lock:
            return len(self._entries)

    def _evict_expired_locked(self) -> List[str]:
        now = self._clock()
        expired = [rid for rid, p in self._entries.items() if p.is_expired(now)]
        for rid in expired:
            self._tombstones[rid] = self._entries.pop(rid).expires_at or now
        self._prune_tombstones_locked(now)
        if expired:
            logger.info(f"Evicted {len(expired)} expired pending invocation(s)")
        return expired

    def _prune_tombstones_locked(self, now: datetime) -> None:
        horizon = now - timedelta(seconds=self.ttl_seconds)
        stale = [rid for rid, expired_at in self._tombstones.items() if expired_at <= horizon]
        for rid in stale:
            del self._tombstones[rid]
        while len(self._tombstones) > self._max_tombstones:
            self._tombstones.popitem(last=False)
