"""
In-memory record of webhook event ids that were already handled.

Stripe delivers at least once, so the same event id can show up again
(retries, replays from the dashboard). The cache lets the webhook
acknowledge a repeat without touching WooCommerce a second time.

Per-process only: with several workers a duplicate can still reach a
worker that has not seen the event. The order status guard in the webhook
service is what catches that case.
"""
import logging
import time
from collections import OrderedDict
from typing import Callable

logger = logging.getLogger(__name__)


class ProcessedEventCache:
    """
    TTL-bounded set of event ids, oldest evicted first.

    mark() is synchronous with no await inside, so on a single event loop
    two concurrent deliveries of one event cannot both see it as new.
    """

    def __init__(
        self,
        ttl_seconds: int = 86_400,
        max_size: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        # {event_id: first_seen_monotonic}
        self._seen: OrderedDict[str, float] = OrderedDict()

    def _cleanup(self, now: float) -> None:
        """Drop expired ids (insertion order == age order)."""
        cutoff = now - self._ttl
        while self._seen:
            event_id, seen_at = next(iter(self._seen.items()))
            if seen_at > cutoff:
                break
            self._seen.popitem(last=False)

    def mark(self, event_id: str) -> bool:
        """
        Record an event id.

        Returns:
            True if the id was new, False if it was already recorded
        """
        now = self._clock()
        self._cleanup(now)

        if event_id in self._seen:
            return False

        self._seen[event_id] = now
        if len(self._seen) > self._max_size:
            evicted, _ = self._seen.popitem(last=False)
            logger.debug(f"Event cache full, evicted {evicted}")
        return True

    def discard(self, event_id: str) -> None:
        """Forget an event id so a redelivery is handled again."""
        self._seen.pop(event_id, None)

    def __contains__(self, event_id: str) -> bool:
        self._cleanup(self._clock())
        return event_id in self._seen

    def __len__(self) -> int:
        return len(self._seen)
