"""
Publish/consume hand-off between the poller and the presentation layer.

The poller calls `publish(list)` after every cycle. Consumers either read the
latest snapshot (GET /alerts) or subscribe to a queue that receives every
snapshot from then on.
"""
from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Protocol, Sequence, Set

from nws_alerts.core.contracts import AlertFeedSnapshot, NormalizedAlert
from nws_alerts.core.keying import feed_key
from nws_alerts.core.settings import settings
from nws_alerts.core.time import utc_now_iso

logger = logging.getLogger(__name__)


class AlertPublisher(Protocol):
    def publish(self, alerts: Sequence[NormalizedAlert]) -> None: ...


def make_snapshot(alerts: Sequence[NormalizedAlert], published_at: Optional[str]) -> AlertFeedSnapshot:
    items = list(alerts)
    return AlertFeedSnapshot(
        items=items,
        published_at=published_at,
        feed_key=feed_key(items),
        count=len(items),
    )


class AlertFeed:
    def __init__(self, *, queue_size: Optional[int] = None) -> None:
        self.queue_size: int = max(1, int(queue_size or settings.feed_queue_size))
        self._snapshot: AlertFeedSnapshot = make_snapshot([], None)
        self._subscribers: Set[asyncio.Queue] = set()

    def publish(self, alerts: Sequence[NormalizedAlert]) -> None:
        snap = make_snapshot(alerts, utc_now_iso())
        self._snapshot = snap

        preview = " | ".join(f"{a.event} ({a.severity}) -> {a.area_desc}" for a in snap.items[:3])
        logger.info("feed_publish count=%d key=%s %s", snap.count, snap.feed_key, preview)

        for q in list(self._subscribers):
            if q.full():
                # Drop the oldest so the newest always lands
                try:
                    q.get_nowait()
                except asyncio.QueueEmpty:
                    pass
            q.put_nowait(snap)

    def snapshot(self) -> AlertFeedSnapshot:
        return self._snapshot

    def items(self) -> List[NormalizedAlert]:
        return list(self._snapshot.items)

    def subscribe(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(q)
        return q

    def unsubscribe(self, q: asyncio.Queue) -> None:
        self._subscribers.discard(q)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
