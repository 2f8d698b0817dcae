# src/bizboard/data/changes.py

from __future__ import annotations

"""
Change notifications.

A tiny in-process pub/sub keyed by (table, business_id). The gateway
publishes after every successful write; views subscribe to the rows they
display and refetch when something changes.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    INSERT = "insert"
    UPDATE = "update"


@dataclass(slots=True, frozen=True)
class ChangeEvent:
    table: str
    kind: ChangeKind
    business_id: str
    row_id: str


ChangeCallback = Callable[[ChangeEvent], None]


@dataclass(slots=True, eq=False)
class Subscription:
    feed: ChangeFeed
    table: str
    business_id: str
    events: frozenset[ChangeKind]
    callback: ChangeCallback
    active: bool = field(default=True)

    def matches(self, event: ChangeEvent) -> bool:
        return (
            self.active
            and event.table == self.table
            and event.business_id == self.business_id
            and event.kind in self.events
        )

    def unsubscribe(self) -> None:
        self.feed.remove(self)


class ChangeFeed:
    def __init__(self) -> None:
        self._subs: list[Subscription] = []

    def subscribe(
        self,
        table: str,
        business_id: str,
        callback: ChangeCallback,
        *,
        events: Iterable[ChangeKind] = (ChangeKind.UPDATE,),
    ) -> Subscription:
        sub = Subscription(
            feed=self,
            table=table,
            business_id=business_id,
            events=frozenset(events),
            callback=callback,
        )
        self._subs.append(sub)
        logger.debug("Subscribed table=%s business_id=%s events=%s", table, business_id, sorted(sub.events))
        return sub

    def remove(self, sub: Subscription) -> None:
        sub.active = False
        if sub in self._subs:
            self._subs.remove(sub)
            logger.debug("Unsubscribed table=%s business_id=%s", sub.table, sub.business_id)

    def subscriber_count(self) -> int:
        return len(self._subs)

    def publish(self, event: ChangeEvent) -> int:
        """Deliver to every matching subscriber. Returns how many were called."""
        delivered = 0
        for sub in list(self._subs):
            if not sub.matches(event):
                continue
            try:
                sub.callback(event)
                delivered += 1
            except Exception:
                logger.exception("Change callback failed table=%s row_id=%s", event.table, event.row_id)
        return delivered
