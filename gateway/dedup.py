"""Bounded memory of recently accepted provider event ids."""

from collections import OrderedDict
from typing import Optional


class RecentEventIds:
    """
    Remembers the last `capacity` event ids.

    Used to accept each provider delivery at most once when a provider
    redelivers an event it believes was not acknowledged.
    """

    def __init__(self, capacity: int = 1024):
        self._capacity = capacity
        self._seen: OrderedDict[str, None] = OrderedDict()

    def first_seen(self, event_id: Optional[str]) -> bool:
        """Record event_id; False if it was already recorded. None is always new."""
        if event_id is None:
            return True
        if event_id in self._seen:
            self._seen.move_to_end(event_id)
            return False
        self._seen[event_id] = None
        if len(self._seen) > self._capacity:
            self._seen.popitem(last=False)
        return True

    def __len__(self) -> int:
        return len(self._seen)
