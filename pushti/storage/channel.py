# -*- coding: utf-8 -*-
"""Storage change channel (publish/subscribe).

Every successful write or removal through `LocalStorage` is published here as a
`StorageChange`. Adapter instances bound to a key subscribe to keep their
in-memory copy current, and the sync WebSocket forwards every change to
connected clients.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageChange:
    key: str
    serialized_value: Optional[str]

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)


Subscriber = Callable[[StorageChange], None]


class ChangeChannel:
    def __init__(self) -> None:
        self._by_key: Dict[str, List[Subscriber]] = {}
        self._all: List[Subscriber] = []

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        self._by_key.setdefault(key, []).append(callback)

        def unsubscribe() -> None:
            subscribers = self._by_key.get(key, [])
            if callback in subscribers:
                subscribers.remove(callback)
            if not subscribers:
                self._by_key.pop(key, None)

        return unsubscribe

    def subscribe_all(self, callback: Subscriber) -> Callable[[], None]:
        self._all.append(callback)

        def unsubscribe() -> None:
            if callback in self._all:
                self._all.remove(callback)

        return unsubscribe

    def publish(self, change: StorageChange) -> None:
        # Copy: subscribers may unsubscribe while being notified.
        targets = list(self._by_key.get(change.key, [])) + list(self._all)
        for callback in targets:
            try:
                callback(change)
            except Exception:
                logger.exception("storage change subscriber failed for key %r", change.key)

    def subscriber_count(self, key: str | None = None) -> int:
        if key is None:
            return sum(len(v) for v in self._by_key.values()) + len(self._all)
        return len(self._by_key.get(key, []))
