"""Push-based live view of the client list.

Each subscriber holds at most one pending snapshot. The publisher computes one
snapshot per change and replaces whatever the subscriber has not read yet, so a
slow or idle subscriber only ever keeps the newest state. Subscribers read on
whatever thread they like, independently of the thread that made the change.
"""

import threading
import time
from typing import Callable, List, Optional

from clientbook.clients.client_models import ClientRecord
from clientbook.errors import StoreError, SubscriptionClosed
from clientbook.utils.logging import get_logger

logger = get_logger(__name__)

Snapshot = List[ClientRecord]


class Subscription:
    """
    One subscriber's view of the live list.

    Snapshots are conflated: reading returns the newest snapshot published
    since the last read. Iterating yields snapshots until the subscription is
    closed. A read failure in the store ends the iteration with StoreError.
    """

    def __init__(self, on_close: Callable[["Subscription"], None]):
        self._cond = threading.Condition()
        self._pending: Optional[Snapshot] = None
        self._error: Optional[StoreError] = None
        self._closed = False
        self._on_close = on_close

    def _push(self, snapshot: Snapshot) -> None:
        with self._cond:
            if self._closed or self._error is not None:
                return
            self._pending = snapshot
            self._cond.notify_all()

    def _fail(self, error: StoreError) -> None:
        with self._cond:
            if self._closed:
                return
            self._pending = None
            self._error = error
            self._cond.notify_all()

    def _ready(self) -> bool:
        return self._closed or self._error is not None or self._pending is not None

    def get(self, timeout: Optional[float] = None) -> Snapshot:
        """
        Block until a snapshot newer than the last one read is available.

        Args:
            timeout: Seconds to wait; None waits forever

        Returns:
            Newest snapshot, ordered by name

        Raises:
            TimeoutError: No snapshot arrived in time
            StoreError: The store failed to read (terminal)
            SubscriptionClosed: The subscription was closed
        """
        with self._cond:
            if not self._cond.wait_for(self._ready, timeout=timeout):
                raise TimeoutError(f"No snapshot within {timeout}s")
            error = self._error
            if error is None:
                if self._closed:
                    raise SubscriptionClosed("Subscription is closed")
                snapshot, self._pending = self._pending, None
                return snapshot
            self._error = None
            self._closed = True

        self._on_close(self)
        raise error

    def wait_for(self, predicate: Callable[[Snapshot], bool], timeout: float = 5.0) -> Snapshot:
        """Return the first snapshot matching predicate, skipping older ones."""
        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise TimeoutError(f"No matching snapshot within {timeout}s")
            snapshot = self.get(timeout=remaining)
            if predicate(snapshot):
                return snapshot

    def close(self) -> None:
        """Stop receiving snapshots and drop any unread one. Idempotent."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._pending = None
            self._error = None
            self._cond.notify_all()
        self._on_close(self)

    def __iter__(self):
        return self

    def __next__(self) -> Snapshot:
        try:
            return self.get()
        except SubscriptionClosed:
            raise StopIteration from None

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class LiveQuery:
    """
    Fan-out of snapshots to any number of subscriptions.

    Loading and delivery happen under the owner's lock, so every subscriber
    sees snapshots in commit order and never an older one after a newer one.
    """

    def __init__(self, load_snapshot: Callable[[], Snapshot], lock: threading.RLock):
        self._load_snapshot = load_snapshot
        self._lock = lock
        self._subscriptions: List[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def subscribe(self) -> Subscription:
        """Register a subscriber and deliver the current snapshot to it."""
        subscription = Subscription(self._unsubscribe)
        with self._lock:
            try:
                snapshot = self._load_snapshot()
            except StoreError as e:
                logger.error(f"Initial snapshot failed: {e}")
                subscription._fail(e)
                return subscription
            self._subscriptions.append(subscription)
            subscription._push(snapshot)
        return subscription

    def publish(self) -> None:
        """Load a fresh snapshot and push it to every open subscription."""
        with self._lock:
            if not self._subscriptions:
                return
            try:
                snapshot = self._load_snapshot()
            except StoreError as e:
                logger.error(f"Snapshot refresh failed, ending {len(self._subscriptions)} subscriptions: {e}")
                failed, self._subscriptions = self._subscriptions, []
                for subscription in failed:
                    subscription._fail(e)
                return
            for subscription in self._subscriptions:
                subscription._push(list(snapshot))

    def close(self) -> None:
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.close()

    def _unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)
