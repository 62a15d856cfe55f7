"""Tests for the local store and its live query."""

import threading

import pytest

from clientbook.clients.client_models import ClientRecord
from clientbook.errors import StoreError, SubscriptionClosed
from clientbook.store.live_query import LiveQuery
from clientbook.store.local_store import LocalStore


def _record(name, id=None, email="x@example.com", ref="ref"):
    return ClientRecord(id=id, name=name, email=email, external_ref=ref)


def test_insert_returns_stored_record_with_id(store):
    stored = store.insert(_record("Ana"))

    assert stored.id is not None
    assert store.snapshot() == [stored]


def test_insert_with_existing_id_is_last_write_wins(store):
    store.insert(_record("Ana", id=1, ref="old"))
    store.insert(_record("Ana", id=1, ref="new"))

    assert store.snapshot() == [_record("Ana", id=1, ref="new")]


def test_update_and_delete_missing_are_noops(store):
    store.insert(_record("Ana", id=1))

    assert store.update(_record("Ghost", id=99)) == 0
    assert store.delete(_record("Ghost", id=99)) == 0
    assert [c.name for c in store.snapshot()] == ["Ana"]


def test_delete_all_clears_table(store):
    store.insert_many([_record("A"), _record("B"), _record("C")])

    assert store.delete_all() == 3
    assert store.count() == 0


def test_memory_store_is_shared_across_threads():
    store = LocalStore.open(":memory:")
    try:
        worker = threading.Thread(target=store.insert, args=(_record("From worker"),))
        worker.start()
        worker.join()

        assert [c.name for c in store.snapshot()] == ["From worker"]
    finally:
        store.close()


def test_observe_delivers_current_snapshot_first(store):
    store.insert(_record("Ana"))

    with store.observe() as subscription:
        assert [c.name for c in subscription.get(timeout=1)] == ["Ana"]


def test_observe_pushes_snapshot_after_each_commit(store):
    with store.observe() as subscription:
        assert subscription.get(timeout=1) == []

        store.insert(_record("Bruno"))
        assert [c.name for c in subscription.get(timeout=1)] == ["Bruno"]

        store.insert(_record("Ana"))
        assert [c.name for c in subscription.get(timeout=1)] == ["Ana", "Bruno"]


def test_unread_snapshots_are_conflated_to_latest(store):
    with store.observe() as subscription:
        for i in range(50):
            store.insert(_record(f"Client {i:02d}"))

        latest = subscription.get(timeout=1)

        assert len(latest) == 50
        assert latest == store.snapshot()
        with pytest.raises(TimeoutError):
            subscription.get(timeout=0.1)


def test_insert_many_publishes_once(store):
    with store.observe() as subscription:
        subscription.get(timeout=1)

        store.insert_many([_record("A"), _record("B")])

        assert len(subscription.get(timeout=1)) == 2
        with pytest.raises(TimeoutError):
            subscription.get(timeout=0.1)


def test_subscribers_are_independent(store):
    first = store.observe()
    second = store.observe()
    first.get(timeout=1)
    second.get(timeout=1)

    first.close()
    store.insert(_record("Ana"))

    assert [c.name for c in second.get(timeout=1)] == ["Ana"]
    with pytest.raises(SubscriptionClosed):
        first.get(timeout=1)
    second.close()


def test_iteration_stops_when_closed(store):
    subscription = store.observe()
    seen = []

    def consume():
        for snapshot in subscription:
            seen.append(len(snapshot))

    consumer = threading.Thread(target=consume)
    consumer.start()
    store.insert(_record("Ana"))
    subscription.close()
    consumer.join(timeout=2)

    assert not consumer.is_alive()
    # an unread snapshot is dropped on close
    assert seen in ([], [0], [1], [0, 1])


def test_close_ends_subscriptions_and_rejects_writes(tmp_path):
    store = LocalStore.open(str(tmp_path / "clients.db"))
    subscription = store.observe()
    subscription.get(timeout=1)

    store.close()

    with pytest.raises(SubscriptionClosed):
        subscription.get(timeout=1)
    with pytest.raises(StoreError):
        store.insert(_record("Late"))


def test_observe_after_close_raises(tmp_path):
    store = LocalStore.open(str(tmp_path / "clients.db"))
    store.close()

    with pytest.raises(StoreError, match="closed"):
        store.observe()
    assert store._live.subscriber_count == 0


def test_concurrent_writes_to_different_ids_all_land(store):
    def write(i):
        store.insert(_record(f"Client {i:02d}", id=i))

    threads = [threading.Thread(target=write, args=(i,)) for i in range(1, 21)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert [c.id for c in store.snapshot()] == list(range(1, 21))


def test_read_failure_is_terminal_for_subscribers():
    lock = threading.RLock()
    state = {"fail": False}

    def load():
        if state["fail"]:
            raise StoreError("disk I/O error")
        return []

    live = LiveQuery(load, lock)
    subscription = live.subscribe()
    assert subscription.get(timeout=1) == []

    state["fail"] = True
    live.publish()

    with pytest.raises(StoreError, match="disk I/O error"):
        subscription.get(timeout=1)
    with pytest.raises(SubscriptionClosed):
        subscription.get(timeout=1)
    assert live.subscriber_count == 0


def test_subscribe_during_read_failure_gets_error():
    def load():
        raise StoreError("database is locked")

    live = LiveQuery(load, threading.RLock())
    subscription = live.subscribe()

    with pytest.raises(StoreError):
        subscription.get(timeout=1)
    assert live.subscriber_count == 0
