"""Client registry: the operation surface used by the CLI and tests."""

import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel

from clientbook.clients.client_models import ClientRecord
from clientbook.clients.sample_data import sample_records
from clientbook.config.loader import (
    get_registry_settings,
    get_remote_settings,
    get_storage_settings,
)
from clientbook.errors import DecodeError, NetworkError, StoreError
from clientbook.retrieval.remote_client import RemoteClient
from clientbook.store.live_query import Subscription
from clientbook.store.local_store import LocalStore
from clientbook.utils.logging import get_logger

logger = get_logger(__name__)

SUCCESS = "SUCCESS"
FAILURE = "FAILURE"


class MutationResult(BaseModel):
    """Outcome of one add/edit/remove/seed/clear call."""

    operation: str
    status: str  # SUCCESS | FAILURE
    rows_affected: int = 0
    record: Optional[ClientRecord] = None  # stored record, for add
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS


class SyncResult(BaseModel):
    """Outcome of one remote sync."""

    synced_at_utc: str  # ISO 8601
    status: str  # SUCCESS | FAILURE
    status_code: Optional[int] = None
    error: Optional[str] = None
    users_fetched: int = 0
    records_imported: int = 0
    duration_seconds: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS


class ClientRegistry:
    """
    Wires a LocalStore and a RemoteClient together.

    Mutations and sync run on a background executor and return a Future
    immediately. The future never raises for store or remote failures: it
    resolves to a result whose status says what happened, and the failure
    is logged. Callers may wait on it or drop it.
    """

    def __init__(self, store: LocalStore, remote: RemoteClient, *, max_workers: int = 1):
        self.store = store
        self.remote = remote
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="clientbook-worker",
        )

    def observe_all(self) -> Subscription:
        return self.store.observe()

    def add(self, record: ClientRecord) -> "Future[MutationResult]":
        def _add() -> Tuple[int, Optional[ClientRecord]]:
            return 1, self.store.insert(record)

        return self._submit_mutation("add", _add)

    def edit(self, record: ClientRecord) -> "Future[MutationResult]":
        return self._submit_mutation("edit", lambda: (self.store.update(record), None))

    def remove(self, record: ClientRecord) -> "Future[MutationResult]":
        return self._submit_mutation("remove", lambda: (self.store.delete(record), None))

    def seed_sample_data(self) -> "Future[MutationResult]":
        """Insert the 20 sample clients. Repeated calls append duplicates."""
        return self._submit_mutation(
            "seed",
            lambda: (len(self.store.insert_many(sample_records())), None),
        )

    def clear_all(self) -> "Future[MutationResult]":
        return self._submit_mutation("clear", lambda: (self.store.delete_all(), None))

    def sync_remote(self) -> "Future[SyncResult]":
        """Import remote users as clients (upsert by remote id). Best effort, no retry."""
        return self._executor.submit(self._run_sync)

    def close(self, wait: bool = True) -> None:
        """Finish queued work, then release the store and HTTP session."""
        self._executor.shutdown(wait=wait)
        self.store.close()
        self.remote.close()

    def __enter__(self) -> "ClientRegistry":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _submit_mutation(
        self,
        operation: str,
        fn: Callable[[], Tuple[int, Optional[ClientRecord]]],
    ) -> "Future[MutationResult]":
        return self._executor.submit(self._run_mutation, operation, fn)

    def _run_mutation(
        self,
        operation: str,
        fn: Callable[[], Tuple[int, Optional[ClientRecord]]],
    ) -> MutationResult:
        try:
            rows_affected, record = fn()
        except StoreError as e:
            logger.error(f"Client {operation} failed: {e}", exc_info=True)
            return MutationResult(operation=operation, status=FAILURE, error=str(e))

        if rows_affected == 0:
            logger.debug(f"Client {operation} affected no rows")
        return MutationResult(
            operation=operation,
            status=SUCCESS,
            rows_affected=rows_affected,
            record=record,
        )

    def _run_sync(self) -> SyncResult:
        synced_at_utc = datetime.now(timezone.utc).isoformat()
        start_time = time.monotonic()

        try:
            users = self.remote.fetch_users()
        except (NetworkError, DecodeError) as e:
            logger.error(f"Remote sync abandoned: {e}", exc_info=True)
            return SyncResult(
                synced_at_utc=synced_at_utc,
                status=FAILURE,
                status_code=getattr(e, "status_code", None),
                error=str(e),
                duration_seconds=time.monotonic() - start_time,
            )

        records = [user.to_client_record() for user in users]
        try:
            stored = self.store.insert_many(records)
        except StoreError as e:
            logger.error(f"Remote sync could not store {len(records)} users: {e}", exc_info=True)
            return SyncResult(
                synced_at_utc=synced_at_utc,
                status=FAILURE,
                error=str(e),
                users_fetched=len(users),
                duration_seconds=time.monotonic() - start_time,
            )

        logger.info(f"Imported {len(stored)} remote users")
        return SyncResult(
            synced_at_utc=synced_at_utc,
            status=SUCCESS,
            users_fetched=len(users),
            records_imported=len(stored),
            duration_seconds=time.monotonic() - start_time,
        )


def build_registry(config: Dict[str, Any], sqlite_path: Optional[str] = None) -> ClientRegistry:
    """
    Construct store, remote client and registry from a config dict.

    Args:
        config: Loaded configuration (missing sections fall back to defaults)
        sqlite_path: Optional override for storage.sqlite_path
    """
    storage = get_storage_settings(config)
    remote_settings = get_remote_settings(config)
    workers = get_registry_settings(config)["max_workers"]

    store = LocalStore.open(sqlite_path or storage["sqlite_path"])
    remote = RemoteClient.from_settings(remote_settings)
    return ClientRegistry(store, remote, max_workers=workers)
