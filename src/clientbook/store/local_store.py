"""Durable client storage with a live, name-ordered view."""

import threading
from pathlib import Path
from typing import Callable, Iterable, List, TypeVar

from sqlalchemy import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clientbook.clients.client_models import ClientRecord
from clientbook.database.client_repo import (
    count_clients,
    delete_all_clients,
    delete_client,
    list_clients,
    to_record,
    update_client,
    upsert_client,
)
from clientbook.database.migrate import ensure_clients_table
from clientbook.database.sqlite_client import (
    MEMORY_PATH,
    get_engine,
    get_session_factory,
    session_scope,
)
from clientbook.errors import StoreError
from clientbook.store.live_query import LiveQuery, Subscription
from clientbook.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class LocalStore:
    """
    CRUD over the clients table plus a live query.

    Every database access runs under one re-entrant lock: writes are
    serialized (last write to an id wins) and each snapshot reflects a
    committed state. Subscribers are notified after each successful commit.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._session_factory = get_session_factory(engine)
        self._lock = threading.RLock()
        self._live = LiveQuery(self._load_snapshot, self._lock)
        self._closed = False

    @classmethod
    def open(cls, sqlite_path: str) -> "LocalStore":
        """
        Open (creating if needed) the store at sqlite_path.

        Args:
            sqlite_path: SQLite file path, or ":memory:" for a throwaway store
        """
        if sqlite_path != MEMORY_PATH:
            Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)
            ensure_clients_table(sqlite_path)
        logger.debug(f"Opening client store at {sqlite_path}")
        return cls(get_engine(sqlite_path))

    def observe(self) -> Subscription:
        """
        Live snapshots ordered by name; the current one is delivered first.

        Raises:
            StoreError: The store is closed
        """
        with self._lock:
            self._check_open()
            return self._live.subscribe()

    def schema_version(self) -> int:
        """Read PRAGMA user_version through the store's engine."""
        with self._lock:
            self._check_open()
            try:
                with self._engine.connect() as conn:
                    return int(conn.exec_driver_sql("PRAGMA user_version;").scalar())
            except SQLAlchemyError as e:
                raise StoreError(f"Failed to read schema version: {e}") from e

    def snapshot(self) -> List[ClientRecord]:
        with self._lock:
            self._check_open()
            return self._load_snapshot()

    def count(self) -> int:
        with self._lock:
            self._check_open()
            try:
                with session_scope(self._session_factory) as session:
                    return count_clients(session)
            except SQLAlchemyError as e:
                raise StoreError(f"Failed to count clients: {e}") from e

    def insert(self, record: ClientRecord) -> ClientRecord:
        """Upsert by id. Returns the stored record with its assigned id."""
        return self._write(
            "insert client",
            lambda session: to_record(upsert_client(session, record)),
        )

    def insert_many(self, records: Iterable[ClientRecord]) -> List[ClientRecord]:
        """Upsert several records in one transaction, publishing once."""
        records = list(records)
        return self._write(
            f"insert {len(records)} clients",
            lambda session: [to_record(upsert_client(session, r)) for r in records],
        )

    def update(self, record: ClientRecord) -> int:
        """Replace the row with record.id. Returns rows affected (0 if absent)."""
        return self._write("update client", lambda session: update_client(session, record))

    def delete(self, record: ClientRecord) -> int:
        """Delete the row with record.id. Returns rows affected (0 if absent)."""
        return self._write("delete client", lambda session: delete_client(session, record))

    def delete_all(self) -> int:
        return self._write("delete all clients", delete_all_clients)

    def close(self) -> None:
        """End all subscriptions and release the engine."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._live.close()
        self._engine.dispose()

    def _check_open(self) -> None:
        if self._closed:
            raise StoreError("Client store is closed")

    def _load_snapshot(self) -> List[ClientRecord]:
        try:
            with session_scope(self._session_factory) as session:
                return list_clients(session)
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to read clients: {e}") from e

    def _write(self, description: str, operation: Callable[[Session], T]) -> T:
        with self._lock:
            self._check_open()
            try:
                with session_scope(self._session_factory) as session:
                    result = operation(session)
                    session.commit()
            except SQLAlchemyError as e:
                raise StoreError(f"Failed to {description}: {e}") from e
            logger.debug(f"Committed: {description}")
            self._live.publish()
            return result
