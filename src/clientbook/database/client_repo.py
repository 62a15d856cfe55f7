"""Repository functions for the clients table.

Functions take an open session and never commit; the caller owns the transaction.
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from clientbook.clients.client_models import ClientRecord
from clientbook.database.schema import Client
from clientbook.utils.logging import get_logger

logger = get_logger(__name__)


def to_record(row: Client) -> ClientRecord:
    return ClientRecord(
        id=row.id,
        name=row.name,
        email=row.email,
        external_ref=row.external_ref,
    )


def list_clients(session: Session) -> List[ClientRecord]:
    """
    All clients ordered by name.

    Ordering uses SQLite's default BINARY collation, so it is case-sensitive
    ("Zoe" sorts before "ana"). Ties are broken by id.
    """
    rows = session.query(Client).order_by(Client.name.asc(), Client.id.asc()).all()
    return [to_record(row) for row in rows]


def count_clients(session: Session) -> int:
    return session.query(Client).count()


def get_client(session: Session, client_id: int) -> Optional[Client]:
    """Get client row by ID."""
    return session.get(Client, client_id)


def upsert_client(session: Session, record: ClientRecord) -> Client:
    """
    Insert a client, or fully replace the row that has the same id.

    Args:
        session: SQLAlchemy session
        record: Client to store. id=None lets the database assign the next id.

    Returns:
        The stored Client row (flushed, so its id is populated)
    """
    if record.id is None:
        row = Client(name=record.name, email=record.email, external_ref=record.external_ref)
        session.add(row)
        session.flush()
        logger.debug(f"Inserted client {row.id}")
        return row

    row = get_client(session, record.id)
    if row is None:
        row = Client(
            id=record.id,
            name=record.name,
            email=record.email,
            external_ref=record.external_ref,
        )
        session.add(row)
        logger.debug(f"Inserted client {record.id}")
    else:
        row.name = record.name
        row.email = record.email
        row.external_ref = record.external_ref
        logger.debug(f"Replaced client {record.id}")
    session.flush()
    return row


def update_client(session: Session, record: ClientRecord) -> int:
    """
    Replace every field of the row whose id matches.

    Returns:
        Rows affected (0 when the id is unknown or None)
    """
    if record.id is None:
        return 0
    return (
        session.query(Client)
        .filter(Client.id == record.id)
        .update(
            {
                Client.name: record.name,
                Client.email: record.email,
                Client.external_ref: record.external_ref,
            },
            synchronize_session=False,
        )
    )


def delete_client(session: Session, record: ClientRecord) -> int:
    """Delete the row matching record.id. Returns rows affected."""
    if record.id is None:
        return 0
    return (
        session.query(Client)
        .filter(Client.id == record.id)
        .delete(synchronize_session=False)
    )


def delete_all_clients(session: Session) -> int:
    return session.query(Client).delete(synchronize_session=False)
