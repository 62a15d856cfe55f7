"""CLI entrypoint for clientbook."""

import argparse
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, List, Optional

from clientbook.clients.client_models import ClientRecord
from clientbook.config.loader import (
    DEFAULT_CONFIG_PATH,
    default_config,
    get_log_level,
    get_remote_settings,
    load_config,
)
from clientbook.errors import ClientbookError, StoreError
from clientbook.registry.client_registry import ClientRegistry, build_registry
from clientbook.retrieval.remote_client import RemoteClient
from clientbook.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

EMPTY_STATE = "No clients yet. Add one with 'clientbook add' or load samples with 'clientbook seed'."


def _load_app_config(args: argparse.Namespace) -> dict:
    """Load the config file; fall back to defaults only when no path was given."""
    if args.config:
        return load_config(Path(args.config))
    try:
        return load_config(DEFAULT_CONFIG_PATH)
    except FileNotFoundError:
        logger.debug(f"{DEFAULT_CONFIG_PATH} not found, using built-in defaults")
        return default_config()


@contextmanager
def _open_registry(args: argparse.Namespace) -> Generator[ClientRegistry, None, None]:
    registry = build_registry(args.app_config, sqlite_path=args.db)
    try:
        yield registry
    finally:
        registry.close()


def _require_text(value: Optional[str], field: str) -> str:
    """Reject blank input before it reaches the registry."""
    if value is None or not value.strip():
        raise ValueError(f"{field} must not be blank")
    return value.strip()


def _record_from_args(args: argparse.Namespace, client_id: Optional[int] = None) -> ClientRecord:
    return ClientRecord(
        id=client_id,
        name=_require_text(args.name, "name"),
        email=_require_text(args.email, "email"),
        external_ref=_require_text(args.ref, "ref"),
    )


def render_clients(clients: List[ClientRecord]) -> str:
    if not clients:
        return EMPTY_STATE

    lines = [f"Clients: {len(clients)}", ""]
    lines.append(f"{'ID':<6} {'Name':<30} {'Email':<32} {'Ref':<16}")
    lines.append("-" * 86)
    for client in clients:
        lines.append(f"{client.id:<6} {client.name:<30} {client.email:<32} {client.external_ref:<16}")
    return "\n".join(lines)


def cmd_list(args: argparse.Namespace) -> int:
    """Print the client list; with --watch keep printing on every change."""
    with _open_registry(args) as registry:
        with registry.observe_all() as subscription:
            if not args.watch:
                print(render_clients(subscription.get()))
                return 0

            try:
                for snapshot in subscription:
                    print(render_clients(snapshot))
                    print()
            except KeyboardInterrupt:
                pass
            except StoreError as e:
                logger.error(f"Live list ended: {e}")
                return 1
    return 0


def cmd_add(args: argparse.Namespace) -> int:
    """Add a client."""
    record = _record_from_args(args)
    with _open_registry(args) as registry:
        result = registry.add(record).result()

    if not result.ok:
        print(f"Error: could not add client ({result.error})")
        return 1
    print(f"Added client {result.record.id}: {result.record.name}")
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    """Replace every field of an existing client."""
    record = _record_from_args(args, client_id=args.id)
    with _open_registry(args) as registry:
        result = registry.edit(record).result()

    if not result.ok:
        print(f"Error: could not update client ({result.error})")
        return 1
    if result.rows_affected == 0:
        print(f"No client with id {args.id}")
        return 1
    print(f"Updated client {args.id}")
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    """Remove a client by id."""
    # Only the id matters for deletion.
    record = ClientRecord(id=args.id, name="", email="", external_ref="")
    with _open_registry(args) as registry:
        result = registry.remove(record).result()

    if not result.ok:
        print(f"Error: could not remove client ({result.error})")
        return 1
    if result.rows_affected == 0:
        print(f"No client with id {args.id}")
    else:
        print(f"Removed client {args.id}")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    """Load the 20 sample clients."""
    with _open_registry(args) as registry:
        result = registry.seed_sample_data().result()

    if not result.ok:
        print(f"Error: could not load sample clients ({result.error})")
        return 1
    print(f"Loaded {result.rows_affected} sample clients")
    return 0


def cmd_sync(args: argparse.Namespace) -> int:
    """Import users from the remote API."""
    if args.dry_run:
        print("DRY RUN: Would import these remote users (no changes will be made)")
        remote = RemoteClient.from_settings(get_remote_settings(args.app_config))
        try:
            users = remote.fetch_users()
        finally:
            remote.close()
        for user in users:
            print(f"  - {user.id}: {user.name} <{user.email}> ({user.username})")
        return 0

    with _open_registry(args) as registry:
        result = registry.sync_remote().result()

    if not result.ok:
        print(f"Sync failed: {result.error}")
        return 1
    print(f"Imported {result.records_imported} clients from remote ({result.duration_seconds:.2f}s)")
    return 0


def cmd_clear(args: argparse.Namespace) -> int:
    """Delete every client."""
    if not args.yes:
        print("Refusing to delete all clients without --yes")
        return 1
    with _open_registry(args) as registry:
        result = registry.clear_all().result()

    if not result.ok:
        print(f"Error: could not clear clients ({result.error})")
        return 1
    print(f"Deleted {result.rows_affected} clients")
    return 0


def _add_record_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", type=str, required=True, help="Client name")
    parser.add_argument("--email", type=str, required=True, help="Client email")
    parser.add_argument("--ref", type=str, required=True, help="External reference (legacy id or username)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="clientbook - local client list with remote import")
    parser.add_argument(
        "--config",
        type=str,
        help=f"Path to config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--db",
        type=str,
        help="Override storage.sqlite_path",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    list_parser = subparsers.add_parser("list", help="Show clients ordered by name")
    list_parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and print the list on every change",
    )
    list_parser.set_defaults(func=cmd_list)

    add_parser = subparsers.add_parser("add", help="Add a client")
    _add_record_arguments(add_parser)
    add_parser.set_defaults(func=cmd_add)

    edit_parser = subparsers.add_parser("edit", help="Replace a client's fields")
    edit_parser.add_argument("id", type=int, help="Client id")
    _add_record_arguments(edit_parser)
    edit_parser.set_defaults(func=cmd_edit)

    remove_parser = subparsers.add_parser("remove", help="Remove a client")
    remove_parser.add_argument("id", type=int, help="Client id")
    remove_parser.set_defaults(func=cmd_remove)

    seed_parser = subparsers.add_parser("seed", help="Load 20 sample clients")
    seed_parser.set_defaults(func=cmd_seed)

    sync_parser = subparsers.add_parser("sync", help="Import users from the remote API")
    sync_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and print remote users without storing them",
    )
    sync_parser.set_defaults(func=cmd_sync)

    clear_parser = subparsers.add_parser("clear", help="Delete all clients")
    clear_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm deleting every client",
    )
    clear_parser.set_defaults(func=cmd_clear)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        args.app_config = _load_app_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 2
    configure_logging(get_log_level(args.app_config))

    try:
        return args.func(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 2
    except ClientbookError as e:
        print(f"Error: {e}")
        return 1
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    sys.exit(main())
