"""
cli.py
------
Command-line interface for the subscriber store.

Every command ensures the table exists first and, when
SUBSCRIBER_LOAD_SAMPLE_DATA is set, imports the configured source file
before running. A bad sample file is logged and the command still runs.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from azure.core.exceptions import AzureError

from .config import Settings, load_settings
from .errors import ImportSourceError, SubscriberStoreError
from .filters import build_filter
from .records import SubscriberRecord, apply_changes
from .sources import save_records
from .subscriber_tables import SubscriberStore

logger = logging.getLogger(__name__)

DEFAULT_PARTITION = "Subscribers"

def _yes_no(value: str) -> bool:
    value = value.strip().lower()
    if value not in ("yes", "no"):
        raise argparse.ArgumentTypeError("expected 'yes' or 'no'")
    return value == "yes"

def _add_filter_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--partition-key", default=DEFAULT_PARTITION, help=f"PartitionKey to search (default: {DEFAULT_PARTITION})")
    parser.add_argument("--row-key", default=None, help="Exact RowKey to match")
    parser.add_argument("--name-prefix", default=None, help="Beginning of the name (case sensitive)")
    parser.add_argument("--min-balance", type=float, default=None, help="Minimum balance")

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="subscriber-tables",
        description="Search, update and delete subscriber records in Azure Table Storage",
    )
    parser.add_argument("--env-file", type=Path, default=None, help="Load settings from this .env file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    import_p = sub.add_parser("import", help="Import records from a JSON file")
    import_p.add_argument("path", type=Path, nargs="?", default=None, help="JSON file (default: SUBSCRIBER_SOURCE_PATH)")

    search_p = sub.add_parser("search", help="Search records")
    _add_filter_options(search_p)

    export_p = sub.add_parser("export", help="Write matching records to a JSON file")
    export_p.add_argument("path", type=Path, help="Output JSON file")
    _add_filter_options(export_p)

    update_p = sub.add_parser("update", help="Update a single record")
    update_p.add_argument("partition_key", help="PartitionKey of the record")
    update_p.add_argument("row_key", help="RowKey of the record")
    update_p.add_argument("--name", default=None)
    update_p.add_argument("--age", type=int, default=None)
    update_p.add_argument("--balance", type=float, default=None)
    update_p.add_argument("--active", type=_yes_no, default=None, help="yes or no")

    delete_p = sub.add_parser("delete", help="Delete records by PartitionKey and/or RowKey")
    delete_p.add_argument("--partition-key", default=None)
    delete_p.add_argument("--row-key", default=None)
    delete_p.add_argument("--yes", action="store_true", help="Confirm the deletion")

    delete_all_p = sub.add_parser("delete-all", help="Delete ALL records")
    delete_all_p.add_argument("--yes", action="store_true", help="Confirm the deletion")

    return parser

# ------------------------------------------------------------------
# Output
# ------------------------------------------------------------------

def _print_record(record: SubscriberRecord) -> None:
    print(f"Name: {record.name}")
    print(f"Balance: {record.balance}")
    print(f"Active: {record.is_active}")
    print(f"Age: {record.age}")
    print(f"Gender: {record.gender}")
    print(f"Company: {record.company}")
    print(f"Phone: {record.phone}")
    print(f"Address: {record.address}")
    print(f"Email: {record.email}")
    print("-" * 40)

# ------------------------------------------------------------------
# Commands
# ------------------------------------------------------------------

def _search_filter(args: argparse.Namespace) -> str:
    return build_filter(
        partition_key=args.partition_key,
        row_key=args.row_key,
        name_prefix=args.name_prefix,
        min_balance=args.min_balance,
    )

async def _run_command(store: SubscriberStore, settings: Settings, args: argparse.Namespace) -> int:
    if args.command == "import":
        summary = await store.import_from_file(args.path or settings.source_path)
        print(f"{summary.added} records added, {summary.skipped} already existed.")
        return 0

    if args.command == "search":
        results = await store.query(_search_filter(args))
        print("Results found:")
        print()
        for record in results:
            _print_record(record)
        return 0

    if args.command == "export":
        results = await store.query(_search_filter(args))
        count = save_records(results, args.path)
        print(f"{count} records written to {args.path}.")
        return 0

    if args.command == "update":
        updated = await store.update_record(
            args.partition_key,
            args.row_key,
            lambda record: apply_changes(
                record,
                name=args.name or None,
                age=args.age,
                balance=args.balance,
                is_active=args.active,
            ),
        )
        print(f"Record updated successfully: Name: {updated.name}, Age: {updated.age}, "
              f"Balance: {updated.balance}, Active: {updated.is_active}")
        return 0

    if args.command == "delete":
        if not (args.partition_key or args.row_key):
            print("No PartitionKey or RowKey provided. Operation canceled.")
            return 2
        if not args.yes:
            print("Deletion not confirmed (pass --yes). Operation canceled.")
            return 2
        deleted = await store.delete_matching(args.partition_key, args.row_key)
        if not deleted:
            print("No records found with the specified keys.")
        else:
            print(f"{deleted} records deleted.")
        return 0

    if args.command == "delete-all":
        if not args.yes:
            print("Deletion not confirmed (pass --yes). Operation canceled.")
            return 2
        deleted = await store.delete_all()
        print(f"All records have been deleted ({deleted}).")
        return 0

    raise ValueError(f"Unknown command: {args.command}")

async def run(settings: Settings, args: argparse.Namespace, store: SubscriberStore | None = None) -> int:
    store = store or SubscriberStore.from_settings(settings)
    async with store:
        if not await store.ensure_table_exists():
            print(f"Table '{settings.table_name}' could not be created. Please try again later.")
            return 1
        if settings.load_sample_data and args.command != "import":
            try:
                await store.import_from_file(settings.source_path)
            except ImportSourceError as e:
                logger.error("Sample data was not imported: %s", e)
        return await _run_command(store, settings, args)

def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        settings = load_settings(args.env_file)
        return asyncio.run(run(settings, args))
    except (SubscriberStoreError, EnvironmentError, ValueError) as e:
        print(f"ERROR: {e}")
        return 1
    except AzureError as e:
        logger.debug("Store request failed", exc_info=True)
        print(f"ERROR: the table service request failed: {e}")
        return 1
