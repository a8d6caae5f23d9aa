"""
subscriber_tables.py
--------------------
Azure Table Storage-backed store for subscriber records.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from azure.core import MatchConditions
from azure.core.credentials import AzureNamedKeyCredential
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)
from azure.data.tables import UpdateMode
from azure.data.tables.aio import TableServiceClient

from .config import Settings
from .errors import (
    ConcurrencyConflictError,
    ConfigurationError,
    RecordExistsError,
    RecordNotFoundError,
)
from .filters import build_filter
from .records import SubscriberRecord, record_from_entity, record_to_entity
from .sources import load_records

logger = logging.getLogger(__name__)

# Upper bound on records materialized by a single query.
MAX_QUERY_RECORDS = 2000

@dataclass
class ImportSummary:
    added:   int = 0
    skipped: int = 0

# ------------------------------------------------------------------
# Public Client Class
# ------------------------------------------------------------------

class SubscriberStore:
    def __init__(self, service: TableServiceClient, table_name: str) -> None:
        self.service    = service
        self.table_name = table_name
        self.table      = service.get_table_client(table_name)

    @classmethod
    def from_connection_string(cls, connection_string: str, table_name: str) -> "SubscriberStore":
        return cls(TableServiceClient.from_connection_string(connection_string), table_name)

    @classmethod
    def from_account_key(cls, account_name: str, account_key: str, table_name: str) -> "SubscriberStore":
        credential = AzureNamedKeyCredential(account_name, account_key)
        service = TableServiceClient(
            endpoint=f"https://{account_name}.table.core.windows.net",
            credential=credential,
        )
        return cls(service, table_name)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SubscriberStore":
        if settings.connection_string:
            return cls.from_connection_string(settings.connection_string, settings.table_name)
        if settings.account_name and settings.account_key:
            return cls.from_account_key(settings.account_name, settings.account_key, settings.table_name)
        raise ConfigurationError("Settings carry neither a connection string nor an account key.")

    async def __aenter__(self) -> "SubscriberStore":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.table.close()
        await self.service.close()

    # --------------------------------------------------------------
    # Table
    # --------------------------------------------------------------

    async def ensure_table_exists(self) -> bool:
        """Creates the table if it is missing.

        An existing table counts as success. Any other 409 means the table
        is still being deleted, and False is returned.
        """
        try:
            await self.table.create_table()
        except HttpResponseError as e:
            if e.status_code != 409:
                raise
            if getattr(e, "error_code", None) == "TableAlreadyExists":
                return True
            logger.warning("Table '%s' is currently being deleted. Please try again later.", self.table_name)
            return False
        logger.info("Created table '%s'", self.table_name)
        return True

    # --------------------------------------------------------------
    # Create
    # --------------------------------------------------------------

    async def add_record(self, record: SubscriberRecord) -> None:
        try:
            await self.table.create_entity(record_to_entity(record))
        except ResourceExistsError as e:
            raise RecordExistsError(record.partition_key, record.row_key) from e

    async def import_records(self, records: Iterable[SubscriberRecord]) -> ImportSummary:
        """Adds each record in turn, skipping identities that already exist."""
        summary = ImportSummary()
        for record in records:
            try:
                await self.add_record(record)
            except RecordExistsError as e:
                logger.info("%s", e)
                summary.skipped += 1
                continue
            logger.debug("New record added: %s/%s", record.partition_key, record.row_key)
            summary.added += 1
        logger.info("Import finished: %d added, %d skipped", summary.added, summary.skipped)
        return summary

    async def import_from_file(self, path: str | Path) -> ImportSummary:
        records = load_records(path)
        if not records:
            logger.info("No entities found in %s.", path)
            return ImportSummary()
        return await self.import_records(records)

    # --------------------------------------------------------------
    # Read
    # --------------------------------------------------------------

    async def query(self, query_filter: str = "") -> list[SubscriberRecord]:
        """Runs ``query_filter`` and returns at most MAX_QUERY_RECORDS records.

        An empty filter lists the whole table. Pages past the cap are never
        requested.
        """
        if query_filter:
            entities = self.table.query_entities(query_filter)
        else:
            entities = self.table.list_entities()

        results = []
        async for entity in entities:
            results.append(record_from_entity(entity))
            if len(results) >= MAX_QUERY_RECORDS:
                break
        return results

    async def get_record(self, partition_key: str, row_key: str) -> SubscriberRecord:
        try:
            entity = await self.table.get_entity(partition_key=partition_key, row_key=row_key)
        except ResourceNotFoundError as e:
            raise RecordNotFoundError(partition_key, row_key) from e
        return record_from_entity(entity)

    # --------------------------------------------------------------
    # Update
    # --------------------------------------------------------------

    async def update_record(
        self,
        partition_key: str,
        row_key:       str,
        change:        Callable[[SubscriberRecord], SubscriberRecord],
    ) -> SubscriberRecord:
        """Reads a record, applies ``change`` and writes the result back.

        The write replaces every property and only succeeds if the record
        still carries the etag that was read; otherwise
        ``ConcurrencyConflictError`` is raised and nothing is retried.
        """
        current = await self.get_record(partition_key, row_key)
        updated = change(current)
        if updated.identity != current.identity:
            raise ValueError("update_record: the change must not alter PartitionKey or RowKey.")

        try:
            await self.table.update_entity(
                record_to_entity(updated),
                mode=UpdateMode.REPLACE,
                etag=current.etag,
                match_condition=MatchConditions.IfNotModified,
            )
        except ResourceModifiedError as e:
            raise ConcurrencyConflictError(partition_key, row_key) from e
        except ResourceNotFoundError as e:
            raise RecordNotFoundError(partition_key, row_key) from e

        logger.info("Updated record %s/%s", partition_key, row_key)
        return updated

    # --------------------------------------------------------------
    # Delete
    # --------------------------------------------------------------

    async def delete_record(self, partition_key: str, row_key: str) -> None:
        # The SDK treats a 404 on delete as success.
        await self.table.delete_entity(partition_key=partition_key, row_key=row_key)

    async def delete_matching(self, partition_key: str | None = None, row_key: str | None = None) -> int:
        query_filter = build_filter(partition_key=partition_key, row_key=row_key)
        if not query_filter:
            raise ValueError("delete_matching: a PartitionKey or RowKey is required.")

        records = await self.query(query_filter)
        for record in records:
            await self.delete_record(record.partition_key, record.row_key)
        logger.info("Deleted %d records matching %s", len(records), query_filter)
        return len(records)

    async def delete_all(self) -> int:
        """Deletes every record in the table, one request per record."""
        deleted = 0
        async for entity in self.table.list_entities(select=["PartitionKey", "RowKey"]):
            await self.delete_record(entity["PartitionKey"], entity["RowKey"])
            deleted += 1
        logger.info("Deleted all %d records from '%s'", deleted, self.table_name)
        return deleted
