"""
errors.py
---------
Exceptions raised by the subscriber store.

Transport and service failures that have no entry here propagate as the
``azure.core.exceptions`` error the SDK raised.
"""

class SubscriberStoreError(RuntimeError):
    """Base exception for subscriber store failures."""

class RecordNotFoundError(SubscriberStoreError):
    def __init__(self, partition_key: str, row_key: str) -> None:
        super().__init__(f"No record with PartitionKey '{partition_key}' and RowKey '{row_key}'.")
        self.partition_key = partition_key
        self.row_key = row_key

class RecordExistsError(SubscriberStoreError):
    def __init__(self, partition_key: str, row_key: str) -> None:
        super().__init__(f"The entity with PartitionKey '{partition_key}' and RowKey '{row_key}' already exists.")
        self.partition_key = partition_key
        self.row_key = row_key

class ConcurrencyConflictError(SubscriberStoreError):
    """Raised when an update presents an etag the store no longer holds."""

    def __init__(self, partition_key: str, row_key: str) -> None:
        super().__init__(f"Record '{partition_key}/{row_key}' was modified by another writer.")
        self.partition_key = partition_key
        self.row_key = row_key

class ImportSourceError(SubscriberStoreError):
    """Raised when an import file cannot be read or parsed."""

class ConfigurationError(EnvironmentError):
    """Raised when a required setting is missing."""
