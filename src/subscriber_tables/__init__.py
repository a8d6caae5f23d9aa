"""
subscriber_tables
-----------------
A thin async data-access layer over an Azure Table Storage table of subscriber records.
"""

__version__ = "1.0.0"

from .errors import (
    ConcurrencyConflictError,
    ConfigurationError,
    ImportSourceError,
    RecordExistsError,
    RecordNotFoundError,
    SubscriberStoreError,
)
from .filters import build_filter, identity_filter
from .records import (
    SubscriberRecord,
    apply_changes,
    format_balance,
    parse_balance,
)
from .subscriber_tables import (
    MAX_QUERY_RECORDS,
    ImportSummary,
    SubscriberStore,
)

__all__ = [
    "__version__",
    "SubscriberStore",
    "SubscriberRecord",
    "ImportSummary",
    "MAX_QUERY_RECORDS",
    "build_filter",
    "identity_filter",
    "apply_changes",
    "parse_balance",
    "format_balance",
    "SubscriberStoreError",
    "RecordNotFoundError",
    "RecordExistsError",
    "ConcurrencyConflictError",
    "ImportSourceError",
    "ConfigurationError",
]
