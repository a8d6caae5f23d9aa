"""
filters.py
----------
OData filter construction for subscriber queries.
"""

import math

from .records import format_balance

# Upper bound appended to a name prefix for the range scan.
NAME_PREFIX_SENTINEL = "~"

def _quote(value: str) -> str:
    return "'" + str(value).replace("'", "''") + "'"

def _present(value: str | None) -> bool:
    return value is not None and str(value).strip() != ""

def build_filter(
    *,
    partition_key: str | None   = None,
    row_key:       str | None   = None,
    name_prefix:   str | None   = None,
    min_balance:   float | None = None,
) -> str:
    """Builds a conjunctive filter from the criteria that are present.

    Returns an empty string when no criterion is given, which queries the
    whole table.
    """
    clauses = []
    if _present(partition_key):
        clauses.append(f"PartitionKey eq {_quote(partition_key)}")
    if _present(name_prefix):
        clauses.append(f"Name ge {_quote(name_prefix)}")
        clauses.append(f"Name lt {_quote(name_prefix + NAME_PREFIX_SENTINEL)}")
    if min_balance is not None:
        if not math.isfinite(min_balance):
            raise ValueError("min_balance must be a finite number.")
        clauses.append(f"Balance ge {format_balance(min_balance)}")
    if _present(row_key):
        clauses.append(f"RowKey eq {_quote(row_key)}")
    return " and ".join(clauses)

def identity_filter(partition_key: str, row_key: str) -> str:
    return build_filter(partition_key=partition_key, row_key=row_key)
