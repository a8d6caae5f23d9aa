"""
records.py
----------
The subscriber record and its mapping to table entities and import files.
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any, Mapping

# ------------------------------------------------------------------
# Field Layout
# ------------------------------------------------------------------

# record attribute -> table property name
_FIELDS: dict[str, str] = {
    "partition_key": "PartitionKey",
    "row_key":       "RowKey",
    "name":          "Name",
    "gender":        "Gender",
    "company":       "Company",
    "phone":         "Phone",
    "address":       "Address",
    "about":         "About",
    "email":         "Email",
    "age":           "Age",
    "balance":       "Balance",
    "is_active":     "IsActive",
}

# Import files are matched without regard to case or underscores.
_SOURCE_KEYS: dict[str, str] = {prop.lower(): attr for attr, prop in _FIELDS.items()}

# ------------------------------------------------------------------
# Record Type
# ------------------------------------------------------------------

@dataclass
class SubscriberRecord:
    partition_key: str
    row_key:       str
    name:          str | None      = None
    gender:        str | None      = None
    company:       str | None      = None
    phone:         str | None      = None
    address:       str | None      = None
    about:         str | None      = None
    email:         str | None      = None
    age:           int | None      = None
    balance:       float | None    = None
    is_active:     bool | None     = None
    timestamp:     datetime | None = None
    etag:          str | None      = None

    @property
    def identity(self) -> tuple[str, str]:
        return self.partition_key, self.row_key

# ------------------------------------------------------------------
# Balance Codec
# ------------------------------------------------------------------

def parse_balance(value: Any) -> float:
    """Parses a currency-formatted balance such as ``"$1,234.56"``.

    Unparseable input yields ``0.0`` instead of raising.
    """
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    text = str(value).replace("$", "").replace(",", "").strip()
    try:
        balance = float(text)
    except ValueError:
        return 0.0
    return balance if math.isfinite(balance) else 0.0

def format_balance(value: float) -> str:
    """Renders a balance as a plain number, without currency symbol or separators."""
    # repr keeps the shortest round-trip digits; Decimal expands any exponent
    text = format(Decimal(repr(float(value))), "f")
    if text.endswith(".0"):
        text = text[:-2]
    return text

# ------------------------------------------------------------------
# Table Mapping
# ------------------------------------------------------------------

def _unwrap(value: Any) -> Any:
    # Int64 and other explicitly typed properties come back as EntityProperty.
    return getattr(value, "value", value)

def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)

def record_from_entity(entity: Mapping[str, Any]) -> SubscriberRecord:
    values = {attr: _unwrap(entity.get(prop)) for attr, prop in _FIELDS.items()}
    if values["age"] is not None:
        values["age"] = int(values["age"])
    if values["balance"] is not None:
        values["balance"] = parse_balance(values["balance"])
    if values["is_active"] is not None:
        values["is_active"] = _parse_bool(values["is_active"])

    metadata = getattr(entity, "metadata", None) or {}
    return SubscriberRecord(
        timestamp=metadata.get("timestamp"),
        etag=metadata.get("etag"),
        **values,
    )

def record_to_entity(record: SubscriberRecord) -> dict:
    entity = {}
    for attr, prop in _FIELDS.items():
        value = getattr(record, attr)
        if value is None:
            continue
        if attr == "balance":
            value = float(value)
        entity[prop] = value
    return entity

# ------------------------------------------------------------------
# Import File Mapping
# ------------------------------------------------------------------

def record_from_source(item: Mapping[str, Any]) -> SubscriberRecord:
    values: dict[str, Any] = {}
    for key, value in item.items():
        attr = _SOURCE_KEYS.get(str(key).replace("_", "").lower())
        if attr is not None:
            values[attr] = value

    for key in ("partition_key", "row_key"):
        if not values.get(key):
            raise ValueError(f"record is missing '{_FIELDS[key]}'")
        values[key] = str(values[key])

    if "balance" in values:
        values["balance"] = parse_balance(values["balance"])
    if values.get("age") is not None:
        values["age"] = int(values["age"])
    if values.get("is_active") is not None:
        values["is_active"] = _parse_bool(values["is_active"])
    return SubscriberRecord(**values)

def record_to_source(record: SubscriberRecord) -> dict:
    item = {}
    for attr, prop in _FIELDS.items():
        value = getattr(record, attr)
        if value is None:
            continue
        if attr == "balance":
            value = format_balance(value)
        item[prop] = value
    return item

# ------------------------------------------------------------------
# Changes
# ------------------------------------------------------------------

def apply_changes(
    record:    SubscriberRecord,
    *,
    name:      str | None   = None,
    age:       int | None   = None,
    balance:   float | None = None,
    is_active: bool | None  = None,
) -> SubscriberRecord:
    """Returns a copy of ``record`` with every non-None argument applied."""
    changes = {"name": name, "age": age, "balance": balance, "is_active": is_active}
    return replace(record, **{k: v for k, v in changes.items() if v is not None})
