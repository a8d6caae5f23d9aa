"""
sources.py
----------
Reading and writing subscriber records as JSON files.
"""

import json
import logging
from pathlib import Path
from typing import Iterable

from .errors import ImportSourceError
from .records import SubscriberRecord, record_from_source, record_to_source

logger = logging.getLogger(__name__)

def load_records(path: str | Path) -> list[SubscriberRecord]:
    """Loads a JSON array of subscriber objects.

    Any problem with the file is raised as ``ImportSourceError`` before a
    single record is returned, so a bad file never causes a partial import.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ImportSourceError(f"Import file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ImportSourceError(f"Could not read import file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ImportSourceError(f"There was an error parsing the JSON file {path}: {e}") from e

    if data is None:
        return []
    if not isinstance(data, list):
        raise ImportSourceError(f"{path}: expected a JSON array of records.")

    records = []
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise ImportSourceError(f"{path}: item {index} is not an object.")
        try:
            records.append(record_from_source(item))
        except (TypeError, ValueError) as e:
            raise ImportSourceError(f"{path}: item {index}: {e}") from e

    logger.debug("Loaded %d records from %s", len(records), path)
    return records

def save_records(records: Iterable[SubscriberRecord], path: str | Path) -> int:
    path = Path(path)
    items = [record_to_source(r) for r in records]
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(items, f, indent=2)
        f.write("\n")
    logger.debug("Wrote %d records to %s", len(items), path)
    return len(items)
