import json
from pathlib import Path

import pytest

from subscriber_tables.errors import ImportSourceError
from subscriber_tables.records import SubscriberRecord
from subscriber_tables.sources import load_records, save_records


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_load_records(tmp_path):
    path = _write(
        tmp_path / "subscribers.json",
        json.dumps(
            [
                {"PartitionKey": "Subscribers", "RowKey": "1", "Name": "John", "Balance": "$1,234.56", "Age": 30, "IsActive": True},
                {"PartitionKey": "Subscribers", "RowKey": "2", "Name": "Amy", "Balance": "oops"},
            ]
        ),
    )

    records = load_records(path)

    assert [r.name for r in records] == ["John", "Amy"]
    assert records[0].balance == pytest.approx(1234.56)
    assert records[1].balance == 0.0


def test_null_document_is_empty(tmp_path):
    assert load_records(_write(tmp_path / "empty.json", "null")) == []


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        '{"PartitionKey": "Subscribers"}',
        "[1, 2]",
        '[{"PartitionKey": "Subscribers"}]',
        '[{"PartitionKey": "Subscribers", "RowKey": "1", "Age": "old"}]',
    ],
)
def test_malformed_files_raise(tmp_path, text):
    with pytest.raises(ImportSourceError):
        load_records(_write(tmp_path / "bad.json", text))


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImportSourceError, match="not found"):
        load_records(tmp_path / "missing.json")


def test_save_records_writes_plain_balances(tmp_path):
    path = tmp_path / "out" / "subscribers.json"

    count = save_records([SubscriberRecord("Subscribers", "1", name="John", balance=1234.5)], path)

    assert count == 1
    assert json.loads(path.read_text(encoding="utf-8")) == [
        {"PartitionKey": "Subscribers", "RowKey": "1", "Name": "John", "Balance": "1234.5"}
    ]
