"""Pytest configuration and fixtures.

``FakeTableService`` stands in for ``azure.data.tables.aio.TableServiceClient``.
It keeps entities in a dict, enforces etag conditions on update and evaluates
the ``Field op literal [and ...]`` filters the store builds.
"""

import asyncio
import re
import uuid
from datetime import datetime, timezone

import pytest
from azure.core import MatchConditions
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)

from subscriber_tables import SubscriberStore

_CLAUSE = re.compile(r"^(\w+) (eq|ne|gt|ge|lt|le) ('(?:[^']|'')*'|true|false|-?\d+(?:\.\d+)?)$")
_OPS = {
    "eq": lambda a, b: a == b,
    "ne": lambda a, b: a != b,
    "gt": lambda a, b: a > b,
    "ge": lambda a, b: a >= b,
    "lt": lambda a, b: a < b,
    "le": lambda a, b: a <= b,
}


def _literal(text):
    if text.startswith("'"):
        return text[1:-1].replace("''", "'")
    if text in ("true", "false"):
        return text == "true"
    return float(text)


def compile_filter(query_filter):
    """Turns a conjunctive OData filter into a predicate over entity dicts."""
    clauses = []
    for part in query_filter.split(" and "):
        match = _CLAUSE.match(part.strip())
        assert match, f"unsupported filter clause: {part!r}"
        field, op, literal = match.groups()
        clauses.append((field, _OPS[op], _literal(literal)))

    def predicate(entity):
        for field, op, value in clauses:
            actual = entity.get(field)
            if actual is None or not op(actual, value):
                return False
        return True

    return predicate


class FakeEntity(dict):
    def __init__(self, data, metadata):
        super().__init__(data)
        self.metadata = metadata


class FakeTableClient:
    def __init__(self, table_name):
        self.table_name = table_name
        self.entities = {}
        self.yielded = 0
        self.update_modes = []
        self.closed = False

    async def _tick(self):
        # Lets concurrent tasks interleave between requests.
        await asyncio.sleep(0)

    def _stored(self, key):
        entity, metadata = self.entities[key]
        return FakeEntity(entity, dict(metadata))

    def _write(self, entity):
        key = (entity["PartitionKey"], entity["RowKey"])
        metadata = {"etag": f'W/"{uuid.uuid4()}"', "timestamp": datetime.now(timezone.utc)}
        self.entities[key] = (dict(entity), metadata)

    async def create_table(self):
        await self._tick()

    async def create_entity(self, entity):
        await self._tick()
        key = (entity["PartitionKey"], entity["RowKey"])
        if key in self.entities:
            raise ResourceExistsError("The specified entity already exists.")
        self._write(entity)

    async def get_entity(self, partition_key, row_key):
        await self._tick()
        key = (partition_key, row_key)
        if key not in self.entities:
            raise ResourceNotFoundError("The specified resource does not exist.")
        return self._stored(key)

    async def update_entity(self, entity, mode=None, etag=None, match_condition=None):
        await self._tick()
        key = (entity["PartitionKey"], entity["RowKey"])
        if key not in self.entities:
            raise ResourceNotFoundError("The specified resource does not exist.")
        if match_condition == MatchConditions.IfNotModified and self.entities[key][1]["etag"] != etag:
            raise ResourceModifiedError("The update condition specified in the request was not satisfied.")
        self.update_modes.append(mode)
        self._write(entity)

    async def delete_entity(self, partition_key, row_key):
        await self._tick()
        self.entities.pop((partition_key, row_key), None)

    async def _iterate(self, predicate):
        for key in list(self.entities):
            if key not in self.entities:
                continue
            entity = self._stored(key)
            if predicate(entity):
                self.yielded += 1
                yield entity
                await self._tick()

    def query_entities(self, query_filter, **kwargs):
        return self._iterate(compile_filter(query_filter))

    def list_entities(self, **kwargs):
        return self._iterate(lambda entity: True)

    async def close(self):
        self.closed = True


class FakeTableService:
    def __init__(self):
        self.tables = {}
        self.closed = False

    def get_table_client(self, table_name):
        return self.tables.setdefault(table_name, FakeTableClient(table_name))

    async def close(self):
        self.closed = True


@pytest.fixture
def conflict():
    def make(error_code):
        error = HttpResponseError("Conflict")
        error.status_code = 409
        error.error_code = error_code
        return error
    return make


@pytest.fixture
def service():
    return FakeTableService()


@pytest.fixture
def store(service):
    return SubscriberStore(service, "TestSubscribers")


@pytest.fixture
def table(service, store):
    return service.tables[store.table_name]
