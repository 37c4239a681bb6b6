# tests/conftest.py

import logging
import sqlite3
import threading
from unittest.mock import Mock

import pytest

from simple_ddns.database import RecordStore
from simple_ddns.records import DomainRecord, RecordType


@pytest.fixture
def logger():
    return logging.getLogger("simple-ddns-tests")


# Fresh on-disk store per test
@pytest.fixture
def store(tmp_path, logger):
    record_store = RecordStore(str(tmp_path / "ddns.db"), logger=logger)
    yield record_store
    record_store.close()


@pytest.fixture(autouse=True)
def reset_shared_store():
    yield
    RecordStore.close_shared()


@pytest.fixture
def cancel():
    return threading.Event()


def make_response(status_code=200, text=""):
    response = Mock()
    response.status_code = status_code
    response.text = text
    return response


def record(fqdn, record_type, value):
    return DomainRecord(fqdn=fqdn, record_type=RecordType(record_type), value=value)


class FailingStatements:
    """Pooled connection wrapper that raises on chosen statements.

    failures is shared by every wrapped connection and counts down per raise.
    """

    def __init__(self, conn, statement, failures):
        self._conn = conn
        self._statement = statement
        self._failures = failures

    def execute(self, sql, *args):
        if sql == self._statement and self._failures[0] > 0:
            self._failures[0] -= 1
            raise sqlite3.OperationalError("disk I/O error")
        return self._conn.execute(sql, *args)

    def __getattr__(self, name):
        return getattr(self._conn, name)


def fail_statement(store, statement, times=1):
    """Make the next `times` executions of statement fail on every pooled connection."""
    failures = [times]
    connections = []
    while not store._pool.empty():
        connections.append(store._pool.get_nowait())
    for conn in connections:
        store._pool.put(FailingStatements(conn, statement, failures))
