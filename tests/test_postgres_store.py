from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from wealthwise.core.exceptions import DocumentNotFound
from wealthwise.storage.document_store import TRANSACTIONS
from wealthwise.storage.postgres_store import PostgresDocumentStore


@pytest.fixture
def conn():
    connection = MagicMock()
    connection.cursor.return_value.rowcount = 1
    return connection


def test_append_inserts_and_commits(conn):
    store = PostgresDocumentStore(conn)
    when = datetime(2024, 7, 1, tzinfo=timezone.utc)

    doc_id = store.append('u1', TRANSACTIONS, {'description': 'x', 'amount': 5, 'date': when})

    cursor = conn.cursor.return_value
    sql, params = cursor.execute.call_args[0]
    assert 'INSERT INTO user_documents' in sql
    assert params[0] == doc_id
    assert params[1:4] == ('u1', TRANSACTIONS, when)
    assert params[4].adapted == {'description': 'x', 'amount': 5}
    conn.commit.assert_called_once()
    cursor.close.assert_called_once()


def test_list_restores_id_and_date(conn):
    when = datetime(2024, 7, 1, tzinfo=timezone.utc)
    conn.cursor.return_value.fetchall.return_value = [('abc', when, {'description': 'x'})]

    listed = PostgresDocumentStore(conn).list('u1', TRANSACTIONS)

    assert listed == [{'id': 'abc', 'date': when, 'description': 'x'}]


def test_update_unknown_id_raises(conn):
    conn.cursor.return_value.rowcount = 0
    with pytest.raises(DocumentNotFound):
        PostgresDocumentStore(conn).update('u1', TRANSACTIONS, 'missing', {'amount': 2})


def test_delete_unknown_id_raises(conn):
    conn.cursor.return_value.rowcount = 0
    with pytest.raises(DocumentNotFound):
        PostgresDocumentStore(conn).delete('u1', TRANSACTIONS, 'missing')


def test_failed_write_rolls_back(conn):
    conn.cursor.return_value.execute.side_effect = RuntimeError('db down')
    with pytest.raises(RuntimeError):
        PostgresDocumentStore(conn).append('u1', TRANSACTIONS, {'description': 'x'})
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


def test_connection_settings_come_from_env(monkeypatch):
    from wealthwise.utils import db_connection

    connect = MagicMock()
    monkeypatch.setattr(db_connection.psycopg2, 'connect', connect)
    monkeypatch.setenv('DB_HOST', 'db.internal')
    monkeypatch.setenv('DB_PORT', '6543')
    monkeypatch.delenv('DB_NAME', raising=False)

    db_connection.get_db_connection(user='svc', password='secret')

    connect.assert_called_once_with(
        host='db.internal',
        port=6543,
        database='wealthwise',
        user='svc',
        password='secret',
    )
