from datetime import datetime, timezone

import pytest

from wealthwise.core.exceptions import DocumentNotFound, InvalidInputError
from wealthwise.storage.document_store import ALERTS, TRANSACTIONS


def _at(day):
    return datetime(2024, 7, day, tzinfo=timezone.utc)


def test_append_and_list_newest_first(store):
    store.append('u1', TRANSACTIONS, {'description': 'old', 'date': _at(1)})
    store.append('u1', TRANSACTIONS, {'description': 'new', 'date': _at(15)})
    store.append('u1', TRANSACTIONS, {'description': 'mid', 'date': _at(8)})

    listed = store.list('u1', TRANSACTIONS)

    assert [d['description'] for d in listed] == ['new', 'mid', 'old']
    assert all(d['id'] for d in listed)


def test_collections_are_per_user(store):
    store.append('u1', TRANSACTIONS, {'description': 'mine'})
    assert store.list('u2', TRANSACTIONS) == []
    assert store.list('u1', ALERTS) == []


def test_append_assigns_unique_ids_and_default_date(store):
    first = store.append('u1', ALERTS, {'message': 'a'})
    second = store.append('u1', ALERTS, {'message': 'a'})
    assert first != second
    assert all(isinstance(d['date'], datetime) for d in store.list('u1', ALERTS))


def test_update_merges_fields(store):
    doc_id = store.append('u1', ALERTS, {'message': 'a', 'read': False, 'date': _at(1)})
    store.update('u1', ALERTS, doc_id, {'read': True})
    assert store.list('u1', ALERTS)[0] == {'id': doc_id, 'message': 'a', 'read': True, 'date': _at(1)}


def test_delete(store):
    doc_id = store.append('u1', TRANSACTIONS, {'description': 'x'})
    store.delete('u1', TRANSACTIONS, doc_id)
    assert store.list('u1', TRANSACTIONS) == []


def test_missing_documents_raise(store):
    with pytest.raises(DocumentNotFound):
        store.update('u1', TRANSACTIONS, 'nope', {'amount': 1})
    with pytest.raises(DocumentNotFound):
        store.delete('u1', TRANSACTIONS, 'nope')


def test_stored_documents_are_copies(store):
    document = {'description': 'x', 'date': _at(1)}
    store.append('u1', TRANSACTIONS, document)
    document['description'] = 'changed'
    listed = store.list('u1', TRANSACTIONS)
    listed[0]['description'] = 'changed again'
    assert store.list('u1', TRANSACTIONS)[0]['description'] == 'x'


def test_unknown_collection_rejected(store):
    with pytest.raises(ValueError):
        store.append('u1', 'budgets', {})


def test_user_id_required(store):
    with pytest.raises(InvalidInputError):
        store.list('', TRANSACTIONS)
