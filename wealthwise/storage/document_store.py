"""
Per-user document collections

Every user owns a fixed set of append-mostly collections. The pipeline
only needs four operations on them: append, list (newest first),
update and delete.
"""
import copy
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Tuple

from ..core.exceptions import DocumentNotFound, InvalidInputError
from ..core.models import parse_date, utcnow


TRANSACTIONS = 'transactions'
RECURRING_EXPENSES = 'recurring_expenses'
INSIGHTS = 'insights'
ALERTS = 'alerts'
PAYMENTS = 'payments'

COLLECTIONS = (TRANSACTIONS, RECURRING_EXPENSES, INSIGHTS, ALERTS, PAYMENTS)


def check_collection(collection: str):
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection: {collection!r}")


def check_user(user_id: str):
    if not user_id or not isinstance(user_id, str):
        raise InvalidInputError("User ID is required")


def document_date(document: Dict[str, Any]) -> datetime:
    """Sort key for a document; missing dates sort last"""
    value = document.get('date')
    if value is None:
        return datetime.min.replace(tzinfo=utcnow().tzinfo)
    return parse_date(value)


class DocumentStore(ABC):
    """
    Storage interface used by the transaction service

    Documents are plain dicts. Listed documents carry their id under 'id'.
    """

    @abstractmethod
    def append(self, user_id: str, collection: str, document: Dict[str, Any]) -> str:
        """Add a document and return its new id"""

    @abstractmethod
    def list(self, user_id: str, collection: str) -> List[Dict[str, Any]]:
        """All documents in a collection, newest 'date' first"""

    @abstractmethod
    def update(self, user_id: str, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        """Merge fields into a document; raises DocumentNotFound"""

    @abstractmethod
    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        """Remove a document; raises DocumentNotFound"""


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed store for tests and local runs
    """

    def __init__(self):
        self._docs: Dict[Tuple[str, str], Dict[str, Dict[str, Any]]] = {}

    def _collection(self, user_id: str, collection: str) -> Dict[str, Dict[str, Any]]:
        check_user(user_id)
        check_collection(collection)
        return self._docs.setdefault((user_id, collection), {})

    def append(self, user_id: str, collection: str, document: Dict[str, Any]) -> str:
        docs = self._collection(user_id, collection)
        doc_id = uuid.uuid4().hex
        stored = copy.deepcopy(document)
        stored.pop('id', None)
        stored.setdefault('date', utcnow())
        docs[doc_id] = stored
        return doc_id

    def list(self, user_id: str, collection: str) -> List[Dict[str, Any]]:
        docs = self._collection(user_id, collection)
        listed = [dict(copy.deepcopy(doc), id=doc_id) for doc_id, doc in docs.items()]
        listed.sort(key=document_date, reverse=True)
        return listed

    def update(self, user_id: str, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        docs = self._collection(user_id, collection)
        if doc_id not in docs:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")
        changes = copy.deepcopy(fields)
        changes.pop('id', None)
        docs[doc_id].update(changes)

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        docs = self._collection(user_id, collection)
        if doc_id not in docs:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")
        del docs[doc_id]
