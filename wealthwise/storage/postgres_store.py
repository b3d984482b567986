"""
PostgreSQL document store

Keeps every user's collections in a single user_documents table with a
JSONB payload (see db/db_schema.sql). The document 'date' lives in its
own column so listings can be ordered by it.
"""
import json
import uuid
from datetime import date, datetime
from functools import partial
from typing import Any, Dict, List

from psycopg2.extras import Json

from ..core.exceptions import DocumentNotFound
from ..core.models import parse_date, utcnow
from ..utils.db_connection import get_db_connection
from .document_store import DocumentStore, check_collection, check_user


def _json_default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _to_json(data: Dict[str, Any]) -> Json:
    return Json(data, dumps=partial(json.dumps, default=_json_default))


def _split_date(document: Dict[str, Any]):
    """Separate the 'date' field from the JSON payload"""
    payload = dict(document)
    payload.pop('id', None)
    raw_date = payload.pop('date', None)
    return (parse_date(raw_date) if raw_date is not None else None), payload


class PostgresDocumentStore(DocumentStore):
    """
    DocumentStore backed by psycopg2
    """

    def __init__(self, conn=None):
        """
        Args:
            conn: psycopg2 connection (default: from DB_* env vars)
        """
        self.conn = conn or get_db_connection()

    def _execute(self, sql: str, params: tuple) -> int:
        """Run a write statement in its own transaction and return rowcount"""
        cursor = self.conn.cursor()
        try:
            cursor.execute(sql, params)
            rowcount = cursor.rowcount
            self.conn.commit()
            return rowcount
        except Exception:
            self.conn.rollback()
            raise
        finally:
            cursor.close()

    def append(self, user_id: str, collection: str, document: Dict[str, Any]) -> str:
        check_user(user_id)
        check_collection(collection)

        doc_id = uuid.uuid4().hex
        doc_date, payload = _split_date(document)

        self._execute("""
            INSERT INTO user_documents (doc_id, user_id, collection, doc_date, data)
            VALUES (%s, %s, %s, %s, %s)
        """, (doc_id, user_id, collection, doc_date or utcnow(), _to_json(payload)))
        return doc_id

    def list(self, user_id: str, collection: str) -> List[Dict[str, Any]]:
        check_user(user_id)
        check_collection(collection)

        cursor = self.conn.cursor()
        try:
            cursor.execute("""
                SELECT doc_id, doc_date, data
                FROM user_documents
                WHERE user_id = %s AND collection = %s
                ORDER BY doc_date DESC, created_at DESC
            """, (user_id, collection))
            rows = cursor.fetchall()
        finally:
            cursor.close()

        documents = []
        for doc_id, doc_date, data in rows:
            document = dict(data or {})
            document['id'] = doc_id
            document['date'] = doc_date
            documents.append(document)
        return documents

    def update(self, user_id: str, collection: str, doc_id: str, fields: Dict[str, Any]) -> None:
        check_user(user_id)
        check_collection(collection)

        doc_date, payload = _split_date(fields)
        rowcount = self._execute("""
            UPDATE user_documents
            SET data = data || %s,
                doc_date = COALESCE(%s, doc_date),
                updated_at = NOW()
            WHERE user_id = %s AND collection = %s AND doc_id = %s
        """, (_to_json(payload), doc_date, user_id, collection, doc_id))

        if rowcount == 0:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")

    def delete(self, user_id: str, collection: str, doc_id: str) -> None:
        check_user(user_id)
        check_collection(collection)

        rowcount = self._execute("""
            DELETE FROM user_documents
            WHERE user_id = %s AND collection = %s AND doc_id = %s
        """, (user_id, collection, doc_id))

        if rowcount == 0:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")

    def close(self):
        self.conn.close()
