"""Keyed document store.

The services only ever talk to ``DocumentStore``; ``SqlDocumentStore`` keeps
every collection in the ``documents`` table as JSON bodies.

Patches use Mongo-style operators::

    {"$set": {"points": 10, "enemy.health": 40},
     "$inc": {"enemyHealthModifier": 10},
     "$push": {"inventory": "item-id"},
     "$unset": ["enemy"]}

Every write bumps the document ``version``. Writes are compare-and-swap on
the version that was read, so two writers can never interleave inside one
update.
"""
from __future__ import annotations

import copy
import json
import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from dailyquest.extensions import db
from dailyquest.models import Document


class StoreError(Exception):
    """The backing database failed."""


class StaleDocumentError(Exception):
    """The document changed between read and write."""

    def __init__(self, collection: str, doc_id: str):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection}/{doc_id} was modified concurrently")


def new_id() -> str:
    return uuid.uuid4().hex


def _encode(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> Any:
    """Round-trip through JSON so only plain types ever reach the body column."""
    return json.loads(json.dumps(value, default=_encode))


def _parent(body: dict, path: str, create: bool) -> tuple[dict | None, str]:
    parts = path.split(".")
    node = body
    for part in parts[:-1]:
        nxt = node.get(part)
        if not isinstance(nxt, dict):
            if not create:
                return None, parts[-1]
            nxt = {}
            node[part] = nxt
        node = nxt
    return node, parts[-1]


def apply_patch(body: dict, patch: dict) -> dict:
    out = copy.deepcopy(body or {})
    for op, fields in patch.items():
        if op == "$set":
            for path, value in fields.items():
                node, key = _parent(out, path, create=True)
                node[key] = to_json(value)
        elif op == "$inc":
            for path, amount in fields.items():
                node, key = _parent(out, path, create=True)
                node[key] = (node.get(key) or 0) + amount
        elif op == "$push":
            for path, value in fields.items():
                node, key = _parent(out, path, create=True)
                items = list(node.get(key) or [])
                items.append(to_json(value))
                node[key] = items
        elif op == "$unset":
            for path in fields:
                node, key = _parent(out, path, create=False)
                if node is not None:
                    node.pop(key, None)
        else:
            raise ValueError(f"Unsupported patch operator: {op}")
    return out


class DocumentStore(ABC):
    @abstractmethod
    def find_by_id(self, collection: str, doc_id: str) -> dict | None: ...

    @abstractmethod
    def find_one(self, collection: str, filter: dict) -> dict | None: ...

    @abstractmethod
    def find_all(self, collection: str, filter: dict | None = None) -> list[dict]: ...

    @abstractmethod
    def insert(self, collection: str, doc: dict) -> str: ...

    @abstractmethod
    def insert_many(self, collection: str, docs: list[dict]) -> list[str]: ...

    @abstractmethod
    def update_atomic(
        self,
        collection: str,
        doc_id: str,
        patch: dict,
        expected_version: int | None = None,
    ) -> dict | None: ...

    @abstractmethod
    def delete(self, collection: str, doc_id: str) -> bool: ...


class SqlDocumentStore(DocumentStore):
    """DocumentStore on top of Flask-SQLAlchemy. Needs an app context."""

    def _query(self, collection: str, filter: dict | None = None):
        q = Document.query.filter(Document.collection == collection)
        for key, value in (filter or {}).items():
            if key == "id":
                q = q.filter(Document.doc_id == str(value))
                continue
            field = Document.body[key]
            if isinstance(value, bool):
                q = q.filter(field.as_boolean() == value)
            elif isinstance(value, int):
                q = q.filter(field.as_integer() == value)
            elif isinstance(value, float):
                q = q.filter(field.as_float() == value)
            elif isinstance(value, str):
                q = q.filter(field.as_string() == value)
            else:
                raise TypeError(f"Unsupported filter value for {key!r}: {type(value).__name__}")
        return q.order_by(Document.seq.asc()).populate_existing()

    def find_by_id(self, collection: str, doc_id: str) -> dict | None:
        try:
            row = self._query(collection, {"id": doc_id}).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e
        return row.to_dict() if row else None

    def find_one(self, collection: str, filter: dict) -> dict | None:
        try:
            row = self._query(collection, filter).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e
        return row.to_dict() if row else None

    def find_all(self, collection: str, filter: dict | None = None) -> list[dict]:
        try:
            rows = self._query(collection, filter).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e
        return [r.to_dict() for r in rows]

    def insert(self, collection: str, doc: dict) -> str:
        return self.insert_many(collection, [doc])[0]

    def insert_many(self, collection: str, docs: list[dict]) -> list[str]:
        ids = []
        rows = []
        for doc in docs:
            body = to_json(doc)
            doc_id = str(body.pop("id", None) or new_id())
            body.pop("version", None)
            ids.append(doc_id)
            rows.append(Document(collection=collection, doc_id=doc_id, body=body, version=1))
        try:
            db.session.add_all(rows)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e
        return ids

    def update_atomic(
        self,
        collection: str,
        doc_id: str,
        patch: dict,
        expected_version: int | None = None,
    ) -> dict | None:
        try:
            row = self._query(collection, {"id": doc_id}).first()
            if row is None:
                return None
            current = int(row.version or 1)
            stored_id = row.doc_id
            if expected_version is not None and current != int(expected_version):
                db.session.rollback()
                raise StaleDocumentError(collection, doc_id)

            new_body = apply_patch(row.body, patch)
            now = datetime.utcnow()
            updated = (
                db.session.query(Document)
                .filter(Document.seq == row.seq, Document.version == current)
                .update(
                    {Document.body: new_body, Document.version: current + 1, Document.updated_at: now},
                    synchronize_session=False,
                )
            )
            if updated != 1:
                db.session.rollback()
                raise StaleDocumentError(collection, doc_id)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e

        out = dict(new_body)
        out["id"] = stored_id
        out["version"] = current + 1
        return out

    def delete(self, collection: str, doc_id: str) -> bool:
        try:
            deleted = (
                db.session.query(Document)
                .filter(Document.collection == collection, Document.doc_id == str(doc_id))
                .delete(synchronize_session=False)
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise StoreError(str(e)) from e
        return deleted > 0
