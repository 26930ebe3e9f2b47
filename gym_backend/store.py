"""
Document store abstraction for Cloud Firestore and an in-memory test implementation.

Collections are addressed by slash-separated paths, so a child collection is
just a longer path (``organizations/{orgId}/gyms``).
"""

from __future__ import annotations

import copy
import uuid
from typing import Any, Dict, Iterable, Optional, Protocol, Sequence

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1.base_query import FieldFilter

# Equality filters, applied as a conjunction.
Filters = Sequence[tuple[str, Any]]
# (collection path, document id, fields to update)
StagedUpdate = tuple[str, str, dict]


class DocumentStore(Protocol):
    """Interface for document database access."""

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    def add(self, collection: str, data: dict) -> str:
        ...

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        ...

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        ...

    def delete(self, collection: str, doc_id: str) -> None:
        ...

    def query(
        self,
        collection: str,
        *,
        filters: Filters = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        ...

    def commit_updates(self, updates: Iterable[StagedUpdate]) -> None:
        """Apply every update atomically, or none of them."""
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, dict]] = {}

    def _documents(self, collection: str) -> Dict[str, dict]:
        return self.collections.setdefault(collection.strip("/"), {})

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        data = self._documents(collection).get(doc_id)
        return copy.deepcopy(data) if data is not None else None

    def add(self, collection: str, data: dict) -> str:
        doc_id = uuid.uuid4().hex[:20]
        self._documents(collection)[doc_id] = copy.deepcopy(data)
        return doc_id

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        documents = self._documents(collection)
        if merge and doc_id in documents:
            documents[doc_id].update(copy.deepcopy(data))
        else:
            documents[doc_id] = copy.deepcopy(data)

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        documents = self._documents(collection)
        if doc_id not in documents:
            raise google_exceptions.NotFound(
                f"No document to update: {collection}/{doc_id}"
            )
        documents[doc_id].update(copy.deepcopy(data))

    def delete(self, collection: str, doc_id: str) -> None:
        self._documents(collection).pop(doc_id, None)

    def query(
        self,
        collection: str,
        *,
        filters: Filters = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        results = [
            (doc_id, data)
            for doc_id, data in self._documents(collection).items()
            if all(
                field in data and data[field] == value for field, value in filters
            )
        ]
        if order_by:
            # Firestore leaves out documents that lack the ordering field.
            results = [item for item in results if order_by in item[1]]
            results.sort(key=lambda item: item[1][order_by], reverse=descending)
        if limit is not None:
            results = results[:limit]
        return [(doc_id, copy.deepcopy(data)) for doc_id, data in results]

    def commit_updates(self, updates: Iterable[StagedUpdate]) -> None:
        staged = list(updates)
        for collection, doc_id, _ in staged:
            if doc_id not in self._documents(collection):
                raise google_exceptions.NotFound(
                    f"No document to update: {collection}/{doc_id}"
                )
        for collection, doc_id, data in staged:
            self._documents(collection)[doc_id].update(copy.deepcopy(data))


class FirestoreDocumentStore:
    """
    Cloud Firestore implementation backed by a firebase-admin client.
    """

    def __init__(self, client):
        self._client = client

    def _collection(self, collection: str):
        return self._client.collection(collection)

    def get(self, collection: str, doc_id: str) -> Optional[dict]:
        snapshot = self._collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict()

    def add(self, collection: str, data: dict) -> str:
        _, doc_ref = self._collection(collection).add(data)
        return doc_ref.id

    def set(
        self, collection: str, doc_id: str, data: dict, *, merge: bool = False
    ) -> None:
        self._collection(collection).document(doc_id).set(data, merge=merge)

    def update(self, collection: str, doc_id: str, data: dict) -> None:
        self._collection(collection).document(doc_id).update(data)

    def delete(self, collection: str, doc_id: str) -> None:
        self._collection(collection).document(doc_id).delete()

    def query(
        self,
        collection: str,
        *,
        filters: Filters = (),
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> list[tuple[str, dict]]:
        # Equality filters combined with an order-by need a composite index.
        query = self._collection(collection)
        for field, value in filters:
            query = query.where(filter=FieldFilter(field, "==", value))
        if order_by:
            direction = "DESCENDING" if descending else "ASCENDING"
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)
        return [(snapshot.id, snapshot.to_dict()) for snapshot in query.stream()]

    def commit_updates(self, updates: Iterable[StagedUpdate]) -> None:
        batch = self._client.batch()
        for collection, doc_id, data in updates:
            batch.update(self._collection(collection).document(doc_id), data)
        batch.commit()
