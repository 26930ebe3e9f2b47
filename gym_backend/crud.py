"""
Building blocks shared by the organization, device and gym handlers.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional

from gym_backend.collection_names import AUDIT_LOGS_COLLECTION
from gym_backend.errors import Conflict, NotFound, missing_fields_error
from gym_backend.records import AuditLogEntry, utc_now
from gym_backend.schemas import RequestPayload
from gym_backend.store import DocumentStore, Filters


DEFAULT_LIST_LIMIT = 100
_UNSET: Any = object()


def envelope(
    data: Any = _UNSET,
    *,
    message: Optional[str] = None,
    count: Optional[int] = None,
    **extra: Any,
) -> dict:
    """Success envelope: {success, data?, message?, count?, ...}."""
    body: dict = {"success": True}
    if data is not _UNSET:
        body["data"] = data
    if message is not None:
        body["message"] = message
    if count is not None:
        body["count"] = count
    body.update(extra)
    return body


def with_id(doc_id: str, data: dict) -> dict:
    return {"id": doc_id, **data}


def require_fields(payload: RequestPayload, required: Iterable[str]) -> None:
    """Raise ValidationFailed naming every required field that is missing or empty."""
    missing = [name for name in required if not getattr(payload, name)]
    if missing:
        raise missing_fields_error(missing)


def get_or_404(
    store: DocumentStore, collection: str, doc_id: str, label: str
) -> dict:
    data = store.get(collection, doc_id)
    if data is None:
        raise NotFound(f"{label} not found")
    return data


def ensure_unique(
    store: DocumentStore,
    collection: str,
    field: str,
    value: Any,
    *,
    conflict_message: str,
    exclude_id: Optional[str] = None,
) -> None:
    """
    Best-effort uniqueness check.

    This is a query followed later by a separate write, not a transaction: two
    concurrent writers with the same value can both pass.
    """
    matches = store.query(collection, filters=[(field, value)], limit=2)
    if any(doc_id != exclude_id for doc_id, _ in matches):
        raise Conflict(conflict_message)


def list_documents(
    store: DocumentStore,
    collection: str,
    *,
    filters: Filters = (),
    limit: int = DEFAULT_LIST_LIMIT,
) -> list[dict]:
    """Newest first, filters ANDed together."""
    return [
        with_id(doc_id, data)
        for doc_id, data in store.query(
            collection,
            filters=filters,
            order_by="createdAt",
            descending=True,
            limit=limit,
        )
    ]


def modification_stamp(uid: str) -> dict:
    return {"updatedAt": utc_now(), "lastModifiedBy": uid}


def collect_changes(
    payload: RequestPayload,
    *,
    if_truthy: Iterable[str] = (),
    if_present: Iterable[str] = (),
) -> dict:
    """
    Build a merge-patch from a request body.

    ``if_truthy`` fields are only applied when non-empty, so sending "" leaves
    the stored value alone. ``if_present`` fields are applied whenever the
    client sent them, including null and "".
    """
    changes: dict = {}
    for name in if_truthy:
        value = getattr(payload, name)
        if value:
            changes[name] = value
    for name in if_present:
        if payload.provided(name):
            changes[name] = getattr(payload, name)
    return changes


def record_deletion(
    store: DocumentStore,
    *,
    action: str,
    subject: dict[str, str],
    performed_by: str,
    snapshot: dict,
) -> None:
    entry = AuditLogEntry(
        action=action,
        subject=subject,
        performed_by=performed_by,
        details=snapshot,
    )
    store.add(AUDIT_LOGS_COLLECTION, entry.as_dict())
