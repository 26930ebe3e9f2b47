"""
Organization CRUD.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from gym_backend.authenticator import require_user
from gym_backend.collection_names import DEVICES_COLLECTION, ORGANIZATIONS_COLLECTION
from gym_backend.crud import (
    DEFAULT_LIST_LIMIT,
    collect_changes,
    ensure_unique,
    envelope,
    get_or_404,
    list_documents,
    modification_stamp,
    record_deletion,
    require_fields,
    with_id,
)
from gym_backend.dependencies import get_store
from gym_backend.errors import Conflict
from gym_backend.records import OrganizationRecord
from gym_backend.schemas import OrganizationPayload
from gym_backend.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["organizations"])

EMAIL_TAKEN = "Organization with this email already exists"


@router.get("/organizations")
def list_organizations(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1),
    organizationId: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    if organizationId:
        data = get_or_404(
            store, ORGANIZATIONS_COLLECTION, organizationId, "Organization"
        )
        return envelope(with_id(organizationId, data))

    filters = [("status", status)] if status else []
    organizations = list_documents(
        store, ORGANIZATIONS_COLLECTION, filters=filters, limit=limit
    )
    logger.info(
        "Fetched %d organizations for user %s", len(organizations), user["uid"]
    )
    return envelope(organizations, count=len(organizations))


@router.get("/organizations/{org_id}")
def get_organization(
    org_id: str,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    data = get_or_404(store, ORGANIZATIONS_COLLECTION, org_id, "Organization")
    return envelope(with_id(org_id, data))


@router.post("/organizations", status_code=201)
def create_organization(
    payload: OrganizationPayload,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    require_fields(payload, ("name", "email"))
    ensure_unique(
        store,
        ORGANIZATIONS_COLLECTION,
        "email",
        payload.email,
        conflict_message=EMAIL_TAKEN,
    )

    record = OrganizationRecord(
        name=payload.name,
        email=payload.email,
        phone=payload.phone or "",
        address=payload.address or "",
        status=payload.status or "active",
        created_by=user["uid"],
    )
    org_id = store.add(ORGANIZATIONS_COLLECTION, record.as_dict())
    created = store.get(ORGANIZATIONS_COLLECTION, org_id)

    logger.info("Organization created: %s by user %s", org_id, user["uid"])
    return envelope(
        with_id(org_id, created), message="Organization created successfully"
    )


@router.put("/organizations/{org_id}")
def update_organization(
    org_id: str,
    payload: Optional[OrganizationPayload] = Body(None),
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    if payload is None:
        payload = OrganizationPayload()
    existing = get_or_404(store, ORGANIZATIONS_COLLECTION, org_id, "Organization")

    changes = collect_changes(
        payload,
        if_truthy=("name", "email", "status"),
        if_present=("phone", "address"),
    )
    if "email" in changes and changes["email"] != existing.get("email"):
        ensure_unique(
            store,
            ORGANIZATIONS_COLLECTION,
            "email",
            changes["email"],
            conflict_message=EMAIL_TAKEN,
            exclude_id=org_id,
        )
    changes.update(modification_stamp(user["uid"]))

    store.update(ORGANIZATIONS_COLLECTION, org_id, changes)
    updated = store.get(ORGANIZATIONS_COLLECTION, org_id)

    logger.info("Organization updated: %s by user %s", org_id, user["uid"])
    return envelope(
        with_id(org_id, updated), message="Organization updated successfully"
    )


@router.delete("/organizations/{org_id}")
def delete_organization(
    org_id: str,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    snapshot = get_or_404(store, ORGANIZATIONS_COLLECTION, org_id, "Organization")

    # Referencing devices block the delete; child gyms are neither checked nor cascaded.
    if store.query(
        DEVICES_COLLECTION, filters=[("organizationId", org_id)], limit=1
    ):
        raise Conflict(
            "Cannot delete organization with associated devices",
            message="Please reassign or delete all devices first",
        )

    store.delete(ORGANIZATIONS_COLLECTION, org_id)
    record_deletion(
        store,
        action="delete_organization",
        subject={"organizationId": org_id},
        performed_by=user["uid"],
        snapshot=snapshot,
    )

    logger.info("Organization deleted: %s by user %s", org_id, user["uid"])
    return envelope(message="Organization deleted successfully")
