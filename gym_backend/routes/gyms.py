"""
Gym CRUD. Gyms live in a child collection of their organization.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query

from gym_backend.authenticator import require_user
from gym_backend.collection_names import ORGANIZATIONS_COLLECTION, gyms_collection
from gym_backend.crud import (
    DEFAULT_LIST_LIMIT,
    collect_changes,
    envelope,
    get_or_404,
    list_documents,
    modification_stamp,
    record_deletion,
    require_fields,
    with_id,
)
from gym_backend.dependencies import get_store
from gym_backend.errors import NotFound
from gym_backend.records import GymRecord
from gym_backend.schemas import GymPayload
from gym_backend.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["gyms"])

REQUIRED_FIELDS = ("name", "address", "phone", "email", "capacity", "manager")


@router.get("/organizations/{org_id}/gyms")
def list_gyms(
    org_id: str,
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1),
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    # A missing parent is an empty listing, not a 404.
    if store.get(ORGANIZATIONS_COLLECTION, org_id) is None:
        logger.info("Organization %s not found, returning empty gyms list", org_id)
        return envelope(
            [], count=0, message="No gyms found (organization doesn't exist yet)"
        )

    gyms = list_documents(store, gyms_collection(org_id), limit=limit)
    if not gyms:
        return envelope([], count=0, message="No gyms found")

    logger.info("Fetched %d gyms for organization %s", len(gyms), org_id)
    return envelope(gyms, count=len(gyms))


@router.get("/organizations/{org_id}/gyms/{gym_id}")
def get_gym(
    org_id: str,
    gym_id: str,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    data = get_or_404(store, gyms_collection(org_id), gym_id, "Gym")
    return envelope(with_id(gym_id, data))


@router.post("/organizations/{org_id}/gyms", status_code=201)
def create_gym(
    org_id: str,
    payload: GymPayload,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    require_fields(payload, REQUIRED_FIELDS)

    # The parent is never created implicitly.
    if store.get(ORGANIZATIONS_COLLECTION, org_id) is None:
        raise NotFound("Organization not found. Please create the organization first.")

    record = GymRecord(
        name=payload.name,
        address=payload.address,
        phone=payload.phone,
        email=payload.email,
        capacity=payload.capacity,
        manager=payload.manager,
        status=payload.status or "ACTIVE",
        opening_time=payload.openingTime or "",
        closing_time=payload.closingTime or "",
        amenities=payload.amenities or [],
        latitude=payload.latitude,
        longitude=payload.longitude,
        organization_id=org_id,
        created_by=user["uid"],
    )
    collection = gyms_collection(org_id)
    gym_id = store.add(collection, record.as_dict())
    created = store.get(collection, gym_id)

    logger.info(
        "Gym created: %s in organization %s by user %s", gym_id, org_id, user["uid"]
    )
    return envelope(with_id(gym_id, created), message="Gym created successfully")


@router.put("/organizations/{org_id}/gyms/{gym_id}")
def update_gym(
    org_id: str,
    gym_id: str,
    payload: Optional[GymPayload] = Body(None),
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    if payload is None:
        payload = GymPayload()
    collection = gyms_collection(org_id)
    get_or_404(store, collection, gym_id, "Gym")

    changes = collect_changes(
        payload,
        if_truthy=("name", "address", "phone", "email", "manager", "status"),
        if_present=(
            "capacity",
            "openingTime",
            "closingTime",
            "amenities",
            "latitude",
            "longitude",
            "members",
            "monthlyRevenue",
        ),
    )
    changes.update(modification_stamp(user["uid"]))

    store.update(collection, gym_id, changes)
    updated = store.get(collection, gym_id)

    logger.info(
        "Gym updated: %s in organization %s by user %s", gym_id, org_id, user["uid"]
    )
    return envelope(with_id(gym_id, updated), message="Gym updated successfully")


@router.delete("/organizations/{org_id}/gyms/{gym_id}")
def delete_gym(
    org_id: str,
    gym_id: str,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    collection = gyms_collection(org_id)
    snapshot = get_or_404(store, collection, gym_id, "Gym")

    store.delete(collection, gym_id)
    record_deletion(
        store,
        action="delete_gym",
        subject={"gymId": gym_id, "organizationId": org_id},
        performed_by=user["uid"],
        snapshot=snapshot,
    )

    logger.info(
        "Gym deleted: %s from organization %s by user %s", gym_id, org_id, user["uid"]
    )
    return envelope(message="Gym deleted successfully")
