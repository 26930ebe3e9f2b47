"""
Device CRUD and bulk organization assignment.
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
from gym_backend.errors import ValidationFailed
from gym_backend.records import UNASSIGNED, DeviceRecord
from gym_backend.schemas import BulkAssignRequest, DevicePayload
from gym_backend.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["devices"])

SERIAL_TAKEN = "Device with this serial number already exists"


def _organization_assignment(
    store: DocumentStore, organization_id: Optional[str]
) -> dict:
    """organizationId plus its cached display name; "Unassigned" when empty."""
    if not organization_id:
        return {"organizationId": None, "organizationName": UNASSIGNED}
    organization = get_or_404(
        store, ORGANIZATIONS_COLLECTION, organization_id, "Organization"
    )
    return {
        "organizationId": organization_id,
        "organizationName": organization.get("name"),
    }


@router.get("/devices")
def list_devices(
    limit: int = Query(DEFAULT_LIST_LIMIT, ge=1),
    organizationId: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    filters = [
        (field, value)
        for field, value in (
            ("organizationId", organizationId),
            ("type", type),
            ("status", status),
        )
        if value
    ]
    devices = list_documents(store, DEVICES_COLLECTION, filters=filters, limit=limit)
    logger.info("Fetched %d devices for user %s", len(devices), user["uid"])
    return envelope(devices, count=len(devices))


@router.get("/devices/{device_id}")
def get_device(
    device_id: str,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    data = get_or_404(store, DEVICES_COLLECTION, device_id, "Device")
    return envelope(with_id(device_id, data))


@router.post("/devices", status_code=201)
def create_device(
    payload: DevicePayload,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    require_fields(payload, ("deviceName", "type", "serialNumber"))
    ensure_unique(
        store,
        DEVICES_COLLECTION,
        "serialNumber",
        payload.serialNumber,
        conflict_message=SERIAL_TAKEN,
    )
    assignment = _organization_assignment(store, payload.organizationId)

    record = DeviceRecord(
        device_name=payload.deviceName,
        type=payload.type,
        serial_number=payload.serialNumber,
        model=payload.model or "",
        manufacturer=payload.manufacturer or "",
        organization_id=assignment["organizationId"],
        organization_name=assignment["organizationName"],
        status=payload.status or "active",
        location=payload.location or "",
        ip_address=payload.ipAddress or "",
        mac_address=payload.macAddress or "",
        created_by=user["uid"],
    )
    device_id = store.add(DEVICES_COLLECTION, record.as_dict())
    created = store.get(DEVICES_COLLECTION, device_id)

    logger.info("Device created: %s by user %s", device_id, user["uid"])
    return envelope(with_id(device_id, created), message="Device created successfully")


@router.post("/devices/bulk-assign")
def bulk_assign_devices(
    payload: BulkAssignRequest,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Point many devices at one organization in a single atomic batch.

    Unknown device ids are skipped and left out of updatedCount.
    """
    if not payload.deviceIds:
        raise ValidationFailed("Device IDs array is required")

    changes = {
        **_organization_assignment(store, payload.organizationId),
        **modification_stamp(user["uid"]),
    }
    staged = [
        (DEVICES_COLLECTION, device_id, changes)
        for device_id in dict.fromkeys(payload.deviceIds)
        if store.get(DEVICES_COLLECTION, device_id) is not None
    ]
    if staged:
        store.commit_updates(staged)

    logger.info("Bulk assigned %d devices by user %s", len(staged), user["uid"])
    return envelope(
        message=f"Successfully assigned {len(staged)} devices",
        updatedCount=len(staged),
    )


@router.put("/devices/{device_id}")
def update_device(
    device_id: str,
    payload: Optional[DevicePayload] = Body(None),
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    if payload is None:
        payload = DevicePayload()
    existing = get_or_404(store, DEVICES_COLLECTION, device_id, "Device")

    if payload.serialNumber and payload.serialNumber != existing.get("serialNumber"):
        ensure_unique(
            store,
            DEVICES_COLLECTION,
            "serialNumber",
            payload.serialNumber,
            conflict_message=SERIAL_TAKEN,
            exclude_id=device_id,
        )

    changes = collect_changes(
        payload,
        if_truthy=("deviceName", "type", "serialNumber", "status"),
        if_present=("model", "manufacturer", "location", "ipAddress", "macAddress"),
    )
    if payload.provided("organizationId"):
        changes.update(_organization_assignment(store, payload.organizationId))
    changes.update(modification_stamp(user["uid"]))

    store.update(DEVICES_COLLECTION, device_id, changes)
    updated = store.get(DEVICES_COLLECTION, device_id)

    logger.info("Device updated: %s by user %s", device_id, user["uid"])
    return envelope(with_id(device_id, updated), message="Device updated successfully")


@router.delete("/devices/{device_id}")
def delete_device(
    device_id: str,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    snapshot = get_or_404(store, DEVICES_COLLECTION, device_id, "Device")

    store.delete(DEVICES_COLLECTION, device_id)
    record_deletion(
        store,
        action="delete_device",
        subject={"deviceId": device_id},
        performed_by=user["uid"],
        snapshot=snapshot,
    )

    logger.info("Device deleted: %s by user %s", device_id, user["uid"])
    return envelope(message="Device deleted successfully")
