"""
Document shapes written to the store.

Documents use camelCase keys, matching what the frontend reads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

UNASSIGNED = "Unassigned"


def utc_now() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2025-01-31T12:00:00.000Z."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


@dataclass
class OrganizationRecord:
    name: str
    email: str
    created_by: str
    phone: str = ""
    address: str = ""
    status: str = "active"
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "status": self.status,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "createdBy": self.created_by,
        }


@dataclass
class DeviceRecord:
    device_name: str
    type: str
    serial_number: str
    created_by: str
    model: str = ""
    manufacturer: str = ""
    organization_id: Optional[str] = None
    organization_name: str = UNASSIGNED
    status: str = "active"
    location: str = ""
    ip_address: str = ""
    mac_address: str = ""
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "deviceName": self.device_name,
            "type": self.type,
            "serialNumber": self.serial_number,
            "model": self.model,
            "manufacturer": self.manufacturer,
            "organizationId": self.organization_id,
            "organizationName": self.organization_name,
            "status": self.status,
            "location": self.location,
            "ipAddress": self.ip_address,
            "macAddress": self.mac_address,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "createdBy": self.created_by,
        }


@dataclass
class GymRecord:
    name: str
    address: str
    phone: str
    email: str
    capacity: int
    manager: str
    organization_id: str
    created_by: str
    status: str = "ACTIVE"
    opening_time: str = ""
    closing_time: str = ""
    amenities: list[str] = field(default_factory=list)
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    members: int = 0
    monthly_revenue: float = 0
    created_at: str = field(default_factory=utc_now)
    updated_at: str = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "capacity": self.capacity,
            "manager": self.manager,
            "status": self.status,
            "openingTime": self.opening_time,
            "closingTime": self.closing_time,
            "amenities": list(self.amenities),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "members": self.members,
            "monthlyRevenue": self.monthly_revenue,
            "organizationId": self.organization_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "createdBy": self.created_by,
        }


@dataclass
class AuditLogEntry:
    """Append-only record of a delete, with a snapshot of what was removed."""

    action: str
    subject: dict[str, str]
    performed_by: str
    details: dict[str, Any]
    timestamp: str = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "action": self.action,
            **self.subject,
            "performedBy": self.performed_by,
            "timestamp": self.timestamp,
            "details": self.details,
        }


@dataclass
class UserProfile:
    name: str
    email: str
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    provider: str = "password"
    created_at: str = field(default_factory=utc_now)

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "photoURL": self.photo_url,
            "provider": self.provider,
            "createdAt": self.created_at,
        }
