"""
Pydantic request schemas.

Fields are optional at the schema level: handlers report every missing
required field at once, and updates inspect ``model_fields_set`` to tell an
omitted field from one sent as null or empty.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_BATCH_SIZE = 500


class RequestPayload(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    def provided(self, name: str) -> bool:
        """True if the client sent this field, whatever its value."""
        return name in self.model_fields_set


class SignupRequest(RequestPayload):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(RequestPayload):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleLoginRequest(RequestPayload):
    idToken: Optional[str] = None


class OrganizationPayload(RequestPayload):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    status: Optional[str] = None


class DevicePayload(RequestPayload):
    deviceName: Optional[str] = None
    type: Optional[str] = None
    serialNumber: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    organizationId: Optional[str] = None
    status: Optional[str] = None
    location: Optional[str] = None
    ipAddress: Optional[str] = None
    macAddress: Optional[str] = None


class BulkAssignRequest(RequestPayload):
    deviceIds: Optional[list[str]] = Field(default=None, max_length=MAX_BATCH_SIZE)
    organizationId: Optional[str] = None


class GymPayload(RequestPayload):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    capacity: Optional[int] = None
    manager: Optional[str] = None
    status: Optional[str] = None
    openingTime: Optional[str] = None
    closingTime: Optional[str] = None
    amenities: Optional[list[str]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    members: Optional[int] = None
    monthlyRevenue: Optional[float] = None
