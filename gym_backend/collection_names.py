"""
Firestore collection names.

Firestore has no DDL; collections come into existence on first write, so
these constants are the schema.
"""

ORGANIZATIONS_COLLECTION = "organizations"
DEVICES_COLLECTION = "devices"
GYMS_SUBCOLLECTION = "gyms"
AUDIT_LOGS_COLLECTION = "audit_logs"
USERS_COLLECTION = "users"


def gyms_collection(org_id: str) -> str:
    """Path of the gyms child collection owned by an organization."""
    return f"{ORGANIZATIONS_COLLECTION}/{org_id}/{GYMS_SUBCOLLECTION}"
