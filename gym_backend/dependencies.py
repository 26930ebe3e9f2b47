"""
Dependency wiring for the FastAPI app.

Clients are built once by ``build_clients`` when the app is created and kept
on ``app.state``; request handlers reach them through the getters below.
"""

from __future__ import annotations

from fastapi import Request

from gym_backend.config import Settings
from gym_backend.firebase import firestore_client, initialize_firebase
from gym_backend.identity import (
    FirebaseIdentityProvider,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from gym_backend.store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
)


def build_clients(settings: Settings) -> tuple[DocumentStore, IdentityProvider]:
    """
    Construct the store and identity clients for this process.

    Raises CredentialsNotFoundError when Firebase is required but not configured.
    """
    if settings.use_in_memory_backends:
        return InMemoryDocumentStore(), InMemoryIdentityProvider(
            api_key=settings.firebase_api_key
        )

    firebase_app = initialize_firebase(settings)
    return (
        FirestoreDocumentStore(firestore_client(firebase_app)),
        FirebaseIdentityProvider(firebase_app, settings.firebase_api_key),
    )


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
