"""
Account endpoints: signup, password and Google login, profile, logout.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, Request, Response

from gym_backend.authenticator import authenticate
from gym_backend.collection_names import USERS_COLLECTION
from gym_backend.config import Settings
from gym_backend.crud import envelope, require_fields
from gym_backend.dependencies import get_app_settings, get_identity, get_store
from gym_backend.errors import Unauthenticated, Unexpected, ValidationFailed
from gym_backend.identity import (
    CredentialError,
    IdentityError,
    IdentityNotConfigured,
    IdentityProvider,
)
from gym_backend.records import UserProfile, utc_now
from gym_backend.schemas import GoogleLoginRequest, LoginRequest, SignupRequest
from gym_backend.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

AUTH_ROUTES = [
    "POST /auth/signup",
    "POST /auth/login",
    "POST /auth/google-login",
    "GET /auth/profile",
    "POST /auth/logout",
]


def _public_user(claims: dict) -> dict:
    return {
        "uid": claims["uid"],
        "email": claims.get("email"),
        "displayName": claims.get("name"),
    }


def _start_session(
    response: Response,
    identity: IdentityProvider,
    settings: Settings,
    id_token: str,
) -> bool:
    """Exchange the ID token for a session cookie and set it; False if that failed."""
    expires_in = timedelta(days=settings.session_expires_in_days)
    try:
        session_cookie = identity.create_session_cookie(id_token, expires_in)
    except IdentityError as e:
        logger.warning("Session cookie creation failed: %s", e)
        return False
    response.set_cookie(
        settings.session_cookie_name,
        session_cookie,
        max_age=int(expires_in.total_seconds()),
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return True


@router.post("/signup", status_code=201)
def signup(
    payload: SignupRequest,
    identity: IdentityProvider = Depends(get_identity),
    store: DocumentStore = Depends(get_store),
):
    require_fields(payload, ("name", "email", "password"))
    logger.info("Signup request received for %s", payload.email)

    try:
        uid = identity.create_user(
            email=payload.email,
            password=payload.password,
            display_name=payload.name,
            phone_number=payload.phone,
        )
        profile = UserProfile(
            name=payload.name, email=payload.email, phone=payload.phone or None
        )
        store.set(USERS_COLLECTION, uid, profile.as_dict())
        link = identity.generate_email_verification_link(payload.email)
    except IdentityError as e:
        raise ValidationFailed(str(e)) from e

    logger.info("User created successfully: %s", uid)
    return envelope(
        message="Account created successfully. Check your email for verification link.",
        uid=uid,
        verificationLink=link,
    )


@router.post("/login")
def login(
    payload: LoginRequest,
    response: Response,
    identity: IdentityProvider = Depends(get_identity),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    require_fields(payload, ("email", "password"))
    logger.info("Login request received for %s", payload.email)

    try:
        id_token = identity.sign_in_with_password(payload.email, payload.password)
        claims = identity.verify_id_token(id_token)
    except IdentityNotConfigured as e:
        raise Unexpected("Server configuration error") from e
    except IdentityError as e:
        raise ValidationFailed(str(e)) from e

    user = _public_user(claims)
    if not _start_session(response, identity, settings, id_token):
        return envelope(
            message="Login successful (session creation failed)",
            user=user,
            warning="Session cookie not created",
        )

    store.set(USERS_COLLECTION, claims["uid"], {"lastLogin": utc_now()}, merge=True)

    logger.info("Login successful for %s", claims["uid"])
    return envelope(message="Login successful", user=user, idToken=id_token)


@router.post("/google-login")
def google_login(
    payload: GoogleLoginRequest,
    response: Response,
    identity: IdentityProvider = Depends(get_identity),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    if not payload.idToken:
        raise ValidationFailed("ID token is required")

    try:
        claims = identity.verify_id_token(payload.idToken)
    except CredentialError as e:
        logger.info("Google login token rejected")
        raise Unauthenticated() from e

    uid = claims["uid"]
    if store.get(USERS_COLLECTION, uid) is None:
        email = claims.get("email") or ""
        profile = UserProfile(
            name=claims.get("name") or email.split("@")[0],
            email=email,
            photo_url=claims.get("picture"),
            provider="google",
        )
        store.set(USERS_COLLECTION, uid, profile.as_dict())
        logger.info("New Google user profile created: %s", uid)
    else:
        store.update(USERS_COLLECTION, uid, {"lastLogin": utc_now()})

    user = _public_user(claims)
    if not _start_session(response, identity, settings, payload.idToken):
        return envelope(
            message="Login successful (session creation skipped)",
            user=user,
            warning="Session cookie not created - authentication still valid",
        )
    return envelope(message="Login successful", user=user)


@router.get("/profile")
def profile(
    request: Request,
    identity: IdentityProvider = Depends(get_identity),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    # Session cookie only; bearer tokens are not accepted here.
    claims = authenticate(
        identity,
        session_cookie=request.cookies.get(settings.session_cookie_name),
        authorization=None,
    )
    return envelope(user=claims, profile=store.get(USERS_COLLECTION, claims["uid"]))


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_app_settings)):
    response.delete_cookie(settings.session_cookie_name)
    return envelope(message="Logged out successfully")


@router.get("/test")
def auth_status(settings: Settings = Depends(get_app_settings)):
    return envelope(
        message="Auth routes are working",
        routes=AUTH_ROUTES,
        firebaseConfigured=bool(settings.firebase_api_key),
    )
