"""
Identity provider abstraction for Firebase Authentication and an in-memory test implementation.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Optional, Protocol

import requests
from firebase_admin import auth
from firebase_admin import exceptions as firebase_exceptions

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds
SIGN_IN_WITH_PASSWORD_URL = (
    "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"
)


class IdentityError(Exception):
    """The identity provider refused an operation (bad password, duplicate email, ...)."""


class CredentialError(IdentityError):
    """A session cookie or ID token failed verification."""


class IdentityNotConfigured(RuntimeError):
    """Password sign-in was requested without an API key."""


class IdentityProvider(Protocol):
    """Defines the operations the API needs from the identity provider."""

    def verify_session_cookie(self, session_cookie: str) -> dict:
        """Verify a session cookie, including a revocation check."""
        ...

    def verify_id_token(self, id_token: str) -> dict:
        ...

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        ...

    def create_user(
        self,
        *,
        email: str,
        password: str,
        display_name: str,
        phone_number: Optional[str] = None,
    ) -> str:
        ...

    def generate_email_verification_link(self, email: str) -> str:
        ...

    def sign_in_with_password(self, email: str, password: str) -> str:
        """Exchange an email and password for an ID token."""
        ...


class FirebaseIdentityProvider:
    """
    Firebase Authentication through the Admin SDK, plus the Identity Toolkit
    REST API for password sign-in (the Admin SDK cannot check passwords).
    """

    def __init__(self, app, api_key: Optional[str]):
        self._app = app
        self.api_key = api_key

    def verify_session_cookie(self, session_cookie: str) -> dict:
        try:
            return auth.verify_session_cookie(
                session_cookie, check_revoked=True, app=self._app
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise CredentialError(str(e)) from e

    def verify_id_token(self, id_token: str) -> dict:
        try:
            return auth.verify_id_token(id_token, app=self._app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise CredentialError(str(e)) from e

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        try:
            return auth.create_session_cookie(
                id_token, expires_in=expires_in, app=self._app
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise IdentityError(str(e)) from e

    def create_user(
        self,
        *,
        email: str,
        password: str,
        display_name: str,
        phone_number: Optional[str] = None,
    ) -> str:
        try:
            user = auth.create_user(
                email=email,
                password=password,
                display_name=display_name,
                phone_number=phone_number or None,
                app=self._app,
            )
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise IdentityError(str(e)) from e
        return user.uid

    def generate_email_verification_link(self, email: str) -> str:
        try:
            return auth.generate_email_verification_link(email, app=self._app)
        except (ValueError, firebase_exceptions.FirebaseError) as e:
            raise IdentityError(str(e)) from e

    def sign_in_with_password(self, email: str, password: str) -> str:
        if not self.api_key:
            raise IdentityNotConfigured("FIREBASE_API_KEY is not configured")
        response = requests.post(
            SIGN_IN_WITH_PASSWORD_URL,
            params={"key": self.api_key},
            json={"email": email, "password": password, "returnSecureToken": True},
            timeout=REQUEST_TIMEOUT,
        )
        data = response.json()
        if "error" in data:
            message = data["error"].get("message", "Sign-in failed")
            logger.info("Password sign-in rejected: %s", message)
            raise IdentityError(message)
        response.raise_for_status()
        return data["idToken"]


@dataclass
class _InMemoryUser:
    uid: str
    email: str
    password: str
    display_name: str
    phone_number: Optional[str] = None


@dataclass
class InMemoryIdentityProvider:
    """Test double for identity provider interactions."""

    api_key: Optional[str] = "test-api-key"
    base_url: str = "https://example.test/auth"
    users: Dict[str, _InMemoryUser] = field(default_factory=dict)
    id_tokens: Dict[str, dict] = field(default_factory=dict)
    session_cookies: Dict[str, dict] = field(default_factory=dict)
    revoked_uids: set = field(default_factory=set)
    fail_session_cookie_creation: bool = False

    def issue_id_token(
        self,
        uid: str,
        *,
        email: Optional[str] = None,
        name: Optional[str] = None,
        picture: Optional[str] = None,
        expires_in: timedelta = timedelta(hours=1),
    ) -> str:
        """Mint an ID token the way a client SDK would after sign-in."""
        token = f"id-{uuid.uuid4().hex}"
        claims = {"uid": uid, "exp": time.time() + expires_in.total_seconds()}
        if email is not None:
            claims["email"] = email
        if name is not None:
            claims["name"] = name
        if picture is not None:
            claims["picture"] = picture
        self.id_tokens[token] = claims
        return token

    def revoke_refresh_tokens(self, uid: str) -> None:
        self.revoked_uids.add(uid)

    def verify_session_cookie(self, session_cookie: str) -> dict:
        claims = self._check(self.session_cookies.get(session_cookie))
        if claims["uid"] in self.revoked_uids:
            raise CredentialError("The Firebase session cookie has been revoked")
        return claims

    def verify_id_token(self, id_token: str) -> dict:
        return self._check(self.id_tokens.get(id_token))

    def create_session_cookie(self, id_token: str, expires_in: timedelta) -> str:
        if self.fail_session_cookie_creation:
            raise IdentityError("Session cookie creation disabled")
        claims = dict(self.verify_id_token(id_token))
        claims["exp"] = time.time() + expires_in.total_seconds()
        cookie = f"session-{uuid.uuid4().hex}"
        self.session_cookies[cookie] = claims
        return cookie

    def create_user(
        self,
        *,
        email: str,
        password: str,
        display_name: str,
        phone_number: Optional[str] = None,
    ) -> str:
        if any(user.email == email for user in self.users.values()):
            raise IdentityError(
                "The email address is already in use by another account."
            )
        if len(password) < 6:
            raise IdentityError("The password must be a string with at least 6 characters.")
        uid = uuid.uuid4().hex[:28]
        self.users[uid] = _InMemoryUser(
            uid=uid,
            email=email,
            password=password,
            display_name=display_name,
            phone_number=phone_number,
        )
        return uid

    def generate_email_verification_link(self, email: str) -> str:
        return f"{self.base_url}/verify?email={email}"

    def sign_in_with_password(self, email: str, password: str) -> str:
        if not self.api_key:
            raise IdentityNotConfigured("FIREBASE_API_KEY is not configured")
        for user in self.users.values():
            if user.email == email:
                if user.password != password:
                    raise IdentityError("INVALID_PASSWORD")
                return self.issue_id_token(
                    user.uid, email=user.email, name=user.display_name
                )
        raise IdentityError("EMAIL_NOT_FOUND")

    def _check(self, claims: Optional[dict]) -> dict:
        if claims is None:
            raise CredentialError("Credential is malformed or unknown")
        if claims["exp"] < time.time():
            raise CredentialError("Credential has expired")
        return dict(claims)
