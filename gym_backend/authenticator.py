"""
Session authenticator shared by every protected route group.

Credentials are resolved strictly in order, first match wins:

1. a non-empty session cookie, verified with a revocation check;
2. an ``Authorization`` header starting with ``"Bearer "``, verified as an ID token;
3. otherwise the request is rejected.

A cookie that fails verification does not fall back to the header. Every
failure is reported as the same ``Unauthenticated`` error.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request

from gym_backend.config import Settings
from gym_backend.dependencies import get_app_settings, get_identity
from gym_backend.errors import Unauthenticated
from gym_backend.identity import CredentialError, IdentityProvider

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def authenticate(
    identity: IdentityProvider,
    *,
    session_cookie: Optional[str],
    authorization: Optional[str],
) -> dict:
    """Return verified claims for the presented credential or raise Unauthenticated."""
    try:
        if session_cookie:
            claims = identity.verify_session_cookie(session_cookie)
        elif authorization and authorization.startswith(BEARER_PREFIX):
            claims = identity.verify_id_token(authorization[len(BEARER_PREFIX):])
        else:
            logger.debug("No credential presented")
            raise Unauthenticated()
    except CredentialError as e:
        logger.debug("Credential verification failed: %s", type(e).__name__)
        raise Unauthenticated() from e

    if not claims.get("uid"):
        raise Unauthenticated()
    return claims


def require_user(
    request: Request,
    identity: IdentityProvider = Depends(get_identity),
    settings: Settings = Depends(get_app_settings),
) -> dict:
    """FastAPI dependency: authenticate the request and attach claims to it."""
    claims = authenticate(
        identity,
        session_cookie=request.cookies.get(settings.session_cookie_name),
        authorization=request.headers.get("Authorization"),
    )
    request.state.user = claims
    return claims
