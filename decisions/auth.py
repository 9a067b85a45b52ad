"""
Caller identity for the rule-set endpoints.

Sessions are HS256 JWTs issued by the account service and carried either in the
session cookie or an ``Authorization: Bearer`` header. The ``email`` claim is the
identity that rule-set ownership is checked against.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, HTTPException, Request, status

from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_access_token(email: str, settings: Settings, **claims) -> str:
    payload = {
        **claims,
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expiry_hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _extract_token(request: Request, settings: Settings) -> Optional[str]:
    token = request.cookies.get(settings.auth_cookie_name)
    if token:
        return token
    scheme, _, credentials = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def get_current_user_email(request: Request, settings: Settings = Depends(get_settings)) -> str:
    token = _extract_token(request, settings)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.InvalidTokenError as e:
        logger.info("Rejected session token: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    email = payload.get("email")
    if not email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    return email
