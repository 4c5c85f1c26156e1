"""Resolve the caller principal handed to the order core.

Credentials are issued elsewhere; this module only checks a static API key or
verifies a bearer JWT.
"""

from __future__ import annotations

import hmac
import logging
from typing import Optional

import jwt
from fastapi import HTTPException, status

from orderledger.config import get_settings

logger = logging.getLogger(__name__)


def _load_api_keys() -> set[str]:
    settings = get_settings()
    keys = set()
    if settings.API_KEYS:
        for value in settings.API_KEYS.split(","):
            value = value.strip()
            if value:
                keys.add(value)
    return keys


def _matches_any(candidate: str, keys: set[str]) -> bool:
    return any(hmac.compare_digest(candidate, key) for key in keys)


def _get_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1]
    return None


def _decode_jwt(token: str) -> dict:
    settings = get_settings()
    if not settings.JWT_SECRET:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="JWT auth is not configured",
        )
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
            options=options,
        )
    except jwt.PyJWTError as exc:
        logger.info("Rejected bearer token: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid JWT",
        ) from exc


def authenticate_request(
    api_key: Optional[str],
    authorization: Optional[str],
    *,
    require_auth: bool = False,
) -> Optional[dict]:
    """Return the caller principal, or ``None`` when auth is not configured.

    Raises 401 when credentials are configured (or required) and the request
    carries none that verify.
    """
    settings = get_settings()
    keys = _load_api_keys()

    if settings.JWT_REQUIRED:
        require_auth = True

    if api_key and keys and _matches_any(api_key, keys) and not settings.JWT_REQUIRED:
        return {"auth_type": "api_key", "subject": None}

    token = _get_bearer_token(authorization)
    if token:
        try:
            payload = _decode_jwt(token)
            return {"auth_type": "jwt", "subject": payload.get("sub"), "payload": payload}
        except HTTPException:
            if settings.JWT_REQUIRED:
                raise

    if (require_auth or keys) and (keys or settings.JWT_SECRET or settings.JWT_REQUIRED):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return None


__all__ = ["authenticate_request"]
