from __future__ import annotations

import logging

from fastapi import Header, HTTPException, status

from hrms.core.auth import extract_roles_from_token, validate_token
from hrms.core.config import settings
from hrms.models.auth import UserInfo

logger = logging.getLogger(__name__)


async def get_current_user(authorization: str | None = Header(None)) -> UserInfo:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1]

    try:
        payload = validate_token(
            token,
            settings.AUTH_JWT_SECRET,
            settings.AUTH_JWT_AUDIENCE,
            settings.AUTH_JWT_ISSUER,
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error("Token validation error: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e

    return UserInfo(
        id=payload.get("sub"),
        email=payload.get("email"),
        role=payload.get("role"),
        roles=extract_roles_from_token(payload),
    )
