"""Bearer token validation for access tokens issued by the identity provider."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException, status
from jose import jwt
from jose.constants import Algorithms
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger("hrms_auth")

_ALLOWED_ALGORITHMS = [Algorithms.HS256, Algorithms.HS384, Algorithms.HS512]


def validate_token(token: str, secret: str, audience: str, issuer: str | None = None) -> dict[str, Any]:
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing authentication configuration",
        )

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token header: {e}",
        ) from e

    algorithm = header.get("alg", Algorithms.HS256)
    if algorithm not in _ALLOWED_ALGORITHMS:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unsupported token algorithm: {algorithm}",
        )

    options = {
        "verify_signature": True,
        "verify_aud": bool(audience),
        "verify_iss": bool(issuer),
        "verify_exp": True,
        "require_exp": True,
        "require_sub": True,
    }

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            audience=audience or None,
            issuer=issuer or None,
            options=options,
        )
    except ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token is expired",
        ) from e
    except JWTClaimsError as e:
        message = str(e).lower()
        detail = "Invalid authentication credentials"
        if "audience" in message:
            detail = f"Invalid token audience. Expected: {audience}"
        elif "issuer" in message:
            detail = f"Invalid token issuer. Expected: {issuer}"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
        ) from e
    except JWTError as e:
        logger.warning("Rejected token: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
        ) from e


def extract_roles_from_token(payload: dict[str, Any]) -> list[str]:
    app_metadata = payload.get("app_metadata")
    if not isinstance(app_metadata, dict):
        return []
    roles = app_metadata.get("roles", [])
    if not isinstance(roles, list):
        return []
    return [str(r) for r in roles if isinstance(r, str | int)]
