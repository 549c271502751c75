from __future__ import annotations

import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from careercoach.core.config import settings

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class InvalidToken(Exception):
    pass


def decode_user_id(token: str) -> str:
    """Verify a bearer token and return the user id it was issued for.

    Tokens are issued elsewhere; the id is read from ``userId`` and, failing
    that, from the standard ``sub`` claim.
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError as exc:
        raise InvalidToken("Token expired") from exc
    except jwt.PyJWTError as exc:
        raise InvalidToken("Token is not valid") from exc

    user_id = payload.get("userId") or payload.get("sub")
    if not user_id or not isinstance(user_id, (str, int)):
        raise InvalidToken("Invalid token payload")
    return str(user_id)


def get_optional_user_id(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str | None:
    """Routes that also serve anonymous callers treat a bad token as no token."""
    if creds is None or not creds.credentials:
        return None
    try:
        return decode_user_id(creds.credentials)
    except InvalidToken as exc:
        logger.info("auth_optional_token_ignored: %s", exc)
        return None


def get_current_user_id(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if creds is None or not creds.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No token, authorization denied",
        )
    try:
        return decode_user_id(creds.credentials)
    except InvalidToken as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc
