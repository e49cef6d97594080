from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError

from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthUser:
    """
    Decode and validate a bearer JWT, raising JWTError/ValidationError on failure.
    """
    settings = get_settings()
    payload = jwt.decode(
        token,
        settings.AUTH_JWT_SECRET,
        algorithms=[settings.AUTH_JWT_ALGORITHM],
        options={"verify_aud": False},
    )
    return AuthUser(**payload)


async def get_optional_user(
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> Optional[AuthUser]:
    """
    Return the authenticated user, or None when no valid token was sent.

    Dashboard routes use this so the authorization resolver can report
    "Unauthorized" in its own result shape.
    """
    if token is None:
        return None
    try:
        return decode_token(token.credentials)
    except (JWTError, ValidationError) as e:
        logger.info("Rejected bearer token: %s", e)
        return None


async def get_current_user(
    user: Annotated[Optional[AuthUser], Depends(get_optional_user)],
) -> AuthUser:
    """
    Require a valid bearer token and return the authenticated user.
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
