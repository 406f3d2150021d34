"""Authentication dependencies for FastAPI"""

from typing import Optional

from authlib.jose.errors import InvalidTokenError
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ez_forms.auth.jwt_utils import jwt_utils
from ez_forms.auth.models import User
from ez_forms.logging_config import get_logger

# auto_error=False so a missing header yields 401 rather than FastAPI's default
security = HTTPBearer(auto_error=False)

logger = get_logger(__name__)


async def _user_from_token(token: str) -> User:
    try:
        return await jwt_utils.extract_user(token)
    except InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> User:
    """
    FastAPI dependency that requires a valid Bearer token

    Args:
        credentials: HTTP Bearer token credentials from Authorization header

    Returns:
        User resolved from the verified token

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return await _user_from_token(credentials.credentials)


async def get_current_user_optional(request: Request) -> Optional[User]:
    """
    FastAPI dependency for routes open to both anonymous and authenticated requesters.

    Reads the Authorization header directly instead of using HTTPBearer so the
    route does not advertise a security requirement in the OpenAPI document.

    Args:
        request: FastAPI Request object

    Returns:
        - Authenticated User if a valid Bearer token is provided
        - None if there is no Authorization header or it is not a Bearer token

    Raises:
        HTTPException: 401 if a token is provided but invalid/expired
    """
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        return None

    token = auth_header[len("Bearer ") :]
    return await _user_from_token(token)
