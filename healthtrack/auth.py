"""
Handles authentication using JSON Web Tokens (JWT).

Tokens are issued by the external auth service; this module only validates
them and exposes the current user's ID to path operations.
"""

from datetime import datetime, timedelta, timezone
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from .config import settings

ACCESS_TOKEN_EXPIRE_DAYS = 30

# HTTPBearer is a security scheme that expects an "Authorization: Bearer <token>" header.
oauth2_scheme = HTTPBearer()


def create_access_token(data: dict) -> str:
    """
    Creates a new JWT access token, signed the same way the auth service signs them.

    Args:
        data (dict): The payload to encode in the token (e.g., user ID).

    Returns:
        str: The encoded JWT token.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def get_current_user_id(credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> int:
    """
    FastAPI dependency to secure endpoints and retrieve the current user's ID.

    Raises:
        HTTPException(500): If the SECRET_KEY is not configured.
        HTTPException(401): If the token is invalid, malformed, or expired.

    Returns:
        int: The user ID from the token's 'sub' claim.
    """
    if not settings.SECRET_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT Secret Key is not configured."
        )

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(credentials.credentials, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        user_id = payload.get("sub")
        if user_id is None:
            raise credentials_exception
        return int(user_id)
    except (JWTError, ValueError):
        raise credentials_exception
