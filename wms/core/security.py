"""
Security utilities for authentication and authorization.
Handles JWT tokens, password hashing, and user verification.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Any

from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from wms.core.config import settings
from wms.core.database import get_db


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# HTTP Bearer token scheme
security_scheme = HTTPBearer(auto_error=False)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def _create_token(
    subject: str | int,
    token_type: str,
    expires_delta: timedelta,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    now = datetime.now(timezone.utc)
    to_encode = {
        "exp": now + expires_delta,
        "sub": str(subject),
        "type": token_type,
        "iat": now
    }
    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )


def create_access_token(
    subject: str | int,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[dict[str, Any]] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        subject: User ID
        expires_delta: Token expiration time
        additional_claims: Extra data to include in token

    Returns:
        Encoded JWT token string
    """
    return _create_token(
        subject,
        "access",
        expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes),
        additional_claims
    )


def create_refresh_token(
    subject: str | int,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Create a JWT refresh token."""
    return _create_token(
        subject,
        "refresh",
        expires_delta or timedelta(days=settings.jwt_refresh_token_expire_days)
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str, expected_type: str = "access") -> int:
    """
    Decode and verify a JWT token and return the user id it was issued for.

    Raises:
        HTTPException: If the token is invalid, expired or of the wrong type
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    if payload.get("type", "access") != expected_type:
        raise _unauthorized(f"Invalid token type. {expected_type.capitalize()} token required.")

    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized("Invalid user ID in token")


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme)
) -> int:
    """Extract and validate the user ID from the bearer token."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    return decode_token(credentials.credentials)


def get_current_user(
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    """
    Get the current authenticated user from database.

    Raises:
        HTTPException: If user not found or inactive
    """
    # Import here to avoid circular dependency
    from wms.models.user import User

    user = db.get(User, user_id)

    if user is None:
        raise _unauthorized("User not found")

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user
