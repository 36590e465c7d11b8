"""FastAPI authentication dependencies for dashboard routes."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from cottagebook.auth.jwt import ACCESS, decode_token
from cottagebook.database import get_db
from cottagebook.models.user import APPROVER_ROLES, User

# Strict bearer: FastAPI answers 403 itself when the header is missing
_bearer_scheme = HTTPBearer()


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Validate the Bearer access token and return the active user behind it.

    Raises:
        HTTPException 401: If the token is invalid, expired, of the wrong type,
            or the user is missing or inactive.
    """
    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise _unauthorized() from None

    # Refresh tokens are only good for /auth/refresh
    if payload.get("type") != ACCESS:
        raise _unauthorized("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _unauthorized() from None

    user = await db.get(User, user_id)
    if user is None:
        raise _unauthorized()
    if not user.is_active:
        raise _unauthorized("User account is inactive")
    return user


async def get_current_approver(user: User = Depends(get_current_user)) -> User:
    """Return the current user if they may approve, reject, edit or cancel bookings.

    Raises:
        HTTPException 403: For cleaners and any other non-approver role.
    """
    if user.role not in APPROVER_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Approver role required",
        )
    return user
