"""Authentication and role-based authorization dependencies."""

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import (
    AuthenticationError,
    IdentityServiceError,
    forbidden_exception,
    not_found_exception,
    unauthorized_exception,
)
from app.core.storage import get_session
from app.models.enums import UserType
from app.models.profile import Profile
from app.services.identity_client import IdentityClient, get_identity_client

logger = logging.getLogger(__name__)

ADMIN_ROLES = (UserType.ADMIN, UserType.SUPER_ADMIN, UserType.HELPDESK)
NO_SESSION_DETAIL = "Unauthorized - no active session"


@dataclass
class CurrentUser:
    """Authenticated caller and their profile, if one exists."""

    id: str
    email: str | None
    profile: Profile | None = None

    @property
    def type(self) -> UserType | None:
        return self.profile.type if self.profile else None

    @property
    def is_admin(self) -> bool:
        return self.type in ADMIN_ROLES


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer`` header."""
    if not authorization:
        raise unauthorized_exception(NO_SESSION_DETAIL)
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise unauthorized_exception(NO_SESSION_DETAIL)
    return token.strip()


async def get_current_user(
    authorization: str | None = Header(default=None),
    identity: IdentityClient = Depends(get_identity_client),
    session: AsyncSession = Depends(get_session),
) -> CurrentUser:
    """Validate the bearer token and load the caller's profile."""
    token = extract_bearer_token(authorization)

    try:
        identity_user = await identity.get_user(token)
    except AuthenticationError as e:
        logger.info(f"Rejected bearer token: {e.detail}")
        raise unauthorized_exception("Unauthorized - invalid token")
    except IdentityServiceError as e:
        logger.error(f"Identity service failure: {e}")
        raise HTTPException(status_code=503, detail="Authentication service unavailable")

    try:
        profile = await session.get(Profile, identity_user.id)
    except SQLAlchemyError as e:
        logger.error(f"Database error loading profile {identity_user.id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch user profile")

    if profile is not None and profile.is_deleted:
        raise unauthorized_exception("Unauthorized - account is deactivated")

    return CurrentUser(
        id=identity_user.id,
        email=identity_user.email or (profile.email if profile else None),
        profile=profile,
    )


def require_roles(*roles: UserType, detail: str = "Forbidden: Insufficient permissions"):
    """Build a dependency admitting only callers whose profile type is in ``roles``."""

    async def dependency(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.profile is None or user.profile.type is None:
            raise not_found_exception("User profile not found")
        if user.profile.type not in roles:
            logger.warning(
                f"User {user.id} ({user.profile.type.value}) denied; requires "
                f"{', '.join(r.value for r in roles)}"
            )
            raise forbidden_exception(detail)
        return user

    return dependency
