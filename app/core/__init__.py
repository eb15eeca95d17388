"""Core application components."""

from app.core.config import settings
from app.core.exceptions import ApplicationError, AuthenticationError
from app.core.storage import Base, async_session, get_session

__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "Base",
    "async_session",
    "get_session",
    "settings",
]
