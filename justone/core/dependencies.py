from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from justone.controllers.auth_controller import user_from_token
from justone.core.config import Settings, get_settings
from justone.core.database import get_db
from justone.core.errors import ApiError, ConfigurationError
from justone.core.security import constant_time_equals
from justone.models.user import User

bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    """
    Bearer guard for user endpoints.
    Only `type=access` tokens are accepted; refresh tokens are rejected.
    """
    if not credentials:
        raise ApiError(
            401,
            "unauthorized",
            "Unauthorized.",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await user_from_token(db, settings, credentials.credentials, "access")


async def require_admin_key(
    x_admin_key: str | None = Header(None, alias="x-admin-key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """Static shared-secret gate for the admin export."""
    if not settings.ADMIN_API_KEY:
        raise ConfigurationError("admin_not_configured", "Admin API key not configured.")

    if not x_admin_key or not constant_time_equals(x_admin_key, settings.ADMIN_API_KEY):
        raise ApiError(401, "invalid_admin_key", "Unauthorized - invalid admin key.")
