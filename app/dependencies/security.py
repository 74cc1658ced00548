"""
Basic-auth gate for callbacks the marketplace platform sends us.

The platform authenticates with the app slug as username and the app password
issued at add-on registration.
"""

import hmac
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from app.core.config import AppSettings
from app.dependencies.config import get_app_settings

logger = logging.getLogger(__name__)

_basic = HTTPBasic(realm="marketplace", auto_error=False)


def require_platform_credentials(
    credentials: Annotated[HTTPBasicCredentials | None, Depends(_basic)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> None:
    """Reject the request unless it carries the platform's basic-auth pair."""
    if credentials is not None:
        # Evaluate both comparisons so timing does not reveal which one failed.
        username_ok = hmac.compare_digest(
            credentials.username.encode("utf-8"),
            settings.marketplace.app_slug.encode("utf-8"),
        )
        password_ok = hmac.compare_digest(
            credentials.password.encode("utf-8"),
            settings.marketplace.app_password.encode("utf-8"),
        )
        if username_ok and password_ok:
            return
    logger.info("Rejected platform request with missing or invalid credentials")
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        headers={"WWW-Authenticate": 'Basic realm="marketplace"'},
    )


PlatformAuthDependency = Depends(require_platform_credentials)

__all__ = ["PlatformAuthDependency", "require_platform_credentials"]
