"""Bearer-token guard for the session inspection endpoints.

The token lives on the app's own settings (``app.state.settings``), so each
``create_app()`` instance can carry a different key.

  key configured, token matches       → allow
  key configured, token wrong/absent  → 401 with a Bearer challenge
  no key, DEBUG on                    → allow
  no key, DEBUG off                   → 403; the endpoints stay closed
"""

from __future__ import annotations

import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from reservations.config import Settings

log = logging.getLogger("reservations.auth")

_bearer_scheme = HTTPBearer(auto_error=False, description="ADMIN_API_KEY")


def _token_matches(credentials: HTTPAuthorizationCredentials | None, key: str) -> bool:
    if credentials is None:
        return False
    return secrets.compare_digest(credentials.credentials.encode(), key.encode())


async def require_admin_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
) -> None:
    settings: Settings = request.app.state.settings

    if not settings.admin_api_key:
        if settings.debug:
            log.debug("Admin request to %s allowed without a key (DEBUG)", request.url.path)
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Session inspection is disabled. Set ADMIN_API_KEY to enable it.",
        )

    if not _token_matches(credentials, settings.admin_api_key):
        log.warning(
            "Rejected admin request to %s (%s token)",
            request.url.path,
            "no" if credentials is None else "wrong",
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="A valid admin bearer token is required.",
            headers={"WWW-Authenticate": "Bearer"},
        )
