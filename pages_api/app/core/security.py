"""
Authentication gate for mutating and proxy routes.

The gate is a FastAPI dependency that answers a yes/no question and
carries no identity.  When ``API_TOKEN`` is not configured every
request passes, which matches the public admin setup this API was
built for.  When a token is configured, requests must present it as
``Authorization: Bearer <token>``.
"""

import hmac

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

security = HTTPBearer(auto_error=False)


def authenticate(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> bool:
    """Dependency that lets the request through or raises HTTP 401."""
    expected = request.app.state.context.settings.api_token
    if not expected:
        return True
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    # Constant‑time comparison to prevent timing attacks
    if not hmac.compare_digest(credentials.credentials.encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return True
