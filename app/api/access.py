"""
Access gate: authenticate every API request and apply the route's role rule.

Role requirements are data (ACCESS_RULES), keyed by HTTP method and route path
without the API prefix. Routes not listed require a valid bearer token. The
resolved identity is stored on the request, never in process-wide state, and
handlers receive it through get_current_identity.
"""

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.database import get_db
from app.core.errors import ForbiddenError, UnauthenticatedError
from app.core.security import ROLE_ADMIN, has_role
from app.schemas.auth import Identity
from app.services.tokens import resolve_identity

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AccessRule:
    """public: no token needed. role: required role once authenticated (None = any)."""

    public: bool = False
    role: str | None = None


PUBLIC = AccessRule(public=True)
AUTHENTICATED = AccessRule()

ACCESS_RULES: dict[tuple[str, str], AccessRule] = {
    ("POST", "/auth/login"): PUBLIC,
    ("GET", "/health"): PUBLIC,
    ("GET", "/users/me"): AUTHENTICATED,
    ("POST", "/users/create"): AccessRule(role=ROLE_ADMIN),
    ("POST", "/users/logout"): AUTHENTICATED,
}


def rule_for(method: str, path: str) -> AccessRule:
    return ACCESS_RULES.get((method.upper(), path), AUTHENTICATED)


def _route_path(request: Request) -> str:
    """Matched route template with the API prefix removed (falls back to the raw URL path)."""
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    app_settings = getattr(request.app.state, "settings", None) or get_settings()
    prefix = app_settings.API_PREFIX
    if prefix and path.startswith(prefix):
        path = path[len(prefix):] or "/"
    return path


def enforce_access(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> None:
    """
    Router-wide dependency run before every handler body.
    Raises UnauthenticatedError (401) or ForbiddenError (403).
    """
    path = _route_path(request)
    rule = rule_for(request.method, path)
    if rule.public:
        return
    if credentials is None:
        raise UnauthenticatedError()
    identity = resolve_identity(db, credentials.credentials)
    if rule.role is not None and not has_role(identity.role, rule.role):
        logger.info(
            "Access denied: username=%s role=%s required=%s %s %s",
            identity.username,
            identity.role,
            rule.role,
            request.method,
            path,
        )
        raise ForbiddenError()
    request.state.identity = identity
    request.state.access_token = credentials.credentials


def get_current_identity(request: Request) -> Identity:
    """Dependency: identity resolved by enforce_access for this request."""
    identity = getattr(request.state, "identity", None)
    if identity is None:
        raise UnauthenticatedError()
    return identity


def get_access_token(request: Request) -> str:
    """Dependency: raw bearer token presented with this request."""
    token = getattr(request.state, "access_token", None)
    if not token:
        raise UnauthenticatedError()
    return token
