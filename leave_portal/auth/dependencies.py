"""Auth dependencies — bearer extraction, JWT claims → ActorContext, role gates.

Tokens are issued by the backend; the gateway only verifies the signature
with the shared secret and reads the claims. The raw token travels on in
``ActorContext.token`` so backend calls are made as the same user.
"""

from __future__ import annotations

from typing import AsyncGenerator, Callable

from fastapi import Depends, Request
from fastapi.exceptions import HTTPException
from jose import ExpiredSignatureError, JWTError, jwt

from leave_portal.auth.context import ActorContext
from leave_portal.common.constants import ActorRole
from leave_portal.common.exceptions import AuthorizationError
from leave_portal.config import settings
from leave_portal.remote.client import PortalBackendClient

# Backend role names → gateway roles
_ROLE_ALIASES: dict[str, ActorRole] = {
    "employee": ActorRole.employee,
    "faculty": ActorRole.employee,
    "hod": ActorRole.hod,
    "principal": ActorRole.principal,
    "hr": ActorRole.hr,
}


def _extract_bearer(request: Request) -> str:
    """Extract Bearer token from Authorization header."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing or invalid Authorization header.")
    return auth_header[7:]


def actor_from_claims(claims: dict, token: str = "") -> ActorContext:
    """Build the actor context from decoded token claims.

    Accepts the backend's claim spellings: ``id``/``sub`` for the employee,
    ``branchCode``/``department`` for the department.
    """
    employee_id = claims.get("id") or claims.get("sub")
    role = _ROLE_ALIASES.get(str(claims.get("role", "")).lower())
    campus = claims.get("campus")
    if isinstance(campus, dict):
        campus = campus.get("name")
    if not employee_id or role is None or not campus:
        raise HTTPException(status_code=401, detail="Token is missing required claims.")

    return ActorContext(
        employee_id=str(employee_id),
        role=role,
        campus=str(campus),
        department=claims.get("branchCode") or claims.get("department"),
        name=claims.get("name"),
        token=token,
    )


# ── Core dependency ─────────────────────────────────────────────────

async def get_actor(request: Request) -> ActorContext:
    """Validate the JWT and return the acting user's context."""
    token = _extract_bearer(request)
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired.")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token.")

    return actor_from_claims(claims, token=token)


# ── Role-based dependency ───────────────────────────────────────────

def require_role(*allowed_roles: ActorRole) -> Callable:
    """Return a FastAPI dependency that enforces role membership."""

    async def _check(actor: ActorContext = Depends(get_actor)) -> ActorContext:
        if actor.role not in allowed_roles:
            raise AuthorizationError(
                f"Role '{actor.role.value}' is not permitted. "
                f"Required: {[r.value for r in allowed_roles]}.",
            )
        return actor

    return _check


# ── Backend client ──────────────────────────────────────────────────

async def get_backend_client(
    actor: ActorContext = Depends(get_actor),
) -> AsyncGenerator[PortalBackendClient, None]:
    """One backend client per request, authenticated as the actor."""
    async with PortalBackendClient(token=actor.token) as client:
        yield client
