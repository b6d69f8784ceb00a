"""
Auth Module - Dependencies
===========================
FastAPI dependencies that turn the upstream session headers into an Actor.
These are injected into route handlers via Depends().

NOTE: Authentication happens upstream; we trust X-Actor-Id / X-Actor-Name /
X-Actor-Role as set by the gateway in front of this service.
"""

from typing import Optional

from fastapi import Header, Depends, HTTPException, status

from common.helpers import safe_int
from modules.auth.permissions import Actor, ALL_ROLES, PERMISSION_REGISTRY


def get_current_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_name: Optional[str] = Header(None),
    x_actor_role: Optional[str] = Header(None),
) -> Optional[Actor]:
    """
    Identify the calling actor from headers.
    Returns Actor or None.
    """
    actor_id = safe_int(x_actor_id)
    if actor_id is None or not x_actor_role:
        return None
    role = x_actor_role.strip().lower()
    if role not in ALL_ROLES:
        return None
    return Actor(id=actor_id, name=(x_actor_name or "").strip() or f"#{actor_id}", role=role)


def require_actor(actor=Depends(get_current_actor)) -> Actor:
    """Require an identified actor. Raises 401 otherwise."""
    if not actor:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="login_required")
    return actor


def require_permission(*perm_keys: str):
    """
    Factory: returns a dependency that checks the actor's role grants every key.

    Usage:
      actor=Depends(require_permission("createSales"))
      actor=Depends(require_permission("viewReports", "viewFinancialDashboards"))
    """

    def dependency(actor=Depends(require_actor)) -> Actor:
        for key in perm_keys:
            if not actor.has_permission(key):
                label = PERMISSION_REGISTRY.get(key, key)
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail=f"Permission required: {label}",
                )
        return actor

    return dependency
