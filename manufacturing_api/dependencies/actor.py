from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import Header, HTTPException, Request


def _as_uuid(value) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return UUID(value.strip())
        except ValueError:
            return None
    return None


def get_actor_id(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
) -> UUID:
    """
    Id recorded as created_by / updated_by.

    request.state.user is set by the upstream auth layer when one is
    mounted; otherwise the caller identifies itself with X-User-Id.
    """
    user = getattr(request.state, "user", None)
    actor_id = _as_uuid(getattr(user, "id", None))
    if actor_id is None:
        actor_id = _as_uuid(x_user_id)
    if actor_id is None:
        raise HTTPException(status_code=400, detail="X-User-Id header required")
    return actor_id
