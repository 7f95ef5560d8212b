# app/dependencies.py
"""
Request-scoped FastAPI dependencies.
Authentication happens upstream: the gateway verifies the caller and forwards
X-User-Id / X-User-Role. The API trusts those headers and turns them into an Actor.
"""

from typing import Optional

from fastapi import Header, HTTPException, status

from app.models.enums import Role
from app.services.actor import Actor

VALID_ROLES = {r.value for r in Role}


def get_actor(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=Role.CUSTOMER.value),
) -> Actor:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing caller identity")
    role = (x_user_role or Role.CUSTOMER.value).lower()
    if role not in VALID_ROLES:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Unknown role '{role}'")
    return Actor(user_id=x_user_id, role=role)
