"""
Principal resolution. The identity provider sits in front of this service and
forwards the authenticated principal as trusted headers.
"""
from fastapi import Depends, Header
from pydantic import BaseModel

from eventmarketers.core.config import settings
from eventmarketers.core.errors import AuthorizationError


class Principal(BaseModel):
    id: str
    role: str


def get_principal(
    x_principal_id: str | None = Header(None),
    x_principal_role: str | None = Header(None),
) -> Principal:
    if not x_principal_id:
        raise AuthorizationError("Authenticated principal required")
    return Principal(id=x_principal_id, role=(x_principal_role or "MOBILE_USER").upper())


def require_moderator(principal: Principal = Depends(get_principal)) -> Principal:
    if principal.role not in settings.moderator_roles_set:
        raise AuthorizationError("Admin access required")
    return principal
