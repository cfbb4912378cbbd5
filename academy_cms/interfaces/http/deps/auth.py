"""Bearer-token authorization dependencies."""

from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from academy_cms.core.container import ApplicationContainer, get_container
from academy_cms.core.security import NotAuthenticatedError, PermissionDeniedError, Principal
from academy_cms.modules.accounts import Role

bearer_scheme = HTTPBearer(auto_error=False)


def require_roles(*roles: Role | str) -> Callable[..., Principal]:
    """Build a dependency admitting only callers whose role is in ``roles``."""
    allowed = tuple(roles)

    async def dependency(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
        container: ApplicationContainer = Depends(get_container),
    ) -> Principal:
        token = credentials.credentials if credentials is not None else None
        try:
            return container.gate.authorize(token, allowed)
        except NotAuthenticatedError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Not authorized",
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        except PermissionDeniedError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden") from exc

    return dependency


require_super_admin = require_roles(Role.SUPER_ADMIN)
require_authenticated = require_roles(*Role)

__all__ = ["bearer_scheme", "require_authenticated", "require_roles", "require_super_admin"]
