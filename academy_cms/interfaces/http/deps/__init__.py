"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .account import get_account_repository, get_account_service, get_password_reset_service
from .auth import require_authenticated, require_roles, require_super_admin

__all__ = [
    "get_db_session",
    "get_account_repository",
    "get_account_service",
    "get_password_reset_service",
    "require_authenticated",
    "require_roles",
    "require_super_admin",
]
