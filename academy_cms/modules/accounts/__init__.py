"""Account directory and password reset use cases."""

from .exceptions import (
    AccountAlreadyExistsError,
    AccountError,
    AccountNotFoundError,
    InvalidCredentialsError,
    InvalidRoleError,
    PasswordMismatchError,
    PasswordResetDeliveryError,
    ProtectedAccountError,
    ResetTokenInvalidError,
)
from .models import ADMIN_ROLES, Account, AccountCreateInput, Role
from .password_reset import PasswordResetService, digest_reset_token
from .repository import AccountRepository
from .service import AccountService

__all__ = [
    "ADMIN_ROLES",
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountError",
    "AccountNotFoundError",
    "AccountRepository",
    "AccountService",
    "InvalidCredentialsError",
    "InvalidRoleError",
    "PasswordMismatchError",
    "PasswordResetDeliveryError",
    "PasswordResetService",
    "ProtectedAccountError",
    "ResetTokenInvalidError",
    "Role",
    "digest_reset_token",
]
