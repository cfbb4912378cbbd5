"""Account domain specific exceptions."""


class AccountError(Exception):
    """Base class for account domain errors."""


class AccountAlreadyExistsError(AccountError):
    """Raised when attempting to create an account with a duplicate username or email."""


class AccountNotFoundError(AccountError):
    """Raised when the requested account cannot be found."""


class InvalidCredentialsError(AccountError):
    """Raised for a failed login, whether the email is unknown or the password is wrong."""


class InvalidRoleError(AccountError):
    """Raised when a role value is outside the role enumeration."""


class ProtectedAccountError(AccountError):
    """Raised when deleting a SuperAdmin account."""


class ResetTokenInvalidError(AccountError):
    """Raised when a reset token is unknown, expired or already used."""


class PasswordMismatchError(AccountError):
    """Raised when a new password and its confirmation differ."""


class PasswordResetDeliveryError(AccountError):
    """Raised when the reset message could not be delivered."""
