"""Account endpoints: registration, login, password reset and administration."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from academy_cms.core.container import ApplicationContainer, get_container
from academy_cms.core.security import Principal
from academy_cms.interfaces.http.deps import (
    get_account_service,
    get_db_session,
    get_password_reset_service,
    require_authenticated,
    require_super_admin,
)
from academy_cms.modules.accounts import (
    Account,
    AccountAlreadyExistsError,
    AccountCreateInput,
    AccountNotFoundError,
    AccountService,
    InvalidCredentialsError,
    InvalidRoleError,
    PasswordMismatchError,
    PasswordResetDeliveryError,
    PasswordResetService,
    ProtectedAccountError,
    ResetTokenInvalidError,
)
from academy_cms.schemas import (
    AccountLoginResponse,
    AccountResponse,
    DeleteResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    PasswordChangeRequest,
    RegisterRequest,
    ResetPasswordRequest,
    RoleUpdate,
)

router = APIRouter()

RESET_REQUESTED_MESSAGE = "If a user with that email exists, a reset link has been sent."


def _account_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        username=account.username,
        email=account.email,
        role=account.role.value,
        created_at=account.created_at,
        updated_at=account.updated_at,
    )


def _login_response(account: Account, container: ApplicationContainer) -> AccountLoginResponse:
    return AccountLoginResponse(
        account_id=account.id,
        username=account.username,
        email=account.email,
        role=account.role.value,
        access_token=container.issuer.issue(account.id, account.role),
    )


# ---------------------------------------------------------------------------
# Public
# ---------------------------------------------------------------------------


@router.post("", response_model=AccountLoginResponse, status_code=status.HTTP_201_CREATED, summary="Register")
async def register(
    payload: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
    container: ApplicationContainer = Depends(get_container),
):
    try:
        account = await account_service.register(
            AccountCreateInput(
                username=payload.username,
                email=payload.email,
                password=payload.password,
            )
        )
    except AccountAlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User already exists") from exc

    return _login_response(account, container)


@router.post("/login", response_model=AccountLoginResponse, summary="Log in")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
    container: ApplicationContainer = Depends(get_container),
):
    try:
        account = await account_service.authenticate(payload.email, payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password") from exc

    return _login_response(account, container)


@router.post("/forgot-password", response_model=MessageResponse, summary="Send password reset email")
async def forgot_password(
    payload: ForgotPasswordRequest,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
):
    try:
        await reset_service.request_reset(payload.email)
    except PasswordResetDeliveryError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error sending reset email. Please try again.",
        ) from exc

    return MessageResponse(message=RESET_REQUESTED_MESSAGE)


@router.patch("/reset-password/{token}", response_model=MessageResponse, summary="Reset password using token")
async def reset_password(
    token: str,
    payload: ResetPasswordRequest,
    reset_service: PasswordResetService = Depends(get_password_reset_service),
    db: AsyncSession = Depends(get_db_session),
):
    try:
        await reset_service.redeem(token, payload.password, payload.confirm_password)
    except ResetTokenInvalidError as exc:
        # Keep the cleared fields of an expired token.
        await db.commit()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Token is invalid or has expired.") from exc
    except PasswordMismatchError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Passwords do not match.") from exc

    return MessageResponse(message="Password reset successfully. Please log in.")


# ---------------------------------------------------------------------------
# Any signed-in account
# ---------------------------------------------------------------------------


@router.get("/me", response_model=AccountResponse, summary="Current account")
async def current_account(
    principal: Principal = Depends(require_authenticated),
    account_service: AccountService = Depends(get_account_service),
):
    account = await account_service.get_by_id(principal.account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return _account_response(account)


@router.put("/me/password", response_model=MessageResponse, summary="Change own password")
async def change_password(
    payload: PasswordChangeRequest,
    principal: Principal = Depends(require_authenticated),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        await account_service.change_password(principal.account_id, payload.current_password, payload.new_password)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect") from exc

    return MessageResponse(message="Password updated successfully.")


# ---------------------------------------------------------------------------
# SuperAdmin only
# ---------------------------------------------------------------------------


@router.get("", response_model=List[AccountResponse], summary="List accounts")
async def list_accounts(
    admin: Principal = Depends(require_super_admin),
    account_service: AccountService = Depends(get_account_service),
):
    return [_account_response(account) for account in await account_service.list_accounts()]


@router.put("/{account_id}/role", response_model=AccountResponse, summary="Change an account's role")
async def update_role(
    account_id: str,
    payload: RoleUpdate,
    admin: Principal = Depends(require_super_admin),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        account = await account_service.change_role(account_id, payload.role)
    except InvalidRoleError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role") from exc
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc

    return _account_response(account)


@router.delete("/{account_id}", response_model=DeleteResponse, summary="Delete an account")
async def delete_account(
    account_id: str,
    admin: Principal = Depends(require_super_admin),
    account_service: AccountService = Depends(get_account_service),
):
    try:
        await account_service.delete_account(account_id)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found") from exc
    except ProtectedAccountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete a SuperAdmin") from exc

    return DeleteResponse(id=account_id, message="User deleted successfully")
