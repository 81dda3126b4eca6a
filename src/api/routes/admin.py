"""
Admin API Routes - User and Session Administration

All endpoints require an authenticated user whose token carries isAdmin.
"""

from typing import List, Literal

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.access_token_codec import AccessTokenClaims
from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.app.services.session_store import ActiveSessionInfo
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import (
    InvalidateSessionResponse,
    InvalidateSessionUseCase,
    ListSessionsUseCase,
)
from src.app.use_cases.users import (
    SetUserActiveUseCase,
    SetUserPasswordResponse,
    SetUserPasswordUseCase,
    SetUserRoleUseCase,
    UserRoleResponse,
    UserStatusResponse,
)
from src.depends import get_credential_service, get_mailer, get_unit_of_work, require_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/sessions", status_code=status.HTTP_200_OK, response_model=List[ActiveSessionInfo])
async def list_active_sessions(
    admin: AccessTokenClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    List Active Sessions

    Raises:
        - 401 Unauthorized: Not authenticated
        - 403 Forbidden: FORBIDDEN (not an administrator)
    """
    result = await ListSessionsUseCase(uow).all_active()
    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=InvalidateSessionResponse,
)
async def invalidate_session(
    session_id: int,
    admin: AccessTokenClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Invalidate Session

    Raises:
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: SESSION_NOT_FOUND
    """
    result = await InvalidateSessionUseCase(uow).execute(session_id)

    if result.is_err():
        error = result.error
        if error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class UserStatusRequest(BaseModel):
    is_active: bool = Field(..., description="False deactivates the user and ends all sessions")


@router.put(
    "/users/{user_id}/status",
    status_code=status.HTTP_200_OK,
    response_model=UserStatusResponse,
)
async def set_user_status(
    user_id: int,
    request: UserStatusRequest,
    admin: AccessTokenClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Activate or Deactivate User

    Deactivation revokes all sessions of the user before responding.

    Raises:
        - 403 Forbidden: FORBIDDEN, CANNOT_MODIFY_SELF
        - 404 Not Found: USER_NOT_FOUND
    """
    result = await SetUserActiveUseCase(uow).execute(user_id, request.is_active, admin.id)

    if result.is_err():
        error = result.error
        if error.code == "CANNOT_MODIFY_SELF":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class UserRoleRequest(BaseModel):
    action: Literal["promote", "demote"] = Field(..., description="Grant or remove admin rights")


@router.put(
    "/users/{user_id}/role",
    status_code=status.HTTP_200_OK,
    response_model=UserRoleResponse,
)
async def set_user_role(
    user_id: int,
    request: UserRoleRequest,
    admin: AccessTokenClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Promote or Demote User

    A role change ends the user's sessions so the next login carries the
    new isAdmin claim.

    Raises:
        - 403 Forbidden: FORBIDDEN, CANNOT_MODIFY_SELF
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = SetUserRoleUseCase(uow)
    result = await use_case.execute(user_id, request.action == "promote", admin.id)

    if result.is_err():
        error = result.error
        if error.code == "CANNOT_MODIFY_SELF":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class SetUserPasswordRequest(BaseModel):
    new_password: str = Field(..., description="New password")


@router.post(
    "/users/{user_id}/reset-password",
    status_code=status.HTTP_200_OK,
    response_model=SetUserPasswordResponse,
)
async def set_user_password(
    user_id: int,
    request: SetUserPasswordRequest,
    admin: AccessTokenClaims = Depends(require_admin),
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialService = Depends(get_credential_service),
    mailer: IMailer = Depends(get_mailer),
):
    """
    Set User Password

    Ends every session of the user.

    Raises:
        - 400 Bad Request: POLICY_VIOLATION
        - 403 Forbidden: FORBIDDEN
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = SetUserPasswordUseCase(uow, credentials, mailer)
    result = await use_case.execute(user_id, request.new_password, admin.id)

    if result.is_err():
        error = result.error
        if error.code == "POLICY_VIOLATION":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
