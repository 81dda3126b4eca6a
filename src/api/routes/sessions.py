from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.access_token_codec import AccessTokenClaims
from src.app.services.session_store import SessionInfo, SessionStore, SessionView
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.sessions import ListSessionsUseCase
from src.depends import get_current_user, get_unit_of_work
from src.domain.entities import AuthErrorCode
from src.libs.result import Error

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=List[SessionInfo])
async def list_my_sessions(
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """Live sessions of the caller, most recently used first"""
    result = await ListSessionsUseCase(uow).for_user(current_user.id)
    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ValidateSessionRequest(BaseModel):
    session_token: str = Field(..., min_length=1, description="Session token from login")


@router.post("/validate", status_code=status.HTTP_200_OK, response_model=SessionView)
async def validate_session(
    request: ValidateSessionRequest,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Validate Session

    Checks that the given session is usable and owned by the caller, and
    records the access.

    Raises:
        - 401 Unauthorized: SESSION_REVOKED
    """
    view = await SessionStore(uow).validate(request.session_token)
    if view is None or view.user_id != current_user.id:
        raise ClientError(
            Error(AuthErrorCode.SESSION_REVOKED.value, "Session expired. Please log in again."),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return view
