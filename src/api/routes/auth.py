from typing import Optional

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from src.api.error import ClientError, ServerError
from src.app.services.access_token_codec import AccessTokenClaims
from src.app.services.credential_service import CredentialService
from src.app.services.mailer import IMailer
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthenticateUseCase,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    LoginResponse,
    LogoutResponse,
    LogoutUseCase,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    RequestEmailVerificationResponse,
    RequestEmailVerificationUseCase,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    VerifyEmailResponse,
    VerifyEmailUseCase,
)
from src.depends import (
    get_authenticate_use_case,
    get_credential_service,
    get_current_user,
    get_mailer,
    get_register_use_case,
    get_request_email_verification_use_case,
    get_request_password_reset_use_case,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Password strength is checked by the use case so that every policy
    violation is reported at once.
    """

    username: str = Field(
        ..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9._@-]+$", description="Public user name"
    )
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
async def register(
    request: RegisterRequest, use_case: RegisterUseCase = Depends(get_register_use_case)
):
    """
    User Registration

    Creates an account with an unverified email and sends a verification link.

    Raises:
        - 400 Bad Request: POLICY_VIOLATION
        - 409 Conflict: USER_EXISTS
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = RegisterCommand(
        username=request.username, email=request.email, password=request.password
    )
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "POLICY_VIOLATION":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "USER_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")
    remember_me: bool = Field(False, description="Keep the session for 30 days")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    http_request: Request,
    use_case: AuthenticateUseCase = Depends(get_authenticate_use_case),
):
    """
    User Login

    Revokes every earlier session of the user and starts a new one.

    Raises:
        - 401 Unauthorized: INVALID_CREDENTIALS
        - 403 Forbidden: ACCOUNT_DISABLED
    """
    result = await use_case.execute(
        request.email,
        request.password,
        user_agent=http_request.headers.get("user-agent"),
        ip_address=http_request.client.host if http_request.client else None,
        remember=request.remember_me,
    )

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "ACCOUNT_DISABLED":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        raise ServerError(error)

    return result.value


class LogoutRequest(BaseModel):
    session_token: Optional[str] = Field(
        None, description="Session to end; all sessions when omitted"
    )


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Optional[LogoutRequest] = None,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Logout

    Raises:
        - 401 Unauthorized: Not authenticated
        - 404 Not Found: SESSION_NOT_FOUND (token not owned by caller)
    """
    session_token = request.session_token if request else None
    result = await LogoutUseCase(uow).end_session(current_user.id, session_token)

    if result.is_err():
        error = result.error
        if error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


@router.post("/logout-all", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout_all(
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await LogoutUseCase(uow).end_all_sessions(current_user.id)
    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=AccessTokenClaims)
async def me(current_user: AccessTokenClaims = Depends(get_current_user)):
    """Identity of the caller, as carried by the access token"""
    return current_user


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., description="New password")


@router.put(
    "/change-password", status_code=status.HTTP_200_OK, response_model=ChangePasswordResponse
)
async def change_password(
    request: ChangePasswordRequest,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialService = Depends(get_credential_service),
    mailer: IMailer = Depends(get_mailer),
):
    """
    Change Password

    Raises:
        - 400 Bad Request: POLICY_VIOLATION
        - 401 Unauthorized: INVALID_CREDENTIALS (wrong current password)
        - 404 Not Found: USER_NOT_FOUND
    """
    use_case = ChangePasswordUseCase(uow, credentials, mailer)
    result = await use_case.execute(
        current_user.id, request.current_password, request.new_password
    )

    if result.is_err():
        error = result.error
        if error.code == "POLICY_VIOLATION":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")


@router.post(
    "/forgot-password",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def forgot_password(
    request: ForgotPasswordRequest,
    use_case: RequestPasswordResetUseCase = Depends(get_request_password_reset_use_case),
):
    """
    Request Password Reset

    Always answers the same way so registered emails cannot be discovered.
    """
    result = await use_case.execute(request.email)
    if result.is_err():
        raise ServerError(result.error)

    return result.value


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Reset token from the email")
    new_password: str = Field(..., description="New password")


@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
)
async def reset_password(
    request: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    credentials: CredentialService = Depends(get_credential_service),
    mailer: IMailer = Depends(get_mailer),
):
    """
    Confirm Password Reset

    Raises:
        - 400 Bad Request: POLICY_VIOLATION, EPHEMERAL_TOKEN_NOT_FOUND
        - 410 Gone: EPHEMERAL_TOKEN_EXPIRED
    """
    use_case = ConfirmPasswordResetUseCase(uow, credentials, mailer)
    result = await use_case.execute(request.token, request.new_password)

    if result.is_err():
        error = result.error
        if error.code in ("POLICY_VIOLATION", "EPHEMERAL_TOKEN_NOT_FOUND"):
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "EPHEMERAL_TOKEN_EXPIRED":
            raise ClientError(error, status_code=status.HTTP_410_GONE)
        raise ServerError(error)

    return result.value


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1, description="Verification token from the email")


@router.post("/verify-email", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse)
async def verify_email(request: VerifyEmailRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Verify Email

    Raises:
        - 400 Bad Request: EPHEMERAL_TOKEN_NOT_FOUND
        - 410 Gone: EPHEMERAL_TOKEN_EXPIRED
    """
    result = await VerifyEmailUseCase(uow).execute(request.token)

    if result.is_err():
        error = result.error
        if error.code == "EPHEMERAL_TOKEN_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
        elif error.code == "EPHEMERAL_TOKEN_EXPIRED":
            raise ClientError(error, status_code=status.HTTP_410_GONE)
        raise ServerError(error)

    return result.value


@router.post(
    "/resend-verification",
    status_code=status.HTTP_200_OK,
    response_model=RequestEmailVerificationResponse,
)
async def resend_verification(
    current_user: AccessTokenClaims = Depends(get_current_user),
    use_case: RequestEmailVerificationUseCase = Depends(get_request_email_verification_use_case),
):
    result = await use_case.execute(current_user.id)

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")


@router.post(
    "/resend-verification-public",
    status_code=status.HTTP_200_OK,
    response_model=RequestEmailVerificationResponse,
)
async def resend_verification_public(
    request: ResendVerificationRequest,
    use_case: RequestEmailVerificationUseCase = Depends(get_request_email_verification_use_case),
):
    """Resend the verification email without revealing whether the email exists"""
    result = await use_case.execute_for_email(request.email)
    if result.is_err():
        raise ServerError(result.error)

    return result.value
