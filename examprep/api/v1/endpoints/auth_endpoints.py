"""Authentication endpoints"""
from fastapi import APIRouter, Depends, Request, status
import logging

from examprep.core.dependencies import get_auth_service
from examprep.core.limiter import AUTH_LIMIT, limiter
from examprep.errors.response_codes import SuccessCode, success_response
from examprep.middleware.auth import get_current_user, get_profile_completion_user_id
from examprep.models.user import User
from examprep.schemas.auth_schemas import (
    CompleteProfileRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ResendOTPRequest,
    ResetPasswordRequest,
    UserResponse,
    VerifyOTPRequest,
)
from examprep.services.auth_service import AuthService

router = APIRouter()
logger = logging.getLogger(__name__)


def _user_dict(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump(mode="json")


@router.post("/register", status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_LIMIT)
def register(request: Request, body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Register a new account (Step 1 of 3)

    **Role:** Public, no authentication required.

    Creates an unverified account and emails a 6-digit OTP. Registering again
    with an email that is still unverified replaces the earlier attempt.

    ### Required fields (JSON body)
    | Field            | Type   | Description                                   |
    |------------------|--------|-----------------------------------------------|
    | email            | string | Valid email; the OTP is sent here             |
    | password         | string | ≥8 chars with uppercase, lowercase and digit  |
    | confirm_password | string | Must match `password`                         |

    ### Frontend integration
    1. HTTP 201 → go to the OTP screen, carry `email` in state.
    2. HTTP 409 → email already registered, offer login.
    3. Next: **POST /auth/verify-otp**.
    """
    data = auth.register(body.email, body.password)
    return success_response(data=data, code=SuccessCode.USER_REGISTERED)


@router.post("/verify-otp")
@limiter.limit(AUTH_LIMIT)
def verify_otp(request: Request, body: VerifyOTPRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Verify the registration OTP (Step 2 of 3)

    **Role:** Public.

    On success the email is marked verified and a `temp_token` scoped to
    profile completion is returned (valid 30 minutes).

    ### Errors
    * 400 → `errors.reason` is one of `NOT_FOUND`, `EXPIRED`,
      `ATTEMPTS_EXCEEDED`, `INVALID_CODE` (the last one with `attempts_remaining`).
    * 404 → unknown email.
    """
    temp_token = auth.verify_email_otp(body.email, body.otp)
    return success_response(
        data={"temp_token": temp_token},
        code=SuccessCode.OTP_VERIFIED,
        message="Email verified successfully. Please complete your profile.",
    )


@router.post("/resend-otp")
@limiter.limit(AUTH_LIMIT)
def resend_otp(request: Request, body: ResendOTPRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Resend an OTP

    **Role:** Public.

    `purpose` is `EMAIL_VERIFICATION` (default) or `PASSWORD_RESET`.
    At most one code per purpose every 60 seconds; HTTP 429 carries
    `errors.wait_seconds`.
    """
    auth.resend_otp(body.email, body.purpose)
    return success_response(code=SuccessCode.OTP_SENT)


@router.post("/complete-profile")
def complete_profile(
    body: CompleteProfileRequest,
    user_id: int = Depends(get_profile_completion_user_id),
    auth: AuthService = Depends(get_auth_service),
):
    """
    ## Complete the profile (Step 3 of 3)

    **Role:** Bearer `temp_token` from `/auth/verify-otp` or `/auth/login`.

    Saves the name and phone number, grants the free plan to trial-eligible
    accounts and returns the first access/refresh token pair.
    """
    tokens, user = auth.complete_profile(
        user_id,
        first_name=body.first_name,
        last_name=body.last_name,
        middle_name=body.middle_name,
        phone_number=body.phone_number,
    )
    return success_response(
        data={**tokens.as_dict(), "user": _user_dict(user)},
        message="Profile completed successfully",
    )


@router.post("/login")
@limiter.limit(AUTH_LIMIT)
def login(request: Request, body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Log in

    **Role:** Public.

    ### Response
    * Complete profile → `access_token`, `refresh_token`, `user`.
    * Incomplete profile → `requires_profile_completion: true` and a
      `temp_token`; no session is created. Redirect to the profile form.

    ### Errors
    401 invalid credentials · 403 disabled account or unverified email.
    """
    result = auth.login(body.email, body.password)
    user = _user_dict(result.user)

    if result.requires_profile_completion:
        return success_response(
            data={"requires_profile_completion": True, "temp_token": result.temp_token, "user": user},
            code=SuccessCode.PROFILE_INCOMPLETE,
        )
    return success_response(
        data={"requires_profile_completion": False, **result.tokens.as_dict(), "user": user},
        code=SuccessCode.LOGIN_SUCCESS,
    )


@router.post("/refresh-token")
def refresh_token(body: RefreshTokenRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Rotate the refresh token

    The presented refresh token is consumed; store the new pair. Reusing an
    old refresh token returns 401.
    """
    tokens = auth.refresh_access_token(body.refresh_token)
    return success_response(data=tokens.as_dict(), message="Token refreshed successfully")


@router.post("/logout")
def logout(body: RefreshTokenRequest, auth: AuthService = Depends(get_auth_service)):
    """Ends the session belonging to the given refresh token. Idempotent."""
    auth.logout(body.refresh_token)
    return success_response(message="Logged out successfully")


@router.post("/forgot-password")
@limiter.limit(AUTH_LIMIT)
def forgot_password(request: Request, body: ForgotPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Request a password reset code

    **Role:** Public.

    Always answers 200 whether or not the email exists; 429 only when a code
    was requested less than 60 seconds ago.
    """
    auth.forgot_password(body.email)
    return success_response(message="If an account exists with this email, a password reset OTP has been sent.")


@router.post("/verify-reset-otp")
@limiter.limit(AUTH_LIMIT)
def verify_reset_otp(request: Request, body: VerifyOTPRequest, auth: AuthService = Depends(get_auth_service)):
    """Checks a reset code without consuming it, before asking for the new password."""
    auth.verify_reset_otp(body.email, body.otp)
    return success_response(code=SuccessCode.OTP_VERIFIED)


@router.post("/reset-password")
@limiter.limit(AUTH_LIMIT)
def reset_password(request: Request, body: ResetPasswordRequest, auth: AuthService = Depends(get_auth_service)):
    """
    ## Reset the password with the emailed code

    Every existing session is ended; the user logs in again afterwards.
    """
    auth.reset_password(body.email, body.otp, body.new_password)
    return success_response(message="Password reset successfully. Please log in with your new password.")


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    """Profile of the access-token holder"""
    return success_response(data=_user_dict(current_user), code=SuccessCode.RETRIEVED)
