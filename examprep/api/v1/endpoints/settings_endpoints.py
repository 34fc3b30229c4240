"""Account settings endpoints"""
from fastapi import APIRouter, Depends, status
import logging

from examprep.core.dependencies import get_account_service, get_settings_service
from examprep.errors.response_codes import SuccessCode, success_response
from examprep.middleware.auth import get_current_user
from examprep.models.user import User
from examprep.schemas.settings_schemas import (
    ChangePasswordRequest,
    CreateSupportTicketRequest,
    InitiateAccountActionRequest,
    PreferencesResponse,
    ProfileResponse,
    SupportTicketResponse,
    UpdatePreferencesRequest,
    VerifyAccountActionRequest,
)
from examprep.services.account_service import AccountActionService
from examprep.services.settings_service import SettingsService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/profile")
def get_profile(
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """
    ## Profile overview

    Subscription fields reflect the live active subscription, not the cached
    flag on the user row.
    """
    profile = ProfileResponse(**service.get_profile(current_user.id))
    return success_response(data=profile.model_dump(mode="json"), code=SuccessCode.RETRIEVED)


@router.get("/preferences")
def get_preferences(
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Defaults (font size 2, theme auto) are created on first read."""
    prefs = service.get_preferences(current_user.id)
    return success_response(
        data=PreferencesResponse.model_validate(prefs).model_dump(mode="json"),
        code=SuccessCode.RETRIEVED,
    )


@router.put("/preferences")
def update_preferences(
    body: UpdatePreferencesRequest,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    prefs = service.update_preferences(current_user.id, font_size=body.font_size, theme=body.theme)
    return success_response(
        data=PreferencesResponse.model_validate(prefs).model_dump(mode="json"),
        code=SuccessCode.UPDATED,
    )


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """
    ## Change password

    The new password may not be the current one or any of the last three.
    All sessions end, including the caller's; log in again afterwards.
    """
    service.change_password(current_user.id, body.old_password, body.new_password)
    return success_response(message="Password changed successfully. Please log in again.")


# ── account actions ───────────────────────────────────────────────────────────

@router.post("/disable-account/initiate")
def initiate_disable(
    body: InitiateAccountActionRequest,
    current_user: User = Depends(get_current_user),
    service: AccountActionService = Depends(get_account_service),
):
    service.initiate_disable(current_user.id, body.reason.value)
    return success_response(code=SuccessCode.OTP_SENT, message="OTP sent to your email to confirm account disable")


@router.post("/disable-account/verify")
def verify_disable(
    body: VerifyAccountActionRequest,
    current_user: User = Depends(get_current_user),
    service: AccountActionService = Depends(get_account_service),
):
    """
    ## Confirm account disable

    Logs the account out everywhere and voids its subscription. The account
    is kept and can be reactivated by customer service.
    """
    service.complete_disable(current_user.id, body.otp, body.reason)
    return success_response(message="Account disabled successfully")


@router.post("/delete-account/initiate")
def initiate_delete(
    body: InitiateAccountActionRequest,
    current_user: User = Depends(get_current_user),
    service: AccountActionService = Depends(get_account_service),
):
    service.initiate_delete(current_user.id, body.reason.value)
    return success_response(code=SuccessCode.OTP_SENT, message="OTP sent to your email to confirm account deletion")


@router.post("/delete-account/verify")
def verify_delete(
    body: VerifyAccountActionRequest,
    current_user: User = Depends(get_current_user),
    service: AccountActionService = Depends(get_account_service),
):
    """
    ## Confirm account deletion

    Permanent. Registering again with the same email will not grant another
    free trial.
    """
    service.complete_delete(current_user.id, body.otp, body.reason)
    return success_response(code=SuccessCode.DELETED, message="Account deleted successfully")


# ── support ───────────────────────────────────────────────────────────────────

@router.post("/support-ticket", status_code=status.HTTP_201_CREATED)
def create_support_ticket(
    body: CreateSupportTicketRequest,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    ticket = service.create_support_ticket(
        current_user.id,
        issue_type=body.issue_type,
        description=body.description,
        attachment_url=str(body.attachment_url) if body.attachment_url else None,
    )
    return success_response(
        data=SupportTicketResponse.model_validate(ticket).model_dump(mode="json"),
        code=SuccessCode.TICKET_CREATED,
    )


@router.get("/support-tickets")
def list_support_tickets(
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    tickets = service.get_user_tickets(current_user.id)
    return success_response(
        data=[SupportTicketResponse.model_validate(t).model_dump(mode="json") for t in tickets],
        code=SuccessCode.RETRIEVED,
    )
