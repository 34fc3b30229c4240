"""Database models"""
from examprep.models.user import User, SubscriptionStatus
from examprep.models.deleted_email import DeletedEmail
from examprep.models.otp import OTP, OTPType
from examprep.models.refresh_token import RefreshToken
from examprep.models.user_preferences import UserPreferences, Theme
from examprep.models.support_ticket import SupportTicket, IssueType, TicketStatus
from examprep.models.subscription import Subscription, PlanType, ExamMode
from examprep.models.payment import Payment, PaymentStatus, PaymentMethod
from examprep.models.exam_result import ExamResult

__all__ = [
    "User", "SubscriptionStatus", "DeletedEmail", "OTP", "OTPType",
    "RefreshToken", "UserPreferences", "Theme",
    "SupportTicket", "IssueType", "TicketStatus",
    "Subscription", "PlanType", "ExamMode",
    "Payment", "PaymentStatus", "PaymentMethod", "ExamResult",
]
