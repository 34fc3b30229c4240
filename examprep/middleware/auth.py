"""Authentication middleware and dependencies"""
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from typing import Optional

from examprep.core.dependencies import get_db, get_token_service
from examprep.errors.exceptions import (
    AccountDisabledException,
    ProfileIncompleteException,
    UnauthorizedException,
)
from examprep.models.user import User
from examprep.services.token_service import TempTokenPurpose, TokenService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> User:
    """Get current authenticated user from an access token"""
    if not token:
        raise UnauthorizedException(detail="Not authenticated")

    token_data = tokens.decode_access_token(token)
    if token_data is None:
        raise UnauthorizedException(detail="Could not validate credentials")

    user = db.query(User).filter(User.id == token_data.user_id).first()
    if user is None:
        raise UnauthorizedException(detail="User not found")
    if user.is_disabled:
        raise AccountDisabledException()

    return user


def require_complete_profile(current_user: User = Depends(get_current_user)) -> User:
    """Gate for routes that consume entitlements or exam history"""
    if not current_user.is_profile_complete:
        raise ProfileIncompleteException()
    return current_user


def get_profile_completion_user_id(
    token: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> int:
    """Resolve the user id from a ``profile_completion`` temporary token"""
    if not token:
        raise UnauthorizedException(detail="Not authenticated")
    return tokens.decode_temp_token(token, TempTokenPurpose.PROFILE_COMPLETION).user_id
