"""Token service: access, refresh and temporary JWTs plus server-side refresh sessions"""
import hashlib
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from examprep.core.config import Settings
from examprep.db.base import utcnow
from examprep.errors.exceptions import ForbiddenException, InvalidTokenException
from examprep.models.refresh_token import RefreshToken
from examprep.models.user import User

logger = logging.getLogger(__name__)


class TokenType(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"
    TEMP = "temp"


class TempTokenPurpose(str, Enum):
    EMAIL_VERIFICATION = "email_verification"
    PROFILE_COMPLETION = "profile_completion"


@dataclass
class TokenPayload:
    user_id: int
    email: str
    type: TokenType
    purpose: Optional[TempTokenPurpose] = None


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

    def as_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": self.token_type,
        }


def hash_token(token: str) -> str:
    """SHA-256 digest of a token string, the only form persisted"""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class TokenService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    # ── encoding ──────────────────────────────────────────────────────────────

    def _encode(self, claims: dict, expires_delta: timedelta, secret: str) -> str:
        to_encode = claims.copy()
        to_encode.update({
            "exp": datetime.now(timezone.utc) + expires_delta,
            "iat": datetime.now(timezone.utc),
        })
        return jwt.encode(to_encode, secret, algorithm=self.settings.ALGORITHM)

    def create_access_token(self, user: User) -> str:
        return self._encode(
            {"sub": str(user.id), "email": user.email, "type": TokenType.ACCESS.value},
            timedelta(minutes=self.settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            self.settings.SECRET_KEY,
        )

    def create_refresh_token(self, user: User) -> str:
        # jti keeps two tokens minted in the same second distinct
        return self._encode(
            {"sub": str(user.id), "email": user.email, "type": TokenType.REFRESH.value, "jti": uuid.uuid4().hex},
            timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS),
            self.settings.REFRESH_SECRET_KEY,
        )

    def create_temp_token(self, user: User, purpose: TempTokenPurpose) -> str:
        return self._encode(
            {"sub": str(user.id), "email": user.email, "type": TokenType.TEMP.value, "purpose": purpose.value},
            timedelta(minutes=self.settings.TEMP_TOKEN_EXPIRE_MINUTES),
            self.settings.SECRET_KEY,
        )

    # ── decoding ──────────────────────────────────────────────────────────────

    def _decode(self, token: str, secret: str, expected: TokenType) -> Optional[TokenPayload]:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.settings.ALGORITHM])
        except JWTError as e:
            logger.info(f"JWT decode error ({expected.value}): {str(e)}")
            return None

        if payload.get("type") != expected.value:
            return None
        try:
            user_id = int(payload.get("sub"))
        except (ValueError, TypeError):
            return None

        purpose = payload.get("purpose")
        try:
            purpose = TempTokenPurpose(purpose) if purpose else None
        except ValueError:
            return None
        return TokenPayload(user_id=user_id, email=payload.get("email", ""), type=expected, purpose=purpose)

    def decode_access_token(self, token: str) -> Optional[TokenPayload]:
        """Stateless check; no database lookup"""
        return self._decode(token, self.settings.SECRET_KEY, TokenType.ACCESS)

    def decode_refresh_token(self, token: str) -> Optional[TokenPayload]:
        return self._decode(token, self.settings.REFRESH_SECRET_KEY, TokenType.REFRESH)

    def decode_temp_token(self, token: str, purpose: TempTokenPurpose) -> TokenPayload:
        payload = self._decode(token, self.settings.SECRET_KEY, TokenType.TEMP)
        if payload is None:
            raise InvalidTokenException("Invalid or expired temporary token")
        if payload.purpose != purpose:
            raise ForbiddenException("Token is not valid for this action")
        return payload

    # ── sessions ──────────────────────────────────────────────────────────────

    def issue_session(self, user: User) -> AuthTokens:
        """Mint an access/refresh pair and persist the refresh token's digest."""
        refresh_token = self.create_refresh_token(user)
        self.db.add(RefreshToken(
            token_hash=hash_token(refresh_token),
            user_id=user.id,
            expires_at=utcnow() + timedelta(days=self.settings.REFRESH_TOKEN_EXPIRE_DAYS),
        ))
        self.db.commit()
        return AuthTokens(access_token=self.create_access_token(user), refresh_token=refresh_token)

    def rotate(self, refresh_token: str) -> AuthTokens:
        """
        One-time-use rotation. The presented token must carry a valid signature
        AND resolve to a live session row; that row is deleted before a new
        pair is issued, so replaying it fails.
        """
        payload = self.decode_refresh_token(refresh_token)
        if payload is None:
            raise InvalidTokenException("Invalid refresh token")

        record = self.db.query(RefreshToken).filter(
            RefreshToken.token_hash == hash_token(refresh_token)
        ).first()
        if record is None:
            logger.warning(f"[Token] Refresh token not found for user_id={payload.user_id} (reused or revoked)")
            raise InvalidTokenException("Refresh token not found or revoked")

        if utcnow() > record.expires_at:
            self.db.delete(record)
            self.db.commit()
            raise InvalidTokenException("Refresh token expired")

        user = self.db.query(User).filter(User.id == record.user_id).first()
        if user is None or user.is_disabled:
            self.db.delete(record)
            self.db.commit()
            raise InvalidTokenException("Refresh token no longer valid")

        deleted = self.db.query(RefreshToken).filter(RefreshToken.id == record.id).delete(synchronize_session=False)
        self.db.commit()
        if not deleted:
            raise InvalidTokenException("Refresh token not found or revoked")

        return self.issue_session(user)

    def revoke(self, refresh_token: str) -> int:
        """Delete the matching session; zero matches is not an error"""
        count = self.db.query(RefreshToken).filter(
            RefreshToken.token_hash == hash_token(refresh_token)
        ).delete(synchronize_session=False)
        self.db.commit()
        return count

    def revoke_all(self, user_id: int, commit: bool = True) -> int:
        count = self.db.query(RefreshToken).filter(
            RefreshToken.user_id == user_id
        ).delete(synchronize_session=False)
        if commit:
            self.db.commit()
        return count
