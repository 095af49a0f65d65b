from griya_auth.models.role import Role
from griya_auth.models.session import SessionStatus, UserSession
from griya_auth.models.user import User, UserStatus
from griya_auth.models.verification_token import TokenPurpose, VerificationToken

__all__ = [
    "Role",
    "SessionStatus",
    "TokenPurpose",
    "User",
    "UserSession",
    "UserStatus",
    "VerificationToken",
]
