# Importing this module registers every model on Base.metadata (Alembic + tests)
from justone.models.campus import Campus
from justone.models.otp_code import OtpCode
from justone.models.otp_rate_limit import OtpRateLimit
from justone.models.user import User
from justone.models.profile import Profile
from justone.models.user_role import UserRole, RoleName
from justone.models.response import Response

__all__ = [
    "Campus",
    "OtpCode",
    "OtpRateLimit",
    "User",
    "Profile",
    "UserRole",
    "RoleName",
    "Response",
]
