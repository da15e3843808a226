import hmac
import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt

from justone.core.config import Settings


# ── OTP ───────────────────────────────────────────────────────────────
def generate_otp() -> str:
    """Uniform 6-digit code, zero-padded (000000–999999)."""
    return f"{secrets.randbelow(1_000_000):06d}"


def constant_time_equals(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode("utf-8"), b.encode("utf-8"))


# ── JWT sessions ──────────────────────────────────────────────────────
def _encode(settings: Settings, payload: dict, expires_delta: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        **payload,
        "iat": now,
        "exp": now + expires_delta,
        # unique per token so two sessions minted in the same second differ
        "jti": secrets.token_urlsafe(16),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_session_tokens(settings: Settings, user_id: str, email: str, role: str) -> dict:
    """
    Mints the access/refresh pair handed back to the browser.

    Payload contains:
      sub  : user id (UUID string)
      email: for frontend display
      role : admin | student
      type : access | refresh, guards against using the wrong token
    """
    base = {"sub": user_id, "email": email, "role": role}
    access = _encode(
        settings,
        {**base, "type": "access"},
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    refresh = _encode(
        settings,
        {**base, "type": "refresh"},
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )
    return {
        "access_token": access,
        "refresh_token": refresh,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    }


def decode_token(settings: Settings, token: str) -> dict:
    """
    Decodes and verifies JWT signature + expiry.
    Raises jose.JWTError on any failure.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
