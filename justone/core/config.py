from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [v.strip().lower() for v in value.split(",") if v.strip()]


class Settings(BaseSettings):
    """
    All config comes from the environment or a .env file.
    Allowlists live here (not in code) so tests can swap them out.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str                     # asyncpg, used by FastAPI
    DATABASE_SYNC_URL: str | None = None  # psycopg2, used only by Alembic

    # ── JWT sessions ──────────────────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    REFRESH_TOKEN_EXPIRE_DAYS: int = 30

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "*"

    # ── App ───────────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # ── Mail (Maileroo) ───────────────────────────────────
    MAILEROO_API_KEY: str | None = None
    MAILEROO_API_URL: str = "https://smtp.maileroo.com/api/v2/emails"
    MAIL_FROM: str = "no-reply@justonematch.in"
    MAIL_FROM_NAME: str = "JustOne"
    CAREERS_FROM: str = "careers@justonematch.in"
    CAREERS_FROM_NAME: str = "JustOne Careers"
    CAREERS_INBOX: str = "support@justonematch.in"

    # ── Encryption at rest ────────────────────────────────
    ENCRYPTION_KEY: str | None = None
    ENCRYPTION_SALT: str = "justone-salt-v1"
    ENCRYPTION_ITERATIONS: int = 100_000

    # ── Admin ─────────────────────────────────────────────
    ADMIN_API_KEY: str | None = None
    ADMIN_EMAILS: str = ""
    ADMIN_CAMPUS_ID: str = "northwestern-evanston"

    # ── Waitlist ──────────────────────────────────────────
    WAITLIST_DOMAINS: str = (
        "ashoka.edu.in,northwestern.edu,christuniversity.in,christcollege.edu,"
        "res.christuniversity.in,mba.christuniversity.in"
    )

    # ── OTP + rate limiting ───────────────────────────────
    OTP_TTL_MINUTES: int = 10
    OTP_MAX_ATTEMPTS: int = 5
    RATE_LIMIT_WINDOW_MINUTES: int = 10
    RATE_LIMIT_MAX_REQUESTS: int = 3

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def origins_list(self) -> list[str]:
        """Splits comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def admin_emails(self) -> list[str]:
        return _split_csv(self.ADMIN_EMAILS)

    @property
    def waitlist_domains(self) -> list[str]:
        return _split_csv(self.WAITLIST_DOMAINS)

    def is_admin_email(self, email: str) -> bool:
        return email.strip().lower() in self.admin_emails


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Single instance used for module-level wiring (engine, CORS)
settings = get_settings()
