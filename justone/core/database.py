from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from justone.core.config import settings


def _engine_options(url: str) -> dict:
    """Pool sizing only applies to server databases; sqlite (local dev) uses its default pool."""
    if make_url(url).get_backend_name() == "sqlite":
        return {}
    return {
        "pool_size": 10,
        "max_overflow": 20,
        "pool_pre_ping": True,    # Drops stale connections before use
    }


# ── Async Engine ──────────────────────────────────────────────────────
# Nothing connects until the first session is used
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,   # Set DEBUG=false in .env to stop SQL logs
    **_engine_options(settings.DATABASE_URL),
)

# ── Session Factory ───────────────────────────────────────────────────
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


# ── Base class for all models ─────────────────────────────────────────
class Base(DeclarativeBase):
    pass


# ── FastAPI Dependency ────────────────────────────────────────────────
# Commits once the route returns; any exception rolls the whole request back.
# Controllers that must persist something before raising commit it themselves.
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
