import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from justone.core.config import Settings
from justone.core.security import create_session_tokens
from justone.core.timeutil import utcnow
from justone.models.campus import Campus
from justone.models.profile import Profile
from justone.models.response import Response
from justone.models.user import User
from justone.models.user_role import RoleName, UserRole
from justone.schemas.auth import AuthStateResponse, ProfileOut, SessionOut

logger = logging.getLogger(__name__)


async def get_or_create_user(db: AsyncSession, email: str) -> tuple[User, bool]:
    """Returns (user, created)."""
    q = await db.execute(select(User).where(User.email == email))
    user = q.scalar_one_or_none()
    if user:
        return user, False

    user = User(email=email)
    db.add(user)
    await db.flush()
    logger.info("Created account %s", user.id)
    return user, True


async def upsert_profile(
    db: AsyncSession,
    user: User,
    campus_id: str | None,
    overwrite_campus: bool = True,
) -> Profile:
    """
    Creates or updates the profile for `user`, always marking it verified.
    With overwrite_campus=False an existing campus is only filled in, never replaced.
    """
    q = await db.execute(select(Profile).where(Profile.user_id == user.id))
    profile = q.scalar_one_or_none()

    if profile is None:
        profile = Profile(user_id=user.id, email=user.email, campus_id=campus_id, verified=True)
        db.add(profile)
    else:
        profile.email = user.email
        profile.verified = True
        if campus_id and (overwrite_campus or not profile.campus_id):
            profile.campus_id = campus_id
        profile.updated_at = utcnow()

    await db.flush()
    return profile


async def ensure_role(db: AsyncSession, user_id: str, role: RoleName) -> None:
    q = await db.execute(
        select(UserRole).where(UserRole.user_id == user_id).where(UserRole.role == role)
    )
    if q.scalar_one_or_none() is None:
        db.add(UserRole(user_id=user_id, role=role))
        await db.flush()


async def get_role(db: AsyncSession, user_id: str) -> RoleName:
    q = await db.execute(select(UserRole.role).where(UserRole.user_id == user_id))
    roles = set(q.scalars().all())
    return RoleName.ADMIN if RoleName.ADMIN in roles else RoleName.STUDENT


async def get_profile(db: AsyncSession, user_id: str) -> Profile | None:
    q = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return q.scalar_one_or_none()


async def get_campus(db: AsyncSession, campus_id: str | None) -> Campus | None:
    if not campus_id:
        return None
    return await db.get(Campus, campus_id)


async def has_completed_onboarding(db: AsyncSession, user_id: str) -> bool:
    q = await db.execute(select(Response.id).where(Response.user_id == user_id).limit(1))
    return q.scalar_one_or_none() is not None


async def build_auth_state(db: AsyncSession, user: User, role: RoleName | None = None) -> AuthStateResponse:
    """Everything the client needs after sign-in, resolved server-side."""
    if role is None:
        role = await get_role(db, user.id)

    profile = await get_profile(db, user.id)
    profile_out = None
    if profile is not None:
        campus = await get_campus(db, profile.campus_id)
        profile_out = ProfileOut(
            user_id=user.id,
            email=profile.email,
            campus_id=profile.campus_id,
            campus_name=campus.name if campus else None,
            verified=profile.verified,
        )

    return AuthStateResponse(
        user_id=user.id,
        email=user.email,
        role=role.value,
        profile=profile_out,
        has_completed_onboarding=await has_completed_onboarding(db, user.id),
    )


def mint_session(settings: Settings, user: User, role: RoleName) -> SessionOut:
    user.last_sign_in_at = utcnow()
    return SessionOut(**create_session_tokens(settings, user.id, user.email, role.value))
