import logging
from datetime import UTC, datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from app.core.timeutils import naive_utc, utc_naive_now
from app.models.refresh_token import RefreshToken
from app.models.user import User, UserCreate, UserPublic

logger = logging.getLogger(__name__)

# (user, access_token, refresh_token, expires_in_seconds)
TokenResult = tuple[User, str, str, int]


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def get_user_by_id(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, data: UserCreate) -> User:
    user = User(
        email=data.email.lower(),
        full_name=data.full_name,
        hashed_password=hash_password(data.password),
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


def user_to_public(user: User) -> UserPublic:
    return UserPublic(id=user.id, email=user.email, full_name=user.full_name)


def make_token_pair(user_id: int) -> tuple[str, str, int]:
    access = create_access_token(user_id)
    refresh = create_refresh_token(user_id)
    expires_in = settings.access_token_expire_minutes * 60
    return access, refresh, expires_in


async def store_refresh_token(session: AsyncSession, user_id: int, refresh_token: str) -> None:
    user_id_str, jti = decode_refresh_token(refresh_token)
    if not user_id_str or not jti:
        return
    expires_at = naive_utc(datetime.now(UTC) + timedelta(days=settings.refresh_token_expire_days))
    session.add(RefreshToken(user_id=user_id, jti=jti, expires_at=expires_at))
    await session.flush()


async def _issue_tokens(session: AsyncSession, user: User) -> TokenResult:
    access, refresh, expires_in = make_token_pair(user.id)
    await store_refresh_token(session, user_id=user.id, refresh_token=refresh)
    return user, access, refresh, expires_in


async def login_user(session: AsyncSession, email: str, password: str) -> TokenResult | None:
    user = await get_user_by_email(session, email)
    if not user or not verify_password(password, user.hashed_password):
        logger.info("Login failed for %s", email)
        return None
    return await _issue_tokens(session, user)


async def signup_user(
    session: AsyncSession, email: str, password: str, full_name: str | None = None
) -> TokenResult | None:
    if await get_user_by_email(session, email):
        return None
    user = await create_user(session, UserCreate(email=email, password=password, full_name=full_name))
    logger.info("Created user id=%s", user.id)
    return await _issue_tokens(session, user)


async def revoke_refresh_token(session: AsyncSession, jti: str) -> None:
    result = await session.execute(select(RefreshToken).where(RefreshToken.jti == jti))
    row = result.scalar_one_or_none()
    if row:
        row.revoked = True
        session.add(row)


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> TokenResult | None:
    """Rotate a refresh token: the presented one is revoked and a new pair issued."""
    user_id_str, jti = decode_refresh_token(refresh_token)
    if not user_id_str or not jti:
        return None
    result = await session.execute(
        select(RefreshToken).where(
            RefreshToken.jti == jti,
            RefreshToken.revoked == False,  # noqa: E712
            RefreshToken.expires_at > utc_naive_now(),
        )
    )
    token_row = result.scalar_one_or_none()
    if not token_row:
        return None
    user = await get_user_by_id(session, int(user_id_str))
    if not user:
        return None
    token_row.revoked = True
    session.add(token_row)
    return await _issue_tokens(session, user)
