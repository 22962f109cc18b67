from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

ACCESS = "access"
REFRESH = "refresh"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(subject: str | int, token_type: str, expires_delta: timedelta, **claims: str) -> str:
    to_encode = {
        "sub": str(subject),
        "exp": datetime.now(UTC) + expires_delta,
        "type": token_type,
        **claims,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def _decode(token: str, token_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type:
        return None
    return payload


def create_access_token(subject: str | int) -> str:
    return _encode(subject, ACCESS, timedelta(minutes=settings.access_token_expire_minutes))


def create_refresh_token(subject: str | int) -> str:
    return _encode(
        subject,
        REFRESH,
        timedelta(days=settings.refresh_token_expire_days),
        jti=str(uuid4()),
    )


def decode_access_token(token: str) -> str | None:
    """Returns the subject (user id as string) or None for invalid/expired tokens."""
    payload = _decode(token, ACCESS)
    if not payload or not payload.get("sub"):
        return None
    return str(payload["sub"])


def decode_refresh_token(token: str) -> tuple[str | None, str | None]:
    """Returns (user_id_str, jti) or (None, None)."""
    payload = _decode(token, REFRESH)
    if not payload:
        return None, None
    return payload.get("sub"), payload.get("jti")
