import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import jwt
from passlib.context import CryptContext

from archiver.core.config import parse_duration, settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_SALT_ROUNDS,
)

# Compared against on the unknown-user path of a credential lookup
_dummy_hash: Optional[str] = None


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.warning(f"Password verification failed: {type(e).__name__}: {str(e)}")
        return False


def get_dummy_hash() -> str:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = pwd_context.hash("archiver-timing-equalizer")
    return _dummy_hash


def _encode(claims: Dict[str, Any], expires_delta: timedelta, audience: str, secret: str) -> str:
    now = datetime.utcnow()
    to_encode = dict(claims)
    to_encode.update({
        "iat": now,
        "exp": now + expires_delta,
        "iss": settings.JWT_ISSUER,
        "aud": audience,
    })
    return jwt.encode(to_encode, secret, algorithm=settings.ALGORITHM)


def create_access_token(user: Any, expires_delta: Optional[timedelta] = None) -> str:
    """
    Issue a bearer token carrying the user's id, username, email and role.
    """
    if expires_delta is None:
        expires_delta = parse_duration(settings.JWT_EXPIRE)
    role = getattr(user.role, "value", user.role)
    claims = {
        "sub": str(user.id),
        "username": user.username,
        "email": user.email,
        "role": role,
    }
    return _encode(claims, expires_delta, settings.JWT_AUDIENCE, settings.SECRET_KEY)


def create_refresh_token(user: Any, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = parse_duration(settings.REFRESH_TOKEN_EXPIRE)
    claims = {"sub": str(user.id), "type": "refresh"}
    return _encode(claims, expires_delta, settings.JWT_REFRESH_AUDIENCE, settings.refresh_secret)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Verify signature, expiry, issuer and audience. Raises ``jose.JWTError``.
    """
    return jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[settings.ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )


def decode_refresh_token(token: str) -> Dict[str, Any]:
    return jwt.decode(
        token,
        settings.refresh_secret,
        algorithms=[settings.ALGORITHM],
        audience=settings.JWT_REFRESH_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )
