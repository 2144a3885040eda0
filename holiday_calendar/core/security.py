"""JWT helpers.

Admin tokens are issued by the auth service with the shared
``SECRET_KEY``; this API only verifies them.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from holiday_calendar.config import settings


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Encode an access token carrying ``data`` as claims."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=15))
    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT.

    Raises:
        jose.JWTError: If the signature is invalid or the token expired.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
