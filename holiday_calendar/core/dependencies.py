from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from holiday_calendar.core.security import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_admin(
    token: Annotated[str, Depends(oauth2_scheme)],
) -> dict:
    """Extract and validate the admin JWT from the Authorization header.

    Returns the token claims.

    Raises:
        HTTPException 401: If the token is missing, invalid or not an
            access token.
        HTTPException 403: If the token does not carry the admin role.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_token(token)
    except JWTError:
        raise credentials_exception

    if payload.get("sub") is None or payload.get("type") != "access":
        raise credentials_exception

    if payload.get("role") != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )

    return payload
