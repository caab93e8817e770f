"""
Session token creation and validation.
Uses python-jose for JWT handling.

The dashboard session cookie carries a signed JWT whose subject is the
signed-in user. Issuing the cookie is the login flow's job; this service
only verifies it.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from metrics_api.config import get_settings

TOKEN_TYPE = "session"


def create_session_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed session token.

    Args:
        subject: User identifier
        claims: Extra claims (e.g. email)
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT
    """
    settings = get_settings()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.session_expiration_minutes))

    to_encode = dict(claims or {})
    to_encode.update({"sub": subject, "exp": expire, "iat": now, "type": TOKEN_TYPE})

    return jwt.encode(to_encode, settings.session_secret, algorithm=settings.session_algorithm)


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Decode and validate a session token.

    Raises:
        JWTError: If the token is invalid, expired or not a session token
    """
    settings = get_settings()

    try:
        payload = jwt.decode(token, settings.session_secret, algorithms=[settings.session_algorithm])
    except JWTError as e:
        raise JWTError(f"Token validation failed: {str(e)}") from e

    if payload.get("type") != TOKEN_TYPE:
        raise JWTError("Invalid token type")
    return payload
