"""
FastAPI dependencies for session verification.
"""

from fastapi import HTTPException, Request, status
from jose import JWTError

from metrics_api.auth.session import decode_session_token
from metrics_api.config import get_settings
from metrics_api.utils.logging import get_logger

logger = get_logger(__name__)


async def require_session(request: Request) -> str:
    """
    Verify the session cookie.

    Returns:
        The signed-in user's id

    Raises:
        HTTPException: 401 if the cookie is missing or invalid
    """
    token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        logger.warning("auth_failed", reason="missing_session")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing session",
        )

    try:
        payload = decode_session_token(token)
    except JWTError as e:
        logger.warning("auth_failed", reason="invalid_session", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session",
        )

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("auth_failed", reason="missing_subject")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session payload",
        )

    logger.debug("auth_success", user_id=user_id)
    return user_id
