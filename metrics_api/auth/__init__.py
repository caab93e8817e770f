"""Session authentication module."""

from metrics_api.auth.dependencies import require_session
from metrics_api.auth.session import create_session_token, decode_session_token

__all__ = ["create_session_token", "decode_session_token", "require_session"]
