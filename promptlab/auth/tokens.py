from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from config.settings import ConfigurationError, Settings, get_settings
from ..errors import InvalidTokenError


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured")
    return settings.jwt_secret


def create_access_token(user_id: str, username: str, settings: Optional[Settings] = None) -> str:
    settings = settings or get_settings()
    exp = _now() + timedelta(days=settings.jwt_expires_days)
    payload = {"sub": user_id, "username": username, "exp": exp}
    return jwt.encode(payload, _secret(settings), algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Verify a token's signature and expiry.

    Raises:
        InvalidTokenError: bad signature, expired, or not a JWT at all
    """
    settings = settings or get_settings()
    try:
        data = jwt.decode(token, _secret(settings), algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}") from e
    if not data.get("sub"):
        raise InvalidTokenError("Token missing user ID")
    return data
