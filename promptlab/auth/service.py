"""
Auth Service

Registration, login and bearer-token verification on top of the user
repository.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from config.settings import Settings, get_settings
from ..errors import InvalidCredentialsError, MissingTokenError, ValidationError
from ..repositories.users import UserRepository, public_user
from .passwords import hash_password, verify_password
from .tokens import create_access_token, decode_token

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class CurrentUser:
    """Identity attached to an authenticated request"""

    id: str
    username: str


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split(" ", 1)
    if len(parts) != 2:
        return None
    if parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


class AuthService:
    """
    Usage:
        auth = AuthService(UserRepository(client))
        auth.register("alice", "secret1")
        session = auth.login("alice", "secret1")
        user = auth.authenticate(f"Bearer {session['token']}")
    """

    def __init__(self, users: UserRepository, settings: Optional[Settings] = None):
        self.users = users
        self.settings = settings or get_settings()

    def register(self, username: Any, password: Any) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: missing username or password shorter than 6 characters
            ConflictError: username already taken; the existing user is untouched
        """
        if (
            not isinstance(username, str) or not username.strip()
            or not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH
        ):
            raise ValidationError("Username and a password of at least 6 characters are required.")

        user = self.users.create(username.strip(), hash_password(password))
        logger.info(f"Registered user {user['id']}")
        return public_user(user)

    def login(self, username: Any, password: Any) -> Dict[str, Any]:
        """
        Returns:
            {"token": signed JWT, "user": {"id", "username"}}

        Raises:
            InvalidCredentialsError: same error for unknown user and wrong password
        """
        if not isinstance(username, str) or not isinstance(password, str):
            raise InvalidCredentialsError()
        user = self.users.get_by_username(username.strip())
        if user is None or not verify_password(password, user.get("passwordHash", "")):
            raise InvalidCredentialsError()

        token = create_access_token(user["id"], user["username"], self.settings)
        return {"token": token, "user": public_user(user)}

    def authenticate(self, authorization: Optional[str]) -> CurrentUser:
        """
        Resolve an Authorization header to the calling user.

        Raises:
            MissingTokenError: no header, or not "Bearer <token>"
            InvalidTokenError: bad signature, expired or undecodable token
        """
        token = bearer_token(authorization)
        if not token:
            raise MissingTokenError("Missing bearer token")
        data = decode_token(token, self.settings)
        return CurrentUser(id=data["sub"], username=data.get("username", ""))
