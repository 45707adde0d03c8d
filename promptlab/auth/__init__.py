"""
Auth module - Password hashing, JWT bearer tokens and the auth service
"""

from .service import AuthService, CurrentUser, bearer_token
from .passwords import hash_password, verify_password
from .tokens import create_access_token, decode_token

__all__ = [
    "AuthService",
    "CurrentUser",
    "bearer_token",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
