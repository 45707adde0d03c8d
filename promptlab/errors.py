"""
Error Taxonomy

Exceptions raised by the repositories, the auth gate and the bulk pipeline.
The HTTP layer maps each class to a status code via `status_code`.
"""

from typing import Any, Optional

from config.settings import ConfigurationError


class PromptLabError(Exception):
    """Base class for all application errors"""

    status_code: int = 500

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(PromptLabError):
    """Bad input shape or type; the operation was not attempted"""

    status_code = 400


class NotFoundError(PromptLabError):
    """An id does not resolve to a node"""

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(PromptLabError):
    """A unique key is already taken"""

    status_code = 409


class AuthError(PromptLabError):
    status_code = 401


class MissingTokenError(AuthError):
    """No bearer token, or a malformed Authorization header"""

    status_code = 401


class InvalidTokenError(AuthError):
    """Bad signature, expired or undecodable token"""

    status_code = 403


class InvalidCredentialsError(AuthError):
    """Login failed. The message never reveals whether the username exists."""

    status_code = 401

    def __init__(self):
        super().__init__("Invalid username or password.")


class StoreFault(PromptLabError):
    """Connectivity, constraint or unexpected graph store failure"""

    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class UpstreamError(PromptLabError):
    """The generative-AI endpoint failed or is not configured"""

    status_code = 500

    def __init__(self, message: str, detail: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message, detail)
        if status_code is not None:
            self.status_code = status_code


__all__ = [
    "PromptLabError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "AuthError",
    "MissingTokenError",
    "InvalidTokenError",
    "InvalidCredentialsError",
    "StoreFault",
    "UpstreamError",
    "ConfigurationError",
]
