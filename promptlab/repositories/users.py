"""
User Repository
"""

from typing import Any, Dict, Optional

from ..errors import ConflictError
from ..graph.schema import USER_SCHEMA
from .base import BaseRepository, new_id


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """The fields of a user that may leave the server"""
    return {"id": user["id"], "username": user["username"]}


class UserRepository(BaseRepository):
    schema = USER_SCHEMA
    entity_name = "User"

    def get_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        rows = self.client.read(
            "MATCH (u:User {username: $username}) RETURN u",
            username=username,
        )
        if not rows:
            return None
        return rows[0]["u"]

    def create(self, username: str, password_hash: str) -> Dict[str, Any]:
        """
        Create a user.

        Raises:
            ConflictError: when the username is taken (checked first, and
                enforced by the user_username constraint under races)
        """
        if self.get_by_username(username) is not None:
            raise ConflictError("Username already exists.")
        rows = self.client.write(
            "CREATE (u:User {id: $id, username: $username, passwordHash: $password_hash}) RETURN u",
            id=new_id(),
            username=username,
            password_hash=password_hash,
        )
        return rows[0]["u"]
