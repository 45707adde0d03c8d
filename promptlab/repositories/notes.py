"""
Note Repository

One note per (user, lesson). The Note node is keyed by the composite
(userId, lessonId) and linked from its owner with HAS_NOTE.
"""

from typing import Any, Dict
import json
import logging

from ..graph.codec import decode_fields
from ..graph.neo4j_client import Neo4jClient
from ..graph.schema import NOTE_JSON_FIELDS, NodeLabel
from .base import ensure_exists

logger = logging.getLogger(__name__)


class NoteRepository:
    def __init__(self, client: Neo4jClient):
        self.client = client

    def get(self, user_id: str, lesson_id: str) -> Any:
        """The note content, or an empty dict when none was saved"""
        rows = self.client.read("""
            MATCH (:User {id: $user_id})-[:HAS_NOTE]->(n:Note {userId: $user_id, lessonId: $lesson_id})
            RETURN n
        """, user_id=user_id, lesson_id=lesson_id)
        if not rows:
            return {}
        note = decode_fields(rows[0]["n"], NOTE_JSON_FIELDS)
        content = note.get("content")
        return {} if content is None else content

    def put(self, user_id: str, lesson_id: str, content: Any) -> Dict[str, Any]:
        """
        Create or replace the user's note for a lesson.

        Raises:
            NotFoundError: when the user does not exist
        """
        # Stored as JSON even when the content is already a string
        encoded = json.dumps(content)
        with self.client.transaction() as tx:
            ensure_exists(tx, NodeLabel.USER.value, user_id, "User")
            tx.run("""
                MATCH (u:User {id: $user_id})
                MERGE (n:Note {userId: $user_id, lessonId: $lesson_id})
                MERGE (u)-[:HAS_NOTE]->(n)
                SET n.content = $content, n.updatedAt = timestamp()
            """, user_id=user_id, lesson_id=lesson_id, content=encoded)
        logger.debug(f"Saved note for user {user_id} on lesson {lesson_id}")
        return {"lessonId": lesson_id, "content": content}
