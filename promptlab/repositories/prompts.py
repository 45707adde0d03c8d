"""
Prompt Repository

Saved prompts belong to exactly one user through (:User)-[:SAVED_PROMPT]->(:Prompt).
"""

from typing import Any, Dict, List
import logging
import time

from ..errors import NotFoundError, ValidationError
from ..graph.schema import PROMPT_SCHEMA, NodeLabel
from .base import BaseRepository, ensure_exists, new_id

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class PromptRepository(BaseRepository):
    """
    Usage:
        prompts = PromptRepository(client)
        saved = prompts.save(user_id, {"name": "Summarize", "promptText": "..."})
        prompts.list(user_id)
        prompts.delete(user_id, saved["id"])
    """

    schema = PROMPT_SCHEMA
    entity_name = "Prompt"

    def list(self, user_id: str) -> List[Dict[str, Any]]:
        """A user's prompts, newest first"""
        rows = self.client.read("""
            MATCH (u:User {id: $user_id})-[:SAVED_PROMPT]->(p:Prompt)
            RETURN p
            ORDER BY p.timestamp DESC
        """, user_id=user_id)
        return [self.decode(row["p"]) for row in rows]

    def save(self, user_id: str, prompt: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create or update a prompt owned by the user.

        Both the Prompt node and the ownership edge are merged, so saving the
        same id twice leaves one node and one edge.

        Raises:
            ValidationError: when the prompt is not an object or has no text
            NotFoundError: when the user does not exist, or the id belongs
                to another user's prompt
        """
        if not isinstance(prompt, dict):
            raise ValidationError("Prompt must be an object")
        if not isinstance(prompt.get("promptText"), str) or not prompt["promptText"].strip():
            raise ValidationError("promptText is required.")

        prompt_id = prompt.get("id") or new_id()
        record = dict(prompt)
        record["tags"] = record.get("tags") or []
        record["timestamp"] = now_ms()
        props = self.encode(record)
        props.pop("id", None)

        with self.client.transaction() as tx:
            ensure_exists(tx, NodeLabel.USER.value, user_id, "User")
            owners = tx.run("""
                MATCH (owner:User)-[:SAVED_PROMPT]->(:Prompt {id: $prompt_id})
                WHERE owner.id <> $user_id
                RETURN count(owner) AS others
            """, prompt_id=prompt_id, user_id=user_id)
            if owners and owners[0]["others"]:
                raise NotFoundError("Prompt", prompt_id)

            rows = tx.run("""
                MATCH (u:User {id: $user_id})
                MERGE (p:Prompt {id: $prompt_id})
                MERGE (u)-[:SAVED_PROMPT]->(p)
                SET p += $props
                RETURN p
            """, user_id=user_id, prompt_id=prompt_id, props=props)

        logger.debug(f"Saved prompt {prompt_id} for user {user_id}")
        return self.decode(rows[0]["p"])

    def delete(self, user_id: str, prompt_id: str) -> bool:
        """
        Remove a prompt and all its edges, only if the user owns it.

        Returns:
            True when a prompt was deleted
        """
        rows = self.client.write("""
            MATCH (u:User {id: $user_id})-[:SAVED_PROMPT]->(p:Prompt {id: $prompt_id})
            DETACH DELETE p
            RETURN count(*) AS deleted
        """, user_id=user_id, prompt_id=prompt_id)
        return bool(rows and rows[0]["deleted"])
