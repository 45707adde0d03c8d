"""
Lesson Repository

Lessons carry most of the codec-managed content and two relationships:
- USES_MODEL → AIModel (at most one)
- IS_PREREQUISITE_FOR → Lesson (prerequisite points at the dependent lesson)
"""

from typing import Any, Dict, List, Optional
import logging

from ..errors import ValidationError
from ..graph.schema import LESSON_SCHEMA, NodeLabel
from .base import BaseRepository, ensure_exists

logger = logging.getLogger(__name__)


LESSON_WITH_LINKS = """
    OPTIONAL MATCH (l)-[:USES_MODEL]->(m:AIModel)
    OPTIONAL MATCH (p:Lesson)-[:IS_PREREQUISITE_FOR]->(l)
    WITH l, head(collect(DISTINCT m.id)) AS model_id, collect(DISTINCT p.id) AS prerequisite_ids
    RETURN l, model_id, prerequisite_ids
"""


class LessonRepository(BaseRepository):
    """
    Usage:
        lessons = LessonRepository(client)
        lesson = lessons.get_by_id("prompt-basics")
        lessons.add_prerequisite("advanced-prompting", "prompt-basics")
    """

    schema = LESSON_SCHEMA
    entity_name = "Lesson"

    def _hydrate(self, row: Dict[str, Any]) -> Dict[str, Any]:
        """Decode a lesson and surface its relationship ids when edges exist"""
        lesson = self.decode(row["l"])
        if row.get("model_id"):
            lesson["modelId"] = row["model_id"]
        if row.get("prerequisite_ids"):
            lesson["prerequisites"] = sorted(row["prerequisite_ids"])
        return lesson

    def get_all(self) -> List[Dict[str, Any]]:
        rows = self.client.read(
            "MATCH (l:Lesson)" + LESSON_WITH_LINKS + "ORDER BY l.order, l.id"
        )
        return [self._hydrate(row) for row in rows]

    def get_by_id(self, lesson_id: str) -> Optional[Dict[str, Any]]:
        rows = self.client.read(
            "MATCH (l:Lesson {id: $id})" + LESSON_WITH_LINKS,
            id=lesson_id,
        )
        if not rows:
            return None
        return self._hydrate(rows[0])

    def get_prerequisites(self, lesson_id: str) -> Optional[List[Dict[str, Any]]]:
        """Lessons that must be completed before this one, or None for an unknown lesson"""
        rows = self.client.read("""
            MATCH (l:Lesson {id: $id})
            OPTIONAL MATCH (p:Lesson)-[:IS_PREREQUISITE_FOR]->(l)
            RETURN l.id AS id, collect(DISTINCT p) AS prerequisites
        """, id=lesson_id)
        if not rows:
            return None
        prerequisites = [self.decode(p) for p in rows[0]["prerequisites"]]
        return sorted(prerequisites, key=lambda p: p.get("id", ""))

    # ==========================================
    # RELATIONSHIPS
    # ==========================================

    def link_model(self, lesson_id: str, model_id: str):
        """
        Point a lesson at the model it is written for.

        Replaces any previous USES_MODEL edge. Both nodes must exist.

        Raises:
            NotFoundError: when either id does not resolve
        """
        with self.client.transaction() as tx:
            ensure_exists(tx, NodeLabel.LESSON.value, lesson_id, "Lesson")
            ensure_exists(tx, NodeLabel.AI_MODEL.value, model_id, "Model")
            tx.run("""
                MATCH (l:Lesson {id: $lesson_id})-[old:USES_MODEL]->(other:AIModel)
                WHERE other.id <> $model_id
                DELETE old
            """, lesson_id=lesson_id, model_id=model_id)
            tx.run("""
                MATCH (l:Lesson {id: $lesson_id})
                MATCH (m:AIModel {id: $model_id})
                MERGE (l)-[:USES_MODEL]->(m)
            """, lesson_id=lesson_id, model_id=model_id)
        logger.info(f"Linked lesson {lesson_id} to model {model_id}")

    def add_prerequisite(self, lesson_id: str, prerequisite_id: str):
        """
        Record that prerequisite_id must be completed before lesson_id.

        Cycles across several lessons are not checked.

        Raises:
            ValidationError: when a lesson is made its own prerequisite
            NotFoundError: when either id does not resolve
        """
        if lesson_id == prerequisite_id:
            raise ValidationError("A lesson cannot be its own prerequisite.")
        with self.client.transaction() as tx:
            ensure_exists(tx, NodeLabel.LESSON.value, lesson_id, "Lesson")
            ensure_exists(tx, NodeLabel.LESSON.value, prerequisite_id, "Lesson")
            tx.run("""
                MATCH (l:Lesson {id: $lesson_id})
                MATCH (p:Lesson {id: $prerequisite_id})
                MERGE (p)-[:IS_PREREQUISITE_FOR]->(l)
            """, lesson_id=lesson_id, prerequisite_id=prerequisite_id)
