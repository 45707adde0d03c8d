"""
Tutorial Repository

Tutorials relate to zero or more models through USES_MODEL.
"""

from typing import Any, Dict, List, Optional

from ..graph.schema import TUTORIAL_SCHEMA, NodeLabel
from .base import BaseRepository, ensure_exists


TUTORIAL_WITH_MODELS = """
    OPTIONAL MATCH (t)-[:USES_MODEL]->(m:AIModel)
    WITH t, collect(DISTINCT m.id) AS model_ids
    RETURN t, model_ids
"""


class TutorialRepository(BaseRepository):
    schema = TUTORIAL_SCHEMA
    entity_name = "Tutorial"

    def _hydrate(self, row: Dict[str, Any]) -> Dict[str, Any]:
        tutorial = self.decode(row["t"])
        if row.get("model_ids"):
            tutorial["modelIds"] = sorted(row["model_ids"])
        return tutorial

    def get_all(self) -> List[Dict[str, Any]]:
        rows = self.client.read("MATCH (t:Tutorial)" + TUTORIAL_WITH_MODELS + "ORDER BY t.id")
        return [self._hydrate(row) for row in rows]

    def get_by_id(self, tutorial_id: str) -> Optional[Dict[str, Any]]:
        rows = self.client.read("MATCH (t:Tutorial {id: $id})" + TUTORIAL_WITH_MODELS, id=tutorial_id)
        if not rows:
            return None
        return self._hydrate(rows[0])

    def link_model(self, tutorial_id: str, model_id: str):
        """
        Add a USES_MODEL edge (idempotent).

        Raises:
            NotFoundError: when either id does not resolve
        """
        with self.client.transaction() as tx:
            ensure_exists(tx, NodeLabel.TUTORIAL.value, tutorial_id, "Tutorial")
            ensure_exists(tx, NodeLabel.AI_MODEL.value, model_id, "Model")
            tx.run("""
                MATCH (t:Tutorial {id: $tutorial_id})
                MATCH (m:AIModel {id: $model_id})
                MERGE (t)-[:USES_MODEL]->(m)
            """, tutorial_id=tutorial_id, model_id=model_id)
