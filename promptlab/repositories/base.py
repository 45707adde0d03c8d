"""
Base Repository

Shared read/write plumbing for one node label: every read decodes the
codec-managed fields and every write encodes them.
"""

from typing import Any, Dict, List, Optional
from uuid import uuid4
import logging

from ..errors import NotFoundError, ValidationError
from ..graph.codec import decode_fields, encode_fields
from ..graph.neo4j_client import Neo4jClient, StatementRunner
from ..graph.schema import EntitySchema

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid4())


def ensure_exists(tx: StatementRunner, label: str, entity_id: str, entity: Optional[str] = None):
    """
    Raise NotFoundError unless a node with this label and id exists.

    Args:
        tx: Runner from client.transaction()
        label: Node label to match
        entity_id: Value of the id property
        entity: Name used in the error message (defaults to the label)
    """
    rows = tx.run(
        f"MATCH (n:{label} {{id: $id}}) RETURN count(n) AS found",
        id=entity_id,
    )
    if not rows or not rows[0]["found"]:
        raise NotFoundError(entity or label, entity_id)


class BaseRepository:
    """
    Read and upsert operations for one entity type.

    Subclasses set `schema`; relationship-aware repositories override the
    read queries to join edge data.
    """

    schema: EntitySchema
    entity_name: str = "Entity"

    def __init__(self, client: Neo4jClient):
        self.client = client

    @property
    def label(self) -> str:
        return self.schema.label.value

    def decode(self, properties: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        return decode_fields(properties, self.schema.json_fields)

    def encode(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """Restrict a record to patchable fields and serialize its JSON fields"""
        return encode_fields(self.schema.patch(record), self.schema.json_fields)

    def get_all(self) -> List[Dict[str, Any]]:
        rows = self.client.read(f"MATCH (n:{self.label}) RETURN n ORDER BY n.id")
        return [self.decode(row["n"]) for row in rows]

    def get_by_id(self, entity_id: str) -> Optional[Dict[str, Any]]:
        """Get one entity, or None when the id does not resolve"""
        rows = self.client.read(
            f"MATCH (n:{self.label} {{id: $id}}) RETURN n",
            id=entity_id,
        )
        if not rows:
            return None
        return self.decode(rows[0]["n"])

    def exists(self, entity_id: str) -> bool:
        rows = self.client.read(
            f"MATCH (n:{self.label} {{id: $id}}) RETURN count(n) AS found",
            id=entity_id,
        )
        return bool(rows and rows[0]["found"])

    def upsert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge an entity by id, creating it when absent.

        Properties not in the record are preserved on an existing node.
        """
        if not isinstance(record, dict):
            raise ValidationError(f"{self.entity_name} must be an object")
        entity_id = record.get("id") or new_id()
        props = self.encode(record)
        props.pop("id", None)

        rows = self.client.write(
            f"MERGE (n:{self.label} {{id: $id}}) SET n += $props RETURN n",
            id=entity_id,
            props=props,
        )
        logger.debug(f"Upserted {self.label} {entity_id}")
        return self.decode(rows[0]["n"])
