"""
Graph module - Handles the Neo4j store, node schema and field codec
"""

from .schema import NodeLabel, EdgeType, EntitySchema, ENTITY_SCHEMAS
from .codec import encode_fields, decode_fields
from .neo4j_client import Neo4jClient

__all__ = [
    "NodeLabel",
    "EdgeType",
    "EntitySchema",
    "ENTITY_SCHEMAS",
    "encode_fields",
    "decode_fields",
    "Neo4jClient",
]
