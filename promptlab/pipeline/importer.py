"""
Graph Import

Merges the entities of an export-shaped document into the graph by id.
Only patchable properties are written and existing properties that the
record does not mention are kept. Relationships are not recreated.
"""

from typing import Any, Dict, Iterable, Type
import logging

from ..errors import ValidationError
from ..graph.neo4j_client import Neo4jClient
from ..graph.schema import CONTENT_COLLECTIONS, ENTITY_SCHEMAS, ImportSummary
from ..repositories.base import BaseRepository
from ..repositories.lessons import LessonRepository
from ..repositories.models import ModelRepository
from ..repositories.prompts import PromptRepository
from ..repositories.tutorials import TutorialRepository
from ..repositories.users import UserRepository

logger = logging.getLogger(__name__)


REPOSITORIES: Dict[str, Type[BaseRepository]] = {
    "lessons": LessonRepository,
    "models": ModelRepository,
    "tutorials": TutorialRepository,
    "prompts": PromptRepository,
    "users": UserRepository,
}


def _validate(document: Any, collections: Iterable[str]):
    if not isinstance(document, dict):
        raise ValidationError("Import document must be a JSON object")
    for name in collections:
        if name not in ENTITY_SCHEMAS:
            raise ValidationError(f"Unknown collection: {name}")
        records = document.get(name)
        if not isinstance(records, list):
            continue
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise ValidationError(f"{name}[{index}] must be an object")


def import_document(
    client: Neo4jClient,
    document: Dict[str, Any],
    collections: Iterable[str] = CONTENT_COLLECTIONS,
) -> ImportSummary:
    """
    Upsert every record of the requested collections.

    Args:
        client: Neo4j client
        document: {"lessons": [...], "models": [...], ...}
        collections: Collection names to import; others are ignored

    Returns:
        ImportSummary with a processed-record count per collection

    Raises:
        ValidationError: before any write, when the document has the wrong shape
    """
    collections = list(collections)
    _validate(document, collections)

    summary = ImportSummary(counts={name: 0 for name in collections})
    for name in collections:
        records = document.get(name)
        if not isinstance(records, list):
            logger.debug(f"No {name} list in import document")
            continue
        repository = REPOSITORIES[name](client)
        for record in records:
            repository.upsert(record)
            summary.counts[name] += 1
        logger.info(f"Imported {summary.counts[name]} {name}")

    return summary
