"""
Graph Export

Dumps every entity into one JSON document keyed by collection name. The
stored (string-encoded) property form is kept as is so the document can be
fed back through import without loss.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Union
import logging

from ..graph.neo4j_client import Neo4jClient
from ..graph.schema import EdgeType, NodeLabel

logger = logging.getLogger(__name__)


def fetch_all(client: Neo4jClient, label: str) -> List[Dict[str, Any]]:
    """Raw properties of every node with the label"""
    rows = client.read(f"MATCH (n:{label}) RETURN n ORDER BY n.id")
    return [dict(row["n"]) for row in rows]


def fetch_lessons_with_sections(client: Neo4jClient) -> List[Dict[str, Any]]:
    """
    Lessons with their Section and Quiz sub-nodes joined in.

    Sub-node lists replace the stored `sections`/`quiz` properties only when
    the lesson actually has such sub-nodes.
    """
    rows = client.read(f"""
        MATCH (l:{NodeLabel.LESSON.value})
        OPTIONAL MATCH (l)-[:{EdgeType.HAS_SECTION.value}]->(s:{NodeLabel.SECTION.value})
        OPTIONAL MATCH (l)-[:{EdgeType.HAS_QUIZ.value}]->(q:{NodeLabel.QUIZ.value})
        RETURN l, collect(DISTINCT s) AS sections, collect(DISTINCT q) AS quiz
        ORDER BY l.id
    """)

    lessons = []
    for row in rows:
        lesson = dict(row["l"])
        sections = [s for s in row["sections"] if s]
        quiz = [q for q in row["quiz"] if q]
        if sections:
            lesson["sections"] = sections
        if quiz:
            lesson["quiz"] = quiz
        lessons.append(lesson)
    return lessons


def export_document(client: Neo4jClient) -> Dict[str, List[Dict[str, Any]]]:
    """Assemble the export document from the graph"""
    document = {
        "lessons": fetch_lessons_with_sections(client),
        "models": fetch_all(client, NodeLabel.AI_MODEL.value),
        "tutorials": fetch_all(client, NodeLabel.TUTORIAL.value),
        "prompts": fetch_all(client, NodeLabel.PROMPT.value),
        "users": fetch_all(client, NodeLabel.USER.value),
    }
    logger.info(
        "Exported " + ", ".join(f"{len(records)} {name}" for name, records in document.items())
    )
    return document


def write_export(document: Dict[str, Any], path: Union[str, Path]) -> Path:
    path = Path(path)
    if path.parent != Path("."):
        path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2, ensure_ascii=False)
    return path
