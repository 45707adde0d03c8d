"""
Graph Schema Definitions

Defines the node labels, relationship types and per-entity property
contracts of the PromptLab learning graph.

Every entity declares two field lists:
- json_fields: codec-managed fields, stored as JSON strings and parsed on read
- patchable_fields: the only properties a write path is allowed to set
"""

from pydantic import BaseModel, Field
from typing import List, Dict, Tuple, Any
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class NodeLabel(str, Enum):
    USER = "User"
    LESSON = "Lesson"
    AI_MODEL = "AIModel"
    TUTORIAL = "Tutorial"
    PROMPT = "Prompt"
    NOTE = "Note"
    SECTION = "Section"
    QUIZ = "Quiz"


class EdgeType(str, Enum):
    USES_MODEL = "USES_MODEL"
    IS_PREREQUISITE_FOR = "IS_PREREQUISITE_FOR"
    SAVED_PROMPT = "SAVED_PROMPT"
    HAS_NOTE = "HAS_NOTE"
    COMPLETED = "COMPLETED"
    HAS_SECTION = "HAS_SECTION"
    HAS_QUIZ = "HAS_QUIZ"


# ==========================================
# CODEC-MANAGED FIELDS
# ==========================================

LESSON_JSON_FIELDS: Tuple[str, ...] = (
    "introduction",
    "sections",
    "modelSpecificStrategies",
    "commonMistakesAndTroubleshooting",
    "advancedTechniques",
    "practiceExercises",
    "reflectionAndDiscussion",
    "summary",
    "quiz",
    "tags",
    "relatedLessons",
    "prerequisites",
)
MODEL_JSON_FIELDS: Tuple[str, ...] = ("capabilities",)
TUTORIAL_JSON_FIELDS: Tuple[str, ...] = ("steps", "troubleshooting", "modelIds")
PROMPT_JSON_FIELDS: Tuple[str, ...] = ("tags",)
NOTE_JSON_FIELDS: Tuple[str, ...] = ("content",)


class EntitySchema(BaseModel):
    """
    Property contract for one node label.

    Example:
        label: "AIModel"
        collection: "models"
        json_fields: ("capabilities",)
    """
    label: NodeLabel
    collection: str = Field(..., description="Plural key used in export/import documents")
    json_fields: Tuple[str, ...] = ()
    scalar_fields: Tuple[str, ...] = ()

    @property
    def patchable_fields(self) -> Tuple[str, ...]:
        return ("id",) + self.scalar_fields + self.json_fields

    def patch(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Keep only the patchable properties of a record.

        Unknown keys are dropped and logged rather than written to the node.
        """
        allowed = set(self.patchable_fields)
        dropped = sorted(k for k in record if k not in allowed)
        if dropped:
            logger.debug(f"Ignoring unknown {self.label.value} fields: {dropped}")
        return {k: v for k, v in record.items() if k in allowed}


USER_SCHEMA = EntitySchema(
    label=NodeLabel.USER,
    collection="users",
    scalar_fields=("username", "passwordHash"),
)

LESSON_SCHEMA = EntitySchema(
    label=NodeLabel.LESSON,
    collection="lessons",
    json_fields=LESSON_JSON_FIELDS,
    scalar_fields=("title", "description", "category", "difficulty", "duration", "order", "modelId"),
)

MODEL_SCHEMA = EntitySchema(
    label=NodeLabel.AI_MODEL,
    collection="models",
    json_fields=MODEL_JSON_FIELDS,
    scalar_fields=("name", "provider", "description", "releaseDate", "contextWindow", "website"),
)

TUTORIAL_SCHEMA = EntitySchema(
    label=NodeLabel.TUTORIAL,
    collection="tutorials",
    json_fields=TUTORIAL_JSON_FIELDS,
    scalar_fields=("title", "description", "difficulty", "duration", "category"),
)

PROMPT_SCHEMA = EntitySchema(
    label=NodeLabel.PROMPT,
    collection="prompts",
    json_fields=PROMPT_JSON_FIELDS,
    scalar_fields=("name", "promptText", "modelId", "isFavorite", "responsePreview", "timestamp"),
)

# Export/import document order
ENTITY_SCHEMAS: Dict[str, EntitySchema] = {
    schema.collection: schema
    for schema in (LESSON_SCHEMA, MODEL_SCHEMA, TUTORIAL_SCHEMA, PROMPT_SCHEMA, USER_SCHEMA)
}

# Types the authenticated HTTP import may write
CONTENT_COLLECTIONS: Tuple[str, ...] = ("lessons", "models", "tutorials")


# ==========================================
# RESULT MODELS
# ==========================================

class ProgressSummary(BaseModel):
    """A user's completed lessons and quiz scores"""
    completed_lesson_ids: List[str] = Field(default_factory=list)
    scores: Dict[str, Any] = Field(default_factory=dict)
    badges: List[str] = Field(default_factory=list)
    current_streak: int = 0
    longest_streak: int = 0

    def to_response(self) -> Dict[str, Any]:
        """Shape returned by GET /api/progress"""
        return {
            "completedLessons": self.completed_lesson_ids,
            "quizScores": self.scores,
            "badges": self.badges,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
        }


class ImportSummary(BaseModel):
    """Per-collection count of processed records"""
    counts: Dict[str, int] = Field(default_factory=dict)

    class Config:
        json_schema_extra = {
            "example": {"counts": {"lessons": 12, "models": 4, "tutorials": 3}}
        }


class SeedReport(BaseModel):
    """Result of a seed run"""
    models: int = 0
    lessons: int = 0
    tutorials: int = 0
    relationships: int = 0
    skipped_relationships: List[str] = Field(default_factory=list)
