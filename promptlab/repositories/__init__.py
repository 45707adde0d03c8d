"""
Repositories module - One repository per entity type over the Neo4j client
"""

from .lessons import LessonRepository
from .models import ModelRepository
from .tutorials import TutorialRepository
from .prompts import PromptRepository
from .notes import NoteRepository
from .users import UserRepository, public_user
from .progress import ProgressRepository

__all__ = [
    "LessonRepository",
    "ModelRepository",
    "TutorialRepository",
    "PromptRepository",
    "NoteRepository",
    "UserRepository",
    "ProgressRepository",
    "public_user",
]
