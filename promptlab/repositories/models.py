"""
AI Model Repository
"""

from ..graph.schema import MODEL_SCHEMA
from .base import BaseRepository


class ModelRepository(BaseRepository):
    """AIModel nodes; `capabilities` is the only codec-managed field"""

    schema = MODEL_SCHEMA
    entity_name = "Model"
