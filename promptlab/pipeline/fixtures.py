"""
Fixture Loading

Reads the seed data file: one JSON document with `models`, `lessons` and
`tutorials` lists.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from ..errors import ValidationError


@dataclass
class Fixtures:
    """Seed data, in structured (not yet encoded) form"""
    models: List[Dict[str, Any]] = field(default_factory=list)
    lessons: List[Dict[str, Any]] = field(default_factory=list)
    tutorials: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def model_ids(self) -> set:
        return {m["id"] for m in self.models}

    @property
    def lesson_ids(self) -> set:
        return {l["id"] for l in self.lessons}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Fixtures":
        if not isinstance(data, dict):
            raise ValidationError("Fixture document must be a JSON object")
        sections = {}
        for name in ("models", "lessons", "tutorials"):
            records = data.get(name, [])
            if not isinstance(records, list):
                raise ValidationError(f"Fixture section '{name}' must be a list")
            for index, record in enumerate(records):
                if not isinstance(record, dict) or not record.get("id"):
                    raise ValidationError(f"{name}[{index}] must be an object with an id")
            sections[name] = records
        return cls(**sections)


def load_fixtures(path: Union[str, Path]) -> Fixtures:
    """
    Load fixtures from a JSON file.

    Raises:
        FileNotFoundError: when the file does not exist
        ValidationError: when the document has the wrong shape
    """
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise ValidationError(f"Fixture file {path} is not valid JSON: {e}") from e
    return Fixtures.from_dict(data)
