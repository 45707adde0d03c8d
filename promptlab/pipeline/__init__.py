"""
Pipeline module - Bulk seed, export and import jobs
"""

from .fixtures import Fixtures, load_fixtures
from .seed import DatabaseSeeder, seed_database, troubleshooting_hint
from .export import export_document, write_export
from .importer import import_document

__all__ = [
    "Fixtures",
    "load_fixtures",
    "DatabaseSeeder",
    "seed_database",
    "troubleshooting_hint",
    "export_document",
    "write_export",
    "import_document",
]
