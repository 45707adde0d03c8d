"""
Database Seeder

Resets the graph and loads fixture data:
1. Verify connectivity
2. Clear existing data
3. Create uniqueness constraints
4. Create AIModel, Lesson and Tutorial nodes (codec fields encoded)
5. Create USES_MODEL and IS_PREREQUISITE_FOR edges

Edges whose target id is not part of the fixture set are skipped. Not
transactional: a failed run is meant to be re-run from a clean state.
"""

from typing import Any, List
import logging
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..errors import StoreFault
from ..graph.codec import encode_fields
from ..graph.neo4j_client import Neo4jClient
from ..graph.schema import LESSON_SCHEMA, MODEL_SCHEMA, TUTORIAL_SCHEMA, SeedReport
from .fixtures import Fixtures

logger = logging.getLogger(__name__)
console = Console()


CONSTRAINTS = [
    "CREATE CONSTRAINT user_id IF NOT EXISTS FOR (u:User) REQUIRE u.id IS UNIQUE",
    "CREATE CONSTRAINT user_username IF NOT EXISTS FOR (u:User) REQUIRE u.username IS UNIQUE",
    "CREATE CONSTRAINT lesson_id IF NOT EXISTS FOR (l:Lesson) REQUIRE l.id IS UNIQUE",
    "CREATE CONSTRAINT model_id IF NOT EXISTS FOR (m:AIModel) REQUIRE m.id IS UNIQUE",
    "CREATE CONSTRAINT tutorial_id IF NOT EXISTS FOR (t:Tutorial) REQUIRE t.id IS UNIQUE",
    "CREATE CONSTRAINT prompt_id IF NOT EXISTS FOR (p:Prompt) REQUIRE p.id IS UNIQUE",
    "CREATE CONSTRAINT note_key IF NOT EXISTS FOR (n:Note) REQUIRE (n.userId, n.lessonId) IS UNIQUE",
]


def _as_list(value: Any) -> List[str]:
    """Relationship id lists may be missing, a single id, or a list"""
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def troubleshooting_hint(error: Exception) -> str:
    """Operator-facing advice for a failed seed run"""
    code = getattr(error, "code", None) or ""
    message = str(error)
    if code == "Neo.ClientError.Security.AuthenticationRateLimit":
        return "You have hit the authentication rate limit. Please wait a few moments and try again."
    if code == "Neo.ClientError.Security.CredentialsExpired":
        return "Your database credentials have expired. Please check your Neo4j console."
    if "ServiceUnavailable" in code or "ServiceUnavailable" in message or "ECONNREFUSED" in message \
            or "Connection refused" in message:
        return ("Could not connect to the database. Please check NEO4J_URI and ensure the "
                "database is running and not paused.")
    return "An unexpected error occurred. Please check your .env credentials and network connection."


class DatabaseSeeder:
    """
    Usage:
        seeder = DatabaseSeeder(client, load_fixtures("data/fixtures.json"))
        report = seeder.run()
    """

    def __init__(self, client: Neo4jClient, fixtures: Fixtures, show_progress: bool = True):
        self.client = client
        self.fixtures = fixtures
        self.show_progress = show_progress
        self.report = SeedReport()

    def run(self) -> SeedReport:
        """
        Execute every seeding step in order.

        Raises:
            StoreFault: on the first failing step; earlier steps stay applied
        """
        steps = [
            ("Verifying database connection...", self.verify_connection),
            ("Clearing existing data...", self.clear),
            ("Creating constraints for uniqueness...", self.create_constraints),
            ("Seeding AI Models...", self.seed_models),
            ("Seeding Lessons...", self.seed_lessons),
            ("Seeding Tutorials...", self.seed_tutorials),
            ("Creating relationships between nodes...", self.create_relationships),
        ]

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            disable=not self.show_progress,
        ) as progress:
            for description, step in steps:
                task = progress.add_task(description, total=None)
                done = step()
                progress.update(task, completed=True, description=f"✓ {done}")
                logger.info(done)

        return self.report

    # ==========================================
    # STEPS
    # ==========================================

    def verify_connection(self) -> str:
        if not self.client.connected:
            self.client.connect()
        if not self.client.verify():
            raise StoreFault("Neo4j is not reachable", code="ServiceUnavailable")
        return "Connection successful"

    def clear(self) -> str:
        self.client.clear_database()
        return "Existing data cleared"

    def create_constraints(self) -> str:
        self.client.create_constraints(CONSTRAINTS)
        return f"Created {len(CONSTRAINTS)} constraints"

    def seed_models(self) -> str:
        for model in self.fixtures.models:
            props = encode_fields(MODEL_SCHEMA.patch(model), MODEL_SCHEMA.json_fields)
            self.client.write("CREATE (m:AIModel $props)", props=props)
        self.report.models = len(self.fixtures.models)
        return f"Seeded {self.report.models} AI Models"

    def seed_lessons(self) -> str:
        for lesson in self.fixtures.lessons:
            properties = {k: v for k, v in lesson.items() if k not in ("modelId", "prerequisites")}
            props = encode_fields(LESSON_SCHEMA.patch(properties), LESSON_SCHEMA.json_fields)
            self.client.write("CREATE (l:Lesson $props)", props=props)
        self.report.lessons = len(self.fixtures.lessons)
        return f"Seeded {self.report.lessons} Lessons"

    def seed_tutorials(self) -> str:
        for tutorial in self.fixtures.tutorials:
            properties = {k: v for k, v in tutorial.items() if k != "modelIds"}
            props = encode_fields(TUTORIAL_SCHEMA.patch(properties), TUTORIAL_SCHEMA.json_fields)
            self.client.write("CREATE (t:Tutorial $props)", props=props)
        self.report.tutorials = len(self.fixtures.tutorials)
        return f"Seeded {self.report.tutorials} Tutorials"

    def create_relationships(self) -> str:
        model_ids = self.fixtures.model_ids
        lesson_ids = self.fixtures.lesson_ids

        for lesson in self.fixtures.lessons:
            for model_id in _as_list(lesson.get("modelId")):
                if self._skip(model_id, model_ids, f"{lesson['id']} -USES_MODEL-> {model_id}"):
                    continue
                self._link("""
                    MATCH (l:Lesson {id: $source}), (m:AIModel {id: $target})
                    MERGE (l)-[:USES_MODEL]->(m)
                """, lesson["id"], model_id)

            for prereq_id in _as_list(lesson.get("prerequisites")):
                if self._skip(prereq_id, lesson_ids, f"{prereq_id} -IS_PREREQUISITE_FOR-> {lesson['id']}"):
                    continue
                self._link("""
                    MATCH (l:Lesson {id: $source}), (p:Lesson {id: $target})
                    MERGE (p)-[:IS_PREREQUISITE_FOR]->(l)
                """, lesson["id"], prereq_id)

        for tutorial in self.fixtures.tutorials:
            for model_id in _as_list(tutorial.get("modelIds")):
                if self._skip(model_id, model_ids, f"{tutorial['id']} -USES_MODEL-> {model_id}"):
                    continue
                self._link("""
                    MATCH (t:Tutorial {id: $source}), (m:AIModel {id: $target})
                    MERGE (t)-[:USES_MODEL]->(m)
                """, tutorial["id"], model_id)

        skipped = len(self.report.skipped_relationships)
        return f"Created {self.report.relationships} relationships ({skipped} skipped)"

    def _skip(self, target_id: str, known: set, edge: str) -> bool:
        if target_id in known:
            return False
        logger.warning(f"Skipping edge with unknown target: {edge}")
        self.report.skipped_relationships.append(edge)
        return True

    def _link(self, cypher: str, source: str, target: str):
        self.client.write(cypher, source=source, target=target)
        self.report.relationships += 1


def seed_database(client: Neo4jClient, fixtures: Fixtures, show_progress: bool = True) -> SeedReport:
    return DatabaseSeeder(client, fixtures, show_progress=show_progress).run()
