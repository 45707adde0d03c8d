"""
Neo4j Client

Owns the driver (and its connection pool) for the whole process and hands
out sessions and transactions to the repositories and the bulk pipeline.
"""

from typing import Optional, List, Dict, Any, Iterator
from neo4j import GraphDatabase, Driver, ManagedTransaction, Transaction
from neo4j.exceptions import ConstraintError, DriverError, Neo4jError
from contextlib import contextmanager
import logging

from config.settings import get_settings
from ..errors import ConflictError, StoreFault

logger = logging.getLogger(__name__)


def _collect(tx: ManagedTransaction, cypher: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Run one statement and materialize its records inside the transaction"""
    return [record.data() for record in tx.run(cypher, params)]


def _store_fault(error: Exception) -> StoreFault:
    code = getattr(error, "code", None) or type(error).__name__
    return StoreFault(str(error), code=code)


class StatementRunner:
    """
    Runs statements inside one explicit transaction.

    Yielded by Neo4jClient.transaction(); exposes the same run signature
    as the client so a multi-statement operation reads like single ones.
    """

    def __init__(self, tx: Transaction):
        self._tx = tx

    def run(self, cypher: str, **params) -> List[Dict[str, Any]]:
        return [record.data() for record in self._tx.run(cypher, params)]


class Neo4jClient:
    """
    Neo4j database client for PromptLab.

    Usage:
        client = Neo4jClient().connect()

        lessons = client.read("MATCH (l:Lesson) RETURN l")
        client.write("MERGE (m:AIModel {id: $id})", id="gemini")

        with client.transaction() as tx:
            tx.run(...)
            tx.run(...)

        client.close()
    """

    def __init__(self, uri: str = None, user: str = None, password: str = None, database: str = None):
        """
        Initialize Neo4j client.

        Args:
            uri: Neo4j connection URI (defaults to settings)
            user: Neo4j username (defaults to settings)
            password: Neo4j password (defaults to settings)
            database: Database name (defaults to settings, then the server default)
        """
        settings = get_settings()
        self.uri = uri or settings.neo4j_uri
        self.user = user or settings.neo4j_username
        self.password = password or settings.neo4j_password
        self.database = database or settings.neo4j_database
        self.driver: Optional[Driver] = None

    def connect(self) -> "Neo4jClient":
        """Create the driver and verify the server is reachable"""
        if not self.uri:
            raise StoreFault("NEO4J_URI not configured")

        self.driver = GraphDatabase.driver(
            self.uri,
            auth=(self.user, self.password)
        )

        try:
            self.driver.verify_connectivity()
        except (Neo4jError, DriverError) as e:
            self.driver.close()
            self.driver = None
            raise _store_fault(e) from e

        logger.info(f"Connected to Neo4j at {self.uri}")
        return self

    def close(self):
        """Close the driver and drain its connection pool"""
        if self.driver:
            self.driver.close()
            self.driver = None
            logger.info("Closed Neo4j connection")

    @property
    def connected(self) -> bool:
        return self.driver is not None

    @contextmanager
    def session(self):
        """Get a Neo4j session, released on every exit path"""
        if not self.driver:
            self.connect()
        session = self.driver.session(database=self.database)
        try:
            yield session
        finally:
            session.close()

    # ==========================================
    # STATEMENTS
    # ==========================================

    def read(self, cypher: str, **params) -> List[Dict[str, Any]]:
        """Run a read statement and return its records as dicts"""
        try:
            with self.session() as session:
                return session.execute_read(_collect, cypher, params)
        except ConstraintError as e:
            raise ConflictError(str(e)) from e
        except (Neo4jError, DriverError) as e:
            raise _store_fault(e) from e

    def write(self, cypher: str, **params) -> List[Dict[str, Any]]:
        """Run a write statement and return its records as dicts"""
        try:
            with self.session() as session:
                return session.execute_write(_collect, cypher, params)
        except ConstraintError as e:
            raise ConflictError(str(e)) from e
        except (Neo4jError, DriverError) as e:
            raise _store_fault(e) from e

    @contextmanager
    def transaction(self) -> Iterator[StatementRunner]:
        """
        Run several statements as one logical operation.

        Commits when the block exits normally, rolls back on any exception.
        """
        try:
            with self.session() as session:
                with session.begin_transaction() as tx:
                    yield StatementRunner(tx)
        except ConstraintError as e:
            raise ConflictError(str(e)) from e
        except (Neo4jError, DriverError) as e:
            raise _store_fault(e) from e

    # ==========================================
    # SCHEMA & MAINTENANCE
    # ==========================================

    def verify(self) -> bool:
        """Check the server is reachable"""
        if not self.driver:
            return False
        try:
            self.driver.verify_connectivity()
            return True
        except (Neo4jError, DriverError) as e:
            logger.warning(f"Neo4j connectivity check failed: {e}")
            return False

    def create_constraints(self, statements: List[str]):
        """Create uniqueness constraints (idempotent: IF NOT EXISTS)"""
        for statement in statements:
            self.write(statement)
        logger.info(f"Ensured {len(statements)} Neo4j constraints")

    def clear_database(self):
        """Clear all nodes and relationships (USE WITH CAUTION)"""
        self.write("MATCH (n) DETACH DELETE n")
        logger.warning("Cleared all data from Neo4j")

    def get_stats(self) -> Dict:
        """Get graph statistics"""
        node_count = self.read("MATCH (n) RETURN count(n) AS count")[0]["count"]
        edge_count = self.read("MATCH ()-[r]->() RETURN count(r) AS count")[0]["count"]

        label_rows = self.read("""
            MATCH (n)
            RETURN labels(n)[0] AS label, count(n) AS count
        """)
        edge_rows = self.read("""
            MATCH ()-[r]->()
            RETURN type(r) AS type, count(r) AS count
        """)

        return {
            "total_nodes": node_count,
            "total_edges": edge_count,
            "nodes_by_label": {r["label"]: r["count"] for r in label_rows},
            "edges_by_type": {r["type"]: r["count"] for r in edge_rows},
        }
