"""
Shared fixtures: a scripted stand-in for Neo4jClient and an API client
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

os.environ["JWT_SECRET"] = "test-secret"

from config.settings import get_settings

get_settings.cache_clear()

from promptlab.auth.tokens import create_access_token
from promptlab.llm.gemini import GeminiClient


PROJECT_ROOT = Path(__file__).parent.parent


class FakeRunner:
    def __init__(self, client: "FakeNeo4jClient"):
        self.client = client

    def run(self, cypher, **params):
        return self.client._run("tx", cypher, params)


class FakeNeo4jClient:
    """
    Records every statement and answers from scripted responses.

    Usage:
        client = FakeNeo4jClient()
        client.on("MATCH (n:Lesson {id: $id}) RETURN count(n)", [{"found": 1}])
        client.on("MERGE (n:AIModel", lambda p: [{"n": {"id": p["id"]}}])

    The most recently registered fragment contained in a statement wins;
    unmatched statements return no rows. A response may be an exception,
    which is raised instead.
    """

    def __init__(self):
        self.calls = []
        self.handlers = []
        self.healthy = True
        self.connected = True
        self.commits = 0
        self.rollbacks = 0

    def on(self, fragment, response):
        self.handlers.append((fragment, response))
        return self

    def _run(self, kind, cypher, params):
        self.calls.append((kind, cypher, params))
        for fragment, response in reversed(self.handlers):
            if fragment in cypher:
                if isinstance(response, Exception):
                    raise response
                if callable(response):
                    return response(params)
                return [dict(row) for row in response]
        return []

    def read(self, cypher, **params):
        return self._run("read", cypher, params)

    def write(self, cypher, **params):
        return self._run("write", cypher, params)

    @contextmanager
    def transaction(self):
        try:
            yield FakeRunner(self)
        except Exception:
            self.rollbacks += 1
            raise
        self.commits += 1

    def connect(self):
        self.connected = True
        return self

    def close(self):
        self.connected = False

    def verify(self):
        return self.healthy

    def create_constraints(self, statements):
        for statement in statements:
            self.write(statement)

    def clear_database(self):
        self.write("MATCH (n) DETACH DELETE n")

    # Assertion helpers

    def statements(self, fragment):
        """Calls whose statement contains the fragment"""
        return [call for call in self.calls if fragment in call[1]]

    def writes(self):
        return [call for call in self.calls if call[0] in ("write", "tx")]


def exists(label):
    """Fragment of the existence check for a label"""
    return f"MATCH (n:{label} {{id: $id}}) RETURN count(n) AS found"


@pytest.fixture
def fake_client():
    return FakeNeo4jClient()


@pytest.fixture
def gemini_responses():
    """Requests seen by the mock Gemini transport, and the response to give"""
    return {"requests": [], "status": 200, "body": {"candidates": [{"content": {"parts": [{"text": "hi"}]}}]}}


@pytest.fixture
def gemini_client(gemini_responses):
    def handler(request: httpx.Request) -> httpx.Response:
        gemini_responses["requests"].append(request)
        return httpx.Response(gemini_responses["status"], json=gemini_responses["body"])

    return GeminiClient(api_key="test-key", transport=httpx.MockTransport(handler))


@pytest.fixture
def api(fake_client, gemini_client):
    from fastapi.testclient import TestClient
    from promptlab.api.main import create_app

    app = create_app(client=fake_client, gemini=gemini_client)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers():
    token = create_access_token("user-1", "alice")
    return {"Authorization": f"Bearer {token}"}
