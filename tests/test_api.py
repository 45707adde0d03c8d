"""
Tests for the HTTP API
"""

import pytest

from conftest import exists
from promptlab.errors import StoreFault


class TestPublicEndpoints:
    """Tests for unauthenticated routes"""

    def test_root(self, api):
        response = api.get("/")
        assert response.status_code == 200
        assert response.json()["name"] == "PromptLab API"

    def test_health(self, api, fake_client):
        assert api.get("/health").json()["status"] == "healthy"
        fake_client.healthy = False
        assert api.get("/health").json() == {"status": "degraded", "graph_connected": False}

    def test_list_lessons(self, api, fake_client):
        fake_client.on("MATCH (l:Lesson)", [{
            "l": {"id": "basics", "quiz": '[{"question": "Q"}]'},
            "model_id": "m1",
            "prerequisite_ids": [],
        }])
        response = api.get("/api/lessons")
        assert response.status_code == 200
        assert response.json() == [{"id": "basics", "quiz": [{"question": "Q"}], "modelId": "m1"}]

    def test_lesson_not_found(self, api):
        response = api.get("/api/lessons/ghost")
        assert response.status_code == 404
        assert response.json() == {"message": "Lesson not found"}

    def test_prerequisites_not_found(self, api):
        assert api.get("/api/lessons/ghost/prerequisites").status_code == 404

    def test_model_and_tutorial(self, api, fake_client):
        fake_client.on("MATCH (n:AIModel {id: $id})", [{"n": {"id": "m1", "capabilities": '["text"]'}}])
        assert api.get("/api/models/m1").json() == {"id": "m1", "capabilities": ["text"]}
        assert api.get("/api/tutorials/ghost").status_code == 404

    def test_store_fault_is_sanitized(self, api, fake_client):
        fake_client.on("MATCH (n:AIModel)", StoreFault("bolt://10.0.0.1 refused", code="ServiceUnavailable"))
        response = api.get("/api/models")
        assert response.status_code == 500
        assert response.json() == {"message": "Database error"}


class TestAuthEndpoints:
    """Tests for register and login"""

    def setup_users(self, fake_client):
        fake_client.on("CREATE (u:User", lambda p: [{"u": {
            "id": p["id"], "username": p["username"], "passwordHash": p["password_hash"],
        }}])

    def test_register(self, api, fake_client):
        self.setup_users(fake_client)
        response = api.post("/api/auth/register", json={"username": "alice", "password": "secret1"})
        assert response.status_code == 201
        assert response.json()["username"] == "alice"
        assert "passwordHash" not in response.json()

    def test_register_short_password(self, api):
        response = api.post("/api/auth/register", json={"username": "alice", "password": "123"})
        assert response.status_code == 400

    def test_register_conflict(self, api, fake_client):
        """Registering a taken username is a 409 and leaves the user alone"""
        self.setup_users(fake_client)
        fake_client.on("MATCH (u:User {username: $username})", [{"u": {"id": "u1", "username": "alice"}}])
        response = api.post("/api/auth/register", json={"username": "alice", "password": "secret1"})
        assert response.status_code == 409
        assert response.json() == {"message": "Username already exists."}
        assert fake_client.statements("CREATE (u:User") == []

    def test_login_failure(self, api):
        response = api.post("/api/auth/login", json={"username": "nobody", "password": "secret1"})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid username or password."}

    def test_malformed_body(self, api):
        response = api.post(
            "/api/auth/login",
            content="not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400


class TestAuthGate:
    """Tests for bearer-token enforcement"""

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/progress"),
        ("get", "/api/prompts"),
        ("delete", "/api/prompts/p1"),
        ("get", "/api/notes/basics"),
        ("post", "/api/gemini"),
        ("post", "/api/import-data"),
    ])
    def test_missing_token_is_401(self, api, fake_client, method, path):
        response = getattr(api, method)(path)
        assert response.status_code == 401
        assert fake_client.calls == []

    def test_invalid_token_is_403(self, api, fake_client):
        response = api.get("/api/progress", headers={"Authorization": "Bearer forged.token.value"})
        assert response.status_code == 403
        assert fake_client.calls == []


class TestProgressEndpoints:
    """Tests for progress routes"""

    def test_get_progress(self, api, auth_headers, fake_client):
        fake_client.on("-[r:COMPLETED]->(l:Lesson)", [{"lessonId": "basics", "score": 90, "completedAt": None}])
        body = api.get("/api/progress", headers=auth_headers).json()
        assert body["completedLessons"] == ["basics"]
        assert body["quizScores"] == {"basics": 90}
        assert body["badges"] == ["first-lesson"]

    def test_record_progress(self, api, auth_headers, fake_client):
        fake_client.on(exists("User"), [{"found": 1}])
        fake_client.on(exists("Lesson"), [{"found": 1}])
        fake_client.on("MERGE (u)-[r:COMPLETED]->(l)", [{"score": 80, "completedAt": 1}])

        response = api.post("/api/progress/lesson/basics", json={"score": 80}, headers=auth_headers)
        assert response.status_code == 200
        (_, _, params), = fake_client.statements("MERGE (u)-[r:COMPLETED]->(l)")
        assert params == {"user_id": "user-1", "lesson_id": "basics", "score": 80}

    def test_non_numeric_score(self, api, auth_headers):
        response = api.post("/api/progress/lesson/basics", json={"score": "high"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"message": "A numeric score is required."}

    def test_unknown_lesson(self, api, auth_headers, fake_client):
        fake_client.on(exists("User"), [{"found": 1}])
        response = api.post("/api/progress/lesson/ghost", json={"score": 10}, headers=auth_headers)
        assert response.status_code == 404


class TestPromptEndpoints:
    """Tests for saved prompt routes"""

    def test_save_and_list(self, api, auth_headers, fake_client):
        fake_client.on(exists("User"), [{"found": 1}])
        fake_client.on("MERGE (p:Prompt", lambda p: [{"p": {"id": p["prompt_id"], **p["props"]}}])

        response = api.post("/api/prompts", json={"name": "Sum", "promptText": "Summarize"}, headers=auth_headers)
        assert response.status_code == 200
        prompt = response.json()["prompt"]
        assert prompt["tags"] == []
        assert prompt["isFavorite"] is False

    def test_delete_not_owned(self, api, auth_headers):
        response = api.delete("/api/prompts/p1", headers=auth_headers)
        assert response.status_code == 404

    def test_delete(self, api, auth_headers, fake_client):
        fake_client.on("DETACH DELETE p", [{"deleted": 1}])
        response = api.delete("/api/prompts/p1", headers=auth_headers)
        assert response.status_code == 200


class TestNoteEndpoints:
    """Tests for note routes"""

    def test_missing_note_is_empty_object(self, api, auth_headers):
        response = api.get("/api/notes/basics", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {}

    def test_save_then_read(self, api, auth_headers, fake_client):
        """The saved content is what a later read returns"""
        stored = {}

        def put(params):
            stored["content"] = params["content"]
            return []

        fake_client.on(exists("User"), [{"found": 1}])
        fake_client.on("MERGE (n:Note", put)
        fake_client.on("-[:HAS_NOTE]->(n:Note {userId", lambda p: [{"n": {"content": stored["content"]}}])

        content = {"text": "remember the format", "highlights": [1, 2]}
        assert api.post("/api/notes/basics", json={"content": content}, headers=auth_headers).status_code == 200
        assert api.get("/api/notes/basics", headers=auth_headers).json() == content


class TestGeminiEndpoint:
    """Tests for the Gemini proxy route"""

    def test_success(self, api, auth_headers, gemini_responses):
        response = api.post("/api/gemini", json={"prompt": "hi"}, headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == gemini_responses["body"]

    def test_upstream_error(self, api, auth_headers, gemini_responses):
        gemini_responses["status"] = 429
        gemini_responses["body"] = {"error": {"code": 429, "message": "quota"}}
        response = api.post("/api/gemini", json={"prompt": "hi"}, headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"message": "Gemini API Error", "error": gemini_responses["body"]}

    def test_empty_prompt(self, api, auth_headers):
        response = api.post("/api/gemini", json={"prompt": ""}, headers=auth_headers)
        assert response.status_code == 400


class TestImportEndpoint:
    """Tests for the authenticated bulk import"""

    def test_import(self, api, auth_headers, fake_client):
        fake_client.on("MERGE (n:", lambda p: [{"n": {"id": p["id"], **p["props"]}}])
        document = {
            "lessons": [{"id": "basics", "title": "Basics"}],
            "models": [{"id": "m1"}, {"id": "m2"}],
            "prompts": [{"id": "p1", "promptText": "ignored"}],
        }
        response = api.post("/api/import-data", json=document, headers=auth_headers)
        assert response.status_code == 200
        assert response.json() == {
            "message": "Data imported successfully!",
            "summary": {"lessons": 1, "models": 2, "tutorials": 0},
        }
        assert fake_client.statements("MERGE (n:Prompt") == []
