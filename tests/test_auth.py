"""
Tests for password hashing, tokens and the auth service
"""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from conftest import FakeNeo4jClient
from config.settings import ConfigurationError, Settings, get_settings
from promptlab.auth import (
    AuthService,
    bearer_token,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from promptlab.errors import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError,
    ValidationError,
)
from promptlab.repositories import UserRepository


class TestPasswords:
    """Tests for bcrypt hashing"""

    def test_hash_and_verify(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    def test_empty_inputs(self):
        assert not verify_password("", "hash")
        assert not verify_password("secret1", "")


class TestTokens:
    """Tests for JWT issue and verification"""

    def test_round_trip(self):
        token = create_access_token("user-1", "alice")
        data = decode_token(token)
        assert data["sub"] == "user-1"
        assert data["username"] == "alice"
        assert data["exp"] > datetime.now(timezone.utc).timestamp()

    def test_expired(self):
        settings = get_settings()
        token = jwt.encode(
            {"sub": "user-1", "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
            settings.jwt_secret,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            decode_token(token)

    def test_garbage(self):
        with pytest.raises(InvalidTokenError):
            decode_token("not-a-jwt")

    def test_missing_secret(self):
        settings = Settings(jwt_secret=None, _env_file=None)
        with pytest.raises(ConfigurationError):
            create_access_token("user-1", "alice", settings)


class TestBearerToken:
    """Tests for Authorization header parsing"""

    def test_bearer(self):
        assert bearer_token("Bearer abc") == "abc"
        assert bearer_token("bearer abc") == "abc"

    def test_malformed(self):
        assert bearer_token(None) is None
        assert bearer_token("abc") is None
        assert bearer_token("Basic abc") is None
        assert bearer_token("Bearer ") is None


class TestAuthService:
    """Tests for register, login and authenticate"""

    def setup_method(self):
        self.client = FakeNeo4jClient()
        self.client.on("CREATE (u:User", lambda p: [{"u": {
            "id": p["id"], "username": p["username"], "passwordHash": p["password_hash"],
        }}])
        self.auth = AuthService(UserRepository(self.client))

    def test_register_returns_public_user(self):
        user = self.auth.register("alice", "secret1")
        assert set(user) == {"id", "username"}
        assert user["username"] == "alice"

        (_, _, params), = self.client.statements("CREATE (u:User")
        assert params["password_hash"] != "secret1"
        assert verify_password("secret1", params["password_hash"])

    @pytest.mark.parametrize("username,password", [
        ("", "secret1"),
        (None, "secret1"),
        ("alice", "short"),
        ("alice", None),
    ])
    def test_register_validation(self, username, password):
        with pytest.raises(ValidationError):
            self.auth.register(username, password)
        assert self.client.calls == []

    def test_register_duplicate(self):
        self.client.on("MATCH (u:User {username: $username})", [{"u": {"id": "u1", "username": "alice"}}])
        with pytest.raises(ConflictError):
            self.auth.register("alice", "secret1")

    def test_login(self):
        self.client.on("MATCH (u:User {username: $username})", [{"u": {
            "id": "u1", "username": "alice", "passwordHash": hash_password("secret1"),
        }}])
        session = self.auth.login("alice", "secret1")
        assert session["user"] == {"id": "u1", "username": "alice"}
        assert decode_token(session["token"])["sub"] == "u1"

    def test_login_failures_look_the_same(self):
        """Unknown user and wrong password give the same error"""
        with pytest.raises(InvalidCredentialsError) as unknown:
            self.auth.login("nobody", "secret1")

        self.client.on("MATCH (u:User {username: $username})", [{"u": {
            "id": "u1", "username": "alice", "passwordHash": hash_password("secret1"),
        }}])
        with pytest.raises(InvalidCredentialsError) as wrong:
            self.auth.login("alice", "wrong-password")

        assert unknown.value.message == wrong.value.message

    def test_authenticate(self):
        token = create_access_token("u1", "alice")
        user = self.auth.authenticate(f"Bearer {token}")
        assert user.id == "u1"
        assert user.username == "alice"

    def test_authenticate_missing_vs_invalid(self):
        with pytest.raises(MissingTokenError):
            self.auth.authenticate(None)
        with pytest.raises(InvalidTokenError):
            self.auth.authenticate("Bearer not-a-jwt")
