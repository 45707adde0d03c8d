"""API dependencies for dependency injection."""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from ..auth.service import AuthService, CurrentUser
from ..graph.neo4j_client import Neo4jClient
from ..llm.gemini import GeminiClient
from ..repositories import (
    LessonRepository,
    ModelRepository,
    NoteRepository,
    ProgressRepository,
    PromptRepository,
    TutorialRepository,
    UserRepository,
)


def get_client(request: Request) -> Neo4jClient:
    """The process-wide Neo4j client created at startup"""
    return request.app.state.neo4j


def get_gemini(request: Request) -> GeminiClient:
    return request.app.state.gemini


def get_auth_service(client: Neo4jClient = Depends(get_client)) -> AuthService:
    return AuthService(UserRepository(client))


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    auth: AuthService = Depends(get_auth_service),
) -> CurrentUser:
    """Reject the request before any business logic unless the bearer token verifies"""
    return auth.authenticate(authorization)


# Type aliases for cleaner route signatures
Client = Annotated[Neo4jClient, Depends(get_client)]
Gemini = Annotated[GeminiClient, Depends(get_gemini)]
Auth = Annotated[AuthService, Depends(get_auth_service)]
User = Annotated[CurrentUser, Depends(get_current_user)]


def lessons_repo(client: Client) -> LessonRepository:
    return LessonRepository(client)


def models_repo(client: Client) -> ModelRepository:
    return ModelRepository(client)


def tutorials_repo(client: Client) -> TutorialRepository:
    return TutorialRepository(client)


def prompts_repo(client: Client) -> PromptRepository:
    return PromptRepository(client)


def notes_repo(client: Client) -> NoteRepository:
    return NoteRepository(client)


def progress_repo(client: Client) -> ProgressRepository:
    return ProgressRepository(client)


Lessons = Annotated[LessonRepository, Depends(lessons_repo)]
Models = Annotated[ModelRepository, Depends(models_repo)]
Tutorials = Annotated[TutorialRepository, Depends(tutorials_repo)]
Prompts = Annotated[PromptRepository, Depends(prompts_repo)]
Notes = Annotated[NoteRepository, Depends(notes_repo)]
Progress = Annotated[ProgressRepository, Depends(progress_repo)]
