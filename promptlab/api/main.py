"""
FastAPI Application

Main entry point for the PromptLab API.
"""

from contextlib import asynccontextmanager
from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional, List, Dict, Any
import logging

from config.settings import ConfigurationError, get_settings
from ..errors import AuthError, NotFoundError, PromptLabError, StoreFault, UpstreamError
from ..graph.neo4j_client import Neo4jClient
from ..graph.schema import CONTENT_COLLECTIONS
from ..llm.gemini import GeminiClient
from ..pipeline.importer import import_document
from .deps import Auth, Client, Gemini, Lessons, Models, Notes, Progress, Prompts, Tutorials, User

# Setup logging
logging.basicConfig(level=get_settings().log_level.upper())
logger = logging.getLogger(__name__)


# ====================
# Request Models
# ====================

class CredentialsRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class GeminiRequest(BaseModel):
    prompt: Optional[str] = None
    model: Optional[str] = None


class ProgressRequest(BaseModel):
    # Kept untyped so a non-numeric score reaches the repository's own check
    score: Any = None


class PromptRequest(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    promptText: Optional[str] = None
    modelId: Optional[str] = None
    tags: Optional[List[str]] = None
    isFavorite: bool = False
    responsePreview: Optional[str] = None


class NoteRequest(BaseModel):
    content: Any = None


# ====================
# Startup/Shutdown
# ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect to Neo4j before serving and drain the pool on shutdown"""
    settings = get_settings()
    owns_client = app.state.neo4j is None

    if owns_client:
        settings.require_store_settings()
        app.state.neo4j = Neo4jClient().connect()
        logger.info("✓ Connected to Neo4j")
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; login and authenticated endpoints will fail")

    logger.info("PromptLab API ready!")
    try:
        yield
    finally:
        if owns_client and app.state.neo4j is not None:
            app.state.neo4j.close()
            app.state.neo4j = None


# ====================
# Error Handlers
# ====================

def error_response(status_code: int, content: Dict[str, Any], headers: Optional[Dict[str, str]] = None):
    return JSONResponse(status_code=status_code, content=content, headers=headers)


async def app_error_handler(request: Request, exc: PromptLabError):
    content: Dict[str, Any] = {"message": exc.message}
    headers = None

    if isinstance(exc, StoreFault):
        logger.error(f"Store fault on {request.url.path}: {exc.message}")
        content = {"message": "Database error"}
        if get_settings().debug:
            content["error"] = exc.message
    elif isinstance(exc, UpstreamError):
        content["error"] = exc.detail
    elif isinstance(exc, AuthError):
        logger.info(f"Rejected request to {request.url.path}: {exc.message}")
        headers = {"WWW-Authenticate": "Bearer"}
    elif exc.detail is not None:
        content["detail"] = exc.detail

    return error_response(exc.status_code, content, headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}")
    return error_response(400, {"message": "Validation error", "detail": exc.errors()})


async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error: {exc}")
    return error_response(500, {"message": "Server is not configured"})


def create_app(client: Optional[Neo4jClient] = None, gemini: Optional[GeminiClient] = None) -> FastAPI:
    """
    Build the application.

    Args:
        client: Neo4j client to use; when None one is created and connected
            at startup and closed at shutdown
        gemini: Gemini client (defaults to one built from settings)
    """
    app = FastAPI(
        title="PromptLab API",
        description="Lessons, AI models, tutorials and saved prompts backed by a Neo4j graph",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.neo4j = client
    app.state.gemini = gemini or GeminiClient()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(PromptLabError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)

    register_routes(app)
    return app


def _found(entity: Optional[Any], name: str, entity_id: str) -> Any:
    if entity is None:
        raise NotFoundError(name, entity_id)
    return entity


def register_routes(app: FastAPI):

    @app.get("/")
    def root():
        """API root"""
        return {
            "name": "PromptLab API",
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs"
        }

    @app.get("/health")
    def health(client: Client):
        """Health check"""
        connected = client.verify()
        return {
            "status": "healthy" if connected else "degraded",
            "graph_connected": connected,
        }

    # ====================
    # Auth
    # ====================

    @app.post("/api/auth/register", status_code=201)
    def register(request: CredentialsRequest, auth: Auth):
        return auth.register(request.username, request.password)

    @app.post("/api/auth/login")
    def login(request: CredentialsRequest, auth: Auth):
        return auth.login(request.username, request.password)

    # ====================
    # Public Content
    # ====================

    @app.get("/api/lessons")
    def list_lessons(lessons: Lessons):
        return lessons.get_all()

    @app.get("/api/lessons/{lesson_id}")
    def get_lesson(lesson_id: str, lessons: Lessons):
        return _found(lessons.get_by_id(lesson_id), "Lesson", lesson_id)

    @app.get("/api/lessons/{lesson_id}/prerequisites")
    def get_lesson_prerequisites(lesson_id: str, lessons: Lessons):
        return _found(lessons.get_prerequisites(lesson_id), "Lesson", lesson_id)

    @app.get("/api/models")
    def list_models(models: Models):
        return models.get_all()

    @app.get("/api/models/{model_id}")
    def get_model(model_id: str, models: Models):
        return _found(models.get_by_id(model_id), "Model", model_id)

    @app.get("/api/tutorials")
    def list_tutorials(tutorials: Tutorials):
        return tutorials.get_all()

    @app.get("/api/tutorials/{tutorial_id}")
    def get_tutorial(tutorial_id: str, tutorials: Tutorials):
        return _found(tutorials.get_by_id(tutorial_id), "Tutorial", tutorial_id)

    # ====================
    # Gemini Proxy
    # ====================

    @app.post("/api/gemini")
    def gemini_generate(request: GeminiRequest, user: User, gemini: Gemini):
        """Forward a prompt to Gemini and relay its response verbatim"""
        return gemini.generate(request.prompt, request.model)

    # ====================
    # Authenticated Endpoints
    # ====================

    @app.get("/api/progress")
    def get_progress(user: User, progress: Progress):
        return progress.get(user.id).to_response()

    @app.post("/api/progress/lesson/{lesson_id}")
    def record_progress(lesson_id: str, request: ProgressRequest, user: User, progress: Progress):
        progress.record_completion(user.id, lesson_id, request.score)
        return {"message": "Lesson progress saved."}

    @app.get("/api/prompts")
    def list_prompts(user: User, prompts: Prompts):
        return prompts.list(user.id)

    @app.post("/api/prompts")
    def save_prompt(request: PromptRequest, user: User, prompts: Prompts):
        saved = prompts.save(user.id, request.model_dump(exclude_none=True))
        return {"message": "Prompt saved successfully.", "prompt": saved}

    @app.delete("/api/prompts/{prompt_id}")
    def delete_prompt(prompt_id: str, user: User, prompts: Prompts):
        if not prompts.delete(user.id, prompt_id):
            raise NotFoundError("Prompt", prompt_id)
        return {"message": "Prompt deleted successfully."}

    @app.get("/api/notes/{lesson_id}")
    def get_notes(lesson_id: str, user: User, notes: Notes):
        return notes.get(user.id, lesson_id)

    @app.post("/api/notes/{lesson_id}")
    def save_notes(lesson_id: str, request: NoteRequest, user: User, notes: Notes):
        notes.put(user.id, lesson_id, request.content)
        return {"message": "Notes saved."}

    @app.post("/api/import-data")
    def import_data(user: User, client: Client, document: Dict[str, Any] = Body(...)):
        """Merge lessons, models and tutorials from an export document"""
        summary = import_document(client, document, CONTENT_COLLECTIONS)
        logger.info(f"User {user.id} imported {summary.counts}")
        return {
            "message": "Data imported successfully!",
            "summary": summary.counts,
        }


app = create_app()
