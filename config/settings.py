"""
Configuration management for PromptLab
"""

from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Optional, List
from functools import lru_cache


class ConfigurationError(RuntimeError):
    """Raised when required configuration is missing"""


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Neo4j
    neo4j_uri: Optional[str] = Field(default=None)
    neo4j_username: Optional[str] = Field(default="neo4j")
    neo4j_password: Optional[str] = Field(default=None)
    neo4j_database: Optional[str] = Field(default=None, description="None uses the server default database")

    # Auth
    jwt_secret: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="HS256")
    jwt_expires_days: int = Field(default=7)

    # Gemini API
    gemini_api_key: Optional[str] = Field(default=None)
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    gemini_model: str = Field(default="gemini-2.0-flash")
    gemini_timeout: float = Field(default=60.0)

    # Server
    api_host: str = Field(default="0.0.0.0")
    port: int = Field(default=8082)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Data Paths
    export_path: str = Field(default="import.json")
    fixtures_path: str = Field(default="data/fixtures.json")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    def missing_store_settings(self) -> List[str]:
        """Names of the Neo4j variables that are not set"""
        required = {
            "NEO4J_URI": self.neo4j_uri,
            "NEO4J_USERNAME": self.neo4j_username,
            "NEO4J_PASSWORD": self.neo4j_password,
        }
        return [name for name, value in required.items() if not value]

    def require_store_settings(self) -> "Settings":
        """
        Abort early when the database credentials are not configured.

        Raises:
            ConfigurationError: naming every missing variable
        """
        missing = self.missing_store_settings()
        if missing:
            raise ConfigurationError(
                "Database credentials are not configured. "
                f"Set {', '.join(missing)} in the environment or in a .env file."
            )
        return self


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
