"""
ImageVault Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
Why:   Connection address, database name, upload directory and port are
       consumed by the core but owned by the deployer.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by every module that needs configuration values.
When:  Loaded once at module import time.

Defaults reproduce a local development setup: MongoDB on 127.0.0.1:27017,
database `imageDB`, uploads in `./uploads`, server on port 3000.
"""

from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have working defaults for development.
    Attributes are grouped by concern for readability.
    """

    # ── Document Store ────────────────────────────────────────────────────
    # Format: mongodb://[user:password@]host:port
    mongo_url: str = Field(
        default="mongodb://127.0.0.1:27017",
        description="MongoDB connection URL",
    )
    mongo_db_name: str = Field(default="imageDB")
    mongo_collection: str = Field(default="images")

    # What: How long the driver waits to find a usable server before an
    # operation fails. The driver's own default is 30s.
    mongo_server_selection_timeout_ms: int = Field(default=30_000, ge=100, le=300_000)

    # ── File Storage ──────────────────────────────────────────────────────
    # What: Directory for uploaded images, relative to the process CWD.
    # Served verbatim at /uploads/{filename}.
    upload_dir: str = Field(default="uploads")

    # What: Bytes read from the multipart part per write to disk.
    upload_chunk_size: int = Field(default=1_048_576, ge=1024, le=16_777_216)

    # ── Record Updates ────────────────────────────────────────────────────
    # merge:     only fields present in the PUT body are written
    # overwrite: all five text fields are written; omitted ones become null
    update_strategy: Literal["merge", "overwrite"] = Field(default="merge")

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs, or "*" for any origin
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MONGO_URL and mongo_url both work
    }


# Singleton instance — imported throughout the application
settings = Settings()
