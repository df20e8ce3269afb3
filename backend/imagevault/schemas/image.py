"""
ImageVault Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the HTTP contract of /api/images.
Why:   Automatic serialization (ObjectId → hex string, datetime → ISO 8601)
       and OpenAPI docs generated from the same definitions.
How:   FastAPI validates the PUT body against ImageUpdate and serializes
       responses through the response_model of each route.

Field naming:
    Response keys keep the stored camelCase names (`imagePath`, `createdAt`,
    `insertedId`, `matchedCount`) and the record id is exposed as `_id`,
    which is what existing clients read.
"""

from datetime import datetime
from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


def _stringify_object_id(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ImageRecord(BaseModel):
    """
    What:  One stored image record.
    Who:   Returned by GET /api/images (as array items) and GET /api/images/{id}.

    Required fields are not enforced at creation, so name/type/description
    may be null. extra="allow" passes through any other stored keys
    (e.g. `lifespan`, written by updates).
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(alias="_id", description="Record identifier (24-char hex ObjectId)")
    name: Optional[str] = Field(default=None)
    type: Optional[str] = Field(default=None)
    description: Optional[str] = Field(default=None)
    color: Optional[str] = Field(default="")
    lifeSpan: Optional[str] = Field(default="")
    imagePath: str = Field(description="Server-relative URL of the stored image")
    createdAt: datetime = Field(description="When the record was created (UTC)")

    @field_validator("id", mode="before")
    @classmethod
    def coerce_object_id(cls, v: Any) -> Any:
        return _stringify_object_id(v)


class InsertResult(BaseModel):
    """Insert acknowledgement returned with 201 by POST /api/images."""
    acknowledged: bool
    insertedId: str = Field(description="Identifier of the new record")

    @field_validator("insertedId", mode="before")
    @classmethod
    def coerce_object_id(cls, v: Any) -> Any:
        return _stringify_object_id(v)


class UpdateResult(BaseModel):
    """
    Store update counts returned by PUT /api/images/{id}.

    matchedCount == 0 means the id does not exist; the response is still 200.
    """
    acknowledged: bool
    matchedCount: int
    modifiedCount: int
    upsertedId: Optional[str] = None
    upsertedCount: int = 0

    @field_validator("upsertedId", mode="before")
    @classmethod
    def coerce_object_id(cls, v: Any) -> Any:
        return _stringify_object_id(v)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ImageUpdate(BaseModel):
    """
    What:  PUT /api/images/{id} body. Any subset of the five text fields.

    Which keys were actually sent is read from `model_fields_set`, so an
    explicit null and an omitted key can be told apart in merge mode.
    Unknown keys are ignored.
    """
    name: Optional[str] = None
    type: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    lifespan: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body for every non-2xx response.

    There is no machine-readable error code; clients inspect `message`.
    """
    message: str = Field(description="Human-readable error description")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
