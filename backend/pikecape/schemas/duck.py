"""
Pikecape Backend - Pydantic Request/Response Schemas
=====================================================

What:  Pydantic models defining the API contract for the duck resource.
How:   FastAPI validates request bodies against DuckCreate/DuckUpdate,
       serializes responses through DuckResponse and the outcome models,
       and generates the OpenAPI docs from all of them.
Who:   Routes (request/response types) and DuckRepository (outcome types).

Ducks are open-ended documents: only `name` is declared on input, every other field
the caller sends is kept (`extra="allow"`) and stored as-is.
"""

from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_serializer


# ══════════════════════════════════════════════════════════════════════════
# Request Models - What the client sends
# ══════════════════════════════════════════════════════════════════════════


class DuckCreate(BaseModel):
    """
    What:  Body of POST /api/ducks.
    Rules: Any JSON object is accepted. `name` is optional; when sent it must
           be a non-empty string. Every other field is passed through as-is.
    """
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, description="Display name of the duck")

    def to_document(self) -> Dict[str, Any]:
        """Plain field set handed to the repository (extras included)."""
        fields = self.model_dump(exclude_unset=True)
        fields.update(self.model_extra or {})
        return fields


class DuckUpdate(BaseModel):
    """
    What:  Body of PUT /api/ducks/{uid}.
    Rules: Every field is optional; only the fields present in the request
           are applied, so absent fields stay untouched on the stored document.
    """
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = Field(default=None, min_length=1, description="New display name")

    def to_document(self) -> Dict[str, Any]:
        fields = self.model_dump(exclude_unset=True)
        fields.update(self.model_extra or {})
        return fields


# ══════════════════════════════════════════════════════════════════════════
# Response Models - What the API returns
# ══════════════════════════════════════════════════════════════════════════


class DuckResponse(BaseModel):
    """
    What:  A stored duck document, returned exactly as the store holds it.
    Who:   Returned by GET /api/ducks, GET /api/ducks/{uid}, POST /api/ducks.

    Only the identifier is declared, exposed under its storage name `_id`.
    Every other field travels untyped, so documents written by other clients
    (a numeric `name`, an ObjectId `_id`) still serialize.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Any = Field(alias="_id", description="Unique duck identifier")

    @field_serializer("id")
    def serialize_id(self, value: Any) -> Any:
        return str(value) if isinstance(value, ObjectId) else value


class UpdateOutcome(BaseModel):
    """
    What:  Store acknowledgement for an update.
    Who:   Returned by DuckRepository.update and PUT /api/ducks/{uid}.

    matchedCount == 0 means no duck had that id; it is not an error.
    """
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")


class DeleteOutcome(BaseModel):
    """
    What:  Store acknowledgement for a delete.
    Who:   Returned by DuckRepository.delete_by_uid.
    """
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool
    deleted_count: int = Field(alias="deletedCount")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
