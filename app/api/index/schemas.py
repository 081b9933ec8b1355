"""Request and response schemas for index management endpoints."""

from pydantic import BaseModel, Field


class SyncResponse(BaseModel):
    """Response schema for POST /v1/index/sync."""

    success_count: int = Field(description="Documents that are up to date after the pass")
    updated_count: int = Field(description="Documents re-indexed or with changed visibility")
    error_count: int = Field(description="Documents or deletions that failed")
    delete_count: int = Field(description="Dangling documents removed from the index")
    elapsed_seconds: float = Field(default=0.0)

    model_config = {"json_schema_extra": {"example": {
        "success_count": 128,
        "updated_count": 3,
        "error_count": 0,
        "delete_count": 1,
        "elapsed_seconds": 4.21,
    }}}
