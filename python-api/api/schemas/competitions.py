"""
Pydantic schemas for competition management endpoints.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class CompetitionResponse(BaseModel):
    """Competition row as returned by the API."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Competition ID")
    event_id: str = Field(..., description="Owning event ID")
    title: str = Field(..., description="Competition title")
    description: Optional[Any] = Field(None, description="Rich-text document, passed through as stored")
    fee: float = Field(0, description="Registration fee, 0 when free")
    is_published: bool = Field(False, description="Visible on the public registration form")
    display_order: int = Field(..., description="Position within the event")
    created_at: Optional[str] = Field(None, description="ISO timestamp")
    updated_at: Optional[str] = Field(None, description="ISO timestamp")


class CompetitionCreateRequest(BaseModel):
    """Request body for creating a competition."""

    title: str = Field(..., min_length=1, max_length=200, description="Competition title")
    description: Optional[Any] = Field(None, description="Rich-text document")
    fee: float = Field(0, ge=0, description="Registration fee")
    is_published: bool = Field(False, description="Publish immediately")
    display_order: Optional[int] = Field(
        None, ge=1, description="Position; defaults to after the last competition"
    )


class CompetitionUpdateRequest(BaseModel):
    """Request body for a partial competition update. Only sent fields change."""

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[Any] = None
    fee: Optional[float] = Field(None, ge=0)
    is_published: Optional[bool] = None


class CompetitionPublishRequest(BaseModel):
    is_published: bool = Field(..., description="New publication state")


class CompetitionReorderRequest(BaseModel):
    """Every competition ID of the event, in the desired order."""

    competition_ids: list[str] = Field(..., description="Competition IDs in display order")
