"""
Pydantic schemas for registration and participant rows.
"""

from typing import Optional

from models.registration import ReviewStatus
from pydantic import BaseModel, ConfigDict, Field


class ParticipantResponse(BaseModel):
    """Participant information response."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = Field(..., description="Participant ID")
    name: str = Field(..., description="Participant name")
    institution: str = Field(..., description="Institution")
    class_: int = Field(..., alias="class", description="Class or encoded year")
    id_at_institution: str = Field(..., description="Student ID at the institution")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Contact phone")
    note: Optional[str] = Field(None, description="Free-text note")
    transaction_id: Optional[str] = Field(None, description="Payment transaction ID")
    payment_provider: Optional[str] = Field(None, description="Payment provider")
    created_at: Optional[str] = Field(None, description="ISO timestamp")
    updated_at: Optional[str] = Field(None, description="ISO timestamp")


class CompetitionRegistrationResponse(BaseModel):
    """One participant's registration to one competition."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., description="Registration ID")
    participant_id: str = Field(..., description="Participant ID")
    competition_id: str = Field(..., description="Competition ID")
    status: ReviewStatus = Field(..., description="Review status")
    created_at: Optional[str] = Field(None, description="ISO timestamp")
    updated_at: Optional[str] = Field(None, description="ISO timestamp")


class RegistrationData(BaseModel):
    """Payload of a successful registration."""

    participant: ParticipantResponse
    registrations: list[CompetitionRegistrationResponse]
    total_fee: float = Field(..., description="Total fee of the selected competitions")


class StatusUpdateRequest(BaseModel):
    """Request body for changing review status. "approved" is read as "confirmed"."""

    status: ReviewStatus = Field(..., description="pending, confirmed or rejected")
