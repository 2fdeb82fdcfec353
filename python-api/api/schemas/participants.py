"""
Pydantic schemas for the admin participant review endpoints.
"""

from typing import Optional

from api.schemas.competitions import CompetitionResponse
from api.schemas.registrations import ParticipantResponse
from models.registration import ReviewStatus
from pydantic import BaseModel, ConfigDict, Field, computed_field


class RegistrationEntry(BaseModel):
    """A participant's registration with its competition embedded."""

    model_config = ConfigDict(extra="ignore")

    id: str
    competition_id: str
    status: ReviewStatus
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    competition: Optional[CompetitionResponse] = None


class EventParticipantEntry(BaseModel):
    """One participant of an event with all of their registrations."""

    participant: ParticipantResponse
    registrations: list[RegistrationEntry]

    @computed_field
    @property
    def total_fee(self) -> float:
        return sum(reg.competition.fee for reg in self.registrations if reg.competition)


class ParticipantStats(BaseModel):
    total: int = Field(..., description="Participants with at least one registration")
    confirmed: int = Field(..., description="Participants with a confirmed registration")
    pending: int = Field(..., description="Participants not confirmed but with a pending registration")
    total_registrations: int = Field(..., description="Registrations across all participants")


class EventParticipantsData(BaseModel):
    event_id: str
    participants: list[EventParticipantEntry]
    stats: ParticipantStats
