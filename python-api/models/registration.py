"""
Event Registration Models

Domain vocabulary and the public registration form.
"""

from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    field_validator,
)


class RegistrationStatus(str, Enum):
    """Review status of one competition registration."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"

    @classmethod
    def _missing_(cls, value):
        # Older admin screens sent "approved" for the accepted state
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "approved":
                return cls.CONFIRMED
            for member in cls:
                if member.value == normalized:
                    return member
        return None


class EducationLevel(str, Enum):
    SCHOOL = "School"
    COLLEGE = "College"
    UNIVERSITY = "University"


class PaymentProvider(str, Enum):
    BKASH = "BKash"


# College and university years are stored offset so one integer column covers all levels:
# College 1st/2nd year -> 11/12, University 1st-4th year -> 21-24.
CLASS_RANGES: dict[EducationLevel, range] = {
    EducationLevel.SCHOOL: range(1, 11),
    EducationLevel.COLLEGE: range(11, 13),
    EducationLevel.UNIVERSITY: range(21, 25),
}


def valid_classes(level: EducationLevel) -> list[int]:
    return list(CLASS_RANGES[level])


class RegistrationForm(BaseModel):
    """
    Public event registration form.

    Fee-dependent rules (payment details required when any selected competition
    has a fee) need the event's fee schedule and are checked by the registration
    service, not here.
    """

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=200, description="Participant name")
    institution: str = Field(..., min_length=1, max_length=200, description="School, college or university")
    level: EducationLevel = Field(..., description="Education level")
    class_: int = Field(..., alias="class", gt=0, description="Class or encoded year")
    id_at_institution: str = Field(..., min_length=1, max_length=100, description="Student ID")
    email: Optional[EmailStr] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, max_length=30, description="Contact phone")
    note: Optional[str] = Field(None, max_length=2000, description="Free-text note")
    competitions: list[str] = Field(..., min_length=1, description="Selected competition IDs")
    transaction_id: Optional[str] = Field(None, max_length=100, description="Payment transaction ID")
    payment_provider: Optional[PaymentProvider] = Field(None, description="Payment provider")

    @field_validator("email", "phone", "note", "transaction_id", "payment_provider", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("class_")
    @classmethod
    def check_class_for_level(cls, v: int, info: ValidationInfo) -> int:
        level = info.data.get("level")
        if level is None:
            # level already failed validation; its own error is reported
            return v
        allowed = CLASS_RANGES[level]
        if v not in allowed:
            raise ValueError(
                f"Class must be between {allowed.start} and {allowed.stop - 1} for {level.value}"
            )
        return v

    @field_validator("competitions")
    @classmethod
    def check_competitions(cls, v: list[str]) -> list[str]:
        ids = [competition_id.strip() for competition_id in v if competition_id and competition_id.strip()]
        if not ids:
            raise ValueError("Select at least one competition")
        # keep first occurrence so one registration row is written per competition
        return list(dict.fromkeys(ids))


def coerce_status(value):
    """Map legacy or differently-cased status strings onto RegistrationStatus."""
    if isinstance(value, str):
        try:
            return RegistrationStatus(value)
        except ValueError:
            return value
    return value


# RegistrationStatus field type that also accepts "approved" and any casing
ReviewStatus = Annotated[RegistrationStatus, BeforeValidator(coerce_status)]
