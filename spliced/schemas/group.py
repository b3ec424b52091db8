from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class ParticipantCreate(BaseModel):
    """Participant to add. Entries with a blank first or last name are skipped."""
    first_name: str = Field(default="", max_length=100)
    last_name: str = Field(default="", max_length=100)

    def is_blank(self) -> bool:
        return not (self.first_name.strip() and self.last_name.strip())


class ParticipantsAdd(BaseModel):
    participants: List[ParticipantCreate] = Field(..., min_length=1)


class ParticipantResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    display_name: str
    is_removed: bool
    joined_at: datetime


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    currency: Optional[str] = Field(default=None, pattern="^[A-Za-z]{3}$")
    participants: List[ParticipantCreate] = []


class GroupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    currency: Optional[str] = Field(None, pattern="^[A-Za-z]{3}$")
    header_image: Optional[str] = None
    header_image_attribution: Optional[str] = None
    color_index: Optional[int] = Field(None, ge=0)

    @field_validator("name", "currency", "header_image", "header_image_attribution")
    @classmethod
    def not_null(cls, v):
        # Omit a field to leave it unchanged; only color_index can be cleared
        if v is None:
            raise ValueError("may not be null")
        return v


class GroupResponse(BaseModel):
    id: str
    name: str
    currency: str
    header_image: str
    header_image_attribution: str
    color_index: Optional[int] = None
    access_code: str
    participants: List[ParticipantResponse]
    total_expenditure_cents: int
    total_expenditure: float
    created_at: datetime
    updated_at: datetime


class GroupSummaryResponse(BaseModel):
    group_id: str
    currency: str
    total_spent_cents: int
    total_spent: float
    expense_count: int
    settlement_count: int
    participant_count: int
