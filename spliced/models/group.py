from typing import Optional, List
from pydantic import Field, BaseModel
from spliced.models.base import MongoModel, PyObjectId, utcnow
from datetime import datetime

# Embedded documents don't need MongoModel (no separate _id)
class Participant(BaseModel):
    """
    Group member.

    `id` is assigned once and never changes; the name is a display
    attribute and may be edited or duplicated without touching balances.
    """
    id: str = Field(default_factory=lambda: str(PyObjectId()))
    first_name: str
    last_name: str
    is_removed: bool = False
    joined_at: datetime = Field(default_factory=utcnow)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Group(MongoModel):
    name: str
    currency: str = "USD"
    header_image: str = ""
    header_image_attribution: str = ""
    color_index: Optional[int] = None
    access_code: str

    participants: List[Participant] = []

    # Sum of non-settlement expenses, maintained with $inc by the expense repo
    total_expenditure_cents: int = 0

    def active_participants(self) -> List[Participant]:
        return [p for p in self.participants if not p.is_removed]

    def active_participant_ids(self) -> List[str]:
        return [p.id for p in self.active_participants()]

    def find_participant(self, participant_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def display_names(self) -> dict[str, str]:
        """Names for every participant ever in the group, removed ones included."""
        return {p.id: p.display_name for p in self.participants}
