from pydantic import BaseModel


class Balance(BaseModel):
    """Net position of one participant. Positive = owed money, negative = owes."""
    participant_id: str
    amount_cents: int


class Transfer(BaseModel):
    """Suggested payment: from_participant_id should pay to_participant_id."""
    from_participant_id: str
    to_participant_id: str
    amount_cents: int
