from pydantic import BaseModel, Field


class SettlementCreate(BaseModel):
    """Confirm that a suggested transfer has been paid."""
    from_participant_id: str
    to_participant_id: str
    amount_cents: int = Field(..., gt=0)


class BalanceResponse(BaseModel):
    participant_id: str
    participant_name: str
    amount_cents: int
    amount: float


class TransferResponse(BaseModel):
    from_participant_id: str
    from_name: str
    to_participant_id: str
    to_name: str
    amount_cents: int
    amount: float
