from datetime import date as date_type, datetime
from typing import List

from pydantic import BaseModel, Field

from spliced.models.expense import ExpenseKind, SplitType


class SplitIn(BaseModel):
    participant_id: str
    amount_cents: int = 0


class SplitOut(BaseModel):
    participant_id: str
    participant_name: str
    amount_cents: int


class ExpenseCreate(BaseModel):
    """
    Request body to add or replace an expense.

    For split_type=equal only `excluded_participant_ids` is read and the
    splits are computed over the group's active participants. For
    split_type=custom `splits` must add up to amount_cents.
    """
    description: str = Field(..., min_length=1, max_length=200)
    amount_cents: int = Field(..., gt=0)
    date: date_type = Field(default_factory=date_type.today)
    paid_by: str
    split_type: SplitType = SplitType.EQUAL
    splits: List[SplitIn] = []
    excluded_participant_ids: List[str] = []


class ExpenseResponse(BaseModel):
    id: str
    group_id: str
    description: str
    amount_cents: int
    amount: float
    currency: str
    date: date_type
    paid_by: str
    paid_by_name: str
    split_type: SplitType
    splits: List[SplitOut]
    kind: ExpenseKind
    created_at: datetime
    updated_at: datetime
