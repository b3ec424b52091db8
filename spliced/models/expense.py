"""
Expense model - one entry of a group's ledger.

Design principles:
- All amounts in integer cents
- Splits always sum to amount_cents (checked before insert)
- Settlement payments are stored as expenses with kind=settlement
- paid_by and splits reference Participant.id, never display names
"""

from typing import Any, List
from datetime import date as date_type
from enum import Enum

from pydantic import BaseModel, model_validator

from spliced.models.base import MongoModel, PyObjectId

SETTLEMENT_MARKER = "settlement"


class SplitType(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"


class ExpenseKind(str, Enum):
    EXPENSE = "expense"
    SETTLEMENT = "settlement"


class Split(BaseModel):
    participant_id: str
    amount_cents: int


class Expense(MongoModel):
    group_id: PyObjectId
    description: str
    amount_cents: int
    currency: str = "USD"
    date: date_type
    paid_by: str
    split_type: SplitType = SplitType.EQUAL
    splits: List[Split] = []
    kind: ExpenseKind = ExpenseKind.EXPENSE

    @model_validator(mode="before")
    @classmethod
    def infer_legacy_kind(cls, data: Any) -> Any:
        # Documents written before `kind` existed were tagged by description
        if isinstance(data, dict) and "kind" not in data:
            description = str(data.get("description", ""))
            if SETTLEMENT_MARKER in description.lower():
                data = {**data, "kind": ExpenseKind.SETTLEMENT}
        return data

    @property
    def is_settlement(self) -> bool:
        return self.kind == ExpenseKind.SETTLEMENT
