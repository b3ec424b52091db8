from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from spliced.api.deps import get_group_or_404
from spliced.api.v1.endpoints.expenses import to_expense_response
from spliced.db.mongo import get_db
from spliced.models.group import Group
from spliced.repositories.expense_repo import ExpenseRepository
from spliced.schemas.expense import ExpenseResponse
from spliced.schemas.settlement import BalanceResponse, SettlementCreate, TransferResponse
from spliced.services.balance_service import compute_balances, to_balance_list
from spliced.services.settlement_service import build_settlement_expense, compute_settlements
from spliced.utils.expense_validation import ExpenseValidationError
from spliced.utils.money import from_cents

router = APIRouter(prefix="/groups/{group_id}", tags=["settlements"])


async def _group_balances(group: Group, db) -> dict:
    ledger = await ExpenseRepository(db).get_ledger(group.id)
    try:
        return compute_balances(ledger, group.active_participant_ids())
    except ExpenseValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc)
        )


@router.get("/balances", response_model=List[BalanceResponse])
async def get_balances(group: Group = Depends(get_group_or_404), db = Depends(get_db)):
    """Net balance per participant, highest first."""
    balances = await _group_balances(group, db)
    names = group.display_names()
    return [
        BalanceResponse(
            participant_id=b.participant_id,
            participant_name=names.get(b.participant_id, b.participant_id),
            amount_cents=b.amount_cents,
            amount=float(from_cents(b.amount_cents))
        )
        for b in to_balance_list(balances)
    ]


@router.get("/settlements", response_model=List[TransferResponse])
async def get_settlements(group: Group = Depends(get_group_or_404), db = Depends(get_db)):
    """Suggested transfers that settle every balance."""
    balances = await _group_balances(group, db)
    names = group.display_names()
    transfers = compute_settlements(to_balance_list(balances))
    return [
        TransferResponse(
            from_participant_id=t.from_participant_id,
            from_name=names.get(t.from_participant_id, t.from_participant_id),
            to_participant_id=t.to_participant_id,
            to_name=names.get(t.to_participant_id, t.to_participant_id),
            amount_cents=t.amount_cents,
            amount=float(from_cents(t.amount_cents))
        )
        for t in transfers
    ]


@router.post("/settlements", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def confirm_settlement(
    settlement_in: SettlementCreate,
    group: Group = Depends(get_group_or_404),
    db = Depends(get_db)
):
    """Record that a transfer was paid. Appends a settlement to the ledger."""
    try:
        settlement_doc = build_settlement_expense(group, settlement_in)
    except ExpenseValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc)
        )

    expense = await ExpenseRepository(db).insert_settlement(settlement_doc)
    return to_expense_response(expense, group)
