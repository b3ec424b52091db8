from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from spliced.api.deps import get_group_or_404
from spliced.core.config import settings
from spliced.db.mongo import get_db
from spliced.models.expense import Expense, ExpenseKind
from spliced.models.group import Group
from spliced.repositories.expense_repo import ExpenseRepository
from spliced.schemas.expense import ExpenseCreate, ExpenseResponse, SplitOut
from spliced.utils.expense_validation import ExpenseValidationError
from spliced.utils.money import from_cents

router = APIRouter(prefix="/groups/{group_id}/expenses", tags=["expenses"])


def to_expense_response(expense: Expense, group: Group) -> ExpenseResponse:
    """Convert Expense model to ExpenseResponse schema."""
    names = group.display_names()
    return ExpenseResponse(
        id=str(expense.id),
        group_id=str(expense.group_id),
        description=expense.description,
        amount_cents=expense.amount_cents,
        amount=float(from_cents(expense.amount_cents)),
        currency=expense.currency,
        date=expense.date,
        paid_by=expense.paid_by,
        paid_by_name=names.get(expense.paid_by, expense.paid_by),
        split_type=expense.split_type,
        splits=[
            SplitOut(
                participant_id=split.participant_id,
                participant_name=names.get(split.participant_id, split.participant_id),
                amount_cents=split.amount_cents
            )
            for split in expense.splits
        ],
        kind=expense.kind,
        created_at=expense.created_at,
        updated_at=expense.updated_at
    )


@router.post("", response_model=ExpenseResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense_in: ExpenseCreate,
    group: Group = Depends(get_group_or_404),
    db = Depends(get_db)
):
    """Add an expense to the group's ledger."""
    try:
        expense = await ExpenseRepository(db).create_expense(group, expense_in)
    except ExpenseValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc)
        )
    return to_expense_response(expense, group)


@router.get("", response_model=List[ExpenseResponse])
async def list_expenses(
    kind: Optional[ExpenseKind] = Query(None, description="Only expenses or only settlements"),
    skip: int = Query(0, ge=0),
    limit: int = Query(settings.EXPENSES_PAGE_SIZE, ge=1, le=500),
    group: Group = Depends(get_group_or_404),
    db = Depends(get_db)
):
    """List expenses, newest first."""
    expenses = await ExpenseRepository(db).list_expenses(group.id, kind=kind, skip=skip, limit=limit)
    return [to_expense_response(e, group) for e in expenses]


@router.get("/{expense_id}", response_model=ExpenseResponse)
async def get_expense(
    expense_id: str,
    group: Group = Depends(get_group_or_404),
    db = Depends(get_db)
):
    expense = await ExpenseRepository(db).get_expense(group.id, expense_id)
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return to_expense_response(expense, group)


@router.put("/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    expense_in: ExpenseCreate,
    group: Group = Depends(get_group_or_404),
    db = Depends(get_db)
):
    """Replace an expense."""
    try:
        expense = await ExpenseRepository(db).update_expense(group, expense_id, expense_in)
    except ExpenseValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc)
        )
    if not expense:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return to_expense_response(expense, group)


@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: str,
    group: Group = Depends(get_group_or_404),
    db = Depends(get_db)
):
    """Soft delete an expense."""
    deleted = await ExpenseRepository(db).soft_delete_expense(group, expense_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Expense not found")
    return {"success": True}
