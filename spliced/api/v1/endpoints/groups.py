from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from spliced.api.deps import get_group_or_404
from spliced.db.mongo import get_db
from spliced.models.group import Group, Participant
from spliced.repositories.expense_repo import ExpenseRepository
from spliced.repositories.group_repo import GroupRepository
from spliced.schemas.group import (
    GroupCreate,
    GroupResponse,
    GroupSummaryResponse,
    GroupUpdate,
    ParticipantResponse,
    ParticipantsAdd,
)
from spliced.services.balance_service import total_spent
from spliced.utils.money import from_cents

router = APIRouter(prefix="/groups", tags=["groups"])


def _to_participant_response(participant: Participant) -> ParticipantResponse:
    return ParticipantResponse(
        id=participant.id,
        first_name=participant.first_name,
        last_name=participant.last_name,
        display_name=participant.display_name,
        is_removed=participant.is_removed,
        joined_at=participant.joined_at
    )


def _to_group_response(group: Group) -> GroupResponse:
    """Convert Group model to GroupResponse schema."""
    return GroupResponse(
        id=str(group.id),
        name=group.name,
        currency=group.currency,
        header_image=group.header_image,
        header_image_attribution=group.header_image_attribution,
        color_index=group.color_index,
        access_code=group.access_code,
        participants=[_to_participant_response(p) for p in group.participants],
        total_expenditure_cents=group.total_expenditure_cents,
        total_expenditure=float(from_cents(group.total_expenditure_cents)),
        created_at=group.created_at,
        updated_at=group.updated_at
    )


@router.post("", response_model=GroupResponse, status_code=status.HTTP_201_CREATED)
async def create_group(group_data: GroupCreate, db = Depends(get_db)):
    """Create a group, optionally with its first participants."""
    group = await GroupRepository(db).create_group(group_data)
    return _to_group_response(group)


@router.get("", response_model=List[GroupResponse])
async def list_groups(db = Depends(get_db)):
    """List all groups, newest first."""
    groups = await GroupRepository(db).list_groups()
    return [_to_group_response(g) for g in groups]


@router.get("/access/{access_code}", response_model=GroupResponse)
async def get_group_by_access_code(access_code: str, db = Depends(get_db)):
    """Join flow: look a group up by its access code."""
    group = await GroupRepository(db).get_group_by_access_code(access_code)
    if not group:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No group found with that access code"
        )
    return _to_group_response(group)


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group: Group = Depends(get_group_or_404)):
    return _to_group_response(group)


@router.patch("/{group_id}", response_model=GroupResponse)
async def update_group(group_id: str, group_data: GroupUpdate, db = Depends(get_db)):
    """Update name, currency, header image or colour."""
    group = await GroupRepository(db).update_group(group_id, group_data)
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return _to_group_response(group)


@router.delete("/{group_id}")
async def delete_group(group_id: str, db = Depends(get_db)):
    """Soft delete a group."""
    deleted = await GroupRepository(db).soft_delete_group(group_id)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return {"success": True}


@router.post("/{group_id}/participants", response_model=GroupResponse)
async def add_participants(group_id: str, payload: ParticipantsAdd, db = Depends(get_db)):
    """Add participants; entries without both names are ignored."""
    if all(p.is_blank() for p in payload.participants):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each participant needs a first and last name"
        )

    group = await GroupRepository(db).add_participants(group_id, payload.participants)
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Group not found")
    return _to_group_response(group)


@router.delete("/{group_id}/participants/{participant_id}", response_model=GroupResponse)
async def remove_participant(group_id: str, participant_id: str, db = Depends(get_db)):
    """Remove a participant. Their expense history and balance are kept."""
    group = await GroupRepository(db).remove_participant(group_id, participant_id)
    if not group:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Participant not found")
    return _to_group_response(group)


@router.get("/{group_id}/summary", response_model=GroupSummaryResponse)
async def get_group_summary(group: Group = Depends(get_group_or_404), db = Depends(get_db)):
    """Totals computed from the ledger; settlements are not counted as spending."""
    ledger = await ExpenseRepository(db).get_ledger(group.id)
    spent = total_spent(ledger)
    settlement_count = sum(1 for e in ledger if e.is_settlement)

    return GroupSummaryResponse(
        group_id=str(group.id),
        currency=group.currency,
        total_spent_cents=spent,
        total_spent=float(from_cents(spent)),
        expense_count=len(ledger) - settlement_count,
        settlement_count=settlement_count,
        participant_count=len(group.active_participants())
    )
