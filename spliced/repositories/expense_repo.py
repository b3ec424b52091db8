"""
ExpenseRepository - a group's ledger.

Every write keeps the group's total_expenditure_cents in step:
- add regular expense      -> +amount
- replace regular expense  -> +(new - old)
- delete regular expense   -> -amount
Settlement expenses never touch the total.
"""

import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from spliced.models.expense import SETTLEMENT_MARKER, Expense, ExpenseKind
from spliced.models.group import Group
from spliced.repositories.group_repo import GroupRepository
from spliced.schemas.expense import ExpenseCreate
from spliced.services.split_service import build_splits

logger = logging.getLogger(__name__)


class ExpenseRepository:
    """Repository for group expenses."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.expenses
        self.groups = GroupRepository(db)

    async def create_expense(self, group: Group, expense_in: ExpenseCreate) -> Expense:
        """
        Validate and insert a regular expense.

        Raises ExpenseValidationError if the splits are invalid.
        """
        splits = build_splits(expense_in, group.active_participant_ids())

        now = datetime.now(timezone.utc)
        doc = {
            "group_id": group.id,
            "description": expense_in.description.strip(),
            "amount_cents": expense_in.amount_cents,
            "currency": group.currency,
            "date": expense_in.date.isoformat(),
            "paid_by": expense_in.paid_by,
            "split_type": expense_in.split_type.value,
            "splits": [s.model_dump() for s in splits],
            "kind": ExpenseKind.EXPENSE.value,
            "is_deleted": False,
            "created_at": now,
            "updated_at": now
        }

        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        await self.groups.increment_total(group.id, expense_in.amount_cents)

        logger.info("Added expense %s to group %s (%d cents)", result.inserted_id, group.id, expense_in.amount_cents)
        return Expense(**doc)

    async def insert_settlement(self, settlement_doc: dict) -> Expense:
        """Insert a settlement expense built by the settlement service."""
        now = datetime.now(timezone.utc)
        doc = {**settlement_doc, "is_deleted": False, "created_at": now, "updated_at": now}

        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return Expense(**doc)

    async def get_expense(self, group_id: ObjectId, expense_id: str) -> Optional[Expense]:
        """Get one expense of a group."""
        if not ObjectId.is_valid(expense_id):
            return None

        doc = await self.collection.find_one({
            "_id": ObjectId(expense_id),
            "group_id": group_id,
            "is_deleted": False
        })
        if doc:
            return Expense(**doc)
        return None

    async def list_expenses(
        self,
        group_id: ObjectId,
        kind: Optional[ExpenseKind] = None,
        skip: int = 0,
        limit: Optional[int] = None
    ) -> List[Expense]:
        """List a group's expenses, newest first."""
        query = {"group_id": group_id, "is_deleted": False}
        if kind is not None:
            query.update(_kind_filter(kind))

        cursor = self.collection.find(query).sort("created_at", -1).skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        docs = await cursor.to_list(None)
        return [Expense(**doc) for doc in docs]

    async def get_ledger(self, group_id: ObjectId) -> List[Expense]:
        """Full ledger in insertion order, for balance computation."""
        cursor = self.collection.find({
            "group_id": group_id,
            "is_deleted": False
        }).sort("created_at", 1)
        docs = await cursor.to_list(None)
        return [Expense(**doc) for doc in docs]

    async def update_expense(
        self, group: Group, expense_id: str, expense_in: ExpenseCreate
    ) -> Optional[Expense]:
        """
        Replace an expense's fields, keeping its kind and created_at.

        Participants already on the old expense stay valid even if they
        have since been removed from the group.
        """
        old = await self.get_expense(group.id, expense_id)
        if old is None:
            return None

        allowed = group.active_participant_ids()
        for pid in [old.paid_by] + [s.participant_id for s in old.splits]:
            if pid not in allowed:
                allowed.append(pid)
        splits = build_splits(expense_in, allowed)

        result = await self.collection.find_one_and_update(
            {"_id": old.id, "is_deleted": False},
            {"$set": {
                "description": expense_in.description.strip(),
                "amount_cents": expense_in.amount_cents,
                "date": expense_in.date.isoformat(),
                "paid_by": expense_in.paid_by,
                "split_type": expense_in.split_type.value,
                "splits": [s.model_dump() for s in splits],
                "updated_at": datetime.now(timezone.utc)
            }},
            return_document=ReturnDocument.AFTER
        )
        if not result:
            return None

        if not old.is_settlement:
            await self.groups.increment_total(group.id, expense_in.amount_cents - old.amount_cents)
        return Expense(**result)

    async def soft_delete_expense(self, group: Group, expense_id: str) -> bool:
        """Soft delete an expense and roll back its share of the total."""
        old = await self.get_expense(group.id, expense_id)
        if old is None:
            return False

        result = await self.collection.update_one(
            {"_id": old.id, "is_deleted": False},
            {"$set": {
                "is_deleted": True,
                "updated_at": datetime.now(timezone.utc)
            }}
        )
        if result.modified_count == 0:
            return False

        if not old.is_settlement:
            await self.groups.increment_total(group.id, -old.amount_cents)
        return True


def _kind_filter(kind: ExpenseKind) -> dict:
    """Match `kind`, including legacy documents that only carry it in the description."""
    marker = re.compile(re.escape(SETTLEMENT_MARKER), re.IGNORECASE)
    legacy_description = marker if kind == ExpenseKind.SETTLEMENT else {"$not": marker}
    return {"$or": [
        {"kind": kind.value},
        {"kind": {"$exists": False}, "description": legacy_description}
    ]}
