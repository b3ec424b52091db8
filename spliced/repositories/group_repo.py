import logging
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from spliced.core.config import settings
from spliced.models.group import Group, Participant
from spliced.schemas.group import GroupCreate, GroupUpdate, ParticipantCreate
from spliced.utils.access_code import generate_access_code, normalize_access_code

logger = logging.getLogger(__name__)

ACCESS_CODE_ATTEMPTS = 5


class GroupRepository:
    """Group database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db.groups

    async def create_group(self, group_data: GroupCreate) -> Group:
        """Create a group with a fresh access code."""
        now = datetime.now(timezone.utc)
        group_dict = {
            "name": group_data.name.strip(),
            "currency": (group_data.currency or settings.DEFAULT_CURRENCY).upper(),
            "header_image": "",
            "header_image_attribution": "",
            "color_index": None,
            "participants": [
                p.model_dump() for p in _new_participants(group_data.participants)
            ],
            "total_expenditure_cents": 0,
            "is_deleted": False,
            "created_at": now,
            "updated_at": now
        }

        # access_code has a unique index; regenerate on collision
        for attempt in range(ACCESS_CODE_ATTEMPTS):
            group_dict["access_code"] = generate_access_code()
            try:
                result = await self.collection.insert_one(group_dict)
                break
            except DuplicateKeyError:
                group_dict.pop("_id", None)
                logger.warning("Access code collision on attempt %d", attempt + 1)
        else:
            raise RuntimeError("Could not allocate a unique access code")

        group_dict["_id"] = result.inserted_id
        logger.info("Created group %s (%s)", result.inserted_id, group_dict["name"])
        return Group(**group_dict)

    async def get_group(self, group_id: str) -> Optional[Group]:
        """Get a group by id."""
        if not ObjectId.is_valid(group_id):
            return None

        doc = await self.collection.find_one({
            "_id": ObjectId(group_id),
            "is_deleted": False
        })
        if doc:
            return Group(**doc)
        return None

    async def get_group_by_access_code(self, access_code: str) -> Optional[Group]:
        """Find a group by its (case-insensitive) access code."""
        doc = await self.collection.find_one({
            "access_code": normalize_access_code(access_code),
            "is_deleted": False
        })
        if doc:
            return Group(**doc)
        return None

    async def list_groups(self) -> List[Group]:
        """List groups, newest first."""
        cursor = self.collection.find({"is_deleted": False}).sort("created_at", -1)
        groups = await cursor.to_list(None)
        return [Group(**doc) for doc in groups]

    async def update_group(self, group_id: str, update_data: GroupUpdate) -> Optional[Group]:
        """Update group settings."""
        if not ObjectId.is_valid(group_id):
            return None

        updates = update_data.model_dump(exclude_unset=True)
        if not updates:
            return await self.get_group(group_id)
        if updates.get("currency"):
            updates["currency"] = updates["currency"].upper()

        updates["updated_at"] = datetime.now(timezone.utc)
        result = await self.collection.find_one_and_update(
            {"_id": ObjectId(group_id), "is_deleted": False},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Group(**result)
        return None

    async def soft_delete_group(self, group_id: str) -> bool:
        """Soft delete a group."""
        if not ObjectId.is_valid(group_id):
            return False

        result = await self.collection.update_one(
            {"_id": ObjectId(group_id), "is_deleted": False},
            {"$set": {
                "is_deleted": True,
                "updated_at": datetime.now(timezone.utc)
            }}
        )
        return result.modified_count > 0

    async def add_participants(
        self, group_id: str, participants: List[ParticipantCreate]
    ) -> Optional[Group]:
        """Append participants; entries with blank names are skipped."""
        if not ObjectId.is_valid(group_id):
            return None

        new_participants = _new_participants(participants)
        if not new_participants:
            return await self.get_group(group_id)

        result = await self.collection.find_one_and_update(
            {"_id": ObjectId(group_id), "is_deleted": False},
            {
                "$push": {"participants": {"$each": [p.model_dump() for p in new_participants]}},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            },
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Group(**result)
        return None

    async def remove_participant(self, group_id: str, participant_id: str) -> Optional[Group]:
        """
        Soft-remove a participant.

        The participant stays in the document so expenses that reference
        them keep resolving to a name and their balance stays visible.
        """
        if not ObjectId.is_valid(group_id):
            return None

        result = await self.collection.find_one_and_update(
            {
                "_id": ObjectId(group_id),
                "is_deleted": False,
                "participants": {"$elemMatch": {"id": participant_id, "is_removed": False}}
            },
            {"$set": {
                "participants.$.is_removed": True,
                "updated_at": datetime.now(timezone.utc)
            }},
            return_document=ReturnDocument.AFTER
        )
        if result:
            return Group(**result)
        return None

    async def increment_total(self, group_id: ObjectId, delta_cents: int) -> None:
        """Adjust the running total of non-settlement spending."""
        if delta_cents == 0:
            return
        await self.collection.update_one(
            {"_id": group_id},
            {
                "$inc": {"total_expenditure_cents": delta_cents},
                "$set": {"updated_at": datetime.now(timezone.utc)}
            }
        )


def _new_participants(participants: List[ParticipantCreate]) -> List[Participant]:
    return [
        Participant(first_name=p.first_name.strip(), last_name=p.last_name.strip())
        for p in participants
        if not p.is_blank()
    ]
