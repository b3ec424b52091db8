from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from spliced.db.mongo import get_db
from spliced.main import app
from spliced.models.expense import Expense

ALICE = "p-alice"
BOB = "p-bob"
CAROL = "p-carol"


def make_cursor(docs):
    """Motor-like cursor whose chained calls return itself."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def mock_db():
    """Fixture for a mocked Motor database with groups and expenses collections."""
    db = MagicMock()
    for name in ("groups", "expenses"):
        collection = getattr(db, name)
        collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
        collection.find_one = AsyncMock(return_value=None)
        collection.find_one_and_update = AsyncMock(return_value=None)
        collection.update_one = AsyncMock(return_value=MagicMock(modified_count=1))
        collection.find = MagicMock(return_value=make_cursor([]))
    return db


@pytest.fixture
def client(mock_db):
    """Fixture for FastAPI test client backed by the mocked database."""
    app.dependency_overrides[get_db] = lambda: mock_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def group_doc():
    """Raw group document with three participants."""
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "name": "Lisbon Trip",
        "currency": "EUR",
        "header_image": "",
        "header_image_attribution": "",
        "color_index": None,
        "access_code": "AB12CD",
        "participants": [
            {"id": ALICE, "first_name": "Alice", "last_name": "Smith", "is_removed": False, "joined_at": now},
            {"id": BOB, "first_name": "Bob", "last_name": "Jones", "is_removed": False, "joined_at": now},
            {"id": CAROL, "first_name": "Carol", "last_name": "White", "is_removed": False, "joined_at": now},
        ],
        "total_expenditure_cents": 0,
        "is_deleted": False,
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def expense_factory():
    """Build Expense models; splits is a {participant_id: cents} mapping."""
    def _make(paid_by, amount_cents, splits, description="Dinner", kind=None, group_id=None):
        data = {
            "_id": ObjectId(),
            "group_id": group_id or ObjectId(),
            "description": description,
            "amount_cents": amount_cents,
            "date": date(2024, 5, 1),
            "paid_by": paid_by,
            "split_type": "custom",
            "splits": [
                {"participant_id": pid, "amount_cents": cents}
                for pid, cents in splits.items()
            ],
        }
        if kind is not None:
            data["kind"] = kind
        return Expense(**data)

    return _make
