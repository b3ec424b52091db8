from unittest.mock import AsyncMock, patch
from bson import ObjectId

from spliced.models.expense import Expense


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "Spliced" in response.json()["message"]


def test_create_group(client, mock_db):
    response = client.post(
        "/api/v1/groups",
        json={
            "name": "Beach House",
            "currency": "usd",
            "participants": [
                {"first_name": "Alice", "last_name": "Smith"},
                {"first_name": "Bob", "last_name": "Jones"},
            ]
        }
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Beach House"
    assert data["currency"] == "USD"
    assert len(data["access_code"]) == 6
    assert [p["display_name"] for p in data["participants"]] == ["Alice Smith", "Bob Jones"]
    assert data["total_expenditure"] == 0.0
    mock_db.groups.insert_one.assert_called_once()


def test_create_group_requires_name(client):
    response = client.post("/api/v1/groups", json={"name": ""})

    assert response.status_code == 422


def test_get_group(client, mock_db, group_doc):
    mock_db.groups.find_one = AsyncMock(return_value=group_doc)

    response = client.get(f"/api/v1/groups/{group_doc['_id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == str(group_doc["_id"])
    assert data["access_code"] == "AB12CD"
    assert len(data["participants"]) == 3


def test_get_group_not_found(client):
    response = client.get(f"/api/v1/groups/{ObjectId()}")

    assert response.status_code == 404


def test_get_group_invalid_id(client):
    response = client.get("/api/v1/groups/not-an-id")

    assert response.status_code == 404


def test_get_group_by_access_code(client, mock_db, group_doc):
    mock_db.groups.find_one = AsyncMock(return_value=group_doc)

    response = client.get("/api/v1/groups/access/ab12cd")

    assert response.status_code == 200
    assert response.json()["name"] == "Lisbon Trip"


def test_get_group_by_unknown_access_code(client):
    response = client.get("/api/v1/groups/access/NOPE00")

    assert response.status_code == 404


def test_update_group(client, mock_db, group_doc):
    mock_db.groups.find_one_and_update = AsyncMock(
        return_value={**group_doc, "header_image": "https://img.example/1.jpg"}
    )

    response = client.patch(
        f"/api/v1/groups/{group_doc['_id']}",
        json={"header_image": "https://img.example/1.jpg"}
    )

    assert response.status_code == 200
    assert response.json()["header_image"] == "https://img.example/1.jpg"


def test_update_group_rejects_null_name(client, mock_db, group_doc):
    response = client.patch(
        f"/api/v1/groups/{group_doc['_id']}",
        json={"name": None}
    )

    assert response.status_code == 422
    mock_db.groups.find_one_and_update.assert_not_called()


def test_update_group_clears_color_index(client, mock_db, group_doc):
    mock_db.groups.find_one_and_update = AsyncMock(
        return_value={**group_doc, "color_index": None}
    )

    response = client.patch(
        f"/api/v1/groups/{group_doc['_id']}",
        json={"color_index": None}
    )

    assert response.status_code == 200
    update = mock_db.groups.find_one_and_update.call_args[0][1]
    assert update["$set"]["color_index"] is None


def test_delete_group(client, group_doc):
    response = client.delete(f"/api/v1/groups/{group_doc['_id']}")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_add_participants_rejects_all_blank(client, group_doc):
    response = client.post(
        f"/api/v1/groups/{group_doc['_id']}/participants",
        json={"participants": [{"first_name": "", "last_name": "Doe"}]}
    )

    assert response.status_code == 400


def test_add_participants(client, mock_db, group_doc):
    group_doc["participants"].append(
        {"id": "p-dan", "first_name": "Dan", "last_name": "Brown", "is_removed": False}
    )
    mock_db.groups.find_one_and_update = AsyncMock(return_value=group_doc)

    response = client.post(
        f"/api/v1/groups/{group_doc['_id']}/participants",
        json={"participants": [{"first_name": "Dan", "last_name": "Brown"}]}
    )

    assert response.status_code == 200
    assert response.json()["participants"][-1]["display_name"] == "Dan Brown"


def test_remove_unknown_participant(client, group_doc):
    response = client.delete(f"/api/v1/groups/{group_doc['_id']}/participants/p-nobody")

    assert response.status_code == 404


def test_summary_excludes_settlements(client, mock_db, group_doc):
    mock_db.groups.find_one = AsyncMock(return_value=group_doc)
    common = {"group_id": group_doc["_id"], "currency": "EUR", "date": "2024-05-01", "split_type": "custom"}
    ledger = [
        Expense(
            description="Hotel", amount_cents=10000, paid_by="p-alice",
            splits=[{"participant_id": "p-bob", "amount_cents": 10000}], **common
        ),
        Expense(
            description="Settlement payment", amount_cents=4000, paid_by="p-bob",
            splits=[{"participant_id": "p-alice", "amount_cents": 4000}], kind="settlement", **common
        ),
    ]

    with patch(
        "spliced.repositories.expense_repo.ExpenseRepository.get_ledger",
        new_callable=AsyncMock
    ) as mock_ledger:
        mock_ledger.return_value = ledger
        response = client.get(f"/api/v1/groups/{group_doc['_id']}/summary")

    assert response.status_code == 200
    data = response.json()
    assert data["total_spent_cents"] == 10000
    assert data["total_spent"] == 100.0
    assert data["expense_count"] == 1
    assert data["settlement_count"] == 1
    assert data["participant_count"] == 3
