from realm_users_export.config import date_to_epoch_seconds
from realm_users_export.transform import (
    normalize_pending_user,
    normalize_pending_users,
    normalize_user,
    normalize_users,
)


def test_normalize_user_projects_fields():
    record = {
        "_id": "u1",
        "data": {"email": "a@x.com"},
        "creation_date": 1600000000,
        "identities": [{"provider_type": "local-userpass"}],
    }

    assert normalize_user(record) == {
        "id": "u1",
        "email": "a@x.com",
        "createdAt": 1600000000,
        "status": "active",
    }


def test_normalize_user_without_data():
    user = normalize_user({"_id": "u1", "creation_date": 1})
    assert user["email"] is None
    assert user["status"] == "active"


def test_normalize_pending_user_uses_first_login_id():
    record = {"_id": "p1", "login_ids": [{"id": "p@x.com", "id_type": "email"}, {"id": "other"}]}

    assert normalize_pending_user(record, 1606780800) == {
        "id": "p1",
        "email": "p@x.com",
        "createdAt": 1606780800,
        "status": "pending",
    }


def test_normalize_pending_user_without_login_ids():
    assert normalize_pending_user({"_id": "p1", "login_ids": []}, 0)["email"] is None


def test_pending_users_share_the_supplied_date():
    created_at = date_to_epoch_seconds("2020-12-01")
    records = [
        {"_id": str(i), "login_ids": [{"id": f"user{i}@x.com"}], "creation_date": i}
        for i in range(5)
    ]

    pending = normalize_pending_users(records, created_at)

    assert {user["createdAt"] for user in pending} == {1606780800}
    assert [user["id"] for user in pending] == ["0", "1", "2", "3", "4"]


def test_normalize_users_keeps_order():
    records = [{"_id": "b", "data": {}}, {"_id": "a", "data": {}}]
    assert [user["id"] for user in normalize_users(records)] == ["b", "a"]
