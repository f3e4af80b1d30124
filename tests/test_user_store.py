"""Admin user store: listing by role, partial updates and deletion."""

import pytest

from eventdesk.stores.user_store import AdminUserStore


def user_json(user_id, role="ATTENDEE", **extra):
    data = {
        "id": user_id,
        "email": f"user{user_id}@example.com",
        "fullName": f"User {user_id}",
        "role": role,
        "balance": 50000,
    }
    data.update(extra)
    return data


@pytest.fixture
def store(api_client):
    return AdminUserStore(api_client)


class TestFetch:
    def test_fetch_all_users(self, backend, store):
        backend.add("GET", "/api/auth/admin/users", body=[user_json("1"), user_json("2", "ADMIN")])

        users, message = store.fetch_users()

        assert [u.role for u in users] == ["ATTENDEE", "ADMIN"]
        assert message == "Found 2 users"

    def test_fetch_by_role(self, backend, store):
        backend.add("GET", "/api/auth/admin/users/role/ORGANIZER", body=[user_json("3", "ORGANIZER")])

        users, _ = store.fetch_users("ORGANIZER")

        assert [u.id for u in users] == ["3"]

    def test_invalid_role_makes_no_request(self, backend, store):
        users, message = store.fetch_users("SUPERUSER")

        assert users is None
        assert message == "Invalid role 'SUPERUSER'"
        assert backend.calls == []


class TestUpdate:
    def test_only_changed_fields_are_sent(self, backend, store):
        backend.add("PUT", "/api/auth/admin/users/1", body=user_json("1", "ORGANIZER"))

        user, message = store.update_user(
            "1", {"email": None, "fullName": "", "role": "ORGANIZER", "password": ""}
        )

        assert user.role == "ORGANIZER"
        assert message == "User updated successfully"
        assert backend.calls[0].json == {"role": "ORGANIZER"}

    def test_update_replaces_cached_user(self, backend, store):
        backend.add("GET", "/api/auth/admin/users", body=[user_json("1"), user_json("2")])
        backend.add("PUT", "/api/auth/admin/users/2", body=user_json("2", balance=0))
        store.fetch_users()

        store.update_user("2", {"balance": 0})

        assert [u.balance for u in store.users] == [50000, 0]
        assert backend.calls[-1].json == {"balance": 0}

    @pytest.mark.parametrize(
        "changes, expected",
        [
            ({}, "Nothing to update"),
            ({"balance": -1}, "Balance cannot be negative"),
            ({"password": "abc"}, "Password must be at least 6 characters long"),
            ({"role": "ROOT"}, "Invalid role 'ROOT'"),
        ],
    )
    def test_invalid_update_makes_no_request(self, backend, store, changes, expected):
        user, message = store.update_user("1", changes)

        assert user is None
        assert message == expected
        assert backend.calls == []


class TestDelete:
    def test_delete_requires_confirmation(self, backend, store):
        success, _ = store.delete_user("1")
        assert not success
        assert backend.calls == []

    def test_delete_removes_cached_user(self, backend, store):
        backend.add("GET", "/api/auth/admin/users", body=[user_json("1"), user_json("2")])
        backend.add("DELETE", "/api/auth/admin/users/1", status=204)
        store.fetch_users()

        success, message = store.delete_user("1", confirmed=True)

        assert success
        assert message == "User deleted successfully"
        assert [u.id for u in store.users] == ["2"]
