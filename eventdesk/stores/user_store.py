"""Admin management of backend user accounts."""

from typing import Any, Dict, List, Optional, Tuple

from eventdesk.errors import ApiError
from eventdesk.models import Role, UserProfile
from eventdesk.stores.base import BaseStore
from eventdesk.validators import validate_user_update

ADMIN_USERS_PATH = "/api/auth/admin/users"


class AdminUserStore(BaseStore):
    def __init__(self, client):
        super().__init__(client)
        self.users: List[UserProfile] = []

    def fetch_users(self, role: Optional[str] = None) -> Tuple[Optional[List[UserProfile]], str]:
        if role is not None and role not in [r.value for r in Role]:
            return None, self._reject("role", f"Invalid role '{role}'")
        path = f"{ADMIN_USERS_PATH}/role/{role}" if role else ADMIN_USERS_PATH
        with self._request():
            try:
                data = self.client.get(path)
            except ApiError as e:
                return None, self._fail("Fetching users", e)
        self.users = [UserProfile.from_dict(u) for u in data] if isinstance(data, list) else []
        return self.users, f"Found {len(self.users)} users"

    def fetch_user(self, user_id: str) -> Tuple[Optional[UserProfile], str]:
        with self._request():
            try:
                data = self.client.get(f"{ADMIN_USERS_PATH}/{user_id}")
            except ApiError as e:
                return None, self._fail(f"Fetching user {user_id}", e)
        return UserProfile.from_dict(data or {}), "User loaded"

    def update_user(self, user_id: str, changes: Dict[str, Any]) -> Tuple[Optional[UserProfile], str]:
        """Send only the fields being changed. An empty password means 'keep the current one'."""
        changes = {k: v for k, v in changes.items() if v is not None and v != ""}
        is_valid, message = validate_user_update(changes)
        if not is_valid:
            return None, self._reject("user", message)

        with self._request():
            try:
                data = self.client.put(f"{ADMIN_USERS_PATH}/{user_id}", payload=changes)
            except ApiError as e:
                return None, self._fail(f"Updating user {user_id}", e)

        user = UserProfile.from_dict(data or {})
        self.users = [user if u.id == str(user_id) else u for u in self.users]
        self.logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return user, "User updated successfully"

    def delete_user(self, user_id: str, confirmed: bool = False) -> Tuple[bool, str]:
        if not confirmed:
            return False, self._reject("confirmation", "Deleting a user must be confirmed first")
        with self._request():
            try:
                self.client.delete(f"{ADMIN_USERS_PATH}/{user_id}")
            except ApiError as e:
                return False, self._fail(f"Deleting user {user_id}", e)
        self.users = [u for u in self.users if u.id != str(user_id)]
        self.logger.info(f"Deleted user {user_id}")
        return True, "User deleted successfully"
