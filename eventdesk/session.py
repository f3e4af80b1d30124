"""Authentication against the ticketing backend and role checks."""

import logging
from typing import Any, Dict, Optional, Tuple

from eventdesk.api_client import TicketingApiClient
from eventdesk.errors import ApiError, AuthorizationError
from eventdesk.models import Role, UserProfile
from eventdesk.validators import validate_email, validate_password


class Session:
    """Bearer token plus the user it belongs to."""

    def __init__(
        self,
        client: TicketingApiClient,
        token: Optional[str] = None,
        role: Optional[str] = None,
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self._base_client = client
        self.client = client.for_token(token)
        self.user: Optional[UserProfile] = None
        self.error: Optional[str] = None
        # Role remembered from an earlier login, used until /api/auth/me is loaded.
        self._known_role = role

    @property
    def token(self) -> Optional[str]:
        return self.client.token

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def _set_token(self, token: Optional[str]) -> None:
        self.client = self._base_client.for_token(token)

    def login(self, email: str, password: str) -> Tuple[Optional[UserProfile], str]:
        """Exchange credentials for a token, then load the user it belongs to."""
        self.error = None
        if not email or not password:
            self.error = "Email and password are required"
            return None, self.error
        try:
            data = self._base_client.post(
                "/api/auth/login", payload={"email": email, "password": password}
            )
        except ApiError as e:
            self.error = e.message or "Login failed. Check your email and password."
            self.logger.warning(f"Login failed for {email}: {self.error}")
            return None, self.error

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            self.error = "Login response did not include a token"
            self.logger.error(f"{self.error} for {email}")
            return None, self.error

        self._set_token(token)
        self.logger.info(f"Logged in as {email}")
        return self.fetch_current_user()

    def register(
        self, full_name: str, email: str, password: str, role: str = Role.ATTENDEE.value
    ) -> Tuple[bool, str]:
        self.error = None
        if not (full_name or "").strip():
            self.error = "Full name is required"
            return False, self.error
        for is_valid, message in (validate_email(email), validate_password(password)):
            if not is_valid:
                self.error = message
                return False, message
        payload: Dict[str, Any] = {
            "fullName": full_name.strip(),
            "email": email,
            "password": password,
            "role": role,
        }
        try:
            self._base_client.post("/api/auth/register", payload=payload)
        except ApiError as e:
            self.error = e.message or "Registration failed. Please try again."
            self.logger.warning(f"Registration failed for {email}: {self.error}")
            return False, self.error
        self.logger.info(f"Registered new {role} account for {email}")
        return True, "Registration successful"

    def fetch_current_user(self) -> Tuple[Optional[UserProfile], str]:
        """Load /api/auth/me. A 401 means the token is dead and it is dropped."""
        self.error = None
        if not self.token:
            self.error = "Not logged in"
            return None, self.error
        try:
            data = self.client.get("/api/auth/me")
        except AuthorizationError as e:
            self.error = e.message
            if e.is_unauthenticated:
                self.logger.info("Stored token rejected by backend; clearing session.")
                self.logout()
            return None, self.error
        except ApiError as e:
            self.error = e.message
            return None, self.error

        self.user = UserProfile.from_dict(data or {})
        return self.user, "User loaded"

    @property
    def role(self) -> Optional[str]:
        if self.user is not None and self.user.role:
            return self.user.role
        return self._known_role if self.is_authenticated else None

    def logout(self) -> None:
        self._set_token(None)
        self.user = None
        self._known_role = None

    def has_role(self, *roles: str) -> bool:
        if self.role is None:
            return False
        return self.role in {Role(r).value for r in roles}

    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    def is_organizer(self) -> bool:
        return self.has_role(Role.ORGANIZER)

    def is_attendee(self) -> bool:
        return self.has_role(Role.ATTENDEE)

    def require_role(self, *roles: str) -> Tuple[bool, str]:
        """Gate an operation on role; distinguishes 'log in' from 'forbidden'."""
        if self.role is None:
            return False, "Please log in first"
        if not self.has_role(*roles):
            allowed = ", ".join(Role(r).value for r in roles)
            return False, f"This action requires one of these roles: {allowed}"
        return True, ""
