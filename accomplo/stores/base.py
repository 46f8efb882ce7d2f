"""
Persistence + identity behind one interface.

Two implementations exist: ``SqlStore`` (relational tables through
SQLAlchemy) and ``LocalStore`` (a JSON key-value file laid out like browser
local storage). Routers only ever talk to ``Store``.
"""
from abc import ABC, abstractmethod

from ..schemas import AccomplishmentOut, ProfileOut, UserOut


class StoreError(Exception):
    pass

class UserExists(StoreError):
    def __init__(self, message: str = "User already exists with this email"):
        super().__init__(message)

class InvalidCredentials(StoreError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)

class NotFound(StoreError):
    pass


PROFILE_FIELDS = ("display_name", "avatar_url")


def default_display_name(email: str) -> str:
    return email.split("@")[0]


class Store(ABC):
    name = "base"

    # ---------- identity ----------
    @abstractmethod
    def sign_up(self, email: str, password: str, display_name: str | None = None,
                avatar_url: str | None = None) -> UserOut: ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> UserOut: ...

    @abstractmethod
    def get_user(self, user_id: str) -> UserOut | None: ...

    @abstractmethod
    def update_password(self, user: UserOut, new_password: str) -> None: ...

    # ---------- profile ----------
    @abstractmethod
    def get_profile(self, user: UserOut) -> ProfileOut:
        """Return the user's profile, creating it on first access."""

    @abstractmethod
    def update_profile(self, user: UserOut, changes: dict) -> ProfileOut:
        """Apply ``changes`` (display_name and/or avatar_url) and bump updated_at."""

    # ---------- accomplishments ----------
    @abstractmethod
    def list_accomplishments(self, profile: ProfileOut) -> list[AccomplishmentOut]:
        """Newest first."""

    @abstractmethod
    def create_accomplishment(self, profile: ProfileOut, content: str, type: str,
                              category: str) -> AccomplishmentOut: ...

    @abstractmethod
    def delete_accomplishment(self, profile: ProfileOut, accomplishment_id: str) -> None: ...

    def close(self) -> None:
        pass
