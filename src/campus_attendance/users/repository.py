from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Optional, Protocol

from .model import ProfileView, RoleProfile, User


class UserWriteTransaction(Protocol):
    """Writes staged inside one database transaction.

    Everything done through one instance commits together or not at all.
    """

    def insert_user(self, user: User) -> None:
        raise NotImplementedError

    def insert_profile(self, profile: RoleProfile) -> None:
        raise NotImplementedError

    def update_user(self, user: User) -> None:
        raise NotImplementedError

    def update_profile(self, profile: RoleProfile) -> None:
        raise NotImplementedError


class UserRepository(Protocol):
    """Repository interface for users and their role profiles.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def email_exists(self, email: str) -> bool:
        raise NotImplementedError

    def user_id_exists(self, user_id: int) -> bool:
        raise NotImplementedError

    def get_profile_view(self, user_id: int) -> Optional[ProfileView]:
        raise NotImplementedError

    def transaction(self) -> AbstractContextManager[UserWriteTransaction]:
        """Open a scoped transaction: commit on normal exit, roll back on any exception."""
        raise NotImplementedError
