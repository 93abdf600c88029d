from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import EmployeeProfile, User


class UserRepository(Protocol):
    """Repository interface for users and their employee profiles.

    Services depend on this interface, never on a concrete database. It also
    satisfies the identifier store used by the employee code generator.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_login(self, login: str) -> Optional[User]:
        """Find a user by e-mail address or employee code."""

        raise NotImplementedError

    def exists_by_employee_code(self, employee_code: str) -> bool:
        raise NotImplementedError

    def find_employee_codes_matching(self, pattern: str) -> Sequence[str]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        employee_code: Optional[str],
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        email_verified_at: Optional[datetime] = None,
    ) -> int:
        """Insert a user; raises ConflictError when e-mail or code is taken."""

        raise NotImplementedError

    def update_user(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        role: Optional[Role] = None,
    ) -> bool:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str, changed_at: datetime) -> bool:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def search(
        self,
        *,
        role: Optional[Role] = None,
        term: Optional[str] = None,
        with_employee_code: bool = False,
        order_by_name: bool = False,
        offset: int = 0,
        limit: int = 15,
    ) -> tuple[Sequence[User], int]:
        """Return one page of users plus the total number of matches."""

        raise NotImplementedError

    def list_employee_ids(self) -> Sequence[int]:
        """Ids of employees that carry an employee code."""

        raise NotImplementedError

    def get_profile(self, user_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def get_profiles(self, user_ids: Sequence[int]) -> Mapping[int, EmployeeProfile]:
        raise NotImplementedError

    def upsert_profile(self, user_id: int, fields: Mapping[str, Any]) -> None:
        raise NotImplementedError
