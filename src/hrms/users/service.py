from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.pagination import Page, PageRequest
from ..common.validators import (
    clean_optional,
    optional_date,
    require_decimal,
    require_email,
    require_max_length,
    require_min_length,
    require_non_empty,
)
from ..core.constants import DEFAULT_PER_PAGE, DIRECTORY_PER_PAGE
from ..core.enums import PresenceStatus, Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    TooManyAttemptsError,
    ValidationError,
)
from ..employees.id_generator import EmployeeIdGenerator, split_full_name
from ..leaves.repository import LeaveRepository
from .model import CreatedEmployee, User, UserWithProfile
from .passwords import PasswordPolicy, generate_password
from .repository import UserRepository
from .throttle import LoginThrottle

logger = logging.getLogger(__name__)

# field -> max length, for free-text profile fields
_PROFILE_TEXT_LIMITS = {"phone": 20, "address": 500, "department": 100, "designation": 100}


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    employee_code: Optional[str]
    name: str
    email: str
    role: Role
    requires_password_change: bool = False


def _parse_role(value: Any) -> Role:
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        raise ValidationError("The selected role is invalid.", errors={"role": ["The selected role is invalid."]})


def _require_name(value: Optional[str]) -> str:
    name = require_non_empty(value, "name")
    return require_min_length(name, "name", 3)


def _clean_profile_text(data: Mapping[str, Any], fields) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for field_name in fields:
        if field_name not in data:
            continue
        value = clean_optional(data.get(field_name))
        if value is None:
            continue
        out[field_name] = require_max_length(value, field_name, _PROFILE_TEXT_LIMITS[field_name])
    return out


class AuthService:
    """Use cases: sign-up, login and password change."""

    def __init__(
        self,
        users: UserRepository,
        id_generator: EmployeeIdGenerator,
        *,
        password_policy: Optional[PasswordPolicy] = None,
        throttle: Optional[LoginThrottle] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._ids = id_generator
        self._policy = password_policy or PasswordPolicy()
        self._throttle = throttle or LoginThrottle(clock=clock)
        self._clock = clock

    def _check_policy(self, password: str, *, email: Optional[str], employee_code: Optional[str]) -> None:
        errors = self._policy.validate(password, email, employee_code)
        if errors:
            raise ValidationError("Password validation failed", errors={"password": errors})

    @staticmethod
    def _check_confirmation(password: str, confirmation: Optional[str]) -> None:
        if confirmation is not None and confirmation != password:
            raise ValidationError(
                "The password confirmation does not match.",
                errors={"password": ["The password confirmation does not match."]},
            )

    def _require_new_email(self, value: Optional[str]) -> str:
        email = require_email(value)
        if self._users.get_by_email(email):
            raise ValidationError("The email has already been taken.", errors={"email": ["The email has already been taken."]})
        return email

    def register_employee(
        self,
        *,
        name: str,
        email: str,
        password: str,
        password_confirmation: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        name = _require_name(name)
        email = self._require_new_email(email)
        require_min_length(password, "password", 8)
        self._check_confirmation(password, password_confirmation)

        parts = split_full_name(name)
        employee_code = self._ids.allocate(parts.first_name, parts.last_name)
        self._check_policy(password, email=email, employee_code=employee_code)

        user_id = self._users.create_user(
            employee_code=employee_code,
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.EMPLOYEE,
        )
        phone = clean_optional(phone)
        if phone:
            self._users.upsert_profile(user_id, {"phone": require_max_length(phone, "phone", 20)})

        logger.info("Employee %s self-registered (user_id=%s)", employee_code, user_id)
        return self._users.get_by_id(user_id)

    def register_admin(
        self,
        *,
        name: str,
        email: str,
        password: str,
        password_confirmation: Optional[str] = None,
        company_name: Optional[str] = None,
    ) -> User:
        name = _require_name(name)
        email = self._require_new_email(email)
        require_min_length(password, "password", 8)
        self._check_confirmation(password, password_confirmation)
        self._check_policy(password, email=email, employee_code=None)
        company_name = require_max_length(clean_optional(company_name), "company_name", 255)

        user_id = self._users.create_user(
            employee_code=None,
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=Role.ADMIN,
            email_verified_at=self._clock(),
        )
        logger.info("Admin account created (user_id=%s, company=%s)", user_id, company_name)
        return self._users.get_by_id(user_id)

    def authenticate(self, login: str, password: str, *, client_key: str) -> SessionUser:
        key = f"login.{client_key}"
        if self._throttle.too_many_attempts(key):
            seconds = self._throttle.available_in(key)
            minutes = -(-seconds // 60)
            raise TooManyAttemptsError(
                f"Too many login attempts. Please try again in {minutes} minutes.",
                retry_after=seconds,
            )

        login = require_non_empty(login, "email")
        require_non_empty(password, "password")

        user = self._users.get_by_login(login)
        try:
            ok = bool(user) and check_password_hash(user.password_hash, password)
        except ValueError:
            # unknown hash format
            ok = False

        if not ok:
            attempts = self._throttle.hit(key)
            logger.warning("Failed login for %r from %s (attempt %d)", login, client_key, attempts)
            raise AuthenticationError("Invalid credentials")

        self._throttle.clear(key)
        logger.info("User %s logged in", user.user_id)
        return SessionUser(
            user_id=user.user_id,
            employee_code=user.employee_code,
            name=user.name,
            email=user.email,
            role=user.role,
            requires_password_change=user.password_changed_at is None,
        )

    def get_user(self, user_id: int) -> User:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("User not found.")
        return user

    def change_password(
        self,
        user_id: int,
        *,
        current_password: str,
        new_password: str,
        password_confirmation: Optional[str] = None,
    ) -> None:
        user = self.get_user(user_id)
        require_non_empty(current_password, "current_password")
        require_min_length(new_password, "password", 8)
        self._check_confirmation(new_password, password_confirmation)

        if not check_password_hash(user.password_hash, current_password):
            raise ValidationError(
                "Current password is incorrect.",
                errors={"current_password": ["The current password you entered is incorrect."]},
            )
        if check_password_hash(user.password_hash, new_password):
            raise ValidationError(
                "New password must be different from current password.",
                errors={"password": ["Please choose a different password."]},
            )
        self._check_policy(new_password, email=user.email, employee_code=user.employee_code)

        self._users.update_password(user_id, password_hash=generate_password_hash(new_password), changed_at=self._clock())
        logger.info("User %s changed password", user_id)


class UserService:
    """Use cases: employee management (admin), directory and own profile."""

    def __init__(
        self,
        users: UserRepository,
        id_generator: EmployeeIdGenerator,
        *,
        attendance: Optional[AttendanceRepository] = None,
        leaves: Optional[LeaveRepository] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._ids = id_generator
        self._attendance = attendance
        self._leaves = leaves
        self._clock = clock

    def _with_profile(self, user: User) -> UserWithProfile:
        return UserWithProfile(user=user, profile=self._users.get_profile(user.user_id))

    def _page(self, users, total: int, req: PageRequest) -> Page[UserWithProfile]:
        profiles = self._users.get_profiles([u.user_id for u in users])
        items = [UserWithProfile(user=u, profile=profiles.get(u.user_id)) for u in users]
        return Page(items=items, total=total, page=req.page, per_page=req.per_page)

    def create_employee(
        self,
        *,
        name: str,
        email: str,
        role: Optional[str] = None,
        company_name: Optional[str] = None,
        phone: Optional[str] = None,
        joining_date: Any = None,
        department: Optional[str] = None,
        designation: Optional[str] = None,
    ) -> CreatedEmployee:
        name = _require_name(name)
        email = require_email(email)
        if self._users.get_by_email(email):
            raise ValidationError("The email has already been taken.", errors={"email": ["The email has already been taken."]})
        user_role = _parse_role(role) if clean_optional(role) else Role.EMPLOYEE
        joined = optional_date(joining_date, "joining_date")

        parts = split_full_name(name)
        employee_code = self._ids.allocate(parts.first_name, parts.last_name, clean_optional(company_name), joined)
        password = generate_password()

        user_id = self._users.create_user(
            employee_code=employee_code,
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=user_role,
            email_verified_at=self._clock(),
        )

        profile = _clean_profile_text(
            {"phone": phone, "department": department, "designation": designation},
            ("phone", "department", "designation"),
        )
        if joined is not None:
            profile["joining_date"] = joined
        if profile:
            self._users.upsert_profile(user_id, profile)

        logger.info("Employee %s created by admin (user_id=%s)", employee_code, user_id)
        user = self._users.get_by_id(user_id)
        return CreatedEmployee(user=user, profile=self._users.get_profile(user_id), password=password)

    def list_users(
        self,
        *,
        role: Optional[str] = None,
        search: Optional[str] = None,
        page: Any = None,
        per_page: Any = None,
    ) -> Page[UserWithProfile]:
        req = PageRequest.of(page, per_page, default_per_page=DEFAULT_PER_PAGE)
        users, total = self._users.search(
            role=_parse_role(role) if clean_optional(role) else None,
            term=clean_optional(search),
            offset=req.offset,
            limit=req.per_page,
        )
        return self._page(users, total, req)

    def get_user(self, user_id: int) -> UserWithProfile:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Employee not found.")
        return self._with_profile(user)

    def update_user(self, user_id: int, data: Mapping[str, Any]) -> UserWithProfile:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Employee not found.")

        name = _require_name(data["name"]) if "name" in data else None
        email = require_email(data["email"]) if "email" in data else None
        if email is not None and email != user.email:
            other = self._users.get_by_email(email)
            if other and other.user_id != user.user_id:
                raise ValidationError("The email has already been taken.", errors={"email": ["The email has already been taken."]})
        role = _parse_role(data["role"]) if "role" in data else None

        profile = _clean_profile_text(data, ("phone", "address", "department", "designation"))
        joined = optional_date(data.get("joining_date"), "joining_date")
        if joined is not None:
            profile["joining_date"] = joined
        if data.get("salary") not in (None, ""):
            profile["salary"] = require_decimal(data["salary"], "salary", min_value=Decimal("0"))

        self._users.update_user(user_id, name=name, email=email, role=role)
        if profile:
            self._users.upsert_profile(user_id, profile)

        logger.info("Employee %s updated", user_id)
        return self.get_user(user_id)

    def delete_user(self, *, current_user_id: int, user_id: int) -> None:
        user = self._users.get_by_id(user_id)
        if not user:
            raise NotFoundError("Employee not found.")
        if int(user_id) == int(current_user_id):
            raise InvalidStateError("You cannot delete your own account.")
        if not self._users.delete_by_id(user_id):
            raise NotFoundError("Employee not found.")
        logger.info("Employee %s deleted by %s", user_id, current_user_id)

    def list_directory(self, *, search: Optional[str] = None, page: Any = None, per_page: Any = None) -> Page[UserWithProfile]:
        req = PageRequest.of(page, per_page, default_per_page=DIRECTORY_PER_PAGE)
        users, total = self._users.search(
            role=Role.EMPLOYEE,
            term=clean_optional(search),
            with_employee_code=True,
            order_by_name=True,
            offset=req.offset,
            limit=req.per_page,
        )
        return self._page(users, total, req)

    def view_directory_entry(self, user_id: int) -> UserWithProfile:
        user = self._users.get_by_id(user_id)
        if not user or user.role != Role.EMPLOYEE or not user.employee_code:
            raise NotFoundError("Employee not found.")
        return self._with_profile(user)

    def get_profile(self, *, current_user_id: int, current_role: Role, user_id: Optional[int] = None) -> UserWithProfile:
        target = int(user_id) if user_id is not None else int(current_user_id)
        if current_role != Role.ADMIN and target != int(current_user_id):
            raise AuthorizationError("Unauthorized access.")
        return self.get_user(target)

    def update_profile(
        self,
        *,
        current_user_id: int,
        current_role: Role,
        data: Mapping[str, Any],
        user_id: Optional[int] = None,
    ) -> UserWithProfile:
        target = int(user_id) if user_id is not None else int(current_user_id)
        if current_role != Role.ADMIN and target != int(current_user_id):
            raise AuthorizationError("Unauthorized access.")
        if not self._users.get_by_id(target):
            raise NotFoundError("Employee not found.")

        name = _require_name(data["name"]) if "name" in data else None
        profile = _clean_profile_text(data, ("phone", "address", "department", "designation"))

        if name is not None:
            self._users.update_user(target, name=name)
        if profile:
            self._users.upsert_profile(target, profile)
        return self.get_user(target)

    def employee_statuses(self, today: Optional[date] = None) -> dict[int, PresenceStatus]:
        """Today's presence of every employee: on leave wins over present."""

        today = today or self._clock().date()
        ids = list(self._users.list_employee_ids())
        on_leave = self._leaves.user_ids_on_leave(today, ids) if self._leaves else set()
        checked_in = self._attendance.user_ids_checked_in_on(today, ids) if self._attendance else set()

        statuses: dict[int, PresenceStatus] = {}
        for user_id in ids:
            if user_id in on_leave:
                statuses[user_id] = PresenceStatus.ON_LEAVE
            elif user_id in checked_in:
                statuses[user_id] = PresenceStatus.PRESENT
            else:
                statuses[user_id] = PresenceStatus.ABSENT
        return statuses
