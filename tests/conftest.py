from __future__ import annotations

import re
from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest
from werkzeug.security import generate_password_hash

from hrms.attendance.model import AttendanceRecord, AttendanceRow
from hrms.container import assemble_container
from hrms.core.enums import LeaveStatus, LeaveType, Role
from hrms.core.exceptions import ConflictError
from hrms.leaves.model import LeaveRequest
from hrms.main import create_app
from hrms.users.model import PROFILE_FIELDS, EmployeeProfile, User

# Cheap hashing keeps the suite fast; services still use werkzeug defaults.
FAST_HASH = "pbkdf2:sha256:1000"


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeUserRepo:
    def __init__(self):
        self._next_id = 1
        self.users: dict[int, User] = {}
        self.profiles: dict[int, EmployeeProfile] = {}

    def add(self, *, name="Jane Doe", email="jane@example.com", password="Secret#123", role=Role.EMPLOYEE,
            employee_code=None, password_changed_at=None, created_at=None) -> User:
        user_id = self.create_user(
            employee_code=employee_code,
            name=name,
            email=email,
            password_hash=generate_password_hash(password, method=FAST_HASH),
            role=role,
        )
        self.users[user_id] = replace(
            self.users[user_id],
            password_changed_at=password_changed_at,
            created_at=created_at or datetime(2024, 1, 1, 0, 0, user_id % 60),
        )
        return self.users[user_id]

    def get_by_id(self, user_id):
        return self.users.get(int(user_id))

    def get_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def get_by_login(self, login):
        return next((u for u in self.users.values() if login in (u.email, u.employee_code)), None)

    def exists_by_employee_code(self, employee_code):
        return any(u.employee_code == employee_code for u in self.users.values())

    def find_employee_codes_matching(self, pattern):
        return [u.employee_code for u in self.users.values() if u.employee_code and re.search(pattern, u.employee_code)]

    def create_user(self, *, employee_code, name, email, password_hash, role, email_verified_at=None):
        if employee_code and self.exists_by_employee_code(employee_code):
            raise ConflictError("The employee ID has already been taken.")
        if self.get_by_email(email):
            raise ConflictError("The email has already been taken.")
        user_id = self._next_id
        self._next_id += 1
        self.users[user_id] = User(
            user_id=user_id,
            employee_code=employee_code,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            email_verified_at=email_verified_at,
            created_at=datetime(2024, 1, 1, 0, 0, user_id % 60),
        )
        return user_id

    def update_user(self, user_id, *, name=None, email=None, role=None):
        user = self.users.get(int(user_id))
        if not user:
            return False
        changes = {k: v for k, v in {"name": name, "email": email, "role": role}.items() if v is not None}
        self.users[user.user_id] = replace(user, **changes)
        return bool(changes)

    def update_password(self, user_id, *, password_hash, changed_at):
        user = self.users.get(int(user_id))
        if not user:
            return False
        self.users[user.user_id] = replace(user, password_hash=password_hash, password_changed_at=changed_at)
        return True

    def delete_by_id(self, user_id):
        self.profiles.pop(int(user_id), None)
        return self.users.pop(int(user_id), None) is not None

    def search(self, *, role=None, term=None, with_employee_code=False, order_by_name=False, offset=0, limit=15):
        rows = list(self.users.values())
        if role is not None:
            rows = [u for u in rows if u.role == role]
        if with_employee_code:
            rows = [u for u in rows if u.employee_code]
        if term:
            t = term.lower()
            rows = [u for u in rows if t in u.name.lower() or t in u.email.lower() or t in (u.employee_code or "").lower()]
        if order_by_name:
            rows.sort(key=lambda u: (u.name, u.user_id))
        else:
            rows.sort(key=lambda u: (u.created_at, u.user_id), reverse=True)
        return rows[offset:offset + limit], len(rows)

    def list_employee_ids(self):
        return [u.user_id for u in self.users.values() if u.role == Role.EMPLOYEE and u.employee_code]

    def get_profile(self, user_id):
        return self.profiles.get(int(user_id))

    def get_profiles(self, user_ids):
        return {i: self.profiles[i] for i in user_ids if i in self.profiles}

    def upsert_profile(self, user_id, fields):
        current = self.profiles.get(int(user_id)) or EmployeeProfile(user_id=int(user_id))
        self.profiles[int(user_id)] = replace(current, **{k: v for k, v in fields.items() if k in PROFILE_FIELDS})


class FakeAttendanceRepo:
    def __init__(self, users: FakeUserRepo):
        self._users = users
        self._next_id = 1
        self.records: dict[int, AttendanceRecord] = {}

    def _find(self, user_id, work_date):
        return next((r for r in self.records.values() if r.user_id == int(user_id) and r.work_date == work_date), None)

    def get_by_id(self, attendance_id):
        return self.records.get(int(attendance_id))

    def get_for_user_and_date(self, user_id, work_date):
        return self._find(user_id, work_date)

    def create_checkin(self, *, user_id, work_date, check_in, status):
        if self._find(user_id, work_date):
            raise ConflictError("duplicate")
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = AttendanceRecord(rid, int(user_id), work_date, check_in, None, status)
        return rid

    def update_checkin(self, *, attendance_id, check_in, status):
        rec = self.records.get(int(attendance_id))
        if not rec or rec.check_in is not None:
            return False
        self.records[rec.attendance_id] = replace(rec, check_in=check_in, status=status)
        return True

    def update_checkout(self, *, attendance_id, check_out):
        rec = self.records.get(int(attendance_id))
        if not rec or rec.check_out is not None:
            return False
        self.records[rec.attendance_id] = replace(rec, check_out=check_out)
        return True

    def upsert_record(self, *, user_id, work_date, check_in, check_out, status):
        rec = self._find(user_id, work_date)
        if rec:
            self.records[rec.attendance_id] = replace(rec, check_in=check_in, check_out=check_out, status=status)
            return rec.attendance_id
        rid = self._next_id
        self._next_id += 1
        self.records[rid] = AttendanceRecord(rid, int(user_id), work_date, check_in, check_out, status)
        return rid

    def search(self, *, user_id=None, from_date=None, to_date=None, offset=0, limit=15):
        rows = list(self.records.values())
        if user_id is not None:
            rows = [r for r in rows if r.user_id == user_id]
        if from_date is not None:
            rows = [r for r in rows if r.work_date >= from_date]
        if to_date is not None:
            rows = [r for r in rows if r.work_date <= to_date]
        rows.sort(key=lambda r: (r.work_date, r.attendance_id), reverse=True)
        out = []
        for r in rows[offset:offset + limit]:
            u = self._users.get_by_id(r.user_id)
            out.append(AttendanceRow(record=r, user_name=u.name, email=u.email, employee_code=u.employee_code))
        return out, len(rows)

    def user_ids_checked_in_on(self, work_date, user_ids):
        return {r.user_id for r in self.records.values() if r.work_date == work_date and r.check_in and r.user_id in user_ids}


class FakeLeaveRepo:
    def __init__(self):
        self._next_id = 1
        self.leaves: dict[int, LeaveRequest] = {}

    def add(self, *, user_id, from_date, to_date, status=LeaveStatus.PENDING, leave_type=None) -> LeaveRequest:
        leave_id = self.create(
            user_id=user_id,
            leave_type=leave_type or LeaveType.CASUAL,
            from_date=from_date,
            to_date=to_date,
            reason="Family matters to attend",
        )
        self.leaves[leave_id] = replace(self.leaves[leave_id], status=status)
        return self.leaves[leave_id]

    def create(self, *, user_id, leave_type, from_date, to_date, reason):
        leave_id = self._next_id
        self._next_id += 1
        self.leaves[leave_id] = LeaveRequest(
            leave_id=leave_id,
            user_id=int(user_id),
            leave_type=leave_type,
            from_date=from_date,
            to_date=to_date,
            reason=reason,
            status=LeaveStatus.PENDING,
            created_at=datetime(2024, 6, 1, 0, 0, leave_id % 60),
        )
        return leave_id

    def get_by_id(self, leave_id):
        return self.leaves.get(int(leave_id))

    def exists_exact(self, *, user_id, from_date, to_date, statuses):
        return any(
            l.user_id == user_id and l.from_date == from_date and l.to_date == to_date and l.status in statuses
            for l in self.leaves.values()
        )

    def exists_overlapping(self, *, user_id, from_date, to_date, statuses):
        return any(
            l.user_id == user_id and l.from_date <= to_date and l.to_date >= from_date and l.status in statuses
            for l in self.leaves.values()
        )

    def update_status(self, *, leave_id, status, expected, admin_comment=None):
        leave = self.leaves.get(int(leave_id))
        if not leave or leave.status != expected:
            return False
        if status == LeaveStatus.CANCELLED:
            self.leaves[leave.leave_id] = replace(leave, status=status)
        else:
            self.leaves[leave.leave_id] = replace(leave, status=status, admin_comment=admin_comment)
        return True

    def search(self, *, user_id=None, status=None, leave_type=None, from_date=None, to_date=None, offset=0, limit=15):
        rows = list(self.leaves.values())
        if user_id is not None:
            rows = [l for l in rows if l.user_id == user_id]
        if status is not None:
            rows = [l for l in rows if l.status == status]
        if leave_type is not None:
            rows = [l for l in rows if l.leave_type == leave_type]
        if from_date is not None and to_date is not None:
            rows = [l for l in rows if l.from_date <= to_date and l.to_date >= from_date]
        rows.sort(key=lambda l: (l.created_at, l.leave_id), reverse=True)
        return rows[offset:offset + limit], len(rows)

    def user_ids_on_leave(self, on_date, user_ids):
        return {
            l.user_id
            for l in self.leaves.values()
            if l.status == LeaveStatus.APPROVED and l.from_date <= on_date <= l.to_date and l.user_id in user_ids
        }


class FakeSalaryRepo:
    def __init__(self):
        self.structures = {}

    def get_by_user(self, user_id):
        return self.structures.get(int(user_id))

    def get_by_users(self, user_ids):
        return {i: self.structures[i] for i in user_ids if i in self.structures}

    def upsert(self, structure):
        existing = self.structures.get(structure.user_id)
        sid = existing.salary_structure_id if existing else len(self.structures) + 1
        self.structures[structure.user_id] = replace(structure, salary_structure_id=sid)
        return sid


@pytest.fixture
def fixed_now() -> datetime:
    # A Monday morning.
    return datetime(2024, 6, 3, 9, 15, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def today(fixed_now) -> date:
    return fixed_now.date()


@pytest.fixture
def users_repo() -> FakeUserRepo:
    return FakeUserRepo()


@pytest.fixture
def attendance_repo(users_repo) -> FakeAttendanceRepo:
    return FakeAttendanceRepo(users_repo)


@pytest.fixture
def leaves_repo() -> FakeLeaveRepo:
    return FakeLeaveRepo()


@pytest.fixture
def salary_repo() -> FakeSalaryRepo:
    return FakeSalaryRepo()


@pytest.fixture
def container(users_repo, attendance_repo, leaves_repo, salary_repo, clock):
    return assemble_container(
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        salary_repo=salary_repo,
        company_code="OI",
        clock=clock,
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()
