from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from werkzeug.security import check_password_hash

from hrms.core.enums import AttendanceStatus, LeaveStatus, PresenceStatus, Role
from hrms.core.exceptions import AuthorizationError, ConflictError, InvalidStateError, NotFoundError, ValidationError
from hrms.employees.id_generator import EmployeeIdGenerator
from hrms.users.passwords import PasswordPolicy
from hrms.users.service import UserService


@pytest.fixture
def service(users_repo, attendance_repo, leaves_repo, clock):
    ids = EmployeeIdGenerator(users_repo, default_company_code="OI", clock=clock)
    return UserService(users_repo, ids, attendance=attendance_repo, leaves=leaves_repo, clock=clock)


@pytest.fixture
def admin(users_repo):
    return users_repo.add(name="Admin User", email="admin@example.com", role=Role.ADMIN)


def test_create_employee_returns_credentials_once(service, users_repo):
    created = service.create_employee(
        name="Priya Sharma",
        email="priya@example.com",
        company_name="Acme Corp",
        joining_date="2023-04-01",
        department="Finance",
    )

    assert created.user.employee_code == "ACPRSH20230001"
    assert created.user.role == Role.EMPLOYEE
    assert created.user.email_verified_at is not None
    assert len(created.password) == 12
    assert PasswordPolicy().validate(created.password) == []
    assert check_password_hash(users_repo.get_by_id(created.user.user_id).password_hash, created.password)
    assert created.profile.department == "Finance"
    assert created.profile.joining_date == date(2023, 4, 1)


def test_create_employee_without_profile_fields(service, users_repo):
    created = service.create_employee(name="Bob Stone", email="bob@example.com")
    assert created.profile is None
    assert created.user.employee_code == "OIBOST20240001"


def test_create_employee_validation(service, users_repo):
    users_repo.add(email="taken@example.com")
    with pytest.raises(ValidationError) as exc:
        service.create_employee(name="Bob Stone", email="taken@example.com")
    assert exc.value.errors == {"email": ["The email has already been taken."]}

    with pytest.raises(ValidationError) as exc:
        service.create_employee(name="Bo", email="bo@example.com")
    assert "name" in exc.value.errors

    with pytest.raises(ValidationError) as exc:
        service.create_employee(name="Bob Stone", email="bob@example.com", role="manager")
    assert "role" in exc.value.errors


def test_list_users_filters_by_role_and_search(service, users_repo, admin):
    users_repo.add(name="Alice Brown", email="alice@example.com", employee_code="OIALBR20240001")
    users_repo.add(name="Carl Green", email="carl@example.com", employee_code="OICAGR20240002")

    page = service.list_users(role="employee", search="ali")
    assert [item.user.name for item in page.items] == ["Alice Brown"]
    assert page.total == 1

    assert service.list_users().total == 3


def test_update_user_changes_account_and_profile(service, users_repo):
    user = users_repo.add(name="Alice Brown", email="alice@example.com", employee_code="OIALBR20240001")

    item = service.update_user(
        user.user_id,
        {"name": "Alice Black", "salary": "45000", "department": "Ops", "joining_date": "2024-02-01"},
    )

    assert item.user.name == "Alice Black"
    assert item.user.employee_code == "OIALBR20240001"
    assert item.profile.salary == Decimal("45000")
    assert item.profile.department == "Ops"


def test_update_user_rejects_taken_email_and_negative_salary(service, users_repo):
    users_repo.add(name="Other Person", email="other@example.com")
    user = users_repo.add(name="Alice Brown", email="alice@example.com")

    with pytest.raises(ValidationError):
        service.update_user(user.user_id, {"email": "other@example.com"})
    with pytest.raises(ValidationError):
        service.update_user(user.user_id, {"salary": -5})
    with pytest.raises(NotFoundError):
        service.update_user(999, {"name": "Nobody Here"})


def test_delete_user(service, users_repo, admin):
    user = users_repo.add(name="Alice Brown", email="alice@example.com")

    with pytest.raises(InvalidStateError):
        service.delete_user(current_user_id=admin.user_id, user_id=admin.user_id)

    service.delete_user(current_user_id=admin.user_id, user_id=user.user_id)
    assert users_repo.get_by_id(user.user_id) is None

    with pytest.raises(NotFoundError):
        service.delete_user(current_user_id=admin.user_id, user_id=user.user_id)


def test_directory_lists_only_employees_with_codes_by_name(service, users_repo, admin):
    users_repo.add(name="Zoe Adams", email="zoe@example.com", employee_code="OIZOAD20240001")
    users_repo.add(name="Amy Cole", email="amy@example.com", employee_code="OIAMCO20240002")
    no_code = users_repo.add(name="Ned Nocode", email="ned@example.com")

    page = service.list_directory()

    assert [item.user.name for item in page.items] == ["Amy Cole", "Zoe Adams"]
    assert page.per_page == 50
    with pytest.raises(NotFoundError):
        service.view_directory_entry(no_code.user_id)
    with pytest.raises(NotFoundError):
        service.view_directory_entry(admin.user_id)


def test_employee_can_only_touch_own_profile(service, users_repo):
    me = users_repo.add(name="Alice Brown", email="alice@example.com")
    other = users_repo.add(name="Bob Stone", email="bob@example.com")

    with pytest.raises(AuthorizationError):
        service.get_profile(current_user_id=me.user_id, current_role=Role.EMPLOYEE, user_id=other.user_id)

    item = service.update_profile(
        current_user_id=me.user_id,
        current_role=Role.EMPLOYEE,
        data={"phone": "12345", "address": "1 Main St", "salary": "999999"},
    )
    assert item.profile.phone == "12345"
    assert item.profile.address == "1 Main St"
    assert item.profile.salary is None


def test_employee_statuses(service, users_repo, attendance_repo, leaves_repo, today):
    on_leave = users_repo.add(name="Leah Away", email="leah@example.com", employee_code="OILEAW20240001")
    present = users_repo.add(name="Pat Here", email="pat@example.com", employee_code="OIPAHE20240002")
    absent = users_repo.add(name="Abe Gone", email="abe@example.com", employee_code="OIABGO20240003")
    pending = users_repo.add(name="Pen Ding", email="pen@example.com", employee_code="OIPEDI20240004")

    leaves_repo.add(user_id=on_leave.user_id, from_date=today, to_date=today + timedelta(days=2), status=LeaveStatus.APPROVED)
    leaves_repo.add(user_id=pending.user_id, from_date=today, to_date=today)
    attendance_repo.create_checkin(user_id=on_leave.user_id, work_date=today, check_in=time(9), status=AttendanceStatus.PRESENT)
    attendance_repo.create_checkin(user_id=present.user_id, work_date=today, check_in=time(9, 5), status=AttendanceStatus.PRESENT)
    attendance_repo.create_checkin(
        user_id=absent.user_id, work_date=today - timedelta(days=1), check_in=time(9), status=AttendanceStatus.PRESENT
    )

    statuses = service.employee_statuses()

    assert statuses == {
        on_leave.user_id: PresenceStatus.ON_LEAVE,
        present.user_id: PresenceStatus.PRESENT,
        absent.user_id: PresenceStatus.ABSENT,
        pending.user_id: PresenceStatus.ABSENT,
    }


def test_taken_identifier_is_rejected_not_duplicated(users_repo, clock, monkeypatch):
    users_repo.add(name="John Doe", email="john@example.com", employee_code="OIJODO20240001")
    ids = EmployeeIdGenerator(users_repo, default_company_code="OI", clock=clock)
    monkeypatch.setattr(ids, "allocate", lambda *args, **kwargs: "OIJODO20240001")
    service = UserService(users_repo, ids, clock=clock)

    with pytest.raises(ConflictError) as exc:
        service.create_employee(name="John Doherty", email="doherty@example.com")

    assert exc.value.message == "The employee ID has already been taken."
    assert users_repo.get_by_email("doherty@example.com") is None
    assert [u.employee_code for u in users_repo.users.values()] == ["OIJODO20240001"]
