from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import Role

PROFILE_FIELDS = (
    "phone",
    "address",
    "department",
    "designation",
    "joining_date",
    "salary",
    "date_of_birth",
    "nationality",
    "personal_email",
    "gender",
    "marital_status",
    "account_number",
    "bank_name",
    "ifsc_code",
    "pan_no",
    "uan_no",
)


@dataclass(frozen=True)
class User:
    """Domain entity: an account (admin or employee).

    Plain data object; persistence lives in the repository.
    """

    user_id: int
    employee_code: Optional[str]
    name: str
    email: str
    password_hash: str
    role: Role
    email_verified_at: Optional[datetime] = None
    password_changed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class EmployeeProfile:
    user_id: int
    phone: Optional[str] = None
    address: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    joining_date: Optional[date] = None
    salary: Optional[Decimal] = None
    date_of_birth: Optional[date] = None
    nationality: Optional[str] = None
    personal_email: Optional[str] = None
    gender: Optional[str] = None
    marital_status: Optional[str] = None
    account_number: Optional[str] = None
    bank_name: Optional[str] = None
    ifsc_code: Optional[str] = None
    pan_no: Optional[str] = None
    uan_no: Optional[str] = None


@dataclass(frozen=True)
class UserWithProfile:
    """Read-model: account plus its (optional) employee profile."""

    user: User
    profile: Optional[EmployeeProfile] = None


@dataclass(frozen=True)
class CreatedEmployee:
    """Result of an admin-created account; the password is only ever returned here."""

    user: User
    profile: Optional[EmployeeProfile]
    password: str
