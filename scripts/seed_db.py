"""Create (or refresh) a handful of demo employees.

Employee codes are allocated with the company name "HRMS", so every code
starts with "HR". Demo passwords count as already changed.
"""

from __future__ import annotations

import importlib
import sys
from decimal import Decimal
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from dotenv import load_dotenv
from werkzeug.security import generate_password_hash

from hrms.common.datetime_utils import now_local, parse_iso_date
from hrms.config import get_settings_module
from hrms.container import build_container
from hrms.core.enums import Role
from hrms.employees.id_generator import split_full_name

DEMO_PASSWORD = "Test@1234"
DEMO_COMPANY = "HRMS"

DEMO_EMPLOYEES = [
    ("John Smith", "john.smith@test.com", "Engineering", "Senior Software Engineer", "2024-01-15", "75000.00"),
    ("Sarah Johnson", "sarah.johnson@test.com", "Marketing", "Marketing Manager", "2024-02-01", "65000.00"),
    ("Michael Chen", "michael.chen@test.com", "Sales", "Sales Executive", "2024-03-10", "55000.00"),
    ("Emily Davis", "emily.davis@test.com", "HR", "HR Manager", "2024-01-20", "70000.00"),
    ("David Wilson", "david.wilson@test.com", "Finance", "Financial Analyst", "2024-04-05", "60000.00"),
]


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG), company_code=settings.COMPANY_CODE)
    users = container.users_repo
    password_hash = generate_password_hash(DEMO_PASSWORD)

    for name, email, department, designation, joined, salary in DEMO_EMPLOYEES:
        joining_date = parse_iso_date(joined)
        existing = users.get_by_email(email)
        if existing:
            user_id = existing.user_id
            code = existing.employee_code
            action = "Updated"
        else:
            parts = split_full_name(name)
            code = container.id_generator.allocate(parts.first_name, parts.last_name, DEMO_COMPANY, joining_date)
            user_id = users.create_user(
                employee_code=code,
                name=name,
                email=email,
                password_hash=password_hash,
                role=Role.EMPLOYEE,
                email_verified_at=now_local(),
            )
            action = "Created"

        users.update_password(user_id, password_hash=password_hash, changed_at=now_local())
        users.upsert_profile(
            user_id,
            {
                "department": department,
                "designation": designation,
                "joining_date": joining_date,
                "salary": Decimal(salary),
            },
        )
        print(f"{action}: {name} ({code}) / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
