from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from hrms.common.datetime_utils import coerce_date, week_bounds
from hrms.common.pagination import Page, PageRequest
from hrms.common.serialization import amount
from hrms.common.validators import require_decimal, require_email
from hrms.core.exceptions import ValidationError
from hrms.database.bootstrap import iter_sql_statements, load_schema
from hrms.database.mysql_base import like_pattern, normalize_mysql_time


def test_page_request_clamps_bad_input():
    req = PageRequest.of("0", "abc", default_per_page=15)
    assert (req.page, req.per_page, req.offset) == (1, 15, 0)

    req = PageRequest.of(3, 1000)
    assert req.per_page == 100
    assert req.offset == 200


def test_page_to_dict():
    page = Page(items=[1, 2], total=31, page=2, per_page=15)
    assert page.to_dict(str) == {"data": ["1", "2"], "current_page": 2, "per_page": 15, "total": 31, "last_page": 3}
    assert Page(items=[], total=0, page=1, per_page=15).last_page == 1


def test_week_bounds_monday_to_sunday():
    assert week_bounds(date(2024, 6, 5)) == (date(2024, 6, 3), date(2024, 6, 9))
    assert week_bounds(date(2024, 6, 9)) == (date(2024, 6, 3), date(2024, 6, 9))


def test_coerce_date():
    assert coerce_date("2024-02-29T10:00:00") == date(2024, 2, 29)
    assert coerce_date("") is None
    assert coerce_date("2024-13-01") is None


def test_require_email_lowercases_and_rejects_garbage():
    assert require_email(" Jo@Example.COM ") == "jo@example.com"
    with pytest.raises(ValidationError):
        require_email("not-an-email")


def test_require_decimal_bounds():
    assert require_decimal("12.5", "x", min_value=Decimal("0")) == Decimal("12.5")
    for bad in (None, "", "nan", True, "-1"):
        with pytest.raises(ValidationError):
            require_decimal(bad, "x", min_value=Decimal("0"))


def test_amount_formats_two_decimals():
    assert amount(Decimal("5")) == "5.00"
    assert amount(None) is None


def test_sql_splitter_respects_quotes():
    sql = "CREATE TABLE a (x VARCHAR(3) DEFAULT ';');\nINSERT INTO a VALUES ('it\\'s;');\n"
    assert list(iter_sql_statements(sql)) == [
        "CREATE TABLE a (x VARCHAR(3) DEFAULT ';')",
        "INSERT INTO a VALUES ('it\\'s;')",
    ]


def test_schema_file_declares_all_tables():
    statements = load_schema()
    assert len(statements) == 5
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    for table in ("users", "employee_profiles", "attendances", "leaves", "salary_structures"):
        assert any(f"CREATE TABLE IF NOT EXISTS {table} " in s for s in statements)


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off") == "%50\\%\\_off%"


def test_normalize_mysql_time_variants():
    assert normalize_mysql_time(timedelta(hours=9, minutes=5)) == time(9, 5)
    assert normalize_mysql_time("08:30") == time(8, 30)
    assert normalize_mysql_time("17:45:10") == time(17, 45, 10)
    assert normalize_mysql_time(None) is None
