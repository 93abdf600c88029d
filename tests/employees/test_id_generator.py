import re
from datetime import date, datetime

import pytest

from hrms.core.exceptions import IdentifierExhaustedError
from hrms.employees.id_generator import EmployeeIdGenerator, name_code, split_full_name


class FakeIdentifierStore:
    """``visible`` is what the serial scan sees, ``taken`` what the unique check sees."""

    def __init__(self, visible=(), taken=None):
        self.visible = list(visible)
        self.taken = set(self.visible if taken is None else taken)

    def exists_by_employee_code(self, employee_code):
        return employee_code in self.taken

    def find_employee_codes_matching(self, pattern):
        return [c for c in self.visible if re.search(pattern, c)]


class AlwaysTaken(FakeIdentifierStore):
    def exists_by_employee_code(self, employee_code):
        return True


def make_generator(store=None, **kwargs):
    kwargs.setdefault("clock", lambda: datetime(2025, 2, 1, 10, 0))
    return EmployeeIdGenerator(store or FakeIdentifierStore(), **kwargs)


def test_split_full_name_single_word_is_used_twice():
    parts = split_full_name("Madonna")
    assert parts.first_name == "Madonna"
    assert parts.last_name == "Madonna"


def test_split_full_name_keeps_rest_as_last_name():
    parts = split_full_name("  Mary Ann Smith ")
    assert parts.first_name == "Mary"
    assert parts.last_name == "Ann Smith"


def test_name_code_pads_short_names_with_x():
    assert name_code("a") == "AX"
    assert name_code("") == "XX"
    assert name_code(" jo ") == "JO"


def test_generate_uses_default_company_code_and_first_serial():
    gen = make_generator()
    assert gen.generate("Ojas", "Doshi", None, date(2024, 1, 5)) == "OIOJDO20240001"


def test_generate_single_letter_names():
    gen = make_generator()
    assert gen.generate("A", "B", None, "2024-03-01") == "OIAXBX20240001"


def test_company_code_from_company_name_letters_only():
    gen = make_generator()
    assert gen.generate("John", "Doe", "a.c-me Corp", "2024-01-01") == "ACJODO20240001"


def test_company_code_falls_back_when_too_few_letters():
    gen = make_generator(default_company_code="hr")
    assert gen.company_code("1 2 B") == "HR"
    assert gen.company_code("X") == "HR"
    assert gen.company_code(None) == "HR"


def test_year_comes_from_clock_when_joining_date_missing_or_invalid():
    gen = make_generator()
    assert gen.generate("John", "Doe").endswith("20250001")
    assert gen.generate("John", "Doe", None, "not-a-date")[10:] == "0001"
    assert gen.generate("John", "Doe", None, "not-a-date")[6:10] == "2025"


def test_year_from_datetime_string():
    gen = make_generator()
    assert gen.joining_year("2023-07-09T08:30:00") == "2023"
    assert gen.joining_year(datetime(2022, 12, 31, 23, 0)) == "2022"


def test_serial_is_shared_across_name_codes_but_not_years_or_companies():
    store = FakeIdentifierStore(
        visible=[
            "OIJODO20240001",
            "OIABCD20240002",
            "OIABCD20230007",
            "ACJODO20240009",
        ]
    )
    gen = make_generator(store)
    assert gen.generate("Jane", "Doe", None, "2024-06-01") == "OIJADO20240003"
    assert gen.generate("Jane", "Doe", None, "2023-06-01") == "OIJADO20230008"


def test_serial_ignores_malformed_identifiers():
    store = FakeIdentifierStore(visible=["OIJODO2024001", "OIjodo20240005"])
    gen = make_generator(store)
    assert gen.next_serial("OI", "2024") == "0001"


def test_gaps_are_not_reused():
    store = FakeIdentifierStore(visible=["OIJODO20240001", "OIJODO20240005"])
    gen = make_generator(store)
    assert gen.next_serial("OI", "2024") == "0006"


def test_allocate_bumps_serial_on_collision():
    store = FakeIdentifierStore(visible=[], taken={"OIJADO20240001", "OIJADO20240002"})
    gen = make_generator(store)
    assert gen.allocate("Jane", "Doe", None, "2024-01-01") == "OIJADO20240003"


def test_allocate_returns_generated_code_when_free():
    gen = make_generator()
    assert gen.allocate("Jane", "Doe", None, "2024-01-01") == "OIJADO20240001"


def test_allocate_gives_up_after_retry_limit():
    gen = make_generator(AlwaysTaken())
    with pytest.raises(IdentifierExhaustedError) as exc:
        gen.allocate("Jane", "Doe", None, "2024-01-01")
    assert "Unable to generate unique employee ID" in exc.value.message


def test_name_code_stays_two_ascii_characters():
    assert name_code("ßara") == "SS"
    assert name_code("Élodie") == "EL"
    assert name_code("李") == "XX"


def test_non_ascii_names_keep_identifier_shape():
    store = FakeIdentifierStore()
    gen = make_generator(store)

    code = gen.generate("ßara", "Öztürk", None, "2024-01-01")
    assert code == "OISSOZ20240001"
    assert len(code) == 14

    store.visible.append(code)
    assert gen.next_serial("OI", "2024") == "0002"
