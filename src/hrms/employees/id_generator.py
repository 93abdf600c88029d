"""Employee identifier generation.

Identifiers have the fixed shape ``CCFFLLYYYYSSSS``:

- ``CC``   employer code (two letters of the company name, or the configured default)
- ``FF``   first two characters of the first name
- ``LL``   first two characters of the last name
- ``YYYY`` year of joining
- ``SSSS`` serial, one above the highest serial already issued for the same
  employer code and year (any name codes)

The serial is re-derived from the stored identifiers on every call, so gaps
left by deleted employees are tolerated. Uniqueness is finally guaranteed by
the unique index on the identifier column, not by this module.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional, Union

from ..common.datetime_utils import coerce_date, now_local
from ..core.constants import DEFAULT_COMPANY_CODE, EMPLOYEE_CODE_SERIAL_WIDTH, MAX_EMPLOYEE_CODE_RETRIES
from ..core.exceptions import IdentifierExhaustedError
from .repository import IdentifierStore

logger = logging.getLogger(__name__)

_NON_ALPHA = re.compile(r"[^A-Za-z]")

JoiningDate = Union[date, datetime, str, None]


@dataclass(frozen=True)
class NameParts:
    first_name: str
    last_name: str


def split_full_name(full_name: str) -> NameParts:
    """Split a full name into first name and last name.

    A single word is used for both parts; otherwise the first token is the
    first name and the remaining tokens (joined by spaces) the last name.
    """

    parts = full_name.strip().split(" ")
    if len(parts) == 1:
        return NameParts(first_name=parts[0], last_name=parts[0])
    return NameParts(first_name=parts[0], last_name=" ".join(parts[1:]))


def name_code(name: str) -> str:
    """First two characters of a name, uppercased, padded with X.

    Uppercasing can lengthen a string ("ß" becomes "SS") and accented
    letters are folded to ASCII, so the slice is taken last.
    """

    upper = unicodedata.normalize("NFKD", name.strip().upper())
    return upper.encode("ascii", "ignore").decode("ascii")[:2].ljust(2, "X")


class EmployeeIdGenerator:
    def __init__(
        self,
        store: IdentifierStore,
        *,
        default_company_code: str = DEFAULT_COMPANY_CODE,
        clock: Callable[[], datetime] = now_local,
    ):
        self._store = store
        self._default_company_code = (default_company_code or DEFAULT_COMPANY_CODE).upper()
        self._clock = clock

    def company_code(self, company_name: Optional[str]) -> str:
        if company_name and len(company_name.strip()) >= 2:
            letters = _NON_ALPHA.sub("", company_name.strip()).upper()
            if len(letters) >= 2:
                return letters[:2]
        return self._default_company_code

    def joining_year(self, joining_date: JoiningDate) -> str:
        parsed = coerce_date(joining_date)
        if parsed is None:
            return f"{self._clock().year:04d}"
        return f"{parsed.year:04d}"

    def next_serial(self, company_code: str, year: str) -> str:
        pattern = rf"^{re.escape(company_code)}[A-Z]{{4}}{re.escape(year)}\d{{4}}$"
        matcher = re.compile(pattern)

        max_serial = 0
        for code in self._store.find_employee_codes_matching(pattern):
            if not code or not matcher.match(code):
                continue
            max_serial = max(max_serial, int(code[-EMPLOYEE_CODE_SERIAL_WIDTH:]))

        return str(max_serial + 1).zfill(EMPLOYEE_CODE_SERIAL_WIDTH)

    def generate(
        self,
        first_name: str,
        last_name: str,
        company_name: Optional[str] = None,
        joining_date: JoiningDate = None,
    ) -> str:
        company = self.company_code(company_name)
        year = self.joining_year(joining_date)
        return company + name_code(first_name) + name_code(last_name) + year + self.next_serial(company, year)

    def allocate(
        self,
        first_name: str,
        last_name: str,
        company_name: Optional[str] = None,
        joining_date: JoiningDate = None,
    ) -> str:
        """Generate an identifier and bump its serial until it is unused.

        Raises IdentifierExhaustedError after MAX_EMPLOYEE_CODE_RETRIES collisions.
        """

        original = self.generate(first_name, last_name, company_name, joining_date)
        base = original[:-EMPLOYEE_CODE_SERIAL_WIDTH]
        serial = int(original[-EMPLOYEE_CODE_SERIAL_WIDTH:])

        candidate = original
        counter = 1
        while self._store.exists_by_employee_code(candidate):
            candidate = base + str(serial + counter).zfill(EMPLOYEE_CODE_SERIAL_WIDTH)
            counter += 1
            if counter > MAX_EMPLOYEE_CODE_RETRIES:
                logger.error("Employee code space exhausted for prefix %s", base)
                raise IdentifierExhaustedError(
                    "Unable to generate unique employee ID. Please contact system administrator."
                )

        if candidate != original:
            logger.info("Employee code %s taken, allocated %s instead", original, candidate)
        return candidate
