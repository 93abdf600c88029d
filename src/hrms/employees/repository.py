from __future__ import annotations

from typing import Protocol, Sequence


class IdentifierStore(Protocol):
    """Read side of the user store needed to hand out employee codes."""

    def exists_by_employee_code(self, employee_code: str) -> bool:
        raise NotImplementedError

    def find_employee_codes_matching(self, pattern: str) -> Sequence[str]:
        """Return every stored employee code matching the regular expression."""

        raise NotImplementedError
