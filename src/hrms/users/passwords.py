from __future__ import annotations

import re
import secrets
import string
from dataclasses import dataclass
from typing import Optional

from ..core.constants import GENERATED_PASSWORD_LENGTH, PASSWORD_MAX_LENGTH, PASSWORD_MIN_LENGTH

SYMBOLS = "!@#$%^&*()_+-=[]{}|;:,.<>?"

REQUIREMENTS = (
    f"Password must be {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} characters and contain at least one "
    "uppercase letter, one lowercase letter, one number, and one special character."
)


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = PASSWORD_MIN_LENGTH
    max_length: int = PASSWORD_MAX_LENGTH

    def validate(self, password: str, email: Optional[str] = None, employee_code: Optional[str] = None) -> list[str]:
        """Return the list of violated rules (empty when the password is acceptable)."""

        errors: list[str] = []
        password = password or ""

        if len(password) < self.min_length:
            errors.append(f"Password must be at least {self.min_length} characters long.")
        if len(password) > self.max_length:
            errors.append(f"Password must not exceed {self.max_length} characters.")
        if not re.search(r"[A-Z]", password):
            errors.append("Password must contain at least one uppercase letter.")
        if not re.search(r"[a-z]", password):
            errors.append("Password must contain at least one lowercase letter.")
        if not re.search(r"[0-9]", password):
            errors.append("Password must contain at least one number.")
        if not re.search(r"[^A-Za-z0-9]", password):
            errors.append(f"Password must contain at least one special character ({SYMBOLS}).")

        lowered = password.lower()
        if email:
            if lowered == email.lower():
                errors.append("Password cannot be the same as your email address.")
            elif email.lower() in lowered:
                errors.append("Password cannot contain your email address.")
        if employee_code:
            if lowered == employee_code.lower():
                errors.append("Password cannot be the same as your Employee ID.")
            elif employee_code.lower() in lowered:
                errors.append("Password cannot contain your Employee ID.")

        return errors


def generate_password(length: int = GENERATED_PASSWORD_LENGTH) -> str:
    """Random password with at least one character of each class, shuffled."""

    if length < 4:
        raise ValueError("length must be at least 4")

    alphabet = string.ascii_uppercase + string.ascii_lowercase + string.digits + SYMBOLS
    chars = [
        secrets.choice(string.ascii_uppercase),
        secrets.choice(string.ascii_lowercase),
        secrets.choice(string.digits),
        secrets.choice(SYMBOLS),
    ]
    chars.extend(secrets.choice(alphabet) for _ in range(length - 4))
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)
