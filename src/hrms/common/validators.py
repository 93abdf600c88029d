from __future__ import annotations

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"The {field_name} field is required.", errors={field_name: ["This field is required."]})
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(
            f"The {field_name} must be at least {min_len} characters.",
            errors={field_name: [f"Must be at least {min_len} characters."]},
        )
    return value


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(
            f"The {field_name} must not exceed {max_len} characters.",
            errors={field_name: [f"Must not exceed {max_len} characters."]},
        )
    return value


def require_email(value: Optional[str], field_name: str = "email") -> str:
    email = require_non_empty(value, field_name)
    if not _EMAIL_RE.match(email):
        raise ValidationError(
            f"The {field_name} must be a valid email address.",
            errors={field_name: ["Must be a valid email address."]},
        )
    return email.lower()


def require_date(value: Any, field_name: str) -> date:
    if isinstance(value, date):
        return value
    text = require_non_empty(value, field_name)
    try:
        return parse_iso_date(text)
    except ValueError:
        raise ValidationError(
            f"The {field_name} is not a valid date (YYYY-MM-DD).",
            errors={field_name: ["Must be a date in YYYY-MM-DD format."]},
        )


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_date(value, field_name)


def require_decimal(
    value: Any,
    field_name: str,
    *,
    min_value: Optional[Decimal] = None,
    max_value: Optional[Decimal] = None,
) -> Decimal:
    if value is None or isinstance(value, bool) or (isinstance(value, str) and not value.strip()):
        raise ValidationError(f"The {field_name} is required.", errors={field_name: ["This field is required."]})
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"The {field_name} must be a number.", errors={field_name: ["Must be a number."]})
    if not number.is_finite():
        raise ValidationError(f"The {field_name} must be a number.", errors={field_name: ["Must be a number."]})
    if min_value is not None and number < min_value:
        raise ValidationError(
            f"The {field_name} must be at least {min_value}.",
            errors={field_name: [f"Must be at least {min_value}."]},
        )
    if max_value is not None and number > max_value:
        raise ValidationError(
            f"The {field_name} must not be greater than {max_value}.",
            errors={field_name: [f"Must not be greater than {max_value}."]},
        )
    return number


def require_int(value: Any, field_name: str, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"The {field_name} must be an integer.", errors={field_name: ["Must be an integer."]})
    if min_value is not None and number < min_value:
        raise ValidationError(
            f"The {field_name} must be at least {min_value}.",
            errors={field_name: [f"Must be at least {min_value}."]},
        )
    if max_value is not None and number > max_value:
        raise ValidationError(
            f"The {field_name} must not be greater than {max_value}.",
            errors={field_name: [f"Must not be greater than {max_value}."]},
        )
    return number


def clean_optional(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
